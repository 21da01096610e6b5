"""
Exceptions for scraping-related errors.
"""

from typing import Optional

from .base import AffiliateRobotError, ValidationError


class ScrapingError(AffiliateRobotError):
    """Base exception for scraping-related errors."""
    
    pass


class PageLoadError(ScrapingError):
    """Raised when a page or API endpoint fails to load."""
    
    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        """
        Initialize page load error.
        
        Args:
            url: URL that failed to load
            message: Error message
            status_code: HTTP status code if available
        """
        self.url = url
        self.status_code = status_code
        super().__init__(f"Failed to load {url}: {message}")


class UnsupportedPlatformError(ScrapingError):
    """Raised when no listing source is registered for a platform."""
    
    def __init__(self, platform: str):
        """
        Initialize unsupported platform error.
        
        Args:
            platform: Platform identifier that has no source
        """
        self.platform = platform
        super().__init__(f"No listing source registered for platform '{platform}'")


class PriceParsingError(ValidationError):
    """Raised when price parsing fails."""
    
    def __init__(self, price_text: str):
        """
        Initialize price parsing error.
        
        Args:
            price_text: Raw price text that couldn't be parsed
        """
        super().__init__(
            field="price",
            value=price_text,
            message=f"Cannot parse price from '{price_text}'"
        )
