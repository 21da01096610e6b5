"""
Base exception classes for all domain-specific errors.
"""

from typing import Any


class AffiliateRobotError(Exception):
    """Base exception for all application-specific errors."""
    
    pass


class ValidationError(AffiliateRobotError):
    """Base exception for all validation-related errors."""
    
    def __init__(self, field: str, value: Any, message: str):
        """
        Initialize validation error.
        
        Args:
            field: Field that failed validation
            value: Invalid value
            message: Error message
        """
        self.field = field
        self.value = value
        super().__init__(f"Validation failed for {field}={value}: {message}")


class ConfigurationError(AffiliateRobotError):
    """Raised when required configuration is missing at startup."""
    
    def __init__(self, missing: list, component: str):
        """
        Initialize configuration error.
        
        Args:
            missing: Names of the missing settings
            component: Component that cannot start without them
        """
        self.missing = missing
        self.component = component
        super().__init__(
            f"{component} is not configured, missing: {', '.join(missing)}"
        )
