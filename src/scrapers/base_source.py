"""
Listing source interfaces and the shared HTTP plumbing behind them.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests
from bs4 import BeautifulSoup
from pydantic import ValidationError as PydanticValidationError

from src.core.exceptions.scraping_errors import PageLoadError
from src.core.models.candidate_listing import CandidateListing
from src.core.models.enums import Platform
from src.scrapers.rate_limiter import RequestThrottle
from src.scrapers.sample_listings import sample_listings
from src.shared.config.scraper_settings import ScraperConfig, get_scraper_config
from src.shared.logging.log_setup import get_logger

logger = get_logger(__name__)


class ListingSource(ABC):
    """A platform that can be asked for candidate listings in a category."""
    
    platform: Platform
    
    @abstractmethod
    def fetch(self, category: str, limit: int) -> List[CandidateListing]:
        """
        Fetch up to ``limit`` listings for a category.
        
        Raises:
            ScrapingError: If the platform cannot be reached or parsed
        """


class HttpListingSource(ListingSource):
    """Listing source that talks HTTP through a shared throttle."""
    
    accept = "application/json, text/plain, */*"
    
    def __init__(
        self,
        throttle: Optional[RequestThrottle] = None,
        config: Optional[ScraperConfig] = None,
    ):
        self.config = config or get_scraper_config()
        self.throttle = throttle or RequestThrottle(
            min_interval=self.config.MIN_REQUEST_INTERVAL,
            max_per_minute=self.config.MAX_REQUESTS_PER_MINUTE,
            name=self.platform.value,
        )
    
    @property
    def headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.config.USER_AGENT,
            "Accept": self.accept,
            "Accept-Language": "pt-BR,pt;q=0.9,en;q=0.8",
        }
    
    def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """
        Throttled GET request.
        
        Args:
            url: URL to load
            params: Query parameters
            
        Returns:
            Successful response
            
        Raises:
            PageLoadError: On network errors and non-2xx responses
        """
        self.throttle.wait()
        logger.debug("request_started", platform=self.platform.value, url=url)
        try:
            response = requests.get(
                url,
                params=params,
                headers=self.headers,
                timeout=self.config.REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            return response
        except requests.exceptions.RequestException as e:
            status_code = getattr(e.response, "status_code", None) if hasattr(e, "response") else None
            raise PageLoadError(url, str(e), status_code)
    
    def _build_listing(self, data: Dict[str, Any]) -> Optional[CandidateListing]:
        """Validate extracted data, dropping malformed listings."""
        try:
            return CandidateListing(**data)
        except (PydanticValidationError, ValueError) as e:
            logger.debug(
                "listing_discarded",
                platform=self.platform.value,
                platform_id=data.get("platform_id"),
                error=str(e),
            )
            return None


class HtmlListingSource(HttpListingSource):
    """
    Listing source that scrapes a search results page.
    
    Falls back to the built-in sample listings when the page cannot be
    loaded or yields no listings.
    """
    
    accept = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    
    @abstractmethod
    def search_url(self, category: str) -> str:
        """Results page URL for a category."""
    
    @abstractmethod
    def parse_listings(self, soup: BeautifulSoup, category: str, limit: int) -> List[CandidateListing]:
        """Extract listings from a results page."""
    
    def fetch(self, category: str, limit: int) -> List[CandidateListing]:
        """
        Scrape listings for a category.
        
        Args:
            category: Product category
            limit: Maximum listings returned
            
        Returns:
            Scraped listings, or sample listings when scraping yields nothing
        """
        url = self.search_url(category)
        try:
            response = self._get(url)
            soup = BeautifulSoup(response.text, "html.parser")
            listings = self.parse_listings(soup, category, limit)[:limit]
        except PageLoadError as e:
            logger.warning(
                "results_page_failed",
                platform=self.platform.value,
                category=category,
                error=str(e),
            )
            listings = []
        except (ValueError, TypeError, AttributeError) as e:
            # markup changed under the selectors
            logger.warning(
                "results_page_unparseable",
                platform=self.platform.value,
                category=category,
                error=str(e),
            )
            listings = []
        
        if not listings:
            logger.info("using_sample_listings", platform=self.platform.value, category=category)
            return sample_listings(self.platform, category, limit)
        
        logger.info(
            "listings_scraped",
            platform=self.platform.value,
            category=category,
            count=len(listings),
        )
        return listings
