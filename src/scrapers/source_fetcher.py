"""
Fetches candidate listings across platforms and categories.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from src.core.exceptions.base import AffiliateRobotError
from src.core.exceptions.scraping_errors import UnsupportedPlatformError
from src.core.models.candidate_listing import CandidateListing
from src.core.models.enums import Platform
from src.scrapers.base_source import ListingSource
from src.scrapers.mercadolivre.mercadolivre_api_source import MercadoLivreApiSource
from src.scrapers.mercadolivre.mercadolivre_html_source import MercadoLivreHtmlSource
from src.scrapers.rate_limiter import RequestThrottle
from src.scrapers.shopee.shopee_source import ShopeeHtmlSource
from src.shared.config.scraper_settings import ScraperConfig, get_scraper_config
from src.shared.logging.log_setup import get_logger

logger = get_logger(__name__)


@dataclass
class FetchError:
    """A platform/category combination that failed."""
    
    platform: str
    category: str
    message: str
    
    def __str__(self) -> str:
        return f"{self.platform}/{self.category}: {self.message}"


@dataclass
class FetchBatch:
    """Listings gathered by one fetch_all call plus the combinations that failed."""
    
    listings: List[CandidateListing] = field(default_factory=list)
    errors: List[FetchError] = field(default_factory=list)


class SourceFetcher:
    """Routes fetch requests to the listing source registered per platform."""
    
    def __init__(self, sources: Dict[Platform, ListingSource]):
        """
        Initialize the fetcher.
        
        Args:
            sources: Listing source per platform
        """
        self.sources = sources
    
    @classmethod
    def from_config(cls, config: Optional[ScraperConfig] = None) -> "SourceFetcher":
        """
        Build the default sources; all of them share one throttle.
        
        Args:
            config: Scraper configuration, defaults to the cached settings
            
        Returns:
            Fetcher for Mercado Livre and Shopee
        """
        config = config or get_scraper_config()
        throttle = RequestThrottle(
            min_interval=config.MIN_REQUEST_INTERVAL,
            max_per_minute=config.MAX_REQUESTS_PER_MINUTE,
            name="scraping",
        )
        if config.MERCADOLIVRE_STRATEGY == "html":
            mercadolivre = MercadoLivreHtmlSource(throttle=throttle, config=config)
        else:
            mercadolivre = MercadoLivreApiSource(throttle=throttle, config=config)
        return cls({
            Platform.MERCADOLIVRE: mercadolivre,
            Platform.SHOPEE: ShopeeHtmlSource(throttle=throttle, config=config),
        })
    
    def fetch(self, category: str, platform: str, limit: int) -> List[CandidateListing]:
        """
        Fetch listings for one category on one platform.
        
        Args:
            category: Product category
            platform: Platform identifier
            limit: Maximum listings returned
            
        Returns:
            At most ``limit`` listings
            
        Raises:
            UnsupportedPlatformError: If no source is registered for the platform
            ScrapingError: If the source fails
        """
        try:
            source = self.sources[Platform(platform)]
        except (KeyError, ValueError):
            raise UnsupportedPlatformError(platform)
        if limit <= 0:
            return []
        return source.fetch(category, limit)[:limit]
    
    def fetch_all(
        self,
        categories: Iterable[str],
        platforms: Iterable[str],
        limit: int,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> FetchBatch:
        """
        Fetch every category on every platform, skipping failed combinations.
        
        Args:
            categories: Product categories
            platforms: Platform identifiers
            limit: Maximum listings per combination
            should_stop: Checked before each combination; returning True ends the walk
            
        Returns:
            Collected listings and per-combination errors
        """
        batch = FetchBatch()
        categories = list(categories)
        for platform in platforms:
            for category in categories:
                if should_stop and should_stop():
                    logger.info("fetch_all_interrupted", listings=len(batch.listings))
                    return batch
                try:
                    listings = self.fetch(category, platform, limit)
                except AffiliateRobotError as e:
                    logger.error("fetch_failed", platform=platform, category=category, error=str(e))
                    batch.errors.append(FetchError(platform, category, str(e)))
                    continue
                except Exception as e:
                    logger.error("fetch_crashed", platform=platform, category=category, error=str(e), exc_info=True)
                    batch.errors.append(FetchError(platform, category, str(e)))
                    continue
                batch.listings.extend(listings)
                logger.info("fetch_completed", platform=platform, category=category, count=len(listings))
        
        logger.info("fetch_all_completed", listings=len(batch.listings), errors=len(batch.errors))
        return batch
