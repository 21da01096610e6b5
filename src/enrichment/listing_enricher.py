"""
Turns candidate listings into products and applies the quality gate.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from src.core.models.candidate_listing import CandidateListing
from src.core.models.product import Product
from src.core.utils.listing_utils import build_affiliate_link, clean_title
from src.shared.config.app_settings import AppConfig, get_app_config, local_now
from src.shared.config.scraper_settings import ScraperConfig
from src.shared.logging.log_setup import get_logger

logger = get_logger(__name__)


@dataclass
class EnrichmentResult:
    """Products that passed the quality gate and a tally of the rest."""
    
    products: List[Product] = field(default_factory=list)
    rejected: int = 0
    rejection_reasons: Dict[str, int] = field(default_factory=dict)


class ListingEnricher:
    """Normalizes listings into unapproved products and filters them."""
    
    def __init__(
        self,
        app_config: Optional[AppConfig] = None,
        scraper_config: Optional[ScraperConfig] = None,
    ):
        self.app_config = app_config or get_app_config()
        self.scraper_config = scraper_config or self.app_config.scraper
    
    def to_product(self, listing: CandidateListing, scraped_at: Optional[datetime] = None) -> Product:
        """
        Build an unapproved product from a listing.
        
        Args:
            listing: Raw listing
            scraped_at: Scrape timestamp, defaults to now
            
        Returns:
            Product with cleaned title and affiliate link
        """
        source_url = str(listing.source_url)
        platform = listing.platform.value
        return Product(
            platform=listing.platform,
            platform_id=listing.platform_id,
            title=clean_title(listing.title) or listing.platform_id,
            category=listing.category,
            price=listing.price,
            original_price=listing.original_price,
            commission_rate=listing.commission_rate,
            rating=listing.rating,
            reviews_count=listing.reviews_count,
            sales_count=max(listing.sales_count, 0),
            product_url=source_url,
            affiliate_link=build_affiliate_link(
                platform, source_url, self.scraper_config.affiliate_id_for(platform)
            ),
            image_url=str(listing.image_url) if listing.image_url else None,
            seller=listing.seller,
            is_approved=False,
            last_scraped_at=scraped_at or local_now(self.app_config),
        )
    
    def check_quality(self, listing: CandidateListing, product: Product) -> Tuple[bool, str]:
        """
        Apply the quality gate.
        
        Args:
            listing: Raw listing, checked for its reported sales count
            product: Product built from the listing
            
        Returns:
            Tuple of (passed, reason); reason is 'ok' when passed
        """
        if product.price < self.app_config.MIN_PRICE:
            return False, "price_below_minimum"
        if product.estimated_commission < self.app_config.MIN_COMMISSION:
            return False, "commission_below_minimum"
        if len(product.title) < self.app_config.MIN_TITLE_LENGTH:
            return False, "title_too_short"
        if listing.sales_count < 0:
            return False, "negative_sales_count"
        return True, "ok"
    
    def enrich(self, listings: Iterable[CandidateListing]) -> EnrichmentResult:
        """
        Enrich a batch of listings.
        
        Args:
            listings: Raw listings
            
        Returns:
            Passing products and rejection counts; rejected listings never raise
        """
        result = EnrichmentResult()
        scraped_at = local_now(self.app_config)
        
        def reject(reason: str) -> None:
            result.rejected += 1
            result.rejection_reasons[reason] = result.rejection_reasons.get(reason, 0) + 1
        
        for listing in listings:
            try:
                product = self.to_product(listing, scraped_at)
            except (PydanticValidationError, ValueError) as e:
                logger.debug("listing_invalid", platform_id=listing.platform_id, error=str(e))
                reject("invalid")
                continue
            
            passed, reason = self.check_quality(listing, product)
            if not passed:
                logger.debug("listing_rejected", platform_id=listing.platform_id, reason=reason)
                reject(reason)
                continue
            result.products.append(product)
        
        logger.info(
            "enrichment_completed",
            accepted=len(result.products),
            rejected=result.rejected,
            reasons=result.rejection_reasons,
        )
        return result
