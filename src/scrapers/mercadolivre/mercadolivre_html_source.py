"""
Mercado Livre results page scraper.
"""

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from src.core.exceptions.scraping_errors import PriceParsingError
from src.core.models.candidate_listing import CandidateListing
from src.core.models.enums import Platform
from src.core.utils.commission_calculator import platform_commission_rate
from src.core.utils.listing_utils import parse_count, parse_price, parse_rating
from src.scrapers.base_source import HtmlListingSource
from src.scrapers.selector_manager import SelectorManager
from src.shared.logging.log_setup import get_logger

from .mercadolivre_selectors import CATEGORY_SLUGS, SELECTORS

logger = get_logger(__name__)

LISTING_BASE_URL = "https://lista.mercadolivre.com.br"


class MercadoLivreHtmlSource(HtmlListingSource):
    """Scrapes the Mercado Livre category listing pages."""
    
    platform = Platform.MERCADOLIVRE
    
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.selectors = SelectorManager(SELECTORS)
    
    def search_url(self, category: str) -> str:
        return f"{LISTING_BASE_URL}/{CATEGORY_SLUGS.get(category, CATEGORY_SLUGS['electronics'])}"
    
    def parse_listings(self, soup: BeautifulSoup, category: str, limit: int) -> List[CandidateListing]:
        listings = []
        for card in self.selectors.select_all(soup, 'item'):
            if len(listings) >= limit:
                break
            listing = self.parse_card(card, category)
            if listing:
                listings.append(listing)
        return listings
    
    def parse_card(self, card: Tag, category: str) -> Optional[CandidateListing]:
        """
        Extract one listing from a result card.
        
        Args:
            card: Result card element
            category: Category the page belongs to
            
        Returns:
            Listing, or None when title, price or link is missing
        """
        title = self.selectors.text_of(card, 'title')
        link_tag = self.selectors.try_selectors(card, 'link')
        link = link_tag.get("href") if link_tag else None
        price_text = self.selectors.text_of(card, 'price')
        if not (title and link and price_text):
            logger.debug("card_skipped", reason="missing_essential_data", title=title[:50])
            return None
        
        try:
            price = parse_price(price_text)
            original_text = self.selectors.text_of(card, 'original_price')
            original_price = parse_price(original_text) if original_text else None
        except PriceParsingError as e:
            logger.debug("card_skipped", reason="price_unparseable", error=str(e))
            return None
        
        image_tag = self.selectors.try_selectors(card, 'image')
        image_url = (image_tag.get("data-src") or image_tag.get("src")) if image_tag else None
        
        # item ids look like MLB-1234567890 in the permalink path
        platform_id = link.split("?")[0].rstrip("/").split("/")[-1][:100]
        
        return self._build_listing({
            "platform": self.platform,
            "platform_id": platform_id,
            "title": title,
            "category": category,
            "price": price,
            "original_price": original_price,
            "commission_rate": platform_commission_rate(self.platform.value, category),
            "rating": parse_rating(self.selectors.text_of(card, 'rating')),
            "reviews_count": parse_count(self.selectors.text_of(card, 'reviews')),
            "source_url": link,
            "image_url": image_url if image_url and image_url.startswith("http") else None,
        })
