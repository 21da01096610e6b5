"""
Shopee search page scraper.

Shopee renders most results client-side, so the sample listings are the
usual outcome; server-rendered cards are parsed when present.
"""

from typing import List, Optional
from urllib.parse import quote

from bs4 import BeautifulSoup, Tag

from src.core.exceptions.scraping_errors import PriceParsingError
from src.core.models.candidate_listing import CandidateListing
from src.core.models.enums import Platform
from src.core.utils.commission_calculator import platform_commission_rate
from src.core.utils.listing_utils import parse_count, parse_price
from src.scrapers.base_source import HtmlListingSource
from src.scrapers.selector_manager import SelectorManager
from src.shared.logging.log_setup import get_logger

logger = get_logger(__name__)

BASE_URL = "https://shopee.com.br"

SELECTORS = {
    'item': ['[data-sqe="item"]'],
    'title': ['[data-sqe="name"]'],
    'price': ['[data-sqe="price"]'],
    'link': ['a[href]'],
    'image': ['img'],
    'sold': ['[data-sqe="sold"]'],
}

CATEGORY_KEYWORDS = {
    'electronics': 'smartphone',
    'beauty': 'perfume',
    'home': 'casa',
    'fashion': 'roupa',
    'sports': 'esporte',
    'books': 'livro',
    'games': 'games',
}


class ShopeeHtmlSource(HtmlListingSource):
    """Scrapes Shopee keyword search results."""
    
    platform = Platform.SHOPEE
    
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.selectors = SelectorManager(SELECTORS)
    
    def search_url(self, category: str) -> str:
        keyword = CATEGORY_KEYWORDS.get(category, CATEGORY_KEYWORDS['electronics'])
        return f"{BASE_URL}/search?keyword={quote(keyword)}"
    
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
        Extract one listing from a search card.
        
        Args:
            card: Search card element
            category: Category the keyword maps to
            
        Returns:
            Listing, or None when title, price or link is missing
        """
        title = self.selectors.text_of(card, 'title')
        price_text = self.selectors.text_of(card, 'price')
        link_tag = self.selectors.try_selectors(card, 'link')
        href = link_tag.get("href") if link_tag else None
        if not (title and price_text and href):
            return None
        
        try:
            price = parse_price(price_text)
        except PriceParsingError:
            return None
        
        url = href if href.startswith("http") else f"{BASE_URL}{href}"
        # product paths end in -i.<shop_id>.<item_id>
        platform_id = url.split("?")[0].rstrip("/").split("/")[-1][-100:]
        image_tag = self.selectors.try_selectors(card, 'image')
        image_url = (image_tag.get("src") or image_tag.get("data-src")) if image_tag else None
        
        return self._build_listing({
            "platform": self.platform,
            "platform_id": platform_id,
            "title": title,
            "category": category,
            "price": price,
            "commission_rate": platform_commission_rate(self.platform.value, category),
            "sales_count": parse_count(self.selectors.text_of(card, 'sold')),
            "source_url": url,
            "image_url": image_url if image_url and image_url.startswith("http") else None,
        })
