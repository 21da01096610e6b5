"""
Mercado Livre search API source.
"""

import re
from typing import Any, Dict, List, Optional

from src.core.exceptions.scraping_errors import ScrapingError
from src.core.models.candidate_listing import CandidateListing
from src.core.models.enums import Platform
from src.core.utils.commission_calculator import platform_commission_rate
from src.scrapers.base_source import HttpListingSource
from src.shared.logging.log_setup import get_logger

from .mercadolivre_selectors import CATEGORY_IDS

logger = get_logger(__name__)

API_BASE_URL = "https://api.mercadolibre.com"
SEARCH_PATH = "/sites/MLB/search"
API_PAGE_LIMIT = 50


class MercadoLivreApiSource(HttpListingSource):
    """Fetches listings from the public Mercado Livre search API."""
    
    platform = Platform.MERCADOLIVRE
    
    def fetch(self, category: str, limit: int) -> List[CandidateListing]:
        """
        Search the API for a category.
        
        Args:
            category: Product category
            limit: Maximum listings returned
            
        Returns:
            Listings mapped from the API results
            
        Raises:
            PageLoadError: If the API request fails
            ScrapingError: If the response is not the expected JSON
        """
        url = f"{API_BASE_URL}{SEARCH_PATH}"
        params = {
            "category": CATEGORY_IDS.get(category, CATEGORY_IDS["electronics"]),
            "limit": min(limit, API_PAGE_LIMIT, self.config.MAX_LISTINGS_PER_REQUEST),
            "sort": "relevance",
            "condition": "new",
        }
        response = self._get(url, params=params)
        try:
            results = response.json().get("results") or []
        except ValueError as e:
            raise ScrapingError(f"Mercado Livre API returned invalid JSON: {e}")
        
        listings = []
        for item in results[:limit]:
            listing = self._build_listing(self.map_item(item, category))
            if listing:
                listings.append(listing)
        
        logger.info(
            "api_listings_fetched",
            platform=self.platform.value,
            category=category,
            found=len(results),
            mapped=len(listings),
        )
        return listings
    
    @staticmethod
    def _https(url: Optional[str]) -> Optional[str]:
        if not url:
            return None
        return re.sub(r"^http://", "https://", url)
    
    def map_item(self, item: Dict[str, Any], category: str) -> Dict[str, Any]:
        """
        Map one API result into CandidateListing fields.
        
        Args:
            item: API result object
            category: Category the search ran under
            
        Returns:
            Listing field values
        """
        seller = item.get("seller") or {}
        reputation = seller.get("seller_reputation") or {}
        power_status = reputation.get("power_seller_status")
        return {
            "platform": self.platform,
            "platform_id": str(item.get("id", "")),
            "title": item.get("title") or "",
            "category": category,
            "price": item.get("price"),
            "original_price": item.get("original_price"),
            "commission_rate": platform_commission_rate(self.platform.value, category),
            "sales_count": item.get("sold_quantity") or 0,
            "source_url": item.get("permalink"),
            "image_url": self._https(item.get("thumbnail")),
            "seller": {
                "name": seller.get("nickname") or "Vendedor ML",
                "rating": 5 if power_status == "gold" else 4,
                "is_verified": power_status is not None,
            },
        }
