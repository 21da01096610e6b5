"""
CSS selector lookup with fallback alternatives.

Each platform keeps its selectors in a dict of lists; the first selector
in each list is the primary one, the rest are fallbacks for older markup.
"""

from typing import Dict, List, Optional, Union

from bs4 import BeautifulSoup, Tag

from src.shared.logging.log_setup import get_logger

logger = get_logger(__name__)


class SelectorManager:
    """
    Tries selectors from a fallback list and remembers the one that worked.
    """
    
    def __init__(self, selectors: Dict[str, List[str]]):
        """
        Initialize the selector manager.
        
        Args:
            selectors: Selector lists by element key
        """
        self.selectors = selectors
        self._successful_selectors: Dict[str, str] = {}
    
    def try_selectors(
        self,
        soup: Union[BeautifulSoup, Tag],
        selector_key: str,
        required: bool = False
    ) -> Optional[Tag]:
        """
        Return the first element matched by any selector for the key.
        
        Args:
            soup: BeautifulSoup object or Tag to search in
            selector_key: Key into the selector dict (e.g. 'title', 'price')
            required: If True, log a warning when nothing matches
            
        Returns:
            First matching element or None
        """
        cached = self._successful_selectors.get(selector_key)
        if cached:
            result = soup.select_one(cached)
            if result:
                return result
        
        selectors = self.selectors.get(selector_key, [])
        for index, selector in enumerate(selectors):
            if selector == cached:
                continue
            result = soup.select_one(selector)
            if result:
                self._successful_selectors[selector_key] = selector
                if index > 0:
                    logger.info("using_fallback_selector", key=selector_key, selector=selector)
                return result
        
        if required:
            logger.warning("all_selectors_failed", key=selector_key, tried_count=len(selectors))
        return None
    
    def select_all(self, soup: Union[BeautifulSoup, Tag], selector_key: str) -> List[Tag]:
        """
        Return all elements matched by the first selector that matches anything.
        
        Args:
            soup: BeautifulSoup object to search in
            selector_key: Key into the selector dict
            
        Returns:
            Matching elements, empty if no selector matches
        """
        for selector in self.selectors.get(selector_key, []):
            results = soup.select(selector)
            if results:
                return results
        return []
    
    def text_of(self, soup: Union[BeautifulSoup, Tag], selector_key: str) -> str:
        """Stripped text of the first match, empty string when absent."""
        element = self.try_selectors(soup, selector_key)
        return element.get_text(strip=True) if element else ""
