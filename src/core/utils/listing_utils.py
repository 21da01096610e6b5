"""
Helpers for turning raw listing text into clean product data.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from src.core.exceptions.scraping_errors import PriceParsingError
from src.shared.logging.log_setup import get_logger

logger = get_logger(__name__)

TITLE_MAX_LENGTH = 200

# word characters, whitespace, Latin-1 accented letters and hyphens survive
_TITLE_STRIP_PATTERN = re.compile(r"[^\w\sÀ-ÿ\-]")
_WHITESPACE_PATTERN = re.compile(r"\s+")

# tracking parameter template per platform
AFFILIATE_PARAMETERS = {
    "mercadolivre": "mshops=SEC{affiliate_id}&utm_source=affiliate_bot",
    "shopee": "aff_sid={affiliate_id}&utm_source=affiliate_bot",
    "amazon": "tag={affiliate_id}&linkCode=as2",
}


def clean_title(title: Optional[str]) -> str:
    """
    Sanitize a scraped title.
    
    Args:
        title: Raw title text
        
    Returns:
        Title without symbols, with collapsed whitespace, capped in length
    """
    if not title:
        return ""
    cleaned = _TITLE_STRIP_PATTERN.sub("", title)
    cleaned = _WHITESPACE_PATTERN.sub(" ", cleaned).strip()
    return cleaned[:TITLE_MAX_LENGTH].strip()


def build_affiliate_link(platform: str, url: str, affiliate_id: str) -> str:
    """
    Append the platform's affiliate tracking parameter to a product URL.
    
    Args:
        platform: Platform identifier
        url: Canonical product URL
        affiliate_id: Tracking id from configuration
        
    Returns:
        URL with tracking parameter; the URL unchanged when the platform
        has no tracking format or no id is configured
    """
    template = AFFILIATE_PARAMETERS.get(platform)
    if template is None or not affiliate_id:
        logger.debug("affiliate_id_missing", platform=platform)
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{template.format(affiliate_id=affiliate_id)}"


def parse_price(price_text: str) -> Decimal:
    """
    Parse a Brazilian formatted price.
    
    Args:
        price_text: Raw price text, e.g. 'R$ 1.234,56' or '1.299'
        
    Returns:
        Parsed price as Decimal
        
    Raises:
        PriceParsingError: If price cannot be parsed
    """
    try:
        price_match = re.search(r"\d[\d.]*(?:,\d+)?", price_text or "")
        if not price_match:
            raise PriceParsingError(price_text)
        
        price_cleaned = price_match.group(0).replace(".", "").replace(",", ".")
        return Decimal(price_cleaned)
        
    except (InvalidOperation, ValueError) as e:
        logger.error("price_parsing_failed", price_text=price_text, error=str(e))
        raise PriceParsingError(price_text)


def parse_count(text: Optional[str]) -> int:
    """Extract an integer count such as '(1.234)' or '2 mil', 0 when absent."""
    if not text:
        return 0
    match = re.search(r"(\d[\d.]*)\s*(mil)?", text)
    if not match:
        return 0
    count = int(match.group(1).replace(".", ""))
    if match.group(2):
        count *= 1000
    return count


def parse_rating(text: Optional[str]) -> float:
    """
    Extract a 0-5 star rating such as '4,7', '4.5 de 5' or 'Avaliação 4,8'.
    
    Returns:
        The first number in the text capped at 5, 0 when there is none ('Novo')
    """
    match = re.search(r"\d+(?:[.,]\d+)?", text or "")
    if not match:
        return 0.0
    return min(float(match.group(0).replace(",", ".")), 5.0)
