"""
Manual scrape cycle behind the products API.
"""

from typing import List

from django.db import DatabaseError, transaction

from src.enrichment.listing_enricher import ListingEnricher
from src.scrapers.source_fetcher import SourceFetcher
from src.shared.logging.log_setup import get_logger

from .models import Product

logger = get_logger(__name__)


def run_scrape_cycle(categories: List[str], platforms: List[str], limit: int) -> dict:
    """
    Fetch, enrich and upsert listings without delivering anything.
    
    Args:
        categories: Product categories to fetch
        platforms: Platforms to fetch
        limit: Listings per category/platform pair
        
    Returns:
        Counts plus the per-pair fetch errors and rejection reasons
    """
    batch = SourceFetcher.from_config().fetch_all(categories, platforms, limit)
    enrichment = ListingEnricher().enrich(batch.listings)
    
    created = updated = failed = 0
    for product in enrichment.products:
        try:
            with transaction.atomic():
                _, was_created = Product.objects.ingest(product)
        except DatabaseError as e:
            failed += 1
            logger.error("product_ingest_failed", platform=product.platform.value,
                         platform_id=product.platform_id, error=str(e))
            continue
        if was_created:
            created += 1
        else:
            updated += 1
    
    summary = {
        "scraped": len(batch.listings),
        "rejected": enrichment.rejected,
        "rejection_reasons": enrichment.rejection_reasons,
        "created": created,
        "updated": updated,
        "errors": failed,
        "fetch_errors": [str(error) for error in batch.errors],
    }
    logger.info("manual_scrape_completed", **{k: v for k, v in summary.items() if isinstance(v, int)})
    return summary
