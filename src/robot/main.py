#!/usr/bin/env python3
"""
Command line entry point for the affiliate robot.

Runs a scrape cycle, a full robot run, or checks the database and the
WhatsApp gateway from a terminal or a container.
"""

import argparse
import sys
from typing import List, Optional

from src.core.exceptions.base import AffiliateRobotError, ConfigurationError
from src.database.store import open_repositories
from src.enrichment.listing_enricher import ListingEnricher
from src.integrations.whatsapp.whatsapp_client import WhatsAppClient
from src.robot.factory import build_robot
from src.scrapers.source_fetcher import SourceFetcher
from src.shared.config.app_settings import get_app_config
from src.shared.config.robot_settings import get_robot_config
from src.shared.config.whatsapp_settings import get_whatsapp_config
from src.shared.logging.log_setup import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_CONFIGURATION = 2


def print_banner(title: str, subtitle: str) -> None:
    print("=" * 60)
    print(f"  {title}")
    print(f"  {subtitle}")
    print("=" * 60)


def run_scrape(categories: List[str], platforms: List[str], limit: int) -> None:
    """
    Fetch, enrich and save listings without delivering anything.
    
    Args:
        categories: Categories to fetch
        platforms: Platforms to fetch
        limit: Listings per category/platform pair
    """
    batch = SourceFetcher.from_config().fetch_all(categories, platforms, limit)
    enrichment = ListingEnricher().enrich(batch.listings)
    print(f"\nFetched {len(batch.listings)} listings, {enrichment.rejected} rejected by quality gate")
    for error in batch.errors:
        print(f"  ! {error}")
    
    with open_repositories() as store:
        report = store.products.bulk_upsert(enrichment.products)
    print(f"SUCCESS: {report.created} created, {report.updated} updated, {report.errors} errors")
    
    if enrichment.products:
        print("\nTop products:")
        top = sorted(enrichment.products, key=lambda p: p.estimated_commission, reverse=True)[:5]
        for i, product in enumerate(top, 1):
            print(
                f"  {i}. {product.title[:50]} - R$ {product.price} "
                f"(commission R$ {product.estimated_commission}, {product.commission_quality.value})"
            )


def run_robot(categories: List[str], platforms: List[str], limit: int) -> bool:
    """
    Execute one full robot run.
    
    Returns:
        True if the run succeeded
    """
    robot = build_robot()
    result = robot.run(categories=categories, platforms=platforms, limit=limit)
    counts = result.counts
    print(f"\nRun {result.execution_id} finished in {result.duration_seconds}s")
    print(f"  scraped:   {counts.scraped} ({counts.rejected} rejected, {counts.created} new, {counts.updated} updated)")
    print(f"  selected:  {counts.selected_products} products x {counts.eligible_targets} targets")
    print(f"  sent:      {counts.sent} ({counts.succeeded} succeeded)")
    print(f"  errors:    {counts.errors}")
    for error in result.errors[:10]:
        print(f"  ! {error}")
    return result.success


def show_status() -> None:
    """Print configuration and database reachability."""
    app_config = get_app_config()
    robot_config = app_config.robot
    whatsapp_config = app_config.whatsapp
    print(f"\nTimezone:            {app_config.TIMEZONE}")
    print(f"Quality gate:        price >= {app_config.MIN_PRICE}, commission >= {app_config.MIN_COMMISSION}")
    print(f"Categories:          {', '.join(robot_config.ROBOT_CATEGORIES)}")
    print(f"Platforms:           {', '.join(robot_config.ROBOT_PLATFORMS)}")
    print(f"Allowed qualities:   {', '.join(robot_config.ROBOT_ALLOWED_QUALITIES)}")
    print(f"WhatsApp configured: {whatsapp_config.is_configured}")
    
    with open_repositories():
        print("Database:            reachable")


def check_whatsapp() -> bool:
    """
    Print the gateway connection state and the instance's groups.
    
    Returns:
        True if the instance is connected
    """
    config = get_whatsapp_config()
    config.require_configured()
    client = WhatsAppClient(config)
    connection = client.check_connection()
    print(f"\nInstance {connection['instance_name']}: {connection['state']}")
    if not connection["connected"]:
        if connection.get("error"):
            print(f"ERROR: {connection['error']}")
        return False
    
    groups = client.list_groups()
    print(f"Groups ({len(groups)}):")
    for group in groups:
        print(f"  {group['id']}  {group['subject']} ({group['participants_count']} participants)")
    return True


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Affiliate Robot - scrape, curate and deliver affiliate offers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fetch and save listings only
  python -m src.robot --scope scrape --categories electronics beauty
  
  # Full run: fetch, select, deliver to WhatsApp groups
  python -m src.robot --scope run
  
  # Check the WhatsApp gateway
  python -m src.robot --scope whatsapp
        """
    )
    parser.add_argument(
        "--scope",
        choices=["scrape", "run", "status", "whatsapp"],
        required=True,
        help="'scrape' (fetch and save), 'run' (full robot run), 'status' or 'whatsapp' (checks)"
    )
    parser.add_argument("--categories", nargs="+", help="Categories to fetch")
    parser.add_argument("--platforms", nargs="+", help="Platforms to fetch")
    parser.add_argument("--limit", type=int, help="Listings per category/platform pair")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    
    args = parser.parse_args(argv)
    
    app_config = get_app_config()
    setup_logging(
        log_level="DEBUG" if args.verbose else app_config.LOG_LEVEL,
        log_format=app_config.LOG_FORMAT,
    )
    
    robot_config = get_robot_config()
    categories = args.categories or robot_config.ROBOT_CATEGORIES
    platforms = args.platforms or robot_config.ROBOT_PLATFORMS
    limit = args.limit or robot_config.ROBOT_SCRAPING_LIMIT
    
    print_banner("Affiliate Robot", f"Scope: {args.scope.upper()}")
    
    try:
        if args.scope == "scrape":
            run_scrape(categories, platforms, limit)
        elif args.scope == "run":
            if not run_robot(categories, platforms, limit):
                sys.exit(1)
        elif args.scope == "status":
            show_status()
        elif args.scope == "whatsapp":
            if not check_whatsapp():
                sys.exit(1)
        
        print("\nDone.")
        
    except ConfigurationError as e:
        logger.error("configuration_missing", component=e.component, missing=e.missing)
        print(f"ERROR: {e}")
        sys.exit(EXIT_CONFIGURATION)
    except KeyboardInterrupt:
        print("\nWARNING: Interrupted by user")
        sys.exit(130)
    except AffiliateRobotError as e:
        logger.error("command_failed", scope=args.scope, error=str(e))
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
