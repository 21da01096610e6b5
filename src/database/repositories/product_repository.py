"""
Product upserts by natural key and delivery selection queries.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from psycopg2.extras import Json

from src.core.exceptions.base import AffiliateRobotError
from src.core.models.product import Product
from src.shared.config.app_settings import local_now
from src.shared.logging.log_setup import get_logger

from .base_repository import BaseRepository

logger = get_logger(__name__)

PRODUCT_COLUMNS = (
    "id, platform, platform_id, title, description, category, price, original_price, "
    "commission_rate, rating, reviews_count, sales_count, product_url, affiliate_link, "
    "image_url, seller, is_approved, approved_by, approved_at, is_active, last_scraped_at, "
    "views, clicks, conversions, created_at, updated_at"
)


@dataclass
class UpsertOutcome:
    """What happened to one product in a bulk upsert."""
    
    platform: str
    platform_id: str
    status: str  # created | updated | errored
    product_id: Optional[int] = None
    error: Optional[str] = None


@dataclass
class UpsertReport:
    """Per-item outcomes of a bulk upsert."""
    
    outcomes: List[UpsertOutcome] = field(default_factory=list)
    
    def _count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)
    
    @property
    def created(self) -> int:
        return self._count("created")
    
    @property
    def updated(self) -> int:
        return self._count("updated")
    
    @property
    def errors(self) -> int:
        return self._count("errored")


def row_to_product(row: Dict[str, Any]) -> Product:
    """Build a Product from a row dict; stored derived columns are recomputed."""
    data = {key: value for key, value in row.items() if key in Product.model_fields}
    data["seller"] = data.get("seller") or {}
    return Product(**data)


class ProductRepository(BaseRepository):
    """Repository for product data operations."""
    
    table = "affiliate_board_product"
    
    def upsert(self, product: Product) -> Tuple[int, bool]:
        """
        Insert a product or refresh the scraped fields of the existing one.
        
        Approval state, engagement counters and the active flag of an
        existing product are preserved.
        
        Args:
            product: Product to store
            
        Returns:
            Tuple of (product id, created)
            
        Raises:
            DatabaseOperationError: If the statement fails
        """
        query = f"""
            INSERT INTO {self.table}
            (platform, platform_id, title, description, category, price, original_price,
             discount, discount_percentage, commission_rate, estimated_commission,
             commission_quality, rating, reviews_count, sales_count, product_url,
             affiliate_link, image_url, seller, is_approved, approved_by, approved_at,
             is_active, last_scraped_at, views, clicks, conversions, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                    %s, %s, %s, FALSE, NULL, NULL, TRUE, %s, 0, 0, 0, NOW(), NOW())
            ON CONFLICT (platform, platform_id) DO UPDATE SET
                title = EXCLUDED.title,
                description = EXCLUDED.description,
                category = EXCLUDED.category,
                price = EXCLUDED.price,
                original_price = EXCLUDED.original_price,
                discount = EXCLUDED.discount,
                discount_percentage = EXCLUDED.discount_percentage,
                commission_rate = EXCLUDED.commission_rate,
                estimated_commission = EXCLUDED.estimated_commission,
                commission_quality = EXCLUDED.commission_quality,
                rating = EXCLUDED.rating,
                reviews_count = EXCLUDED.reviews_count,
                sales_count = EXCLUDED.sales_count,
                product_url = EXCLUDED.product_url,
                affiliate_link = EXCLUDED.affiliate_link,
                image_url = EXCLUDED.image_url,
                seller = EXCLUDED.seller,
                last_scraped_at = EXCLUDED.last_scraped_at,
                updated_at = NOW()
            RETURNING id, (xmax = 0) AS inserted;
        """
        params = (
            product.platform.value,
            product.platform_id,
            product.title,
            product.description,
            product.category.value,
            product.price,
            product.original_price,
            product.discount,
            product.discount_percentage,
            product.commission_rate,
            product.estimated_commission,
            product.commission_quality.value,
            product.rating,
            product.reviews_count,
            product.sales_count,
            product.product_url,
            product.affiliate_link,
            product.image_url,
            Json(product.seller.model_dump()),
            product.last_scraped_at,
        )
        rows = self._execute_query(query, params)
        product_id, inserted = rows[0]
        logger.debug(
            "product_upserted",
            product_id=product_id,
            created=inserted,
            platform_id=product.platform_id,
        )
        return product_id, bool(inserted)
    
    def bulk_upsert(self, products: Iterable[Product]) -> UpsertReport:
        """
        Upsert products one by one, continuing past failures.
        
        Args:
            products: Products to store
            
        Returns:
            Outcome for every input product, in input order
        """
        report = UpsertReport()
        for product in products:
            try:
                product_id, created = self.upsert(product)
            except AffiliateRobotError as e:
                logger.warning("product_upsert_failed", platform_id=product.platform_id, error=str(e))
                report.outcomes.append(UpsertOutcome(
                    product.platform.value, product.platform_id, "errored", error=str(e)
                ))
                continue
            report.outcomes.append(UpsertOutcome(
                product.platform.value,
                product.platform_id,
                "created" if created else "updated",
                product_id,
            ))
        
        logger.info(
            "products_saved",
            created=report.created,
            updated=report.updated,
            errors=report.errors,
        )
        return report
    
    def find_by_id(self, product_id: int) -> Optional[Product]:
        rows = self._fetch_dicts(
            f"SELECT {PRODUCT_COLUMNS} FROM {self.table} WHERE id = %s;", (product_id,)
        )
        return row_to_product(rows[0]) if rows else None
    
    def find_by_natural_key(self, platform: str, platform_id: str) -> Optional[Product]:
        rows = self._fetch_dicts(
            f"SELECT {PRODUCT_COLUMNS} FROM {self.table} WHERE platform = %s AND platform_id = %s;",
            (platform, platform_id),
        )
        return row_to_product(rows[0]) if rows else None
    
    def find_for_delivery(self, qualities: List[str], limit: int) -> List[Product]:
        """
        Approved, active products of the given qualities, best commission first.
        
        Args:
            qualities: Allowed commission qualities
            limit: Maximum products returned
            
        Returns:
            Products ordered by estimated commission descending
        """
        if not qualities or limit <= 0:
            return []
        query = f"""
            SELECT {PRODUCT_COLUMNS} FROM {self.table}
            WHERE is_approved = TRUE AND is_active = TRUE AND commission_quality = ANY(%s)
            ORDER BY estimated_commission DESC, id ASC
            LIMIT %s;
        """
        return [row_to_product(row) for row in self._fetch_dicts(query, (list(qualities), limit))]
    
    def approve(self, product_id: int, approved_by: str, approved_at: Optional[datetime] = None) -> bool:
        """
        Approve a product for delivery.
        
        Returns:
            True if an unapproved product was approved
        """
        rows = self._execute_query(
            f"""
            UPDATE {self.table}
            SET is_approved = TRUE, approved_by = %s, approved_at = %s, updated_at = NOW()
            WHERE id = %s AND is_approved = FALSE
            RETURNING id;
            """,
            (approved_by, approved_at or local_now(), product_id),
        )
        return bool(rows)
