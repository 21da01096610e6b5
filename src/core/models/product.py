"""
Pydantic model for curated affiliate products.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from src.core.models.candidate_listing import SellerInfo
from src.core.models.enums import CommissionQuality, Platform, ProductCategory
from src.core.utils.commission_calculator import (
    calculate_discount,
    calculate_discount_percentage,
    calculate_estimated_commission,
    classify_commission,
    normalize_commission_rate,
)
from src.shared.config.app_settings import local_now


class Product(BaseModel):
    """
    Model representing a persisted product keyed by (platform, platform_id).
    
    Derived values are computed from price, original price and commission
    rate on every access, so they always agree with the stored inputs.
    
    Attributes:
        id: Database primary key, None until persisted
        platform: Platform the product is sold on
        platform_id: Platform-specific item id
        title: Cleaned product title
        description: Optional free text
        category: Product category
        price: Current price in BRL
        original_price: Price before discount, if any
        commission_rate: Affiliate commission as a fraction
        rating: Average review rating
        reviews_count: Number of reviews
        sales_count: Number of units sold
        product_url: Canonical product page
        affiliate_link: Product page with the affiliate tracking parameter
        image_url: Product image
        seller: Seller details
        is_approved: Whether an operator approved the product for delivery
        approved_by: Who approved it
        approved_at: When it was approved
        is_active: False once soft-deleted
        last_scraped_at: Last time a scrape refreshed this product
        views: View counter
        clicks: Click counter
        conversions: Conversion counter
    """
    
    id: Optional[int] = None
    platform: Platform
    platform_id: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=1000)
    category: ProductCategory = Field(ProductCategory.OTHER)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    original_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    commission_rate: Decimal = Field(Decimal("0"), ge=0, le=1)
    rating: float = Field(0, ge=0, le=5)
    reviews_count: int = Field(0, ge=0)
    sales_count: int = Field(0, ge=0)
    product_url: str = Field(..., min_length=1)
    affiliate_link: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    seller: SellerInfo = Field(default_factory=SellerInfo)
    is_approved: bool = Field(False)
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    is_active: bool = Field(True)
    last_scraped_at: datetime = Field(default_factory=lambda: local_now())
    views: int = Field(0, ge=0)
    clicks: int = Field(0, ge=0)
    conversions: int = Field(0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    @field_validator("commission_rate", mode="before")
    @classmethod
    def validate_commission_rate(cls, v):
        """
        Converts percentage rates to fractions.
        
        Args:
            v: Incoming rate
            
        Returns:
            Rate as a fraction
        """
        return normalize_commission_rate(v)
    
    @computed_field
    @property
    def discount(self) -> Decimal:
        return calculate_discount(self.price, self.original_price)
    
    @computed_field
    @property
    def discount_percentage(self) -> int:
        return calculate_discount_percentage(self.price, self.original_price)
    
    @computed_field
    @property
    def estimated_commission(self) -> Decimal:
        return calculate_estimated_commission(self.price, self.commission_rate)
    
    @computed_field
    @property
    def commission_quality(self) -> CommissionQuality:
        return classify_commission(self.commission_rate)
    
    @property
    def natural_key(self) -> tuple:
        """Upsert key."""
        return (self.platform.value, self.platform_id)
    
    
    class Config:
        json_encoders = {
            Decimal: str,
            datetime: lambda v: v.isoformat()
        }
