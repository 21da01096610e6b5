"""
Pydantic model for raw listings produced by the source fetcher.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, HttpUrl, field_validator

from src.core.models.enums import Platform, ProductCategory
from src.core.utils.commission_calculator import normalize_commission_rate


class SellerInfo(BaseModel):
    """
    Seller details attached to a listing.
    
    Attributes:
        name: Seller display name
        rating: Seller rating from 0 to 5
        is_verified: Whether the platform marks the seller as trusted
    """
    
    name: Optional[str] = Field(None, max_length=200)
    rating: Optional[float] = Field(None, ge=0, le=5)
    is_verified: bool = Field(False)


class CandidateListing(BaseModel):
    """
    Model representing a listing as fetched, before enrichment.
    
    Attributes:
        platform: Platform the listing comes from
        platform_id: Platform-specific item id
        title: Raw listing title
        category: Category the listing was fetched under
        price: Current price in BRL
        original_price: Price before discount, if shown
        commission_rate: Affiliate commission as a fraction
        rating: Average review rating from 0 to 5
        reviews_count: Number of reviews
        sales_count: Number of units sold
        source_url: Canonical product page
        image_url: Product image
        seller: Seller details
    """
    
    platform: Platform
    platform_id: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1)
    category: ProductCategory = Field(ProductCategory.OTHER)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    original_price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    commission_rate: Decimal = Field(Decimal("0"), ge=0, le=1)
    rating: float = Field(0, ge=0, le=5)
    reviews_count: int = Field(0, ge=0)
    sales_count: int = Field(0)
    source_url: HttpUrl
    image_url: Optional[HttpUrl] = None
    seller: SellerInfo = Field(default_factory=SellerInfo)
    
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
        if v is None:
            return Decimal("0")
        return normalize_commission_rate(v)
    
    @field_validator("price", "original_price", mode="before")
    @classmethod
    def round_prices(cls, v):
        """Rounds float prices to cents so decimal_places holds."""
        if isinstance(v, float):
            return Decimal(str(round(v, 2)))
        return v
