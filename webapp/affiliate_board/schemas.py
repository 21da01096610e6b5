"""
Pydantic request bodies for the JSON API.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, HttpUrl, field_validator, model_validator

from src.core.models.candidate_listing import SellerInfo
from src.core.models.enums import Platform, ProductCategory, TargetCategory
from src.core.models.message_template import TemplateVariable
from src.core.utils.commission_calculator import normalize_commission_rate

DERIVED_PRODUCT_FIELDS = ("discount", "discount_percentage", "estimated_commission", "commission_quality")


class ProductWrite(BaseModel):
    """Writable product fields; derived fields are rejected."""

    platform: Platform
    platform_id: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=1000)
    category: ProductCategory = Field(ProductCategory.OTHER)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    original_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    commission_rate: Decimal
    rating: float = Field(0, ge=0, le=5)
    reviews_count: int = Field(0, ge=0)
    sales_count: int = Field(0, ge=0)
    product_url: HttpUrl
    affiliate_link: Optional[HttpUrl] = None
    image_url: Optional[HttpUrl] = None
    seller: SellerInfo = Field(default_factory=SellerInfo)

    @model_validator(mode="before")
    @classmethod
    def reject_derived_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            assigned = [name for name in DERIVED_PRODUCT_FIELDS if name in data]
            if assigned:
                raise ValueError(f"Derived fields cannot be assigned: {', '.join(assigned)}")
        return data

    @field_validator("commission_rate", mode="before")
    @classmethod
    def normalize_rate(cls, v: Any) -> Decimal:
        return normalize_commission_rate(v)


class ApproveProduct(BaseModel):
    approved_by: str = Field(..., min_length=1, max_length=100)


class ScrapeRequest(BaseModel):
    categories: List[ProductCategory] = Field(default_factory=lambda: [ProductCategory.ELECTRONICS], min_length=1)
    platforms: List[Platform] = Field(default_factory=lambda: [Platform.MERCADOLIVRE], min_length=1)
    limit: int = Field(20, ge=1, le=100)


class GroupWrite(BaseModel):
    """Writable message target fields."""

    name: str = Field(..., min_length=1, max_length=100)
    whatsapp_id: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)
    category: TargetCategory = Field(TargetCategory.GENERAL)
    members_count: int = Field(0, ge=0)
    is_active: bool = Field(True)
    sending_enabled: bool = Field(True)
    max_messages_per_day: int = Field(5, ge=1, le=20)
    allowed_hours_start: int = Field(8, ge=0, le=23)
    allowed_hours_end: int = Field(22, ge=1, le=24)
    message_template_id: Optional[int] = None

    @model_validator(mode="after")
    def validate_hours_window(self) -> "GroupWrite":
        if self.allowed_hours_end <= self.allowed_hours_start:
            raise ValueError("allowed_hours_end must be greater than allowed_hours_start")
        return self


class TemplateWrite(BaseModel):
    """Writable message template fields."""

    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field("", max_length=200)
    category: TargetCategory = Field(TargetCategory.GENERAL)
    content: str = Field(..., min_length=1, max_length=2000)
    variables: List[TemplateVariable] = Field(default_factory=list)
    is_default: bool = Field(False)
    is_active: bool = Field(True)

    @field_validator("variables")
    @classmethod
    def validate_unique_names(cls, v: List[TemplateVariable]) -> List[TemplateVariable]:
        names = [var.name for var in v]
        if len(names) != len(set(names)):
            raise ValueError("Template variable names must be unique")
        return v


class ProcessTemplate(BaseModel):
    variables: Dict[str, Any] = Field(default_factory=dict)


class RobotRunRequest(BaseModel):
    categories: Optional[List[ProductCategory]] = None
    platforms: Optional[List[Platform]] = None
    limit: Optional[int] = Field(None, ge=1, le=100)


class ProbeMessageRequest(BaseModel):
    number: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=1, max_length=4096)
