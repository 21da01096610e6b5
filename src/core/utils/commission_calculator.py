"""
Commission and discount derivations shared by the domain models and the web app.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from src.core.models.enums import CommissionQuality

_CENT = Decimal("0.01")

# quality band floors on the commission rate fraction, best first
QUALITY_BANDS = (
    (Decimal("0.15"), CommissionQuality.EXCELLENT),
    (Decimal("0.10"), CommissionQuality.GOOD),
    (Decimal("0.05"), CommissionQuality.REGULAR),
)

# per-platform affiliate programme rates by product category
PLATFORM_COMMISSION_RATES = {
    "mercadolivre": {
        "electronics": Decimal("0.08"),
        "home": Decimal("0.12"),
        "beauty": Decimal("0.15"),
        "fashion": Decimal("0.10"),
        "sports": Decimal("0.11"),
        "books": Decimal("0.06"),
        "games": Decimal("0.09"),
        "default": Decimal("0.08"),
    },
    "shopee": {
        "electronics": Decimal("0.06"),
        "home": Decimal("0.10"),
        "beauty": Decimal("0.12"),
        "fashion": Decimal("0.08"),
        "sports": Decimal("0.09"),
        "books": Decimal("0.05"),
        "games": Decimal("0.07"),
        "default": Decimal("0.06"),
    },
}

Number = Union[Decimal, int, float, str]


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e


def normalize_commission_rate(value: Number) -> Decimal:
    """
    Convert an incoming commission rate to the canonical fraction.
    
    Values in (1, 100] are read as percentages. Values in [0, 1] are
    already fractions.
    
    Args:
        value: Rate as fraction or percentage
        
    Returns:
        Rate as a fraction between 0 and 1
        
    Raises:
        ValueError: If the value is negative or above 100
    """
    rate = _to_decimal(value)
    if rate < 0 or rate > 100:
        raise ValueError(f"Commission rate out of range: {value}")
    if rate > 1:
        rate = rate / 100
    return rate


def calculate_discount(price: Decimal, original_price: Optional[Decimal]) -> Decimal:
    """Absolute discount, zero unless the original price is higher."""
    if original_price is None or original_price <= price:
        return Decimal("0")
    return original_price - price


def calculate_discount_percentage(price: Decimal, original_price: Optional[Decimal]) -> int:
    """Discount as a whole percentage of the original price, rounded half up."""
    discount = calculate_discount(price, original_price)
    if discount == 0:
        return 0
    percentage = discount / original_price * 100
    return int(percentage.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_estimated_commission(price: Decimal, commission_rate: Decimal) -> Decimal:
    """Commission earned on one sale, rounded half up to cents."""
    return (_to_decimal(price) * _to_decimal(commission_rate)).quantize(_CENT, rounding=ROUND_HALF_UP)


def classify_commission(commission_rate: Decimal) -> CommissionQuality:
    """
    Band a commission rate into a quality label.
    
    Args:
        commission_rate: Rate as a fraction
        
    Returns:
        The first band whose floor the rate reaches, LOW otherwise
    """
    rate = _to_decimal(commission_rate)
    for floor, quality in QUALITY_BANDS:
        if rate >= floor:
            return quality
    return CommissionQuality.LOW


def platform_commission_rate(platform: str, category: str) -> Decimal:
    """
    Look up the affiliate programme rate for a platform and category.
    
    Args:
        platform: Platform identifier
        category: Product category
        
    Returns:
        Rate as a fraction, the platform default for unknown categories,
        zero for platforms without a table
    """
    table = PLATFORM_COMMISSION_RATES.get(platform)
    if table is None:
        return Decimal("0")
    return table.get(category, table["default"])
