"""
Unit tests for commission and discount derivations.
"""

import pytest
from decimal import Decimal

from src.core.models.enums import CommissionQuality
from src.core.utils.commission_calculator import (
    calculate_discount,
    calculate_discount_percentage,
    calculate_estimated_commission,
    classify_commission,
    normalize_commission_rate,
    platform_commission_rate,
)


class TestNormalizeCommissionRate:
    """Test percent/fraction normalization."""
    
    @pytest.mark.parametrize("value,expected", [
        (Decimal("0.15"), Decimal("0.15")),
        (15, Decimal("0.15")),
        ("8", Decimal("0.08")),
        (1, Decimal("1")),
        (0, Decimal("0")),
        (100, Decimal("1")),
    ])
    def test_normalizes(self, value, expected):
        assert normalize_commission_rate(value) == expected
    
    @pytest.mark.parametrize("value", [-0.01, 100.5, "abc"])
    def test_rejects_out_of_range(self, value):
        with pytest.raises(ValueError):
            normalize_commission_rate(value)


class TestDerivations:
    """Test discount, commission and quality bands."""
    
    def test_discount(self):
        assert calculate_discount(Decimal("89.90"), Decimal("149.90")) == Decimal("60.00")
        assert calculate_discount(Decimal("89.90"), None) == Decimal("0")
        assert calculate_discount(Decimal("89.90"), Decimal("80.00")) == Decimal("0")
    
    def test_discount_percentage_rounds_half_up(self):
        assert calculate_discount_percentage(Decimal("89.90"), Decimal("149.90")) == 40
        assert calculate_discount_percentage(Decimal("55.00"), Decimal("100.00")) == 45
        assert calculate_discount_percentage(Decimal("99.50"), Decimal("100.00")) == 1
    
    def test_estimated_commission_rounds_half_up(self):
        assert calculate_estimated_commission(Decimal("10.05"), Decimal("0.5")) == Decimal("5.03")
        assert calculate_estimated_commission(Decimal("199.90"), Decimal("0.12")) == Decimal("23.99")
    
    @pytest.mark.parametrize("rate,quality", [
        ("0.20", CommissionQuality.EXCELLENT),
        ("0.15", CommissionQuality.EXCELLENT),
        ("0.1499", CommissionQuality.GOOD),
        ("0.10", CommissionQuality.GOOD),
        ("0.05", CommissionQuality.REGULAR),
        ("0.0499", CommissionQuality.LOW),
    ])
    def test_quality_bands(self, rate, quality):
        assert classify_commission(Decimal(rate)) == quality
    
    def test_platform_rates(self):
        assert platform_commission_rate("shopee", "beauty") == Decimal("0.12")
        assert platform_commission_rate("mercadolivre", "unknown") == Decimal("0.08")
        assert platform_commission_rate("amazon", "beauty") == Decimal("0")
