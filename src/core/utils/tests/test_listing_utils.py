"""
Unit tests for listing text helpers and affiliate links.
"""

import pytest
from decimal import Decimal

from src.core.exceptions.scraping_errors import PriceParsingError
from src.core.utils.listing_utils import (
    TITLE_MAX_LENGTH,
    build_affiliate_link,
    clean_title,
    parse_count,
    parse_price,
    parse_rating,
)


class TestParsePrice:
    """Test Brazilian price parsing."""
    
    @pytest.mark.parametrize("text,expected", [
        ("R$ 1.234,56", Decimal("1234.56")),
        ("R$ 59", Decimal("59")),
        ("1.299", Decimal("1299")),
        ("89,90", Decimal("89.90")),
    ])
    def test_parses(self, text, expected):
        assert parse_price(text) == expected
    
    @pytest.mark.parametrize("text", ["", "Grátis", None])
    def test_unparseable(self, text):
        with pytest.raises(PriceParsingError):
            parse_price(text)


class TestParseCount:
    
    @pytest.mark.parametrize("text,expected", [
        ("(1.234)", 1234),
        ("2 mil vendidos", 2000),
        ("+10mil vendidos", 10000),
        ("Novo", 0),
        (None, 0),
    ])
    def test_counts(self, text, expected):
        assert parse_count(text) == expected


class TestParseRating:
    
    @pytest.mark.parametrize("text,expected", [
        ("4,7", 4.7),
        ("4.5 de 5", 4.5),
        ("Avaliação 4,8 de 5", 4.8),
        ("5", 5.0),
        ("12", 5.0),
        ("Novo", 0.0),
        ("", 0.0),
        (None, 0.0),
    ])
    def test_ratings(self, text, expected):
        assert parse_rating(text) == expected


class TestBuildAffiliateLink:
    """Test tracking parameter formats."""
    
    def test_mercadolivre(self):
        link = build_affiliate_link("mercadolivre", "https://produto.mercadolivre.com.br/MLB1", "ML1")
        assert link == "https://produto.mercadolivre.com.br/MLB1?mshops=SECML1&utm_source=affiliate_bot"
    
    def test_existing_query_string(self):
        link = build_affiliate_link("shopee", "https://shopee.com.br/p?sp_atk=1", "S1")
        assert link == "https://shopee.com.br/p?sp_atk=1&aff_sid=S1&utm_source=affiliate_bot"
    
    def test_amazon(self):
        link = build_affiliate_link("amazon", "https://www.amazon.com.br/dp/B0", "tag-20")
        assert link.endswith("?tag=tag-20&linkCode=as2")
    
    def test_platform_without_format_is_unchanged(self):
        url = "https://www.magazineluiza.com.br/p/123"
        assert build_affiliate_link("magazineluiza", url, "X") == url
    
    def test_missing_id_is_unchanged(self):
        url = "https://shopee.com.br/p"
        assert build_affiliate_link("shopee", url, "") == url


class TestCleanTitle:
    
    def test_collapses_whitespace(self):
        assert clean_title("  Fone   Bluetooth \n JBL  ") == "Fone Bluetooth JBL"
    
    def test_caps_length(self):
        assert len(clean_title("a" * 300)) == TITLE_MAX_LENGTH
    
    def test_empty(self):
        assert clean_title(None) == ""
