"""
API tests for the products endpoints.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest

from affiliate_board.models import Product
from src.enrichment.listing_enricher import EnrichmentResult
from src.scrapers.source_fetcher import FetchBatch, FetchError


@pytest.mark.django_db
class TestProductCollection:
    """Test listing and creating products."""

    @pytest.fixture
    def payload(self):
        return {
            "platform": "mercadolivre",
            "platform_id": "MLB123456",
            "title": "Fone de Ouvido Bluetooth JBL Tune 510BT",
            "category": "electronics",
            "price": "199.90",
            "original_price": "299.90",
            "commission_rate": 12,
            "product_url": "https://produto.mercadolivre.com.br/MLB123456",
        }

    def test_create_product_derives_fields(self, post_json, payload):
        """Test that creation computes discount and commission fields."""
        response, body = post_json("/api/products/", payload)

        assert response.status_code == 201
        assert body["success"] is True
        data = body["data"]
        assert Decimal(data["commission_rate"]) == Decimal("0.12")
        assert Decimal(data["discount"]) == Decimal("100.00")
        assert data["discount_percentage"] == 33
        assert Decimal(data["estimated_commission"]) == Decimal("23.99")
        assert data["commission_quality"] == "good"
        assert data["is_approved"] is False
        assert "mshops=SEC" in data["affiliate_link"]

    def test_create_duplicate_natural_key_conflicts(self, post_json, payload):
        """Test that a second product with the same platform id is a 409."""
        post_json("/api/products/", payload)
        response, body = post_json("/api/products/", payload)

        assert response.status_code == 409
        assert body["success"] is False
        assert Product.objects.count() == 1

    def test_create_rejects_derived_fields(self, post_json, payload):
        """Test that derived fields cannot be assigned."""
        payload["estimated_commission"] = "999.00"
        response, body = post_json("/api/products/", payload)

        assert response.status_code == 400
        assert "Derived fields" in body["data"]["errors"][0]["message"]

    def test_create_rejects_invalid_commission(self, post_json, payload):
        """Test that rates above 100 are rejected."""
        payload["commission_rate"] = 150
        response, _ = post_json("/api/products/", payload)
        assert response.status_code == 400

    def test_create_rejects_malformed_json(self, client):
        response = client.post("/api/products/", data="{not json", content_type="application/json")
        assert response.status_code == 400

    def test_list_envelope_and_pagination(self, client, make_product):
        """Test the paginated envelope shape."""
        for i in range(3):
            make_product(platform_id=f"shopee_item-{i}")

        body = client.get("/api/products/?limit=2&page=1").json()

        data = body["data"]
        assert body["success"] is True
        assert "timestamp" in body
        assert data["totalDocs"] == 3
        assert data["limit"] == 2
        assert data["totalPages"] == 2
        assert data["hasNextPage"] is True
        assert data["hasPrevPage"] is False
        assert len(data["docs"]) == 2

    def test_list_clamps_limit(self, client, make_product):
        make_product()
        body = client.get("/api/products/?limit=500").json()
        assert body["data"]["limit"] == 100

    def test_list_filters(self, client, make_product):
        """Test category, price and search filters."""
        make_product(platform_id="shopee_a", title="Kit Skincare Vitamina C", price=Decimal("89.90"))
        make_product(platform_id="shopee_b", title="Organizador de Bambu", category="home", price=Decimal("49.90"))
        make_product(platform_id="shopee_c", title="Perfume Natura Kaiak", price=Decimal("159.90"))

        assert client.get("/api/products/?category=home").json()["data"]["totalDocs"] == 1
        assert client.get("/api/products/?min_price=60&max_price=100").json()["data"]["totalDocs"] == 1
        assert client.get("/api/products/?search=perfume").json()["data"]["totalDocs"] == 1

    def test_list_rejects_unknown_sort(self, client):
        response = client.get("/api/products/?sort=-password")
        assert response.status_code == 400

    def test_list_rejects_bad_boolean(self, client):
        response = client.get("/api/products/?is_approved=maybe")
        assert response.status_code == 400

    def test_list_hides_deactivated(self, client, make_product):
        make_product(is_active=False)
        assert client.get("/api/products/").json()["data"]["totalDocs"] == 0

    def test_method_not_allowed(self, client):
        response = client.delete("/api/products/")
        assert response.status_code == 405


@pytest.mark.django_db
class TestProductDetail:
    """Test detail, update, delete and approval."""

    def test_get_unknown_product(self, client):
        response = client.get("/api/products/9999/")
        body = response.json()
        assert response.status_code == 404
        assert body["success"] is False

    def test_update_recomputes_derived_fields(self, post_json, make_product):
        """Test that changing price and rate refreshes the derived values."""
        product = make_product()

        response, body = post_json(
            f"/api/products/{product.pk}/", {"price": "100.00", "commission_rate": "0.04"}, method="put"
        )

        assert response.status_code == 200
        product.refresh_from_db()
        assert product.estimated_commission == Decimal("4.00")
        assert product.commission_quality == "low"
        assert product.discount == Decimal("49.90")
        assert body["data"]["title"] == "Kit Skincare Completo Vitamina C"

    def test_delete_is_soft(self, client, make_product):
        """Test that delete only deactivates the product."""
        product = make_product()

        response = client.delete(f"/api/products/{product.pk}/")

        assert response.status_code == 200
        product.refresh_from_db()
        assert product.is_active is False

    def test_approve_product(self, post_json, make_product):
        product = make_product()

        response, body = post_json(f"/api/products/{product.pk}/approve/", {"approved_by": "curadoria"}, method="patch")

        assert response.status_code == 200
        assert body["data"]["is_approved"] is True
        assert body["data"]["approved_by"] == "curadoria"
        assert body["data"]["approved_at"] is not None

    def test_approve_twice_is_rejected(self, post_json, make_product):
        product = make_product(is_approved=True, approved_by="curadoria")

        response, _ = post_json(f"/api/products/{product.pk}/approve/", {"approved_by": "outro"}, method="patch")

        assert response.status_code == 400


@pytest.mark.django_db
class TestProductQueries:
    """Test good-commission, category and stats endpoints."""

    def test_good_commission_only_approved_good_or_better(self, client, make_product):
        make_product(platform_id="a", is_approved=True, commission_rate=Decimal("0.15"))
        make_product(platform_id="b", is_approved=True, commission_rate=Decimal("0.10"), price=Decimal("500.00"))
        make_product(platform_id="c", is_approved=True, commission_rate=Decimal("0.06"))
        make_product(platform_id="d", is_approved=False, commission_rate=Decimal("0.20"))

        docs = client.get("/api/products/good-commission/").json()["data"]["docs"]

        assert [doc["platform_id"] for doc in docs] == ["b", "a"]

    def test_category_with_approved_filter(self, client, make_product):
        make_product(platform_id="a", is_approved=True)
        make_product(platform_id="b")

        assert client.get("/api/products/category/beauty/").json()["data"]["totalDocs"] == 2
        assert client.get("/api/products/category/beauty/?approved=true").json()["data"]["totalDocs"] == 1

    def test_unknown_category_is_rejected(self, client):
        assert client.get("/api/products/category/weapons/").status_code == 400

    def test_stats(self, client, make_product):
        make_product(platform_id="a", is_approved=True)
        make_product(platform_id="b", platform="mercadolivre", category="electronics", commission_rate=Decimal("0.08"))

        data = client.get("/api/products/stats/").json()["data"]

        assert data["general"]["total"] == 2
        assert data["general"]["approved"] == 1
        assert {row["platform"] for row in data["by_platform"]} == {"mercadolivre", "shopee"}
        assert {row["category"]: row["count"] for row in data["by_category"]} == {"beauty": 1, "electronics": 1}


@pytest.mark.django_db
class TestScrapeEndpoint:
    """Test the manual scrape cycle."""

    @patch("affiliate_board.services.ListingEnricher")
    @patch("affiliate_board.services.SourceFetcher")
    def test_scrape_upserts_and_preserves_approval(self, mock_fetcher_cls, mock_enricher_cls, post_json, make_product):
        """Test that a re-scrape refreshes scraped fields but keeps approval."""
        from src.core.models.product import Product as DomainProduct

        existing = make_product(is_approved=True, approved_by="curadoria", price=Decimal("99.90"))
        refreshed = DomainProduct(
            platform="shopee",
            platform_id=existing.platform_id,
            title=existing.title,
            category="beauty",
            price=Decimal("79.90"),
            original_price=Decimal("149.90"),
            commission_rate=Decimal("0.15"),
            product_url=existing.product_url,
            affiliate_link=existing.affiliate_link,
        )
        fresh = refreshed.model_copy(update={"platform_id": "shopee_fone-bluetooth", "title": "Fone Bluetooth TWS"})
        mock_fetcher_cls.from_config.return_value.fetch_all.return_value = FetchBatch(
            listings=[object(), object(), object()],
            errors=[FetchError("mercadolivre", "beauty", "timeout")],
        )
        mock_enricher_cls.return_value.enrich.return_value = EnrichmentResult(
            products=[refreshed, fresh], rejected=1, rejection_reasons={"price_below_minimum": 1}
        )

        response, body = post_json("/api/products/scrape/", {"categories": ["beauty"], "platforms": ["shopee"], "limit": 5})

        assert response.status_code == 200
        assert body["data"]["created"] == 1
        assert body["data"]["updated"] == 1
        assert body["data"]["rejected"] == 1
        assert len(body["data"]["fetch_errors"]) == 1
        existing.refresh_from_db()
        assert existing.price == Decimal("79.90")
        assert existing.is_approved is True
        assert existing.approved_by == "curadoria"
        mock_fetcher_cls.from_config.return_value.fetch_all.assert_called_once_with(["beauty"], ["shopee"], 5)

    def test_scrape_rejects_unknown_platform(self, post_json):
        response, _ = post_json("/api/products/scrape/", {"platforms": ["ebay"]})
        assert response.status_code == 400
