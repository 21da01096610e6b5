"""
Fixtures shared by the affiliate_board API tests.
"""

import json
from decimal import Decimal

import pytest


@pytest.fixture
def post_json(client):
    """POST/PUT/PATCH a JSON body and decode the envelope."""
    def send(url, body=None, method="post"):
        response = getattr(client, method)(url, data=json.dumps(body or {}), content_type="application/json")
        return response, response.json()
    return send


@pytest.fixture
def make_product(db):
    from affiliate_board.models import Product

    def create(**overrides):
        values = {
            "platform": "shopee",
            "platform_id": "shopee_kit-skincare",
            "title": "Kit Skincare Completo Vitamina C",
            "category": "beauty",
            "price": Decimal("89.90"),
            "original_price": Decimal("149.90"),
            "commission_rate": Decimal("0.15"),
            "rating": 4.8,
            "reviews_count": 1200,
            "sales_count": 3400,
            "product_url": "https://shopee.com.br/kit-skincare",
            "affiliate_link": "https://shopee.com.br/kit-skincare?aff_sid=SHOPEE_AFF_67890",
        }
        values.update(overrides)
        return Product.objects.create(**values)
    return create


@pytest.fixture
def template(db):
    from affiliate_board.models import MessageTemplate

    return MessageTemplate.objects.create(
        name="Oferta beleza",
        category="beauty",
        content="🔥 {{title}} por {{ price }} ({{discount_percentage}} OFF) {{link}}",
        variables=[
            {"name": "title", "type": "text", "required": True},
            {"name": "price", "type": "currency", "required": True},
            {"name": "discount_percentage", "type": "percentage", "required": False},
            {"name": "link", "type": "url", "required": True},
        ],
        is_default=True,
    )


@pytest.fixture
def group(db):
    from affiliate_board.models import MessageTarget

    return MessageTarget.objects.create(
        name="Ofertas Beleza",
        whatsapp_id="120363000000000001@g.us",
        category="beauty",
        members_count=180,
    )
