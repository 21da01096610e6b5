"""
Built-in listings used when a results page cannot be scraped.
"""

from decimal import Decimal
from typing import Dict, List

from src.core.models.candidate_listing import CandidateListing, SellerInfo
from src.core.models.enums import Platform
from src.core.utils.commission_calculator import platform_commission_rate

_SAMPLES: Dict[str, List[dict]] = {
    "shopee": [
        {
            "slug": "kit-skincare-vitamina-c",
            "title": "Kit Skincare Completo Vitamina C + Ácido Hialurônico",
            "category": "beauty",
            "price": "89.99",
            "original_price": "149.99",
            "commission_rate": "0.15",
            "rating": 4.7,
            "reviews_count": 1850,
            "sales_count": 950,
            "seller": ("Beauty Store Official", 4.8),
        },
        {
            "slug": "fone-bluetooth-tws",
            "title": "Fone Bluetooth TWS Sem Fio Cancelamento Ruído",
            "category": "electronics",
            "price": "79.90",
            "original_price": "159.90",
            "commission_rate": "0.12",
            "rating": 4.5,
            "reviews_count": 1200,
            "sales_count": 600,
            "seller": ("TechMax Store", 4.6),
        },
        {
            "slug": "organizador-bambu",
            "title": "Organizador Multiuso Casa Bambu 5 Gavetas",
            "category": "home",
            "price": "129.90",
            "original_price": "199.90",
            "commission_rate": "0.14",
            "rating": 4.3,
            "reviews_count": 820,
            "sales_count": 340,
            "seller": ("Casa & Estilo", 4.4),
        },
        {
            "slug": "perfume-natura-kaiak",
            "title": "Perfume Natura Kaiak Masculino 100ml",
            "category": "beauty",
            "price": "139.90",
            "original_price": None,
            "rating": 4.8,
            "reviews_count": 640,
            "sales_count": 410,
            "seller": ("Natura Oficial", 4.9),
        },
    ],
    "mercadolivre": [
        {
            "slug": "MLB-SAMPLE-1",
            "title": "Smartphone Samsung Galaxy A54 128GB",
            "category": "electronics",
            "price": "1899.00",
            "original_price": "2199.00",
            "rating": 4.6,
            "reviews_count": 3200,
            "sales_count": 5000,
            "seller": ("SAMSUNG OFICIAL", 5.0),
        },
        {
            "slug": "MLB-SAMPLE-2",
            "title": "Perfume Boticário Malbec Tradicional 100ml",
            "category": "beauty",
            "price": "179.90",
            "original_price": "219.90",
            "rating": 4.8,
            "reviews_count": 1500,
            "sales_count": 2300,
            "seller": ("BOTICARIO", 5.0),
        },
        {
            "slug": "MLB-SAMPLE-3",
            "title": "Jogo de Panelas Antiaderente 10 Peças",
            "category": "home",
            "price": "249.90",
            "original_price": None,
            "rating": 4.4,
            "reviews_count": 780,
            "sales_count": 1200,
            "seller": ("CASA NOVA", 4.0),
        },
    ],
}

_PRODUCT_URLS = {
    "shopee": "https://shopee.com.br/{slug}",
    "mercadolivre": "https://produto.mercadolivre.com.br/{slug}",
}


def sample_listings(platform: Platform, category: str, limit: int) -> List[CandidateListing]:
    """
    Sample listings for a platform and category.
    
    Args:
        platform: Platform the samples are for
        category: Product category, 'general' returns every category
        limit: Maximum listings returned
        
    Returns:
        Deterministic listings with stable platform ids
    """
    listings = []
    for sample in _SAMPLES.get(platform.value, []):
        if category not in (sample["category"], "general"):
            continue
        seller_name, seller_rating = sample["seller"]
        rate = sample.get("commission_rate") or platform_commission_rate(platform.value, sample["category"])
        listings.append(CandidateListing(
            platform=platform,
            platform_id=f"{platform.value}_{sample['slug']}",
            title=sample["title"],
            category=sample["category"],
            price=Decimal(sample["price"]),
            original_price=Decimal(sample["original_price"]) if sample["original_price"] else None,
            commission_rate=Decimal(str(rate)),
            rating=sample["rating"],
            reviews_count=sample["reviews_count"],
            sales_count=sample["sales_count"],
            source_url=_PRODUCT_URLS[platform.value].format(slug=sample["slug"]),
            image_url=f"https://cf.shopee.com.br/file/placeholder_{sample['category']}"
            if platform == Platform.SHOPEE else None,
            seller=SellerInfo(name=seller_name, rating=seller_rating, is_verified=True),
        ))
    return listings[:limit]
