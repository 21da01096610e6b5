"""
Mercado Livre results page selectors, primary first.
"""

from typing import Dict, List

SELECTORS: Dict[str, List[str]] = {
    'item': [
        '.ui-search-results__item',
        'li.ui-search-layout__item',
    ],
    'title': [
        '.ui-search-item__title',
        '.poly-component__title',
    ],
    'price': [
        '.andes-money-amount__fraction',
    ],
    'original_price': [
        '.ui-search-price__second-line .andes-money-amount__fraction',
        's.andes-money-amount--previous .andes-money-amount__fraction',
    ],
    'link': [
        'a.ui-search-link',
        'a.poly-component__title',
    ],
    'image': [
        '.ui-search-result-image__element img',
        'img.poly-component__picture',
    ],
    'rating': [
        '.ui-search-reviews__rating-number',
    ],
    'reviews': [
        '.ui-search-reviews__amount',
    ],
}

# results page slug per product category
CATEGORY_SLUGS = {
    'electronics': 'celulares-telefones',
    'beauty': 'beleza-cuidado-pessoal',
    'home': 'casa-moveis-decoracao',
    'fashion': 'roupas-bolsas-calcados',
    'sports': 'esportes-fitness',
    'books': 'livros-revistas-comics',
    'games': 'games',
}

# search API category ids
CATEGORY_IDS = {
    'electronics': 'MLB1051',
    'home': 'MLB1574',
    'beauty': 'MLB1246',
    'fashion': 'MLB1430',
    'sports': 'MLB1276',
    'books': 'MLB1196',
    'games': 'MLB1144',
}
