"""
Unit tests for the Mercado Livre and Shopee listing sources.
"""

import pytest
import requests
from decimal import Decimal
from unittest.mock import Mock, patch

from bs4 import BeautifulSoup

from src.core.exceptions.scraping_errors import PageLoadError, ScrapingError
from src.core.models.enums import Platform
from src.core.utils.listing_utils import TITLE_MAX_LENGTH
from src.enrichment.listing_enricher import ListingEnricher
from src.scrapers.mercadolivre.mercadolivre_api_source import MercadoLivreApiSource
from src.scrapers.mercadolivre.mercadolivre_html_source import MercadoLivreHtmlSource
from src.scrapers.sample_listings import sample_listings
from src.scrapers.shopee.shopee_source import ShopeeHtmlSource
from src.scrapers.source_fetcher import SourceFetcher
from src.shared.config.app_settings import AppConfig
from src.shared.config.scraper_settings import ScraperConfig

ML_RESULTS_PAGE = """
<ol>
  <li class="ui-search-layout__item">
    <div class="ui-search-result-image__element"><img data-src="https://http2.mlstatic.com/D_1.jpg"></div>
    <a class="ui-search-link" href="https://produto.mercadolivre.com.br/MLB-1234567890-fone-jbl?tracking_id=x">
      <h2 class="ui-search-item__title">Fone de Ouvido JBL Tune 510BT</h2>
    </a>
    <span class="andes-money-amount__fraction">199</span>
    <div class="ui-search-price__second-line"><span class="andes-money-amount__fraction">299</span></div>
    <span class="ui-search-reviews__rating-number">4,7</span>
    <span class="ui-search-reviews__amount">(1.234)</span>
  </li>
  <li class="ui-search-layout__item">
    <a class="ui-search-link" href="https://produto.mercadolivre.com.br/MLB-999"><h2 class="ui-search-item__title">Sem preço</h2></a>
  </li>
  <li class="ui-search-layout__item">
    <a class="ui-search-link" href="https://produto.mercadolivre.com.br/MLB-555-caixa-som">
      <h2 class="ui-search-item__title">Caixa de Som Bluetooth</h2>
    </a>
    <span class="andes-money-amount__fraction">1.299</span>
  </li>
</ol>
"""

ML_PAGE_WITH_UNRATED_CARD = """
<ol>
  <li class="ui-search-layout__item">
    <a class="ui-search-link" href="https://produto.mercadolivre.com.br/MLB-777-mouse-gamer">
      <h2 class="ui-search-item__title">Mouse Gamer Redragon Cobra</h2>
    </a>
    <span class="andes-money-amount__fraction">129</span>
    <span class="ui-search-reviews__rating-number">Novo</span>
  </li>
  <li class="ui-search-layout__item">
    <a class="ui-search-link" href="https://produto.mercadolivre.com.br/MLB-888-teclado">
      <h2 class="ui-search-item__title">Teclado Mecânico Redragon Kumara</h2>
    </a>
    <span class="andes-money-amount__fraction">249</span>
    <span class="ui-search-reviews__rating-number">4,7 de 5</span>
  </li>
</ol>
"""


SHOPEE_RESULTS_PAGE = """
<div data-sqe="item">
  <a href="/Kit-Skincare-Vitamina-C-i.123.456">
    <img src="https://cf.shopee.com.br/file/abc">
    <div data-sqe="name">Kit Skincare Vitamina C</div>
    <div data-sqe="price">R$ 89,90</div>
    <div data-sqe="sold">2 mil vendidos</div>
  </a>
</div>
"""


@pytest.fixture
def config():
    return ScraperConfig(MIN_REQUEST_INTERVAL=0, MAX_LISTINGS_PER_REQUEST=50)


def html_response(text):
    response = Mock()
    response.text = text
    return response


class TestMercadoLivreHtmlSource:
    """Test results page parsing and the sample fallback."""
    
    @pytest.fixture
    def source(self, config):
        return MercadoLivreHtmlSource(throttle=Mock(), config=config)
    
    def test_search_url(self, source):
        assert source.search_url("beauty") == "https://lista.mercadolivre.com.br/beleza-cuidado-pessoal"
        assert source.search_url("unknown") == "https://lista.mercadolivre.com.br/celulares-telefones"
    
    def test_parse_listings(self, source):
        soup = BeautifulSoup(ML_RESULTS_PAGE, "html.parser")
        
        listings = source.parse_listings(soup, "electronics", 10)
        
        assert len(listings) == 2
        first = listings[0]
        assert first.platform_id == "MLB-1234567890-fone-jbl"
        assert first.price == Decimal("199")
        assert first.original_price == Decimal("299")
        assert first.rating == 4.7
        assert first.reviews_count == 1234
        assert first.commission_rate == Decimal("0.08")
        assert str(first.image_url) == "https://http2.mlstatic.com/D_1.jpg"
        assert listings[1].price == Decimal("1299")
    
    def test_parse_respects_limit(self, source):
        soup = BeautifulSoup(ML_RESULTS_PAGE, "html.parser")
        assert len(source.parse_listings(soup, "electronics", 1)) == 1
    
    @patch("src.scrapers.base_source.requests.get")
    def test_fetch_scrapes_page(self, mock_get, source):
        mock_get.return_value = html_response(ML_RESULTS_PAGE)
        
        listings = source.fetch("electronics", 5)
        
        assert [listing.platform_id for listing in listings] == ["MLB-1234567890-fone-jbl", "MLB-555-caixa-som"]
        source.throttle.wait.assert_called_once()
        assert mock_get.call_args.kwargs["headers"]["Accept-Language"].startswith("pt-BR")
    
    @patch("src.scrapers.base_source.requests.get")
    def test_fetch_falls_back_to_samples_on_error(self, mock_get, source):
        mock_get.side_effect = requests.exceptions.ConnectionError("connection refused")
        
        listings = source.fetch("electronics", 5)
        
        assert [listing.platform_id for listing in listings] == ["mercadolivre_MLB-SAMPLE-1"]
    
    @patch("src.scrapers.base_source.requests.get")
    def test_fetch_falls_back_to_samples_on_empty_page(self, mock_get, source):
        mock_get.return_value = html_response("<html><body>captcha</body></html>")
        
        listings = source.fetch("beauty", 5)
        
        assert [listing.platform_id for listing in listings] == ["mercadolivre_MLB-SAMPLE-2"]
    
    def test_parse_keeps_cards_with_text_ratings(self, source):
        soup = BeautifulSoup(ML_PAGE_WITH_UNRATED_CARD, "html.parser")

        listings = source.parse_listings(soup, "electronics", 10)

        assert [listing.platform_id for listing in listings] == ["MLB-777-mouse-gamer", "MLB-888-teclado"]
        assert listings[0].rating == 0
        assert listings[1].rating == 4.7

    @patch("src.scrapers.base_source.requests.get")
    def test_fetch_all_with_unrated_card(self, mock_get, source):
        mock_get.return_value = html_response(ML_PAGE_WITH_UNRATED_CARD)
        fetcher = SourceFetcher({Platform.MERCADOLIVRE: source})

        batch = fetcher.fetch_all(["electronics"], ["mercadolivre"], 10)

        assert batch.errors == []
        assert [listing.platform_id for listing in batch.listings] == ["MLB-777-mouse-gamer", "MLB-888-teclado"]

    @patch("src.scrapers.base_source.requests.get")
    def test_fetch_falls_back_to_samples_when_markup_unparseable(self, mock_get, source):
        mock_get.return_value = html_response(ML_RESULTS_PAGE)

        with patch.object(source, "parse_listings", side_effect=ValueError("could not convert string to float")):
            listings = source.fetch("electronics", 5)

        assert [listing.platform_id for listing in listings] == ["mercadolivre_MLB-SAMPLE-1"]

    @patch("src.scrapers.base_source.requests.get")
    def test_http_error_becomes_page_load_error(self, mock_get, source):
        response = Mock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("503", response=Mock(status_code=503))
        mock_get.return_value = response
        
        with pytest.raises(PageLoadError) as exc_info:
            source._get("https://lista.mercadolivre.com.br/games")
        assert exc_info.value.status_code == 503


class TestMercadoLivreApiSource:
    """Test search API mapping."""
    
    @pytest.fixture
    def source(self, config):
        return MercadoLivreApiSource(throttle=Mock(), config=config)
    
    @pytest.fixture
    def api_item(self):
        return {
            "id": "MLB3456789012",
            "title": "Smart TV 50 4K Samsung",
            "price": 2399.9,
            "original_price": 2899.9,
            "sold_quantity": 150,
            "permalink": "https://produto.mercadolivre.com.br/MLB-3456789012-smart-tv",
            "thumbnail": "http://http2.mlstatic.com/D_tv.jpg",
            "seller": {"nickname": "SAMSUNG", "seller_reputation": {"power_seller_status": "gold"}},
        }
    
    @patch("src.scrapers.base_source.requests.get")
    def test_fetch_maps_results(self, mock_get, source, api_item):
        mock_get.return_value.json.return_value = {"results": [api_item, {"id": "MLB1", "title": ""}]}
        
        listings = source.fetch("electronics", 80)
        
        assert len(listings) == 1
        listing = listings[0]
        assert listing.platform == Platform.MERCADOLIVRE
        assert listing.price == Decimal("2399.90")
        assert listing.sales_count == 150
        assert str(listing.image_url) == "https://http2.mlstatic.com/D_tv.jpg"
        assert listing.seller.rating == 5
        assert listing.seller.is_verified is True
        params = mock_get.call_args.kwargs["params"]
        assert params["category"] == "MLB1051"
        assert params["limit"] == 50
    
    @patch("src.scrapers.base_source.requests.get")
    def test_long_title_is_kept_and_capped_on_product(self, mock_get, source, api_item):
        api_item["title"] = "Smart TV 50 4K Samsung Crystal UHD " * 20
        assert len(api_item["title"]) > 600
        mock_get.return_value.json.return_value = {"results": [api_item]}

        listings = source.fetch("electronics", 10)

        assert len(listings) == 1
        enricher = ListingEnricher(app_config=AppConfig(), scraper_config=ScraperConfig())
        assert len(enricher.to_product(listings[0]).title) == TITLE_MAX_LENGTH

    def test_map_item_without_power_status(self, source, api_item):
        api_item["seller"] = {"nickname": "LOJA"}
        seller = source.map_item(api_item, "home")["seller"]
        assert seller == {"name": "LOJA", "rating": 4, "is_verified": False}
    
    @patch("src.scrapers.base_source.requests.get")
    def test_invalid_json(self, mock_get, source):
        mock_get.return_value.json.side_effect = ValueError("Expecting value")
        with pytest.raises(ScrapingError):
            source.fetch("electronics", 10)


class TestShopeeHtmlSource:
    """Test Shopee search parsing."""
    
    @pytest.fixture
    def source(self, config):
        return ShopeeHtmlSource(throttle=Mock(), config=config)
    
    def test_search_url(self, source):
        assert source.search_url("beauty") == "https://shopee.com.br/search?keyword=perfume"
    
    def test_parse_card(self, source):
        soup = BeautifulSoup(SHOPEE_RESULTS_PAGE, "html.parser")
        
        listings = source.parse_listings(soup, "beauty", 10)
        
        assert len(listings) == 1
        listing = listings[0]
        assert listing.platform_id == "Kit-Skincare-Vitamina-C-i.123.456"
        assert str(listing.source_url) == "https://shopee.com.br/Kit-Skincare-Vitamina-C-i.123.456"
        assert listing.price == Decimal("89.90")
        assert listing.sales_count == 2000
        assert listing.commission_rate == Decimal("0.12")
    
    @patch("src.scrapers.base_source.requests.get")
    def test_client_rendered_page_uses_samples(self, mock_get, source):
        mock_get.return_value = html_response("<div id='main'></div>")
        
        listings = source.fetch("beauty", 10)
        
        assert [listing.platform_id for listing in listings] == [
            "shopee_kit-skincare-vitamina-c",
            "shopee_perfume-natura-kaiak",
        ]


class TestSampleListings:
    
    def test_deterministic_ids(self):
        first = sample_listings(Platform.SHOPEE, "general", 10)
        second = sample_listings(Platform.SHOPEE, "general", 10)
        
        assert [l.platform_id for l in first] == [l.platform_id for l in second]
        assert len(first) == 4
    
    def test_table_rate_when_sample_has_none(self):
        perfume = sample_listings(Platform.SHOPEE, "beauty", 10)[-1]
        assert perfume.commission_rate == Decimal("0.12")
    
    def test_limit(self):
        assert len(sample_listings(Platform.SHOPEE, "general", 2)) == 2
