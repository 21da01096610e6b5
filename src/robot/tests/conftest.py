"""
In-memory repositories and collaborators for robot tests.
"""

from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from unittest.mock import Mock

import pytest

from src.core.models.candidate_listing import CandidateListing
from src.core.models.enums import Platform, ProductCategory, TargetCategory
from src.core.models.message_target import MessageTarget
from src.core.models.message_template import MessageTemplate, TemplateVariable
from src.database.repositories.product_repository import UpsertOutcome, UpsertReport
from src.database.store import RepositoryBundle
from src.enrichment.listing_enricher import ListingEnricher
from src.integrations.whatsapp.whatsapp_client import DeliveryOutcome
from src.robot.robot_service import AffiliateRobot
from src.robot.robot_state import RobotState
from src.scrapers.source_fetcher import FetchBatch
from src.shared.config.app_settings import AppConfig
from src.shared.config.robot_settings import RobotConfig
from src.shared.config.scraper_settings import ScraperConfig

NOW = datetime(2024, 3, 10, 14, 0)


class FakeProducts:
    """Product repository keeping rows in a dict keyed by natural key."""

    def __init__(self):
        self.rows = {}
        self._next_id = 1

    def bulk_upsert(self, products):
        report = UpsertReport()
        for product in products:
            existing = self.rows.get(product.natural_key)
            if existing is None:
                stored = product.model_copy(update={"id": self._next_id})
                self._next_id += 1
                status = "created"
            else:
                stored = product.model_copy(update={
                    "id": existing.id,
                    "is_approved": existing.is_approved,
                    "is_active": existing.is_active,
                })
                status = "updated"
            self.rows[product.natural_key] = stored
            report.outcomes.append(
                UpsertOutcome(product.platform.value, product.platform_id, status, stored.id)
            )
        return report

    def approve_all(self):
        for key, product in self.rows.items():
            self.rows[key] = product.model_copy(update={"is_approved": True})

    def find_for_delivery(self, qualities, limit):
        selected = [
            p for p in self.rows.values()
            if p.is_approved and p.is_active and p.commission_quality.value in qualities
        ]
        selected.sort(key=lambda p: (-p.estimated_commission, p.id))
        return selected[:limit]


class FakeTargets:
    def __init__(self, targets=()):
        self.rows = {target.id: target for target in targets}
        self.reset_calls = []

    def find_sendable(self):
        return [t.model_copy() for t in self.rows.values() if t.is_active and t.sending_enabled]

    def find_by_id(self, target_id):
        target = self.rows.get(target_id)
        return target.model_copy() if target else None

    def record_message_sent(self, target_id, sent_at):
        self.rows[target_id].record_send(sent_at)

    def reset_daily_counters(self, today):
        self.reset_calls.append(today)
        for target in self.rows.values():
            if target.counters_date != today:
                target.reset_daily_counters(today)
        return len(self.rows)


class FakeTemplates:
    def __init__(self, templates=()):
        self.rows = list(templates)
        self.usage = []

    def find_active_by_id(self, template_id):
        for template in self.rows:
            if template.id == template_id and template.is_active:
                return template
        return None

    def find_default(self, category):
        for template in self.rows:
            if template.category.value == category and template.is_default and template.is_active:
                return template
        return None

    def record_usage(self, template_id, used_at):
        self.usage.append(template_id)


class FakeDeliveries:
    def __init__(self):
        self.records = []

    def insert(self, record):
        self.records.append(record)
        return len(self.records)


def make_listing(platform_id, price, commission_rate, title="Fone de Ouvido Bluetooth Premium", **kwargs):
    return CandidateListing(
        platform=Platform.MERCADOLIVRE,
        platform_id=platform_id,
        title=title,
        category=kwargs.pop("category", ProductCategory.ELECTRONICS),
        price=Decimal(str(price)),
        commission_rate=Decimal(str(commission_rate)),
        rating=4.5,
        sales_count=120,
        source_url=f"https://produto.mercadolivre.com.br/{platform_id}",
        **kwargs,
    )


def make_target(target_id=1, **kwargs):
    values = {
        "id": target_id,
        "name": f"Grupo {target_id}",
        "whatsapp_id": f"1203{target_id}@g.us",
        "category": TargetCategory.ELECTRONICS,
    }
    values.update(kwargs)
    return MessageTarget(**values)


@pytest.fixture
def general_template():
    return MessageTemplate(
        id=1,
        name="general_default",
        category=TargetCategory.GENERAL,
        content="{{title}} por {{price}}\n{{link}}",
        variables=[
            TemplateVariable(name="title", required=True),
            TemplateVariable(name="price", type="currency", required=True),
            TemplateVariable(name="link", required=True),
        ],
        is_default=True,
    )


@pytest.fixture
def store(general_template):
    return RepositoryBundle(
        products=FakeProducts(),
        targets=FakeTargets([make_target(1)]),
        templates=FakeTemplates([general_template]),
        deliveries=FakeDeliveries(),
    )


@pytest.fixture
def fetcher():
    fetcher = Mock()
    fetcher.fetch_all.return_value = FetchBatch(listings=[
        make_listing("MLB1", 100, "0.20"),
        make_listing("MLB2", 200, "0.03"),
        make_listing("MLB3", 5, "0.20"),
    ])
    return fetcher


@pytest.fixture
def transport():
    transport = Mock()
    transport.send_with_retry.return_value = DeliveryOutcome(
        success=True, message_id="MSG", http_status=200, attempts=1, response={"key": {"id": "MSG"}}
    )
    return transport


@pytest.fixture
def robot_config():
    return RobotConfig(
        ROBOT_CATEGORIES=["electronics"],
        ROBOT_PLATFORMS=["mercadolivre"],
        ROBOT_SCRAPING_LIMIT=10,
        ROBOT_ALLOWED_QUALITIES=["excellent", "good"],
        ROBOT_MAX_PRODUCTS=10,
        ROBOT_MESSAGE_DELAY=0,
        ROBOT_STOP_GRACE=2.0,
    )


@pytest.fixture
def clock():
    clock = Mock()
    clock.return_value = NOW
    return clock


@pytest.fixture
def robot(fetcher, store, transport, robot_config, clock):
    @contextmanager
    def store_factory():
        yield store

    enricher = ListingEnricher(
        app_config=AppConfig(MIN_PRICE=Decimal("10"), MIN_COMMISSION=Decimal("2"), MIN_TITLE_LENGTH=10),
        scraper_config=ScraperConfig(),
    )
    return AffiliateRobot(
        fetcher=fetcher,
        enricher=enricher,
        transport=transport,
        store_factory=store_factory,
        config=robot_config,
        state=RobotState(history_size=5),
        clock=clock,
        send_images=False,
    )
