"""
Opens the repositories a robot run works with.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from src.shared.config.app_settings import DatabaseConfig

from .handlers.connection_handler import ConnectionHandler
from .repositories.delivery_record_repository import DeliveryRecordRepository
from .repositories.message_target_repository import MessageTargetRepository
from .repositories.message_template_repository import MessageTemplateRepository
from .repositories.product_repository import ProductRepository


@dataclass
class RepositoryBundle:
    """Repositories sharing one connection."""
    
    products: ProductRepository
    targets: MessageTargetRepository
    templates: MessageTemplateRepository
    deliveries: DeliveryRecordRepository


@contextmanager
def open_repositories(config: Optional[DatabaseConfig] = None) -> Iterator[RepositoryBundle]:
    """
    Connect to PostgreSQL and yield the repositories; the connection closes on exit.
    
    Args:
        config: Database settings, read from the environment by default
        
    Raises:
        DatabaseConnectionError: If the database cannot be reached
    """
    with ConnectionHandler(config) as conn:
        yield RepositoryBundle(
            products=ProductRepository(conn),
            targets=MessageTargetRepository(conn),
            templates=MessageTemplateRepository(conn),
            deliveries=DeliveryRecordRepository(conn),
        )
