"""
Wires the robot with its production collaborators.
"""

from typing import Optional

from src.database.store import open_repositories
from src.enrichment.listing_enricher import ListingEnricher
from src.integrations.whatsapp.whatsapp_client import WhatsAppClient
from src.robot.robot_service import AffiliateRobot
from src.robot.robot_state import RobotState
from src.scrapers.source_fetcher import SourceFetcher
from src.shared.config.robot_settings import get_robot_config
from src.shared.config.whatsapp_settings import get_whatsapp_config


def build_robot(state: Optional[RobotState] = None) -> AffiliateRobot:
    """
    Build a robot backed by PostgreSQL, the live sources and the WhatsApp gateway.
    
    Args:
        state: State to share, a fresh one by default
        
    Returns:
        Ready robot
        
    Raises:
        ConfigurationError: If the WhatsApp gateway is not configured
    """
    whatsapp_config = get_whatsapp_config()
    whatsapp_config.require_configured()
    robot_config = get_robot_config()
    return AffiliateRobot(
        fetcher=SourceFetcher.from_config(),
        enricher=ListingEnricher(),
        transport=WhatsAppClient(whatsapp_config),
        store_factory=open_repositories,
        config=robot_config,
        state=state or RobotState(robot_config.ROBOT_HISTORY_SIZE),
        send_images=whatsapp_config.SEND_IMAGES,
    )
