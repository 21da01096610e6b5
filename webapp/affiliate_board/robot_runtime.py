"""
Process-wide robot for the web API.

The state is shared even when the robot cannot be built, so status and
history answer without a configured WhatsApp gateway.
"""

from functools import lru_cache

from src.integrations.whatsapp.whatsapp_client import WhatsAppClient
from src.robot.factory import build_robot
from src.robot.robot_service import AffiliateRobot
from src.robot.robot_state import RobotState
from src.shared.config.robot_settings import get_robot_config
from src.shared.config.whatsapp_settings import get_whatsapp_config


@lru_cache()
def get_robot_state() -> RobotState:
    return RobotState(get_robot_config().ROBOT_HISTORY_SIZE)


@lru_cache()
def get_robot() -> AffiliateRobot:
    """Build the robot once; raises ConfigurationError until the gateway is configured."""
    return build_robot(state=get_robot_state())


def get_whatsapp_client() -> WhatsAppClient:
    return WhatsAppClient(get_whatsapp_config())
