"""
Enumerations shared by the pipeline, the robot and the web API.
"""

from enum import Enum


class Platform(str, Enum):
    """E-commerce platforms listings are fetched from."""
    
    MERCADOLIVRE = "mercadolivre"
    SHOPEE = "shopee"
    AMAZON = "amazon"
    MAGAZINELUIZA = "magazineluiza"


class ProductCategory(str, Enum):
    """Product categories."""
    
    ELECTRONICS = "electronics"
    HOME = "home"
    BEAUTY = "beauty"
    FASHION = "fashion"
    SPORTS = "sports"
    BOOKS = "books"
    GAMES = "games"
    OTHER = "other"


class TargetCategory(str, Enum):
    """Category affinity of message targets and templates."""
    
    ELECTRONICS = "electronics"
    HOME = "home"
    BEAUTY = "beauty"
    FASHION = "fashion"
    SPORTS = "sports"
    BOOKS = "books"
    GAMES = "games"
    GENERAL = "general"


class CommissionQuality(str, Enum):
    """Commission quality bands, best first."""
    
    EXCELLENT = "excellent"
    GOOD = "good"
    REGULAR = "regular"
    LOW = "low"


class DeliveryStatus(str, Enum):
    """Delivery record lifecycle states."""
    
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    DELIVERED = "delivered"
    READ = "read"


ALLOWED_STATUS_TRANSITIONS = {
    DeliveryStatus.PENDING: {DeliveryStatus.SENT, DeliveryStatus.FAILED},
    DeliveryStatus.SENT: {DeliveryStatus.DELIVERED, DeliveryStatus.READ},
    DeliveryStatus.DELIVERED: {DeliveryStatus.READ},
    DeliveryStatus.FAILED: set(),
    DeliveryStatus.READ: set(),
}


class VariableType(str, Enum):
    """Declared type of a template variable, drives value formatting."""
    
    TEXT = "text"
    NUMBER = "number"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    URL = "url"


class RobotPhase(str, Enum):
    """Phases of a robot run."""
    
    IDLE = "idle"
    FETCHING = "fetching"
    SELECTING = "selecting"
    DELIVERING = "delivering"
    FINALIZING = "finalizing"
