"""
Delivery orchestrator defaults.
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_QUALITIES = ("excellent", "good", "regular", "low")


class RobotConfig(BaseSettings):
    """
    Configuration for robot runs.
    
    Attributes:
        ROBOT_CATEGORIES: Categories fetched on every run
        ROBOT_PLATFORMS: Platforms fetched on every run
        ROBOT_SCRAPING_LIMIT: Listings requested per category/platform pair
        ROBOT_ALLOWED_QUALITIES: Commission qualities eligible for delivery
        ROBOT_MAX_PRODUCTS: Maximum products selected per run
        ROBOT_MESSAGE_DELAY: Pause between consecutive sends in seconds
        ROBOT_HISTORY_SIZE: Number of run results kept in memory
        ROBOT_STOP_GRACE: Seconds a stop request waits for the run to wind down
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    ROBOT_CATEGORIES: List[str] = Field(default=["electronics", "beauty", "home"])
    ROBOT_PLATFORMS: List[str] = Field(default=["mercadolivre", "shopee"])
    ROBOT_SCRAPING_LIMIT: int = Field(default=30, ge=1, le=100)
    ROBOT_ALLOWED_QUALITIES: List[str] = Field(default=["excellent", "good"])
    ROBOT_MAX_PRODUCTS: int = Field(default=10, ge=1, le=100)
    ROBOT_MESSAGE_DELAY: float = Field(default=5.0, ge=0)
    ROBOT_HISTORY_SIZE: int = Field(default=50, ge=1, le=1000)
    ROBOT_STOP_GRACE: float = Field(default=1.0, ge=0)
    
    @field_validator("ROBOT_ALLOWED_QUALITIES")
    @classmethod
    def validate_qualities(cls, v: List[str]) -> List[str]:
        """
        Validates the commission quality allow-list.
        
        Args:
            v: Quality names
            
        Returns:
            Validated quality names
            
        Raises:
            ValueError: If an unknown quality is listed
        """
        unknown = [q for q in v if q not in _QUALITIES]
        if unknown:
            raise ValueError(f"Unknown commission qualities: {unknown}")
        return v


@lru_cache()
def get_robot_config() -> RobotConfig:
    """
    Get cached robot configuration.
    
    Returns:
        Robot configuration instance
    """
    return RobotConfig()
