"""
General application settings and environment variables.
"""

from datetime import datetime
from decimal import Decimal
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .robot_settings import RobotConfig
from .scraper_settings import ScraperConfig
from .whatsapp_settings import WhatsAppConfig


class DatabaseConfig(BaseSettings):
    """
    Database configuration settings.
    
    Attributes:
        POSTGRES_DB: Database name
        POSTGRES_USER: Database username
        POSTGRES_PASSWORD: Database password
        POSTGRES_HOST: Database host
        DB_PORT: Database port
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    POSTGRES_DB: str = Field(default="affiliate_robot", description="PostgreSQL database name")
    POSTGRES_USER: str = Field(default="postgres", description="PostgreSQL username")
    POSTGRES_PASSWORD: str = Field(default="", description="PostgreSQL password")
    POSTGRES_HOST: str = Field(default="localhost", description="PostgreSQL host")
    DB_PORT: int = Field(default=5432, description="PostgreSQL port")


class AppConfig(BaseSettings):
    """
    Main application configuration combining all settings.
    
    Attributes:
        DEBUG: Debug mode flag
        LOG_LEVEL: Minimum level for emitted log events
        LOG_FORMAT: 'console' for colored output, 'json' for structured lines
        TIMEZONE: Zone used for allowed-hours windows and daily counters
        MIN_PRICE: Quality gate price floor
        MIN_COMMISSION: Quality gate estimated commission floor
        MIN_TITLE_LENGTH: Quality gate minimum title length
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    LOG_FORMAT: str = Field(default="console", pattern="^(console|json)$")
    TIMEZONE: str = Field(default="America/Sao_Paulo", description="IANA timezone for sending windows")
    MIN_PRICE: Decimal = Field(default=Decimal("10"), ge=0, description="Minimum listing price")
    MIN_COMMISSION: Decimal = Field(default=Decimal("2"), ge=0, description="Minimum estimated commission")
    MIN_TITLE_LENGTH: int = Field(default=10, ge=1, description="Minimum descriptive title length")
    
    @property
    def database(self) -> DatabaseConfig:
        """Gets database configuration."""
        return DatabaseConfig()
    
    @property
    def scraper(self) -> ScraperConfig:
        """Gets scraper configuration."""
        from .scraper_settings import get_scraper_config
        return get_scraper_config()
    
    @property
    def whatsapp(self) -> WhatsAppConfig:
        """Gets WhatsApp gateway configuration."""
        from .whatsapp_settings import get_whatsapp_config
        return get_whatsapp_config()
    
    @property
    def robot(self) -> RobotConfig:
        """Gets orchestrator configuration."""
        from .robot_settings import get_robot_config
        return get_robot_config()


@lru_cache()
def get_app_config() -> AppConfig:
    """
    Get cached application configuration.
    
    Returns:
        Application configuration instance
    """
    return AppConfig()


def local_now(config: Optional[AppConfig] = None) -> datetime:
    """
    Current time in the configured zone.
    
    Args:
        config: Configuration supplying TIMEZONE, defaults to the cached settings
        
    Returns:
        Timezone-aware datetime
    """
    config = config or get_app_config()
    return datetime.now(ZoneInfo(config.TIMEZONE))
