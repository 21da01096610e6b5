"""
WhatsApp gateway (Evolution API) configuration.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.exceptions.base import ConfigurationError


class WhatsAppConfig(BaseSettings):
    """
    Configuration for WhatsApp delivery.
    
    Attributes:
        WHATSAPP_API_URL: Base URL of the Evolution API server
        WHATSAPP_API_KEY: API key sent in the 'apikey' header
        WHATSAPP_INSTANCE_NAME: Evolution API instance name
        WHATSAPP_TIMEOUT: Request timeout in seconds
        WHATSAPP_MIN_INTERVAL: Minimum spacing between gateway calls in seconds
        WHATSAPP_MAX_RETRIES: Attempts per message before giving up
        WHATSAPP_RETRY_DELAY: Base backoff in seconds, multiplied by the attempt number
        SEND_IMAGES: Send product image with caption instead of plain text
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    WHATSAPP_API_URL: Optional[str] = Field(None, description="Evolution API base URL")
    WHATSAPP_API_KEY: Optional[str] = Field(None, description="Evolution API key")
    WHATSAPP_INSTANCE_NAME: Optional[str] = Field("affiliate_bot", description="Evolution API instance")
    WHATSAPP_TIMEOUT: int = Field(default=30, ge=1, le=120)
    WHATSAPP_MIN_INTERVAL: float = Field(default=2.0, ge=0)
    WHATSAPP_MAX_RETRIES: int = Field(default=3, ge=1, le=10)
    WHATSAPP_RETRY_DELAY: float = Field(default=2.0, ge=0)
    SEND_IMAGES: bool = Field(default=True)
    
    @property
    def is_configured(self) -> bool:
        """
        Checks if the gateway is properly configured.
        
        Returns:
            True if URL, key and instance are all set
        """
        return bool(self.WHATSAPP_API_URL and self.WHATSAPP_API_KEY and self.WHATSAPP_INSTANCE_NAME)
    
    def require_configured(self) -> None:
        """
        Refuse to continue without gateway credentials.
        
        Raises:
            ConfigurationError: If any required setting is missing
        """
        missing = [
            name for name in ("WHATSAPP_API_URL", "WHATSAPP_API_KEY", "WHATSAPP_INSTANCE_NAME")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(missing, "WhatsApp gateway")


@lru_cache()
def get_whatsapp_config() -> WhatsAppConfig:
    """
    Get cached WhatsApp configuration.
    
    Returns:
        WhatsApp configuration instance
    """
    return WhatsAppConfig()
