"""
Source fetcher configuration: politeness policy and affiliate identifiers.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScraperConfig(BaseSettings):
    """
    Configuration for the listing sources.
    
    Attributes:
        REQUEST_TIMEOUT: Timeout for outbound requests in seconds
        USER_AGENT: User agent sent with every request
        MIN_REQUEST_INTERVAL: Minimum spacing between requests in seconds
        MAX_REQUESTS_PER_MINUTE: Rolling one-minute request ceiling
        MAX_LISTINGS_PER_REQUEST: Upper bound for a single search
        MERCADOLIVRE_STRATEGY: 'api' for the search API, 'html' for result pages
        MERCADOLIVRE_AFFILIATE_ID: Tracking id appended to Mercado Livre links
        SHOPEE_AFFILIATE_ID: Tracking id appended to Shopee links
        AMAZON_AFFILIATE_ID: Tracking tag appended to Amazon links
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    REQUEST_TIMEOUT: int = Field(default=15, ge=1, le=120)
    USER_AGENT: str = Field(
        default="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )
    MIN_REQUEST_INTERVAL: float = Field(default=1.5, ge=0)
    MAX_REQUESTS_PER_MINUTE: int = Field(default=30, ge=1)
    MAX_LISTINGS_PER_REQUEST: int = Field(default=50, ge=1, le=100)
    MERCADOLIVRE_STRATEGY: str = Field(default="api")
    MERCADOLIVRE_AFFILIATE_ID: str = Field(default="ML_AFFILIATE_12345")
    SHOPEE_AFFILIATE_ID: str = Field(default="SHOPEE_AFF_67890")
    AMAZON_AFFILIATE_ID: str = Field(default="AMAZON_TAG_123")
    
    @field_validator("MERCADOLIVRE_STRATEGY")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        """
        Validates the Mercado Livre fetch strategy.
        
        Args:
            v: Strategy name
            
        Returns:
            Normalized strategy name
            
        Raises:
            ValueError: If strategy is unknown
        """
        v = v.lower().strip()
        if v not in ("api", "html"):
            raise ValueError("MERCADOLIVRE_STRATEGY must be 'api' or 'html'")
        return v
    
    def affiliate_id_for(self, platform: str) -> str:
        """
        Get the affiliate tracking id for a platform.
        
        Args:
            platform: Platform identifier
            
        Returns:
            Configured affiliate id, empty string if the platform has none
        """
        return {
            "mercadolivre": self.MERCADOLIVRE_AFFILIATE_ID,
            "shopee": self.SHOPEE_AFFILIATE_ID,
            "amazon": self.AMAZON_AFFILIATE_ID,
        }.get(platform, "")


@lru_cache()
def get_scraper_config() -> ScraperConfig:
    """
    Get cached scraper configuration.
    
    Returns:
        Scraper configuration instance
    """
    return ScraperConfig()
