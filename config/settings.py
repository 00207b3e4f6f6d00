"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Matching thresholds live here so they can be calibrated per deployment
without code changes.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache

from models.matching import MatchingConfig


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )

    # ===================
    # MATCHING THRESHOLDS
    # ===================
    product_fuzzy_threshold: float = Field(
        default=0.8,
        ge=0,
        le=1,
        description="Min similarity for a low-confidence fuzzy product match"
    )
    customer_fuzzy_threshold: float = Field(
        default=0.7,
        ge=0,
        le=1,
        description="Min similarity for a low-confidence fuzzy customer match"
    )
    containment_score: float = Field(
        default=0.85,
        ge=0,
        le=1,
        description="Similarity assigned when one string contains the other"
    )

    # ===================
    # ORDER TOTALS
    # ===================
    default_tax_rate: float = Field(
        default=10,
        ge=0,
        le=100,
        description="Tax rate (percent) for items without their own rate"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def matching_config(self) -> MatchingConfig:
        """Thresholds bundled for the matchers."""
        return MatchingConfig(
            product_fuzzy_threshold=self.product_fuzzy_threshold,
            customer_fuzzy_threshold=self.customer_fuzzy_threshold,
            containment_score=self.containment_score,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
