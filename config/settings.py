"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Every value has a default so the configurator runs without a .env file;
catalog import needs ANTHROPIC_API_KEY.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


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
    # ANTHROPIC
    # ===================
    anthropic_api_key: Optional[str] = Field(
        None,
        description="Anthropic API key used for catalog extraction"
    )
    extraction_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model used to read supplier catalogs"
    )
    extraction_max_tokens: int = Field(
        default=4096,
        ge=256,
        le=32000,
        description="Maximum tokens for the extraction response"
    )

    # ===================
    # CATALOG PERSISTENCE
    # ===================
    catalog_backend: str = Field(
        default="file",
        pattern="^(memory|file|supabase)$",
        description="Where the catalog is persisted between restarts"
    )
    catalog_file_path: str = Field(
        default="data/catalog.json",
        description="JSON file used by the file backend"
    )
    catalog_storage_key: str = Field(
        default="catalog_categories",
        description="Key of the persisted catalog entry"
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: Optional[str] = Field(
        None,
        description="Supabase project URL (supabase backend only)"
    )
    supabase_key: Optional[str] = Field(
        None,
        description="Supabase anon/public key (supabase backend only)"
    )

    # ===================
    # QUOTE RULES
    # ===================
    min_dimension_cm: float = Field(
        default=30,
        gt=0,
        description="Minimum width/height accepted to leave the dimensions step"
    )
    max_dimension_cm: float = Field(
        default=500,
        gt=0,
        description="Advisory upper bound shown to the user"
    )
    default_width_cm: float = Field(
        default=120,
        gt=0,
        description="Width of a new quote"
    )
    default_height_cm: float = Field(
        default=140,
        gt=0,
        description="Height of a new quote"
    )

    # ===================
    # CATALOG IMPORT
    # ===================
    max_import_size_mb: int = Field(
        default=30,
        ge=1,
        le=200,
        description="Maximum accepted catalog PDF size"
    )
    cost_per_kg: float = Field(
        default=15,
        gt=0,
        description="Profile cost per kg used to price imported rows"
    )
    frame_multiplier: float = Field(
        default=4,
        gt=0,
        description="Assembly multiplier for frame profiles"
    )
    sash_multiplier: float = Field(
        default=5,
        gt=0,
        description="Assembly multiplier for sash profiles"
    )
    import_timeout_seconds: Optional[float] = Field(
        default=120,
        gt=0,
        description="Upper bound for one extraction call (unset = wait forever)"
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
    def extraction_configured(self) -> bool:
        """Check if catalog extraction has credentials."""
        return bool(self.anthropic_api_key and self.anthropic_api_key.strip())

    @property
    def supabase_configured(self) -> bool:
        """Check if Supabase is properly configured."""
        return bool(self.supabase_url and self.supabase_key)

    @property
    def max_import_size_bytes(self) -> int:
        return self.max_import_size_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
