"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory based on platform."""
    return Path.home() / "Documents" / "Portfolio Tracker Data"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PORTFOLIO_",
    )

    app_name: str = "Portfolio Tracker"
    app_version: str = "0.1.0"

    # Data directory (all JSON files live here)
    data_dir: Optional[Path] = None

    log_level: str = "INFO"
    log_to_file: bool = False

    # Market data settings
    quote_provider: str = "yahoo"
    quote_cache_ttl_seconds: int = 300
    quote_failure_ttl_seconds: int = 60
    quote_timeout_seconds: float = 10

    # FX settings
    fx_cache_ttl_seconds: int = 1800
    fx_failure_ttl_seconds: int = 60
    fx_timeout_seconds: float = 5

    # Result cache / analytics
    result_cache_ttl_seconds: int = 1800
    analytics_cache_ttl_seconds: int = 300
    risk_free_rate: float = 0.045

    default_currency: str = "USD"
    reject_oversell: bool = True

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
