"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./save_invest.db"

    # External Services
    market_data_api_base: str = "https://www.alphavantage.co/query"
    market_data_api_key: str = "demo"

    # Service
    service_name: str = "save-invest"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0
    market_data_cache_seconds: float = 3600.0
    market_data_min_interval_seconds: float = 12.0  # Free-tier rate limit

    # Engines
    risk_free_rate: float = 2.0
    portfolio_reference_return: float = 7.0
    savings_pattern_guard_ratio: float = 0.8
    default_savings_percent: int = 50
    default_projection_years: int = 10
    analysis_window_months: int = 1
    insights_lookback_months: int = 6
    override_refresh_seconds: float = 300.0  # Picks up overrides written by other workers


settings = Settings()
