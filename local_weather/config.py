from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    app_name: str = "LocalWeather"
    app_version: str = "0.1.0"
    app_env: str = "development"
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8088

    # Storage
    database_url: str = "sqlite:///.met.sqlite"
    observation_lookback: int = 12

    # AEMET ingestion
    aemet_url: str = "https://opendata.aemet.es/opendata/api/observacion/convencional/todas"
    aemet_api_key: Optional[str] = None
    refresh_interval_s: int = 3600
    refresh_on_startup: bool = False
    http_timeout_connect: float = 5.0
    http_timeout_read: float = 30.0
    http_max_retries: int = 3
    http_backoff_factor: float = 0.5

    # .env support and prefix for clarity
    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
