from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine.url import URL, make_url


class Settings(BaseSettings):
    app_name: str = "MarketOracle"
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/marketoracle"

    twelve_data_api_key: str = ""
    twelve_data_base_url: str = "https://api.twelvedata.com"
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    market_data_timeout_seconds: float = 20.0
    equity_request_delay_seconds: float = 0.5

    cron_secret: str = ""
    resolution_allow_test_trigger: bool = False
    resolution_interval_minutes: int = 30
    resolution_lease_ttl_seconds: int = 900

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()


def get_database_url() -> str:
    return settings.database_url


def get_database_identity() -> tuple[str, str]:
    parsed: URL = make_url(get_database_url())
    return parsed.host or "<unknown>", parsed.database or "<unknown>"
