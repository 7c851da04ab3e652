import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="BILLDESK_", extra="ignore")

    db_url: str = "sqlite:///billdesk.db"

    storage_backend: str = "local"
    storage_local_path: str = "./invoices"
    storage_prefix: str = "bills"

    log_level: str = "INFO"
    log_json: bool = False

    timezone: str = "Asia/Kolkata"

    bill_number_prefix: str = "BILL"
    # Random suffix when the per-day counter is unavailable; uniqueness is then best-effort.
    bill_number_fallback: bool = True

    default_minimum_stock_level: int = 5
    page_size: int = 20

    host: str = "0.0.0.0"
    port: int = 8000


settings = Settings()
