import logging
import os

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    database_url: str = "sqlite:///./ledger.db"
    # "sql" or "memory"
    backend: str = "sql"
    timezone: str = os.getenv("TIMEZONE", "Europe/Madrid")
    log_level: str = "INFO"
    sql_echo: bool = False


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Set up the root logger format and level from the settings."""
    level = (level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s - %(name)s - %(message)s",
    )
