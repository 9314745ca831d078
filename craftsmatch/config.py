"""Configuration."""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "CraftsMatch-Shipping"
    debug: bool = False
    log_level: str = "INFO"

    # Seller country assumed when a request omits the origin
    default_origin_country: str = "US"
    currency: str = "USD"

    # Optional JSON file replacing the built-in zone/rate tables
    shipping_rates_file: str = ""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings) -> int:
    """Set up root handlers and the package log level; unknown level names mean INFO."""
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("craftsmatch").setLevel(level)
    return level
