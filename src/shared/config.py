"""Runtime configuration read from the environment.

``GLOWMART_ENV`` selects an overlay of defaults ("development", "test",
"production"); any individual variable overrides the overlay. Settings are
read once and cached; tests call ``reset_settings()`` after changing the
environment.
"""

import os
from dataclasses import dataclass
from decimal import Decimal

_ENV_DEFAULTS = {
    "development": {
        "DATABASE_URL": "sqlite:///glowmart.db",
        "LOG_LEVEL": "DEBUG",
    },
    "test": {
        "DATABASE_URL": "sqlite://",
        "LOG_LEVEL": "WARNING",
    },
    "production": {
        "DATABASE_URL": "postgresql+psycopg2://glowmart@localhost/glowmart",
        "LOG_LEVEL": "INFO",
    },
}


@dataclass(frozen=True)
class Settings:
    env: str
    database_url: str
    log_level: str
    tax_rate: Decimal
    shipping_policy: str
    shipping_fee: Decimal
    free_shipping_threshold: Decimal
    order_grouping: str
    currency: str


_settings: Settings | None = None


def _read(name: str, overlay: dict, default: str) -> str:
    return os.environ.get(name) or overlay.get(name) or default


def load_settings() -> Settings:
    env = (os.environ.get("GLOWMART_ENV") or "development").lower()
    overlay = _ENV_DEFAULTS.get(env, {})

    return Settings(
        env=env,
        database_url=_read("DATABASE_URL", overlay, "sqlite://"),
        log_level=_read("LOG_LEVEL", overlay, "INFO"),
        tax_rate=Decimal(_read("TAX_RATE", overlay, "0.18")),
        shipping_policy=_read("SHIPPING_POLICY", overlay, "flat"),
        shipping_fee=Decimal(_read("SHIPPING_FEE", overlay, "0")),
        free_shipping_threshold=Decimal(_read("FREE_SHIPPING_THRESHOLD", overlay, "0")),
        order_grouping=_read("ORDER_GROUPING", overlay, "single"),
        currency=_read("CURRENCY", overlay, "INR"),
    )


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
