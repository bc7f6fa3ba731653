"""Application configuration module.

Reads settings from environment variables (and an optional ``.env`` file)
with defaults suitable for a local single-file document store.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from core.constants import Collections, NotificationDefaults, StoreDefaults
from core.exceptions import ConfigurationError

load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    """Get integer from environment variable with fallback."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    """Get float from environment variable with fallback."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_str(name: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.getenv(name, default)


@dataclass(frozen=True)
class Config:
    environment: str
    debug: bool
    log_level: str
    log_folder: str
    database_path: str
    db_pool_size: int
    db_busy_timeout: int
    transaction_attempts: int
    transaction_retry_delay: float

    # Store layout
    users_collection: str = Collections.USERS
    events_collection: str = Collections.EVENTS
    notifications_collection: str = Collections.NOTIFICATIONS
    extras_collection: str = Collections.EXTRAS
    counter_document: str = Collections.COUNTER_DOCUMENT

    # Lottery notifications
    lottery_notifications: bool = NotificationDefaults.ENABLED

    @property
    def log_file(self) -> str:
        return os.path.join(self.log_folder, "waitlist.log")


def validate_config(config: Config) -> None:
    """Reject settings the store cannot run with."""
    if config.db_pool_size < 1:
        raise ConfigurationError("DB_POOL_SIZE must be at least 1")
    if config.transaction_attempts < 1:
        raise ConfigurationError("TRANSACTION_ATTEMPTS must be at least 1")
    if config.db_busy_timeout < 0:
        raise ConfigurationError("DB_BUSY_TIMEOUT must not be negative")
    names = {
        config.users_collection,
        config.events_collection,
        config.notifications_collection,
        config.extras_collection,
    }
    if len(names) != 4 or "" in names:
        raise ConfigurationError("Collection names must be distinct and non-empty")


def load_config() -> Config:
    """Load application configuration from environment variables.

    Returns:
        Config: Application configuration with validated values
    """
    config = Config(
        environment=_get_str("ENVIRONMENT", "development"),
        debug=_get_bool("DEBUG", False),
        log_level=_get_str("LOG_LEVEL", "INFO"),
        log_folder=_get_str("LOG_FOLDER", "logs"),
        database_path=_get_str("DATABASE_PATH", "data/waitlist.sqlite"),
        db_pool_size=_get_int("DB_POOL_SIZE", StoreDefaults.POOL_SIZE),
        db_busy_timeout=_get_int("DB_BUSY_TIMEOUT", StoreDefaults.BUSY_TIMEOUT),
        transaction_attempts=_get_int("TRANSACTION_ATTEMPTS", StoreDefaults.TRANSACTION_ATTEMPTS),
        transaction_retry_delay=_get_float("TRANSACTION_RETRY_DELAY", StoreDefaults.RETRY_DELAY),
        users_collection=_get_str("USERS_COLLECTION", Collections.USERS),
        events_collection=_get_str("EVENTS_COLLECTION", Collections.EVENTS),
        notifications_collection=_get_str("NOTIFICATIONS_COLLECTION", Collections.NOTIFICATIONS),
        extras_collection=_get_str("EXTRAS_COLLECTION", Collections.EXTRAS),
        counter_document=_get_str("COUNTER_DOCUMENT", Collections.COUNTER_DOCUMENT),
        lottery_notifications=_get_bool("LOTTERY_NOTIFICATIONS", NotificationDefaults.ENABLED),
    )
    validate_config(config)
    return config
