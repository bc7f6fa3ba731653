"""Tests for configuration loading, logging setup and bootstrap."""

import logging
from dataclasses import replace

import pytest

from config import load_config, validate_config
from core.app_initializer import ApplicationInitializer
from core.exceptions import ConfigurationError
from core.logger import ColoredFormatter, setup_logger


def test_load_config_reads_environment(monkeypatch):
    """Test environment variables override defaults."""
    monkeypatch.setenv("DB_POOL_SIZE", "3")
    monkeypatch.setenv("TRANSACTION_RETRY_DELAY", "0.5")
    monkeypatch.setenv("LOTTERY_NOTIFICATIONS", "off")
    monkeypatch.setenv("EVENTS_COLLECTION", "events_test")

    config = load_config()

    assert config.db_pool_size == 3
    assert config.transaction_retry_delay == 0.5
    assert config.lottery_notifications is False
    assert config.events_collection == "events_test"


def test_bad_numbers_fall_back_to_defaults(monkeypatch):
    """Test unparsable numbers use the default."""
    monkeypatch.setenv("TRANSACTION_ATTEMPTS", "many")
    assert load_config().transaction_attempts == 5


@pytest.mark.parametrize(
    "changes",
    [
        {"db_pool_size": 0},
        {"transaction_attempts": 0},
        {"db_busy_timeout": -1},
        {"events_collection": "users"},
        {"notifications_collection": ""},
    ],
)
def test_validate_config_rejects(test_config, changes):
    """Test invalid settings raise ConfigurationError."""
    with pytest.raises(ConfigurationError):
        validate_config(replace(test_config, **changes))


def test_setup_logger_writes_file(tmp_path):
    """Test file logging uses the plain format without color codes."""
    log_file = tmp_path / "logs" / "waitlist.log"
    logger = setup_logger("waitlist.test", level="debug", log_file=str(log_file), colored=True)

    logger.debug("draw finished")
    for handler in logger.handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "draw finished" in content
    assert "\033[" not in content
    assert logger.level == logging.DEBUG
    assert isinstance(logger.handlers[0].formatter, ColoredFormatter)


@pytest.mark.asyncio
async def test_initializer_bootstraps_store(test_config):
    """Test initialization creates the schema, counter and services."""
    app = ApplicationInitializer(test_config)
    services = await app.initialize()
    try:
        event = await services.event_service.create_event("org-1", "Opening")
        assert event.event_id == 1
        assert await services.store.get("extras", "uniqueIdentifierData") == {"curEvent": 1, "curNotification": 0}
    finally:
        await app.cleanup()
