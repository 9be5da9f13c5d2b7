"""Unit tests for package logging setup."""

import logging
from collections.abc import Iterator

import pytest

from securemotor.bootstrap import create_portal
from securemotor.core.config import Settings
from securemotor.core.logging_utils import (
    PACKAGE_LOGGER,
    configure_from_settings,
    get_logger,
)


@pytest.fixture(autouse=True)
def _restore_package_level() -> Iterator[None]:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    previous = package_logger.level
    yield
    package_logger.setLevel(previous)


class TestLoggingUtils:
    def test_module_loggers_live_under_package(self) -> None:
        logger = get_logger("securemotor.services.quote_service")

        assert logger.name.startswith(f"{PACKAGE_LOGGER}.")
        assert get_logger().name == PACKAGE_LOGGER

    def test_configure_from_settings_sets_package_level(self) -> None:
        package_logger = configure_from_settings(
            Settings(database_url="memory://", log_level="WARNING")
        )

        assert package_logger.name == PACKAGE_LOGGER
        assert package_logger.level == logging.WARNING
        assert not get_logger("securemotor.services.claim_service").isEnabledFor(
            logging.INFO
        )

    def test_create_portal_applies_log_level(self) -> None:
        create_portal(Settings(database_url="memory://", log_level="DEBUG"))

        assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG
