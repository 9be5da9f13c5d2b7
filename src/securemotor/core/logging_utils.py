# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Logging setup for the SecureMotor core.

Every module logs through ``get_logger(__name__)``, so all lifecycle
messages sit under the ``securemotor`` logger. The root handler is installed
once; the package level follows ``Settings.log_level`` when the portal is
built through :py:func:`securemotor.bootstrap.create_portal`.
"""

from __future__ import annotations

import logging
from typing import Final

from beartype import beartype

from .config import Settings

__all__: Final = [
    "PACKAGE_LOGGER",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

PACKAGE_LOGGER: Final = "securemotor"

_DEFAULT_LOG_FORMAT: Final = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_is_configured: bool = False


@beartype
def configure_logging(
    *, level: int | str = logging.INFO, fmt: str = _DEFAULT_LOG_FORMAT
) -> None:
    """Install the root handler exactly once; later calls are no-ops."""
    global _is_configured
    if _is_configured:
        return

    logging.basicConfig(level=level, format=fmt)
    _is_configured = True


@beartype
def configure_from_settings(settings: Settings) -> logging.Logger:
    """Apply ``log_level`` to the package logger and return it."""
    configure_logging(level=settings.log_level)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(settings.log_level)
    return package_logger


@beartype
def get_logger(name: str | None = None, *, level: int | None = None) -> logging.Logger:
    """Return a logger under the package namespace."""
    configure_logging()
    logger = logging.getLogger(name or PACKAGE_LOGGER)
    if level is not None:
        logger.setLevel(level)
    return logger


@beartype
def reset_logging() -> None:
    """Allow the next configure_logging() call to apply again (for testing)."""
    global _is_configured
    _is_configured = False
