# SecureMotor - Motor Insurance Portal Core
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Core infrastructure components for the SecureMotor core."""

from .clock import Clock, FixedClock, SystemClock
from .config import Settings, get_settings
from .document_store import DocumentStore, InMemoryDocumentStore
from .errors import ErrorKind, ServiceError
from .result_types import Err, Ok, Result

__all__ = [
    "Clock",
    "DocumentStore",
    "Err",
    "ErrorKind",
    "FixedClock",
    "InMemoryDocumentStore",
    "Ok",
    "Result",
    "ServiceError",
    "Settings",
    "SystemClock",
    "get_settings",
]
