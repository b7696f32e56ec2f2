# SPDX-License-Identifier: MIT
"""Retrying helpers for Azure Data Explorer commands and queries."""

from .client import KustoClientFactory, KustoCredentials, new_request_properties
from .errors import (
    AdxToolkitError,
    ConfigurationError,
    ExecutionCancelledError,
    InputValidationError,
    RequiredValueInvalidError,
    RequiredValueMissingError,
    RetriesOutOfRangeError,
    WaitTimeOutOfRangeError,
)
from .helper import KustoHelper
from .monitoring import init_logfire
from .retry import RetryPolicy
from .settings import Settings, load_settings

__all__ = [
    "AdxToolkitError",
    "ConfigurationError",
    "ExecutionCancelledError",
    "InputValidationError",
    "KustoClientFactory",
    "KustoCredentials",
    "KustoHelper",
    "RequiredValueInvalidError",
    "RequiredValueMissingError",
    "RetriesOutOfRangeError",
    "RetryPolicy",
    "Settings",
    "WaitTimeOutOfRangeError",
    "init_logfire",
    "load_settings",
    "new_request_properties",
]
