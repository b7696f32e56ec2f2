# SPDX-License-Identifier: MIT
"""Exception hierarchy for the ADX toolkit.

Failures raised by the Kusto client itself are never wrapped; only the
toolkit's own configuration, validation and cancellation errors live here.
"""

from __future__ import annotations


class AdxToolkitError(Exception):
    """Base exception for adx_toolkit."""


class ConfigurationError(AdxToolkitError, ValueError):
    """Raised when a helper setting falls outside its accepted bounds."""


class RetriesOutOfRangeError(ConfigurationError):
    """Retry count outside ``[MIN_RETRIES, MAX_RETRIES]``."""


class WaitTimeOutOfRangeError(ConfigurationError):
    """Negative base wait time."""


class InputValidationError(AdxToolkitError, ValueError):
    """Raised when a required execution argument is unusable."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class RequiredValueMissingError(InputValidationError):
    """A required argument was ``None``."""

    def __init__(self, field: str) -> None:
        super().__init__(field, "value is required")


class RequiredValueInvalidError(InputValidationError):
    """A required argument was an empty string."""

    def __init__(self, field: str) -> None:
        super().__init__(field, "value must not be empty")


class ExecutionCancelledError(AdxToolkitError):
    """The caller's cancellation signal was set between attempts."""


__all__ = [
    "AdxToolkitError",
    "ConfigurationError",
    "ExecutionCancelledError",
    "InputValidationError",
    "RequiredValueInvalidError",
    "RequiredValueMissingError",
    "RetriesOutOfRangeError",
    "WaitTimeOutOfRangeError",
]
