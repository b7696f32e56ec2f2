# SPDX-License-Identifier: MIT
"""Execute Kusto control commands and queries with retry.

:class:`KustoHelper` validates every argument before touching the network,
opens a connection scoped to the call and runs the statement under a
:class:`~adx_toolkit.retry.RetryPolicy` with exponential backoff.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Callable

import logfire

from .client import (
    ConnectionFactory,
    KustoClientFactory,
    KustoCredentials,
    new_request_properties,
)
from .errors import (
    RequiredValueInvalidError,
    RequiredValueMissingError,
    RetriesOutOfRangeError,
    WaitTimeOutOfRangeError,
)
from .retry import RetryPolicy, Sleep, always_retry, exponential_delay

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from .settings import Settings


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _require(field: str, value: str | None) -> None:
    if value is None:
        raise RequiredValueMissingError(field)
    if value == "":
        raise RequiredValueInvalidError(field)


class KustoHelper:
    """Run Kusto statements with validation and exponential backoff."""

    MIN_RETRIES = 0
    MAX_RETRIES = 5

    def __init__(
        self,
        retries: int = 2,
        *,
        client_factory: ConnectionFactory | None = None,
        retry_on: Callable[[Exception], bool] = always_retry,
        sleep: Sleep | None = None,
    ) -> None:
        """Create a helper.

        Args:
            retries: Times a failed execution is retried.
            client_factory: Source of Kusto connections; defaults to
                :class:`~adx_toolkit.client.KustoClientFactory`.
            retry_on: Predicate selecting which failures are retried.
            sleep: Coroutine used for backoff waits.

        Raises:
            RetriesOutOfRangeError: If ``retries`` is outside
                ``[MIN_RETRIES, MAX_RETRIES]``.
        """
        self._check_retries(retries)
        self._retries = retries
        self._base_wait_time = 2
        self._client_factory = client_factory or KustoClientFactory()
        self._retry_on = retry_on
        self._sleep = sleep
        self._settings: "Settings | None" = None

    @classmethod
    def from_settings(cls, settings: "Settings", **kwargs: Any) -> "KustoHelper":
        """Build a helper from validated :class:`~adx_toolkit.settings.Settings`.

        The retry budget and base wait time come from ``settings``; its
        cluster, database and application credentials back :meth:`run_command`
        and :meth:`run_query`.
        """
        helper = cls(settings.retries, **kwargs)
        helper.base_wait_time = settings.base_wait_time
        helper._settings = settings
        return helper

    @property
    def retries(self) -> int:
        return self._retries

    @property
    def base_wait_time(self) -> int:
        """Base of the exponential backoff, in seconds."""
        return self._base_wait_time

    @base_wait_time.setter
    def base_wait_time(self, value: int) -> None:
        if not _is_int(value):
            raise WaitTimeOutOfRangeError(
                f"base_wait_time must be an integer, got {value!r}"
            )
        if value < 0:
            raise WaitTimeOutOfRangeError(
                f"base_wait_time must be >= 0, got {value}"
            )
        self._base_wait_time = value

    @classmethod
    def _check_retries(cls, retries: int) -> None:
        if not _is_int(retries):
            raise RetriesOutOfRangeError(f"retries must be an integer, got {retries!r}")
        if not cls.MIN_RETRIES <= retries <= cls.MAX_RETRIES:
            raise RetriesOutOfRangeError(
                f"retries must be between {cls.MIN_RETRIES} and "
                f"{cls.MAX_RETRIES}, got {retries}"
            )

    def _validate(
        self,
        cluster: str | None,
        database: str | None,
        statement_field: str,
        statement: str | None,
        app_id: str | None,
        app_secret: str | None,
        app_tenant: str | None,
        retries: int | None,
    ) -> None:
        _require("cluster", cluster)
        _require("database", database)
        _require(statement_field, statement)
        _require("app_id", app_id)
        _require("app_secret", app_secret)
        _require("app_tenant", app_tenant)
        if retries is not None:
            self._check_retries(retries)

    def _policy(self, retries: int | None) -> RetryPolicy:
        return RetryPolicy(
            retries=self._retries if retries is None else retries,
            delay=lambda attempt: exponential_delay(self.base_wait_time, attempt),
            retry_on=self._retry_on,
            sleep=self._sleep,
        )

    async def execute_command(
        self,
        cluster: str,
        database: str,
        command: str,
        app_id: str,
        app_secret: str,
        app_tenant: str,
        *,
        retries: int | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        """Execute a control command, retrying failures with backoff.

        Args:
            cluster: Kusto cluster URL.
            database: Database name.
            command: Control command to execute.
            app_id: Application (client) ID.
            app_secret: Application secret.
            app_tenant: Application tenant.
            retries: Optional per-call override of the retry count.
            cancel_event: Set to stop retrying between attempts.

        Returns:
            The client's response, or ``None`` if it returned nothing.
        """
        self._validate(
            cluster, database, "command", command, app_id, app_secret, app_tenant, retries
        )
        credentials = KustoCredentials(app_id, app_secret, app_tenant)
        properties = new_request_properties()
        policy = self._policy(retries)
        with logfire.span(
            "kusto.execute_command",
            cluster=cluster,
            database=database,
            client_request_id=properties.client_request_id,
        ):
            async with self._client_factory.admin_connection(
                cluster, database, credentials
            ) as connection:
                return await policy.execute(
                    lambda: connection.execute_control_command(
                        database, command, properties
                    ),
                    cancel_event=cancel_event,
                    operation="execute_command",
                )

    async def execute_query(
        self,
        cluster: str,
        database: str,
        query: str,
        app_id: str,
        app_secret: str,
        app_tenant: str,
        *,
        retries: int | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        """Execute a query, retrying failures with backoff.

        Arguments mirror :meth:`execute_command` with ``query`` in place of
        the command text.
        """
        self._validate(
            cluster, database, "query", query, app_id, app_secret, app_tenant, retries
        )
        credentials = KustoCredentials(app_id, app_secret, app_tenant)
        properties = new_request_properties()
        policy = self._policy(retries)
        with logfire.span(
            "kusto.execute_query",
            cluster=cluster,
            database=database,
            client_request_id=properties.client_request_id,
        ):
            async with self._client_factory.query_connection(
                cluster, database, credentials
            ) as connection:
                return await policy.execute(
                    lambda: connection.execute_query(database, query, properties),
                    cancel_event=cancel_event,
                    operation="execute_query",
                )

    def _configured_target(self) -> tuple[str | None, ...]:
        settings = self._settings
        if settings is None:
            return (None, None, None, None, None)
        secret = settings.app_secret.get_secret_value() if settings.app_secret else None
        return (
            settings.cluster,
            settings.database,
            settings.app_id,
            secret,
            settings.app_tenant,
        )

    async def run_command(
        self,
        command: str,
        *,
        retries: int | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        """Execute ``command`` against the cluster configured in settings.

        Unset connection values fail validation exactly as they would in
        :meth:`execute_command`.
        """
        cluster, database, app_id, app_secret, app_tenant = self._configured_target()
        return await self.execute_command(
            cluster, database, command, app_id, app_secret, app_tenant,
            retries=retries, cancel_event=cancel_event,
        )

    async def run_query(
        self,
        query: str,
        *,
        retries: int | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Any:
        """Execute ``query`` against the cluster configured in settings."""
        cluster, database, app_id, app_secret, app_tenant = self._configured_target()
        return await self.execute_query(
            cluster, database, query, app_id, app_secret, app_tenant,
            retries=retries, cancel_event=cancel_event,
        )


__all__ = ["KustoHelper"]
