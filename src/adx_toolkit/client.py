# SPDX-License-Identifier: MIT
"""Kusto client capabilities consumed by :class:`~adx_toolkit.helper.KustoHelper`.

Connections are scoped to a single execution: each factory method is an async
context manager that builds an ``azure-kusto-data`` client, yields a thin
connection wrapper and closes the client on exit.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Protocol
from uuid import uuid4

import logfire
from azure.kusto.data import ClientRequestProperties, KustoConnectionStringBuilder
from azure.kusto.data.aio import KustoClient


@dataclass(frozen=True)
class KustoCredentials:
    """AAD application-key credentials for a cluster."""

    app_id: str
    app_secret: str = field(repr=False)
    app_tenant: str


def new_request_properties() -> ClientRequestProperties:
    """Return request properties tagged with a fresh correlation id."""
    properties = ClientRequestProperties()
    properties.client_request_id = str(uuid4())
    return properties


class AdminConnection(Protocol):
    async def execute_control_command(
        self, database: str, command: str, properties: ClientRequestProperties
    ) -> Any: ...


class QueryConnection(Protocol):
    async def execute_query(
        self, database: str, query: str, properties: ClientRequestProperties
    ) -> Any: ...


class ConnectionFactory(Protocol):
    """Builds short-lived admin and query connections."""

    def admin_connection(
        self, cluster: str, database: str, credentials: KustoCredentials
    ) -> AbstractAsyncContextManager[AdminConnection]: ...

    def query_connection(
        self, cluster: str, database: str, credentials: KustoCredentials
    ) -> AbstractAsyncContextManager[QueryConnection]: ...


class _KustoAdminConnection:
    def __init__(self, client: KustoClient) -> None:
        self._client = client

    async def execute_control_command(
        self, database: str, command: str, properties: ClientRequestProperties
    ) -> Any:
        return await self._client.execute_mgmt(database, command, properties)


class _KustoQueryConnection:
    def __init__(self, client: KustoClient) -> None:
        self._client = client

    async def execute_query(
        self, database: str, query: str, properties: ClientRequestProperties
    ) -> Any:
        return await self._client.execute_query(database, query, properties)


class KustoClientFactory:
    """Default :class:`ConnectionFactory` backed by ``azure.kusto.data.aio``."""

    def __init__(self, client_cls: type[KustoClient] = KustoClient) -> None:
        self._client_cls = client_cls

    @staticmethod
    def connection_string(
        cluster: str, credentials: KustoCredentials
    ) -> KustoConnectionStringBuilder:
        """Return a connection string using application-key authentication."""
        return KustoConnectionStringBuilder.with_aad_application_key_authentication(
            cluster,
            credentials.app_id,
            credentials.app_secret,
            credentials.app_tenant,
        )

    @asynccontextmanager
    async def _client(
        self, cluster: str, database: str, credentials: KustoCredentials
    ) -> AsyncIterator[KustoClient]:
        kcsb = self.connection_string(cluster, credentials)
        logfire.debug("Opening Kusto client", cluster=cluster, database=database)
        async with self._client_cls(kcsb) as client:
            yield client

    @asynccontextmanager
    async def admin_connection(
        self, cluster: str, database: str, credentials: KustoCredentials
    ) -> AsyncIterator[AdminConnection]:
        async with self._client(cluster, database, credentials) as client:
            yield _KustoAdminConnection(client)

    @asynccontextmanager
    async def query_connection(
        self, cluster: str, database: str, credentials: KustoCredentials
    ) -> AsyncIterator[QueryConnection]:
        async with self._client(cluster, database, credentials) as client:
            yield _KustoQueryConnection(client)


__all__ = [
    "AdminConnection",
    "ConnectionFactory",
    "KustoClientFactory",
    "KustoCredentials",
    "QueryConnection",
    "new_request_properties",
]
