# SPDX-License-Identifier: MIT
"""Tests for the Kusto connection factory."""

from __future__ import annotations

import uuid

import pytest
from azure.kusto.data import KustoConnectionStringBuilder

from adx_toolkit.client import (
    KustoClientFactory,
    KustoCredentials,
    new_request_properties,
)

CLUSTER = "https://help.kusto.windows.net/"
CREDENTIALS = KustoCredentials("app-id", "app-secret", "tenant-id")


class DummyKustoClient:
    """Async client stub recording calls and lifecycle."""

    instances: list["DummyKustoClient"] = []

    def __init__(self, kcsb) -> None:
        self.kcsb = kcsb
        self.calls: list[tuple[str, str, str, object]] = []
        self.closed = False
        DummyKustoClient.instances.append(self)

    async def __aenter__(self) -> "DummyKustoClient":
        return self

    async def __aexit__(self, *args) -> None:
        self.closed = True

    async def execute_mgmt(self, database, query, properties=None):
        self.calls.append(("mgmt", database, query, properties))
        return "mgmt-result"

    async def execute_query(self, database, query, properties=None):
        self.calls.append(("query", database, query, properties))
        return "query-result"


@pytest.fixture(autouse=True)
def _reset_instances():
    DummyKustoClient.instances.clear()
    yield
    DummyKustoClient.instances.clear()


def test_request_properties_carry_fresh_ids() -> None:
    first = new_request_properties()
    second = new_request_properties()
    assert first.client_request_id != second.client_request_id
    uuid.UUID(first.client_request_id)


def test_credentials_repr_hides_secret() -> None:
    assert "app-secret" not in repr(CREDENTIALS)


def test_connection_string_uses_application_key(monkeypatch) -> None:
    captured = {}

    def fake_builder(connection_string, aad_app_id, app_key, authority_id):
        captured.update(
            cluster=connection_string, app_id=aad_app_id, key=app_key, tenant=authority_id
        )
        return "kcsb"

    monkeypatch.setattr(
        KustoConnectionStringBuilder,
        "with_aad_application_key_authentication",
        staticmethod(fake_builder),
    )

    assert KustoClientFactory.connection_string(CLUSTER, CREDENTIALS) == "kcsb"
    assert captured == {
        "cluster": CLUSTER,
        "app_id": "app-id",
        "key": "app-secret",
        "tenant": "tenant-id",
    }


@pytest.mark.asyncio
async def test_admin_connection_runs_mgmt_and_closes() -> None:
    factory = KustoClientFactory(client_cls=DummyKustoClient)
    properties = new_request_properties()

    async with factory.admin_connection(CLUSTER, "acme", CREDENTIALS) as connection:
        result = await connection.execute_control_command("acme", ".show tables", properties)

    client = DummyKustoClient.instances[0]
    assert result == "mgmt-result"
    assert client.calls == [("mgmt", "acme", ".show tables", properties)]
    assert client.closed is True


@pytest.mark.asyncio
async def test_query_connection_closes_on_error() -> None:
    factory = KustoClientFactory(client_cls=DummyKustoClient)

    with pytest.raises(RuntimeError):
        async with factory.query_connection(CLUSTER, "acme", CREDENTIALS) as connection:
            assert await connection.execute_query("acme", "T | take 1", None) == "query-result"
            raise RuntimeError("boom")

    assert DummyKustoClient.instances[0].closed is True
