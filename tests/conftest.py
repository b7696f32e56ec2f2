# SPDX-License-Identifier: MIT
"""Test configuration for adx-toolkit.

Provides a fake Kusto connection factory so no test reaches a real cluster,
and a recording sleep so backoff delays are observed instead of waited.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import logfire
import pytest

logfire.configure(send_to_logfire=False, console=False)


class FakeConnection:
    """Connection returning queued outcomes in order.

    Each outcome is either an exception instance, which is raised, or a value,
    which is returned. The last outcome repeats once the queue is drained.
    """

    def __init__(self, outcomes: list[Any], calls: list[tuple[str, ...]]) -> None:
        self._outcomes = outcomes
        self.calls = calls

    def _next(self) -> Any:
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def execute_control_command(self, database: str, command: str, properties) -> Any:
        self.calls.append(("command", database, command, properties.client_request_id))
        return self._next()

    async def execute_query(self, database: str, query: str, properties) -> Any:
        self.calls.append(("query", database, query, properties.client_request_id))
        return self._next()


class FakeClientFactory:
    """Records opened and closed connections for assertions."""

    def __init__(self, outcomes: list[Any] | None = None) -> None:
        self.outcomes = list(outcomes) if outcomes is not None else ["ok"]
        self.calls: list[tuple[str, ...]] = []
        self.opened: list[tuple[str, str, str, Any]] = []
        self.closed = 0

    @asynccontextmanager
    async def _open(self, kind, cluster, database, credentials):
        self.opened.append((kind, cluster, database, credentials))
        try:
            yield FakeConnection(self.outcomes, self.calls)
        finally:
            self.closed += 1

    def admin_connection(self, cluster, database, credentials):
        return self._open("admin", cluster, database, credentials)

    def query_connection(self, cluster, database, credentials):
        return self._open("query", cluster, database, credentials)


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` capturing requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture()
def fake_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture()
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture(autouse=True)
def _clear_adx_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host ``ADX_`` variables from leaking into settings tests."""

    for name in (
        "ADX_RETRIES",
        "ADX_BASE_WAIT_TIME",
        "ADX_LOG_LEVEL",
        "ADX_CLUSTER",
        "ADX_DATABASE",
        "ADX_APP_ID",
        "ADX_APP_SECRET",
        "ADX_APP_TENANT",
        "ADX_LOGFIRE_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
