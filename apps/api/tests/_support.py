"""Shared fixtures for the API test suites."""

from __future__ import annotations

import asyncio
import os
import unittest
from collections.abc import Iterable

from fastapi.testclient import TestClient

from logifacade.adapters.backends.base import NOT_FOUND, BackendConnector, BackendQueryResult, Found, Unavailable
from logifacade.core.config import get_settings
from logifacade.errors import BackendUnavailableError
from logifacade.schemas.shipment import ShipmentRecord, ShipmentSystem
from logifacade.schemas.system import BackendInfo

TEST_JWT_SECRET = "logifacade-test-secret-" + "k" * 64

SEEDED_PASSWORDS = {
    "admin": "admin123",
    "operator": "operator123",
    "auditor": "auditor123",
    "client": "client123",
}


def shipment(shipment_id: int, system: ShipmentSystem, **overrides: str) -> ShipmentRecord:
    values = {"origin": "Cali", "destination": "Pereira", "status": "in-transit"}
    values.update(overrides)
    return ShipmentRecord(id=shipment_id, system=system, **values)


class FakeConnector(BackendConnector):
    """In-process stand-in for a backend system that records every call."""

    def __init__(
        self,
        system: ShipmentSystem,
        records: Iterable[ShipmentRecord] = (),
        *,
        unavailable: bool = False,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.system = system
        self.listing = list(records)
        self.records = {record.id: record for record in self.listing}
        self.unavailable = unavailable
        self.delay = delay
        self.error = error
        self.calls: list[tuple[str, object]] = []
        self.closed = False

    async def _enter(self, operation: str, argument: object = None) -> None:
        self.calls.append((operation, argument))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

    async def query_by_id(self, shipment_id: int) -> BackendQueryResult:
        await self._enter("query", shipment_id)
        if self.unavailable:
            return Unavailable("connection refused")
        record = self.records.get(shipment_id)
        return Found(record) if record is not None else NOT_FOUND

    async def list_all(self) -> list[ShipmentRecord]:
        await self._enter("list_all")
        if self.unavailable:
            raise BackendUnavailableError(self.name, "connection refused")
        return list(self.listing)

    async def update_status(self, shipment_id: int, status: str) -> BackendQueryResult:
        await self._enter("update_status", (shipment_id, status))
        if self.unavailable:
            return Unavailable("connection refused")
        record = self.records.get(shipment_id)
        if record is None:
            return NOT_FOUND
        updated = record.model_copy(update={"status": status})
        self.records[shipment_id] = updated
        return Found(updated)

    async def describe(self) -> BackendInfo:
        await self._enter("describe")
        if self.unavailable:
            raise BackendUnavailableError(self.name, "connection refused")
        return BackendInfo(
            name=f"{self.name.title()} cargo service",
            system=self.system,
            details={"version": "2.1.0"},
        )

    async def aclose(self) -> None:
        self.closed = True


class SettingsEnvCase(unittest.TestCase):
    _env_defaults = {
        "LOGIFACADE_JWT_SECRET": TEST_JWT_SECRET,
        "LOGIFACADE_PASSWORD_HASH_ROUNDS": "4",
        "LOGIFACADE_SEED_SAMPLE_SHIPMENTS": "false",
        "LOGIFACADE_SEED_PRINCIPALS": "true",
        "LOGIFACADE_LOG_LEVEL": "WARNING",
    }
    env_overrides: dict[str, str] = {}

    def setUp(self) -> None:
        env = {**self._env_defaults, **self.env_overrides}
        self._old_env = {key: os.environ.get(key) for key in env}
        os.environ.update(env)
        get_settings.cache_clear()

    def tearDown(self) -> None:
        for key, value in self._old_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        get_settings.cache_clear()


def login_headers(client: TestClient, username: str) -> dict[str, str]:
    response = client.post(
        "/api/v1/auth/login",
        json={"username": username, "password": SEEDED_PASSWORDS[username]},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}
