"""HTTP connector for a backend cargo system over httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from logifacade.adapters.backends.base import (
    NOT_FOUND,
    BackendConnector,
    BackendQueryResult,
    Found,
    Unavailable,
)
from logifacade.errors import BackendUnavailableError
from logifacade.schemas.shipment import ShipmentRecord, ShipmentSystem
from logifacade.schemas.system import BackendInfo

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 3.0


class _InvalidPayload(Exception):
    pass


class HttpBackendConnector(BackendConnector):
    """Talks to one backend's REST contract.

    Expected contract, relative to ``base_url``:
    - ``GET shipments/{id}``: the shipment, 404 when unknown
    - ``GET shipments``: a JSON list, or an object with a ``shipments`` list
    - ``PUT shipments/{id}/status`` with ``{"status": ...}``: the updated shipment
    - ``GET info``: free-form service metadata

    A 200 body carrying an ``error`` key is treated as "not found", which is
    how older backends report unknown identifiers.
    """

    def __init__(
        self,
        system: ShipmentSystem,
        *,
        base_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.system = system
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def query_by_id(self, shipment_id: int) -> BackendQueryResult:
        return await self._single_record_call("query", "GET", f"/shipments/{shipment_id}", shipment_id)

    async def update_status(self, shipment_id: int, status: str) -> BackendQueryResult:
        return await self._single_record_call(
            "update_status",
            "PUT",
            f"/shipments/{shipment_id}/status",
            shipment_id,
            json={"status": status},
        )

    async def list_all(self) -> list[ShipmentRecord]:
        try:
            response = await self._client.get("/shipments")
            response.raise_for_status()
            payload = response.json()
            items = payload.get("shipments") if isinstance(payload, dict) else payload
            if not isinstance(items, list):
                raise _InvalidPayload("shipment list missing")
            return [self._to_record(item) for item in items]
        except (httpx.HTTPError, ValueError, _InvalidPayload) as exc:
            raise self._unavailable("list_all", exc) from exc

    async def describe(self) -> BackendInfo:
        try:
            response = await self._client.get("/info")
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict):
                raise _InvalidPayload("info payload is not an object")
        except (httpx.HTTPError, ValueError, _InvalidPayload) as exc:
            raise self._unavailable("describe", exc) from exc

        name = payload.get("name") or payload.get("service") or self.name
        details = {key: value for key, value in payload.items() if key not in {"name", "service"}}
        return BackendInfo(name=str(name), system=self.system, details=details)

    async def _single_record_call(
        self,
        operation: str,
        method: str,
        url: str,
        shipment_id: int,
        **kwargs: Any,
    ) -> BackendQueryResult:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            return self._unavailable_result(operation, shipment_id, type(exc).__name__)

        if response.status_code == 404:
            return NOT_FOUND
        if response.is_error:
            return self._unavailable_result(operation, shipment_id, f"http_{response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            return self._unavailable_result(operation, shipment_id, "invalid_json")
        if isinstance(payload, dict) and "error" in payload:
            return NOT_FOUND

        try:
            record = self._to_record(payload)
        except _InvalidPayload:
            return self._unavailable_result(operation, shipment_id, "invalid_payload")
        if record.id != shipment_id:
            return self._unavailable_result(operation, shipment_id, "id_mismatch")
        return Found(record)

    def _to_record(self, payload: Any) -> ShipmentRecord:
        if isinstance(payload, dict) and isinstance(payload.get("shipment"), dict):
            payload = payload["shipment"]
        if not isinstance(payload, dict):
            raise _InvalidPayload("shipment payload is not an object")
        try:
            return ShipmentRecord(
                id=payload.get("id"),
                origin=payload.get("origin"),
                destination=payload.get("destination"),
                status=payload.get("status"),
                system=self.system,
            )
        except PydanticValidationError as exc:
            raise _InvalidPayload(str(exc)) from exc

    def _unavailable_result(self, operation: str, shipment_id: int, reason: str) -> Unavailable:
        logger.warning(
            "backend.unavailable system=%s operation=%s shipment_id=%s reason=%s",
            self.name,
            operation,
            shipment_id,
            reason,
        )
        return Unavailable(reason)

    def _unavailable(self, operation: str, exc: Exception) -> BackendUnavailableError:
        reason = type(exc).__name__
        if isinstance(exc, httpx.HTTPStatusError):
            reason = f"http_{exc.response.status_code}"
        logger.warning("backend.unavailable system=%s operation=%s reason=%s", self.name, operation, reason)
        return BackendUnavailableError(self.name, reason)


__all__ = ["DEFAULT_TIMEOUT_SECONDS", "HttpBackendConnector"]
