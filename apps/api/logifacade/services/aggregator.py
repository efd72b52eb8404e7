"""Ordered, failure-tolerant fallback across backend connectors."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
import logging
from typing import TypeVar

from logifacade.adapters.backends.base import BackendConnector, BackendQueryResult, Found, Unavailable
from logifacade.errors import BackendUnavailableError, NotFoundError
from logifacade.schemas.shipment import ShipmentRecord, ShipmentSystem
from logifacade.schemas.system import BackendInfo, BackendUnavailableMarker

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ORDER: tuple[ShipmentSystem, ...] = (ShipmentSystem.GROUND, ShipmentSystem.AIR, ShipmentSystem.SEA)

_DEADLINE_EXCEEDED = "deadline_exceeded"


class _DeadlineExceeded(Exception):
    pass


class FallbackAggregator:
    """Resolves shipment operations against connectors in precedence order.

    ``deadline`` arguments are absolute event-loop times (``loop.time()``).
    Every connector call runs under that deadline; a call that is cut off,
    or that would start after the deadline, counts as an unavailable backend.
    Per-backend failures never propagate out of the fallback operations.
    """

    def __init__(self, connectors: Sequence[BackendConnector]) -> None:
        systems = [connector.system for connector in connectors]
        if len(set(systems)) != len(systems):
            raise ValueError("each backend system may only be connected once")
        self._connectors = tuple(connectors)

    @property
    def connectors(self) -> tuple[BackendConnector, ...]:
        return self._connectors

    @property
    def order(self) -> list[ShipmentSystem]:
        return [connector.system for connector in self._connectors]

    async def resolve_by_id(self, shipment_id: int, *, deadline: float | None = None) -> ShipmentRecord | None:
        """Return the first backend's record for ``shipment_id``; None if no backend has it."""
        return await self._first_found(
            "resolve",
            shipment_id,
            lambda connector: connector.query_by_id(shipment_id),
            deadline,
        )

    async def update_status_anywhere(
        self,
        shipment_id: int,
        status: str,
        *,
        deadline: float | None = None,
    ) -> ShipmentRecord | None:
        """Apply ``status`` on the first backend that accepts it; None if none does."""
        return await self._first_found(
            "update_status",
            shipment_id,
            lambda connector: connector.update_status(shipment_id, status),
            deadline,
        )

    async def list_all_merged(self, *, deadline: float | None = None) -> list[ShipmentRecord]:
        """Concatenate every reachable backend's listing in precedence order.

        Identifiers are not deduplicated across backends.
        """
        results = await asyncio.gather(
            *(self._bounded(connector.list_all, deadline) for connector in self._connectors),
            return_exceptions=True,
        )
        merged: list[ShipmentRecord] = []
        for connector, result in zip(self._connectors, results):
            if isinstance(result, BaseException):
                self._log_skipped(connector, "list_all", result)
                continue
            merged.extend(result)
        return merged

    async def describe_all(
        self,
        *,
        deadline: float | None = None,
    ) -> dict[str, BackendInfo | BackendUnavailableMarker]:
        results = await asyncio.gather(
            *(self._bounded(connector.describe, deadline) for connector in self._connectors),
            return_exceptions=True,
        )
        info: dict[str, BackendInfo | BackendUnavailableMarker] = {}
        for connector, result in zip(self._connectors, results):
            if isinstance(result, BaseException):
                self._log_skipped(connector, "describe", result)
                info[connector.name] = BackendUnavailableMarker(
                    system=connector.system,
                    error=f"{connector.name} service unavailable",
                )
            else:
                info[connector.name] = result
        return info

    async def describe_one(self, system: ShipmentSystem, *, deadline: float | None = None) -> BackendInfo:
        """Query one named backend; its failure is reported, not absorbed."""
        connector = self._connector_for(system)
        try:
            return await self._bounded(connector.describe, deadline)
        except (TimeoutError, _DeadlineExceeded) as exc:
            raise BackendUnavailableError(connector.name, _DEADLINE_EXCEEDED) from exc

    async def aclose(self) -> None:
        for connector in self._connectors:
            await connector.aclose()

    async def _first_found(
        self,
        operation: str,
        shipment_id: int,
        call: Callable[[BackendConnector], Awaitable[BackendQueryResult]],
        deadline: float | None,
    ) -> ShipmentRecord | None:
        for connector in self._connectors:
            result = await self._attempt(connector, operation, shipment_id, call, deadline)
            if isinstance(result, Found):
                logger.info(
                    "aggregator.%s.found system=%s shipment_id=%s",
                    operation,
                    connector.name,
                    shipment_id,
                )
                return result.record
            if isinstance(result, Unavailable):
                logger.info(
                    "aggregator.%s.skipped system=%s shipment_id=%s reason=%s",
                    operation,
                    connector.name,
                    shipment_id,
                    result.reason,
                )
        logger.info("aggregator.%s.not_found shipment_id=%s systems=%s", operation, shipment_id, len(self._connectors))
        return None

    async def _attempt(
        self,
        connector: BackendConnector,
        operation: str,
        shipment_id: int,
        call: Callable[[BackendConnector], Awaitable[BackendQueryResult]],
        deadline: float | None,
    ) -> BackendQueryResult:
        try:
            return await self._bounded(lambda: call(connector), deadline)
        except (TimeoutError, _DeadlineExceeded):
            return Unavailable(_DEADLINE_EXCEEDED)
        except BackendUnavailableError as exc:
            return Unavailable(exc.reason)
        except Exception:
            logger.exception(
                "aggregator.%s.connector_error system=%s shipment_id=%s",
                operation,
                connector.name,
                shipment_id,
            )
            return Unavailable("connector_error")

    @staticmethod
    async def _bounded(call: Callable[[], Awaitable[T]], deadline: float | None) -> T:
        if deadline is None:
            return await call()
        if asyncio.get_running_loop().time() >= deadline:
            raise _DeadlineExceeded()
        async with asyncio.timeout_at(deadline):
            return await call()

    def _connector_for(self, system: ShipmentSystem) -> BackendConnector:
        for connector in self._connectors:
            if connector.system is system:
                return connector
        raise NotFoundError(
            message=f"No backend connector is configured for {system.value}",
            details={"system": system.value},
        )

    @staticmethod
    def _log_skipped(connector: BackendConnector, operation: str, exc: BaseException) -> None:
        if isinstance(exc, BackendUnavailableError):
            reason = exc.reason
        elif isinstance(exc, (TimeoutError, _DeadlineExceeded)):
            reason = _DEADLINE_EXCEEDED
        else:
            reason = type(exc).__name__
        logger.warning("aggregator.%s.skipped system=%s reason=%s", operation, connector.name, reason)


__all__ = ["DEFAULT_ORDER", "FallbackAggregator"]
