"""Backend connector interface and query result types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from logifacade.schemas.shipment import ShipmentRecord, ShipmentSystem
from logifacade.schemas.system import BackendInfo


@dataclass(frozen=True, slots=True)
class Found:
    record: ShipmentRecord


@dataclass(frozen=True, slots=True)
class NotFound:
    pass


@dataclass(frozen=True, slots=True)
class Unavailable:
    reason: str


BackendQueryResult = Found | NotFound | Unavailable

NOT_FOUND = NotFound()


class BackendConnector(ABC):
    """Stateless client for one backend system's shipment contract.

    Implementations never retry and never share state with each other.
    ``query_by_id`` and ``update_status`` report failures through the
    tri-state result; ``list_all`` and ``describe`` raise
    ``BackendUnavailableError``.
    """

    system: ShipmentSystem

    @property
    def name(self) -> str:
        return self.system.value

    @abstractmethod
    async def query_by_id(self, shipment_id: int) -> BackendQueryResult:
        ...

    @abstractmethod
    async def list_all(self) -> list[ShipmentRecord]:
        ...

    @abstractmethod
    async def update_status(self, shipment_id: int, status: str) -> BackendQueryResult:
        ...

    @abstractmethod
    async def describe(self) -> BackendInfo:
        ...

    async def aclose(self) -> None:
        return None


__all__ = [
    "BackendConnector",
    "BackendQueryResult",
    "Found",
    "NOT_FOUND",
    "NotFound",
    "Unavailable",
]
