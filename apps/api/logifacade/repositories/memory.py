"""Storage interfaces and their in-memory implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
import threading

from logifacade.errors import NotFoundError, ValidationError
from logifacade.schemas.auth import Role
from logifacade.schemas.shipment import ShipmentDraft, ShipmentRecord, ShipmentStatistics, ShipmentSystem


def _shipment_not_found(shipment_id: int) -> NotFoundError:
    return NotFoundError(
        message=f"Shipment {shipment_id} not found",
        details={"id": shipment_id},
    )


class ShipmentStore(ABC):
    """Locally owned shipment records.

    Implementations provide create/read/update/delete/list; filtering and
    statistics are derived from ``list_all``.
    """

    @abstractmethod
    def create(self, draft: ShipmentDraft) -> ShipmentRecord:
        """Persist ``draft`` under a newly generated identifier."""

    @abstractmethod
    def get(self, shipment_id: int) -> ShipmentRecord | None:
        ...

    @abstractmethod
    def update(self, shipment_id: int, draft: ShipmentDraft) -> ShipmentRecord:
        """Replace all mutable fields; raises NotFoundError when absent."""

    @abstractmethod
    def delete(self, shipment_id: int) -> ShipmentRecord:
        """Remove and return the record; raises NotFoundError when absent."""

    @abstractmethod
    def list_all(self) -> list[ShipmentRecord]:
        """All records ordered by identifier."""

    def find_by_system(self, system: ShipmentSystem) -> list[ShipmentRecord]:
        return [record for record in self.list_all() if record.system is system]

    def find_by_status(self, status: str) -> list[ShipmentRecord]:
        wanted = status.strip().casefold()
        return [record for record in self.list_all() if record.status.casefold() == wanted]

    def statistics(self) -> ShipmentStatistics:
        records = self.list_all()
        return ShipmentStatistics(
            total=len(records),
            by_system=dict(Counter(record.system.value for record in records)),
            by_status=dict(Counter(record.status for record in records)),
        )


class InMemoryShipmentStore(ShipmentStore):
    """Process-local store; all mutations are serialized by one lock.

    Identifiers continue from the highest one ever issued, so a deleted
    identifier is never handed out again.
    """

    def __init__(self, records: Iterable[ShipmentRecord] = ()) -> None:
        self._lock = threading.Lock()
        self._records: dict[int, ShipmentRecord] = {}
        self._last_id = 0
        for record in records:
            self.insert(record)

    def insert(self, record: ShipmentRecord) -> ShipmentRecord:
        """Store a record under its own identifier, e.g. when seeding."""
        with self._lock:
            if record.id in self._records:
                raise ValidationError(
                    "Shipment identifier already exists",
                    fields={"id": f"{record.id} is already in use"},
                )
            self._records[record.id] = record
            self._last_id = max(self._last_id, record.id)
        return record

    def create(self, draft: ShipmentDraft) -> ShipmentRecord:
        with self._lock:
            self._last_id += 1
            record = ShipmentRecord(id=self._last_id, **draft.model_dump())
            self._records[record.id] = record
        return record

    def get(self, shipment_id: int) -> ShipmentRecord | None:
        return self._records.get(shipment_id)

    def update(self, shipment_id: int, draft: ShipmentDraft) -> ShipmentRecord:
        with self._lock:
            if shipment_id not in self._records:
                raise _shipment_not_found(shipment_id)
            record = ShipmentRecord(id=shipment_id, **draft.model_dump())
            self._records[shipment_id] = record
        return record

    def delete(self, shipment_id: int) -> ShipmentRecord:
        with self._lock:
            record = self._records.pop(shipment_id, None)
            if record is None:
                raise _shipment_not_found(shipment_id)
        return record

    def list_all(self) -> list[ShipmentRecord]:
        with self._lock:
            records = list(self._records.values())
        records.sort(key=lambda record: record.id)
        return records


@dataclass(slots=True)
class PrincipalRecord:
    id: int
    username: str
    email: str
    display_name: str
    roles: frozenset[Role]
    password_hash: str
    enabled: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_access_at: datetime | None = None


class InMemoryPrincipalDirectory:
    """Principals provisioned at startup; disabled rather than deleted."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: dict[int, PrincipalRecord] = {}
        self._next_id = 1

    def add(
        self,
        *,
        username: str,
        email: str,
        display_name: str,
        roles: Iterable[Role],
        password_hash: str,
        enabled: bool = True,
    ) -> PrincipalRecord:
        role_set = frozenset(roles)
        if not role_set:
            raise ValidationError("Principal needs at least one role", fields={"roles": "must not be empty"})
        with self._lock:
            if any(existing.username == username for existing in self._by_id.values()):
                raise ValidationError("Username already exists", fields={"username": "already in use"})
            record = PrincipalRecord(
                id=self._next_id,
                username=username,
                email=email,
                display_name=display_name,
                roles=role_set,
                password_hash=password_hash,
                enabled=enabled,
            )
            self._by_id[record.id] = record
            self._next_id += 1
        return replace(record)

    def get(self, principal_id: int) -> PrincipalRecord | None:
        record = self._by_id.get(principal_id)
        return replace(record) if record is not None else None

    def get_by_username(self, username: str) -> PrincipalRecord | None:
        with self._lock:
            for record in self._by_id.values():
                if record.username == username:
                    return replace(record)
        return None

    def list_all(self) -> list[PrincipalRecord]:
        with self._lock:
            return [replace(record) for record in sorted(self._by_id.values(), key=lambda r: r.id)]

    def record_access(self, principal_id: int, when: datetime | None = None) -> None:
        with self._lock:
            record = self._by_id.get(principal_id)
            if record is not None:
                record.last_access_at = when or datetime.now(UTC)

    def set_enabled(self, principal_id: int, enabled: bool) -> bool:
        with self._lock:
            record = self._by_id.get(principal_id)
            if record is None:
                return False
            record.enabled = enabled
            return True


__all__ = [
    "InMemoryPrincipalDirectory",
    "InMemoryShipmentStore",
    "PrincipalRecord",
    "ShipmentStore",
]
