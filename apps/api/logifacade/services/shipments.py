"""Shipment service layer."""

from __future__ import annotations

import logging

from logifacade.errors import NotFoundError, ValidationError
from logifacade.repositories.memory import ShipmentStore
from logifacade.schemas.shipment import (
    ShipmentDraft,
    ShipmentRecord,
    ShipmentStatistics,
    ShipmentSystem,
    ShipmentWriteRequest,
)
from logifacade.services.aggregator import FallbackAggregator

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS: tuple[str, ...] = ("origin", "destination", "status", "system")
_SYSTEM_CHOICES = ", ".join(system.value for system in ShipmentSystem)


def parse_system(value: str | None, *, field_name: str = "system") -> ShipmentSystem:
    system = ShipmentSystem.parse(value)
    if system is None:
        raise ValidationError(
            "Invalid shipment system",
            fields={field_name: f"must be one of {_SYSTEM_CHOICES}"},
        )
    return system


def validate_draft(payload: ShipmentWriteRequest) -> ShipmentDraft:
    """Check required fields and normalize the system tag."""
    values = payload.model_dump()
    problems = {
        name: "must not be blank"
        for name in _REQUIRED_FIELDS
        if values.get(name) is None or not str(values[name]).strip()
    }
    if problems:
        raise ValidationError("Missing required shipment fields", fields=problems)

    return ShipmentDraft(
        origin=values["origin"].strip(),
        destination=values["destination"].strip(),
        status=values["status"].strip(),
        system=parse_system(values["system"]),
    )


def validate_status(status: str | None) -> str:
    if status is None or not status.strip():
        raise ValidationError("Missing shipment status", fields={"status": "must not be blank"})
    return status.strip()


class ShipmentService:
    """Dispatches shipment operations to the backends or the local store."""

    def __init__(self, store: ShipmentStore, aggregator: FallbackAggregator) -> None:
        self._store = store
        self._aggregator = aggregator

    async def get_shipment(self, shipment_id: int, *, deadline: float | None = None) -> ShipmentRecord:
        record = await self._aggregator.resolve_by_id(shipment_id, deadline=deadline)
        if record is not None:
            return record

        record = self._store.get(shipment_id)
        if record is not None:
            logger.info("shipment.resolved source=local shipment_id=%s", shipment_id)
            return record

        raise NotFoundError(
            message=f"Shipment {shipment_id} not found in any system",
            details={"id": shipment_id},
        )

    async def update_status_in_systems(
        self,
        shipment_id: int,
        status: str | None,
        *,
        deadline: float | None = None,
    ) -> ShipmentRecord:
        new_status = validate_status(status)
        record = await self._aggregator.update_status_anywhere(shipment_id, new_status, deadline=deadline)
        if record is None:
            raise NotFoundError(
                message=f"Shipment {shipment_id} not found in any system for update",
                details={"id": shipment_id},
            )
        return record

    async def list_system_shipments(self, *, deadline: float | None = None) -> list[ShipmentRecord]:
        return await self._aggregator.list_all_merged(deadline=deadline)

    def create_shipment(self, payload: ShipmentWriteRequest) -> ShipmentRecord:
        record = self._store.create(validate_draft(payload))
        logger.info("shipment.created shipment_id=%s system=%s", record.id, record.system.value)
        return record

    def update_shipment(self, shipment_id: int, payload: ShipmentWriteRequest) -> ShipmentRecord:
        record = self._store.update(shipment_id, validate_draft(payload))
        logger.info("shipment.updated shipment_id=%s", shipment_id)
        return record

    def delete_shipment(self, shipment_id: int) -> ShipmentRecord:
        record = self._store.delete(shipment_id)
        logger.info("shipment.deleted shipment_id=%s", shipment_id)
        return record

    def list_shipments(self, *, system: str | None = None, status: str | None = None) -> list[ShipmentRecord]:
        has_system = system is not None and bool(system.strip())
        has_status = status is not None and bool(status.strip())
        if not has_system:
            return self._store.find_by_status(status) if has_status else self._store.list_all()

        records = self._store.find_by_system(parse_system(system))
        if has_status:
            wanted = status.strip().casefold()
            records = [record for record in records if record.status.casefold() == wanted]
        return records

    def statistics(self) -> ShipmentStatistics:
        return self._store.statistics()
