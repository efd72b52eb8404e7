"""Shipment API schemas."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ShipmentSystem(str, Enum):
    GROUND = "GROUND"
    AIR = "AIR"
    SEA = "SEA"

    @classmethod
    def parse(cls, value: str | None) -> ShipmentSystem | None:
        """Return the canonical system for ``value`` or None when unknown.

        Matching is case-insensitive. The codes used by the legacy
        deployments (TMS, ACMS, SMCS) are accepted as aliases.
        """
        if value is None:
            return None
        key = value.strip().upper()
        if key in cls.__members__:
            return cls[key]
        return _LEGACY_SYSTEM_CODES.get(key)


_LEGACY_SYSTEM_CODES: dict[str, ShipmentSystem] = {
    "TMS": ShipmentSystem.GROUND,
    "ACMS": ShipmentSystem.AIR,
    "SMCS": ShipmentSystem.SEA,
}


class ShipmentRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    origin: str
    destination: str
    status: str
    system: ShipmentSystem


class ShipmentDraft(BaseModel):
    """Validated mutable fields of a shipment, without an identifier."""

    origin: str
    destination: str
    status: str
    system: ShipmentSystem


class ShipmentWriteRequest(BaseModel):
    origin: str | None = None
    destination: str | None = None
    status: str | None = None
    system: str | None = None


class StatusUpdateRequest(BaseModel):
    status: str | None = None


class ShipmentList(BaseModel):
    total: int
    shipments: list[ShipmentRecord]


class MergedShipmentList(BaseModel):
    total: int
    shipments: list[ShipmentRecord]
    systems: list[ShipmentSystem]


class DeletedShipment(BaseModel):
    message: str
    shipment: ShipmentRecord


class ShipmentStatistics(BaseModel):
    total: int
    by_system: dict[str, int]
    by_status: dict[str, int]
