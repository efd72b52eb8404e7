"""Backend system metadata schemas."""

from typing import Any

from pydantic import BaseModel, Field

from logifacade.schemas.shipment import ShipmentSystem


class BackendInfo(BaseModel):
    name: str
    system: ShipmentSystem
    available: bool = True
    details: dict[str, Any] = Field(default_factory=dict)


class BackendUnavailableMarker(BaseModel):
    system: ShipmentSystem
    available: bool = False
    error: str


class SystemsInfoResponse(BaseModel):
    facade: str
    version: str
    systems: dict[str, BackendInfo | BackendUnavailableMarker]
