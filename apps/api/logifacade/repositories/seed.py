"""Startup provisioning of sample shipments and principals."""

from __future__ import annotations

import logging

from logifacade.adapters.auth.base import PasswordHasher
from logifacade.repositories.memory import InMemoryPrincipalDirectory, InMemoryShipmentStore
from logifacade.schemas.auth import Role
from logifacade.schemas.shipment import ShipmentRecord, ShipmentSystem

logger = logging.getLogger(__name__)

SAMPLE_SHIPMENTS: tuple[ShipmentRecord, ...] = (
    ShipmentRecord(id=123, origin="Bogotá", destination="Medellín", status="in-transit", system=ShipmentSystem.GROUND),
    ShipmentRecord(id=124, origin="Cali", destination="Pereira", status="in-transit", system=ShipmentSystem.GROUND),
    ShipmentRecord(id=125, origin="Bucaramanga", destination="Cartagena", status="pending", system=ShipmentSystem.GROUND),
    ShipmentRecord(id=456, origin="Cali", destination="Cartagena", status="delivered", system=ShipmentSystem.AIR),
    ShipmentRecord(id=457, origin="Bogotá", destination="Miami", status="in-transit", system=ShipmentSystem.AIR),
    ShipmentRecord(id=458, origin="Medellín", destination="Panamá", status="delivered", system=ShipmentSystem.AIR),
    ShipmentRecord(id=789, origin="Barranquilla", destination="Buenaventura", status="pending", system=ShipmentSystem.SEA),
    ShipmentRecord(id=790, origin="Cartagena", destination="Valencia", status="in-transit", system=ShipmentSystem.SEA),
    ShipmentRecord(id=791, origin="Buenaventura", destination="Shanghai", status="delivered", system=ShipmentSystem.SEA),
)

# username, password, display name, role
SAMPLE_PRINCIPALS: tuple[tuple[str, str, str, Role], ...] = (
    ("admin", "admin123", "System Administrator", Role.ADMIN),
    ("operator", "operator123", "Logistics Operator", Role.OPERATOR),
    ("auditor", "auditor123", "Shipment Auditor", Role.AUDITOR),
    ("client", "client123", "Business Client", Role.CLIENT),
)


def seed_shipments(store: InMemoryShipmentStore) -> None:
    for record in SAMPLE_SHIPMENTS:
        store.insert(record)
    logger.info("seed.shipments count=%s", len(SAMPLE_SHIPMENTS))


def seed_principals(directory: InMemoryPrincipalDirectory, hasher: PasswordHasher) -> None:
    if directory.list_all():
        return
    for username, password, display_name, role in SAMPLE_PRINCIPALS:
        directory.add(
            username=username,
            email=f"{username}@logifacade.example",
            display_name=display_name,
            roles={role},
            password_hash=hasher.hash(password),
        )
    logger.info("seed.principals count=%s", len(SAMPLE_PRINCIPALS))
