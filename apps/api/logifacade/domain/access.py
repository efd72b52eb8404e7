"""Operation-to-role authorization rules."""

from enum import Enum

from logifacade.errors import AuthorizationError
from logifacade.schemas.auth import AuthPrincipal, Role


class Operation(str, Enum):
    SHIPMENT_READ = "shipment.read"
    SHIPMENT_LIST = "shipment.list"
    SHIPMENT_STATS = "shipment.stats"
    SHIPMENT_CREATE = "shipment.create"
    SHIPMENT_UPDATE = "shipment.update"
    SHIPMENT_UPDATE_STATUS = "shipment.update_status"
    SHIPMENT_DELETE = "shipment.delete"
    SYSTEMS_SHIPMENTS = "systems.shipments"
    AUTH_ME = "auth.me"


_ALL_ROLES: frozenset[Role] = frozenset(Role)
_WRITERS: frozenset[Role] = frozenset({Role.ADMIN, Role.OPERATOR})

REQUIRED_ROLES: dict[Operation, frozenset[Role]] = {
    Operation.SHIPMENT_READ: _ALL_ROLES,
    Operation.SHIPMENT_LIST: _ALL_ROLES,
    Operation.SHIPMENT_STATS: _ALL_ROLES,
    Operation.SHIPMENT_CREATE: _WRITERS,
    Operation.SHIPMENT_UPDATE: _WRITERS,
    Operation.SHIPMENT_UPDATE_STATUS: _WRITERS,
    Operation.SHIPMENT_DELETE: frozenset({Role.ADMIN}),
    Operation.SYSTEMS_SHIPMENTS: frozenset({Role.ADMIN, Role.OPERATOR, Role.AUDITOR}),
    Operation.AUTH_ME: _ALL_ROLES,
}


def is_authorized(roles: frozenset[Role], operation: Operation) -> bool:
    return not roles.isdisjoint(REQUIRED_ROLES[operation])


def ensure_authorized(principal: AuthPrincipal, operation: Operation) -> None:
    """Raise AuthorizationError unless the principal holds a required role."""
    if is_authorized(principal.roles, operation):
        return

    raise AuthorizationError(
        details={
            "operation": operation.value,
            "required_roles": sorted(role.value for role in REQUIRED_ROLES[operation]),
        },
    )
