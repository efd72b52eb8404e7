"""Shipment routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from logifacade.domain.access import Operation
from logifacade.routes.dependencies import get_request_deadline, get_shipment_service, require_operation
from logifacade.schemas.auth import AuthPrincipal
from logifacade.schemas.error import ErrorResponse, ValidationErrorResponse
from logifacade.schemas.shipment import (
    DeletedShipment,
    ShipmentList,
    ShipmentRecord,
    ShipmentStatistics,
    ShipmentWriteRequest,
    StatusUpdateRequest,
)
from logifacade.services.shipments import ShipmentService

router = APIRouter(prefix="/shipments", tags=["Shipments"])

ShipmentId = Annotated[int, Path(alias="shipmentId", gt=0)]

_AUTH_RESPONSES = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}


@router.get(
    "",
    response_model=ShipmentList,
    responses={**_AUTH_RESPONSES, 400: {"model": ValidationErrorResponse}},
)
async def list_shipments(
    _: Annotated[AuthPrincipal, Depends(require_operation(Operation.SHIPMENT_LIST))],
    service: Annotated[ShipmentService, Depends(get_shipment_service)],
    system: Annotated[str | None, Query()] = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> ShipmentList:
    records = service.list_shipments(system=system, status=status_filter)
    return ShipmentList(total=len(records), shipments=records)


@router.get(
    "/stats",
    response_model=ShipmentStatistics,
    responses=_AUTH_RESPONSES,
)
async def shipment_statistics(
    _: Annotated[AuthPrincipal, Depends(require_operation(Operation.SHIPMENT_STATS))],
    service: Annotated[ShipmentService, Depends(get_shipment_service)],
) -> ShipmentStatistics:
    return service.statistics()


@router.get(
    "/{shipmentId}",
    response_model=ShipmentRecord,
    responses={**_AUTH_RESPONSES, 400: {"model": ValidationErrorResponse}, 404: {"model": ErrorResponse}},
)
async def get_shipment(
    shipment_id: ShipmentId,
    _: Annotated[AuthPrincipal, Depends(require_operation(Operation.SHIPMENT_READ))],
    service: Annotated[ShipmentService, Depends(get_shipment_service)],
    deadline: Annotated[float, Depends(get_request_deadline)],
) -> ShipmentRecord:
    return await service.get_shipment(shipment_id, deadline=deadline)


@router.post(
    "",
    response_model=ShipmentRecord,
    status_code=status.HTTP_201_CREATED,
    responses={**_AUTH_RESPONSES, 400: {"model": ValidationErrorResponse}},
)
async def create_shipment(
    payload: ShipmentWriteRequest,
    _: Annotated[AuthPrincipal, Depends(require_operation(Operation.SHIPMENT_CREATE))],
    service: Annotated[ShipmentService, Depends(get_shipment_service)],
) -> ShipmentRecord:
    return service.create_shipment(payload)


@router.put(
    "/{shipmentId}",
    response_model=ShipmentRecord,
    responses={**_AUTH_RESPONSES, 400: {"model": ValidationErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_shipment(
    shipment_id: ShipmentId,
    payload: ShipmentWriteRequest,
    _: Annotated[AuthPrincipal, Depends(require_operation(Operation.SHIPMENT_UPDATE))],
    service: Annotated[ShipmentService, Depends(get_shipment_service)],
) -> ShipmentRecord:
    return service.update_shipment(shipment_id, payload)


@router.delete(
    "/{shipmentId}",
    response_model=DeletedShipment,
    responses={**_AUTH_RESPONSES, 404: {"model": ErrorResponse}},
)
async def delete_shipment(
    shipment_id: ShipmentId,
    _: Annotated[AuthPrincipal, Depends(require_operation(Operation.SHIPMENT_DELETE))],
    service: Annotated[ShipmentService, Depends(get_shipment_service)],
) -> DeletedShipment:
    record = service.delete_shipment(shipment_id)
    return DeletedShipment(message="Shipment deleted", shipment=record)


@router.put(
    "/{shipmentId}/status",
    response_model=ShipmentRecord,
    responses={**_AUTH_RESPONSES, 400: {"model": ValidationErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_shipment_status(
    shipment_id: ShipmentId,
    payload: StatusUpdateRequest,
    _: Annotated[AuthPrincipal, Depends(require_operation(Operation.SHIPMENT_UPDATE_STATUS))],
    service: Annotated[ShipmentService, Depends(get_shipment_service)],
    deadline: Annotated[float, Depends(get_request_deadline)],
) -> ShipmentRecord:
    return await service.update_status_in_systems(shipment_id, payload.status, deadline=deadline)
