"""Backend system routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from logifacade import __version__
from logifacade.domain.access import Operation
from logifacade.routes.dependencies import (
    get_aggregator,
    get_request_deadline,
    get_shipment_service,
    require_operation,
)
from logifacade.schemas.auth import AuthPrincipal
from logifacade.schemas.error import ErrorResponse, ValidationErrorResponse
from logifacade.schemas.shipment import MergedShipmentList
from logifacade.schemas.system import BackendInfo, SystemsInfoResponse
from logifacade.services.aggregator import FallbackAggregator
from logifacade.services.shipments import ShipmentService, parse_system

router = APIRouter(prefix="/systems", tags=["Systems"])

FACADE_NAME = "LogiFacade shipment facade"


@router.get("/info", response_model=SystemsInfoResponse)
async def systems_info(
    aggregator: Annotated[FallbackAggregator, Depends(get_aggregator)],
    deadline: Annotated[float, Depends(get_request_deadline)],
) -> SystemsInfoResponse:
    return SystemsInfoResponse(
        facade=FACADE_NAME,
        version=__version__,
        systems=await aggregator.describe_all(deadline=deadline),
    )


@router.get(
    "/{system}/info",
    response_model=BackendInfo,
    responses={
        400: {"model": ValidationErrorResponse},
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def system_info(
    system: Annotated[str, Path()],
    aggregator: Annotated[FallbackAggregator, Depends(get_aggregator)],
    deadline: Annotated[float, Depends(get_request_deadline)],
) -> BackendInfo:
    return await aggregator.describe_one(parse_system(system), deadline=deadline)


@router.get(
    "/shipments",
    response_model=MergedShipmentList,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def list_system_shipments(
    _: Annotated[AuthPrincipal, Depends(require_operation(Operation.SYSTEMS_SHIPMENTS))],
    service: Annotated[ShipmentService, Depends(get_shipment_service)],
    aggregator: Annotated[FallbackAggregator, Depends(get_aggregator)],
    deadline: Annotated[float, Depends(get_request_deadline)],
) -> MergedShipmentList:
    records = await service.list_system_shipments(deadline=deadline)
    return MergedShipmentList(total=len(records), shipments=records, systems=aggregator.order)
