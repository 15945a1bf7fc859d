from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from travel_requests.api.core.container import Container, get_container
from travel_requests.api.dependencies import (
    get_current_actor,
    get_trace_id,
    get_travel_request_service,
)
from travel_requests.api.schemas import (
    DataResponse,
    PaginatedResponse,
    StatusUpdate,
    TravelRequestCreate,
    TravelRequestOut,
    TravelRequestQuery,
    TravelRequestUpdate,
)
from travel_requests.domain.travel.entities import Actor, Pagination
from travel_requests.runtime.service import TravelRequestService

router = APIRouter(prefix="/travel-requests", tags=["Travel Requests"])


@router.get(
    "",
    summary="List travel requests",
    description="Returns the caller's own travel requests, newest first, filtered and paginated.",
    response_model=PaginatedResponse[TravelRequestOut],
)
async def list_travel_requests(
    q: Annotated[TravelRequestQuery, Query()],
    actor: Actor = Depends(get_current_actor),
    service: TravelRequestService = Depends(get_travel_request_service),
    container: Container = Depends(get_container),
):
    """
    List travel requests with optional filters.

    Query Parameters:
    - status: REQUESTED, APPROVED or CANCELLED
    - destination: case-insensitive substring
    - departure_from/departure_to, return_from/return_to,
      created_from/created_to: inclusive ranges, both ends required
    - travel_from/travel_to: trips overlapping the range
    - per_page: page size (default: 15, clamped to 1-100)
    - page: 1-based page number
    """
    pagination = Pagination.from_request(
        q.per_page,
        q.page,
        default=container.settings.default_per_page,
        maximum=container.settings.max_per_page,
    )
    page = service.list_requests(actor, q.to_filters(), pagination)
    return PaginatedResponse[TravelRequestOut].from_page(page)


@router.post(
    "",
    status_code=201,
    summary="Create a travel request",
    response_model=DataResponse[TravelRequestOut],
)
async def create_travel_request(
    payload: TravelRequestCreate,
    actor: Actor = Depends(get_current_actor),
    service: TravelRequestService = Depends(get_travel_request_service),
    trace_id: str = Depends(get_trace_id),
):
    request = service.create_request(actor, payload.to_new_request(), trace_id=trace_id)
    return DataResponse[TravelRequestOut](data=TravelRequestOut.from_entity(request))


@router.get(
    "/{request_id}",
    summary="Get a travel request",
    response_model=DataResponse[TravelRequestOut],
)
async def get_travel_request(
    request_id: int,
    actor: Actor = Depends(get_current_actor),
    service: TravelRequestService = Depends(get_travel_request_service),
    trace_id: str = Depends(get_trace_id),
):
    """Get a specific travel request. Only its requester may see it."""
    request = service.get_request(actor, request_id, trace_id=trace_id)
    return DataResponse[TravelRequestOut](data=TravelRequestOut.from_entity(request))


@router.api_route(
    "/{request_id}",
    methods=["PUT", "PATCH"],
    summary="Update a travel request",
    response_model=DataResponse[TravelRequestOut],
)
async def update_travel_request(
    request_id: int,
    payload: TravelRequestUpdate,
    actor: Actor = Depends(get_current_actor),
    service: TravelRequestService = Depends(get_travel_request_service),
    trace_id: str = Depends(get_trace_id),
):
    """Only the requester may edit, and only while the request is REQUESTED."""
    request = service.update_request(actor, request_id, payload.changes(), trace_id=trace_id)
    return DataResponse[TravelRequestOut](data=TravelRequestOut.from_entity(request))


@router.patch(
    "/{request_id}/status",
    summary="Approve or cancel a travel request",
    response_model=DataResponse[TravelRequestOut],
)
async def update_travel_request_status(
    request_id: int,
    payload: StatusUpdate,
    actor: Actor = Depends(get_current_actor),
    service: TravelRequestService = Depends(get_travel_request_service),
    trace_id: str = Depends(get_trace_id),
):
    request = await service.change_status(actor, request_id, payload.status, trace_id=trace_id)
    return DataResponse[TravelRequestOut](data=TravelRequestOut.from_entity(request))


@router.delete(
    "/{request_id}",
    status_code=204,
    summary="Delete a travel request",
)
async def delete_travel_request(
    request_id: int,
    actor: Actor = Depends(get_current_actor),
    service: TravelRequestService = Depends(get_travel_request_service),
    trace_id: str = Depends(get_trace_id),
):
    service.delete_request(actor, request_id, trace_id=trace_id)
    return Response(status_code=204)
