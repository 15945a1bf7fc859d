from typing import Optional, Generic, List, TypeVar, Annotated, Any
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field, BeforeValidator, model_validator

from travel_requests.domain.travel.entities import (
    NewTravelRequest,
    PageResult,
    TravelRequestEntity,
    TravelRequestFilters,
)
from travel_requests.domain.travel.status import TravelRequestStatus


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# Empty query values are ignored rather than rejected.
OptionalStatus = Annotated[Optional[TravelRequestStatus], BeforeValidator(_blank_to_none)]
OptionalStr = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
OptionalDate = Annotated[Optional[date], BeforeValidator(_blank_to_none)]
OptionalInt = Annotated[Optional[int], BeforeValidator(_blank_to_none)]

_RANGES = (
    ("departure_from", "departure_to", "departure"),
    ("return_from", "return_to", "return"),
    ("created_from", "created_to", "created"),
    ("travel_from", "travel_to", "travel"),
)


class TravelRequestQuery(BaseModel):
    """
    Query filters for listing travel requests.

    All fields are optional; unknown keys are ignored.
    Date ranges need both ends, and the end may not precede the start.
    """

    status: OptionalStatus = Field(
        default=None,
        description="Filter by status"
    )
    destination: OptionalStr = Field(
        default=None,
        max_length=255,
        description="Case-insensitive substring of the destination"
    )

    departure_from: OptionalDate = None
    departure_to: OptionalDate = None
    return_from: OptionalDate = None
    return_to: OptionalDate = None
    created_from: OptionalDate = None
    created_to: OptionalDate = None
    travel_from: OptionalDate = Field(
        default=None,
        description="Trips overlapping [travel_from, travel_to]"
    )
    travel_to: OptionalDate = None

    # Pagination
    per_page: OptionalInt = Field(
        default=None,
        description="Page size, clamped to 1-100 (default: 15)"
    )
    page: OptionalInt = Field(
        default=None,
        description="1-based page number"
    )

    @model_validator(mode="after")
    def _check_ranges(self) -> "TravelRequestQuery":
        for start_name, end_name, label in _RANGES:
            start, end = getattr(self, start_name), getattr(self, end_name)
            if (start is None) != (end is None):
                missing = end_name if end is None else start_name
                raise ValueError(f"The {missing} field is required with the {label} range.")
            if start is not None and end < start:
                raise ValueError(
                    f"The {label} end date must be after or equal to the {label} start date."
                )
        return self

    def to_filters(self) -> TravelRequestFilters:
        return TravelRequestFilters(
            status=self.status,
            destination=self.destination,
            departure_from=self.departure_from,
            departure_to=self.departure_to,
            return_from=self.return_from,
            return_to=self.return_to,
            created_from=self.created_from,
            created_to=self.created_to,
            travel_from=self.travel_from,
            travel_to=self.travel_to,
        )


class TravelRequestCreate(BaseModel):
    """Creation payload. Status and ownership are never taken from the client."""

    requester_name: Optional[str] = Field(default=None, max_length=255)
    destination: str = Field(max_length=255)
    departure_date: date
    return_date: date

    def to_new_request(self) -> NewTravelRequest:
        return NewTravelRequest(
            destination=self.destination,
            departure_date=self.departure_date,
            return_date=self.return_date,
            requester_name=self.requester_name,
        )


class TravelRequestUpdate(BaseModel):
    """Partial content update.

    Extra keys are kept so that protected fields (status, audit pairs,
    requester) reach the service and are rejected after authorization.
    """

    model_config = ConfigDict(extra="allow")

    requester_name: Optional[str] = Field(default=None, max_length=255)
    destination: Optional[str] = Field(default=None, max_length=255)
    departure_date: Optional[date] = None
    return_date: Optional[date] = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class StatusUpdate(BaseModel):
    status: TravelRequestStatus = Field(description="APPROVED or CANCELLED")


class TravelRequestOut(BaseModel):
    id: int
    requester_id: str
    requester_name: str
    destination: str
    departure_date: date
    return_date: date
    status: TravelRequestStatus
    status_label: str
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, entity: TravelRequestEntity) -> "TravelRequestOut":
        return cls(
            id=entity.id,
            requester_id=entity.requester_id,
            requester_name=entity.requester_name,
            destination=entity.destination,
            departure_date=entity.departure_date,
            return_date=entity.return_date,
            status=entity.status,
            status_label=entity.status.label,
            approved_by=entity.approved_by,
            approved_at=entity.approved_at,
            cancelled_by=entity.cancelled_by,
            cancelled_at=entity.cancelled_at,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )


T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    data: T


class PaginationMeta(BaseModel):
    total: int
    per_page: int
    current_page: int
    last_page: int
    has_next: bool
    has_previous: bool


class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    meta: PaginationMeta

    @classmethod
    def from_page(cls, page: PageResult) -> "PaginatedResponse[TravelRequestOut]":
        return cls(
            data=[TravelRequestOut.from_entity(r) for r in page.data],
            meta=PaginationMeta(
                total=page.meta.total,
                per_page=page.meta.per_page,
                current_page=page.meta.current_page,
                last_page=page.meta.last_page,
                has_next=page.meta.has_next,
                has_previous=page.meta.has_previous,
            ),
        )
