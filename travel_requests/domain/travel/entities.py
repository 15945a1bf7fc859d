# ============================================================
# Business/domain entities
# ============================================================
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from travel_requests.core.errors import ValidationError
from .status import TravelRequestStatus

DEFAULT_PER_PAGE = 15
MAX_PER_PAGE = 100
# keeps the OFFSET inside a signed 64-bit integer
MAX_PAGE = 2**31 - 1
MAX_TEXT_LENGTH = 255

CONTENT_FIELDS = ("requester_name", "destination", "departure_date", "return_date")


@dataclass(frozen=True)
class Actor:
    """Pre-authenticated identity performing an operation."""
    id: str
    name: str = ""


@dataclass
class TravelRequestEntity:
    id: int
    requester_id: str
    requester_name: str
    destination: str
    departure_date: date
    return_date: date
    status: TravelRequestStatus = TravelRequestStatus.REQUESTED
    approved_by: str | None = None
    approved_at: datetime | None = None
    cancelled_by: str | None = None
    cancelled_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_requested_by(self, actor_id: str) -> bool:
        return self.requester_id == actor_id


@dataclass(frozen=True)
class NewTravelRequest:
    destination: str
    departure_date: date
    return_date: date
    requester_name: str | None = None


@dataclass(frozen=True)
class TravelRequestFilters:
    status: TravelRequestStatus | None = None
    destination: str | None = None
    departure_from: date | None = None
    departure_to: date | None = None
    return_from: date | None = None
    return_to: date | None = None
    created_from: date | None = None
    created_to: date | None = None
    travel_from: date | None = None
    travel_to: date | None = None


@dataclass(frozen=True)
class Pagination:
    per_page: int = DEFAULT_PER_PAGE
    page: int = 1

    @classmethod
    def from_request(
        cls,
        per_page: int | None = None,
        page: int | None = None,
        *,
        default: int = DEFAULT_PER_PAGE,
        maximum: int = MAX_PER_PAGE,
    ) -> "Pagination":
        size = default if per_page is None else per_page
        return cls(
            per_page=max(1, min(size, maximum)),
            page=max(1, min(page or 1, MAX_PAGE)),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


@dataclass(frozen=True)
class PageMeta:
    total: int
    per_page: int
    current_page: int
    last_page: int
    has_next: bool
    has_previous: bool

    @classmethod
    def build(cls, total: int, pagination: Pagination) -> "PageMeta":
        last_page = max(1, math.ceil(total / pagination.per_page))
        return cls(
            total=total,
            per_page=pagination.per_page,
            current_page=pagination.page,
            last_page=last_page,
            has_next=pagination.page < last_page,
            has_previous=pagination.page > 1,
        )


@dataclass(frozen=True)
class PageResult:
    data: list[TravelRequestEntity]
    meta: PageMeta


@dataclass(frozen=True)
class StatusChangeSignal:
    """Notification-worthy event emitted after a committed transition."""
    request_id: int
    destination: str
    departure_date: date
    return_date: date
    old_status: TravelRequestStatus
    new_status: TravelRequestStatus
    requester_id: str
    requester_name: str
    actor_id: str | None = None
    actor_name: str | None = None
    occurred_at: datetime | None = None

    @classmethod
    def from_request(
        cls,
        request: TravelRequestEntity,
        old_status: TravelRequestStatus,
        new_status: TravelRequestStatus,
        *,
        actor: Actor | None = None,
    ) -> "StatusChangeSignal":
        """Build the signal from a request the transition was applied to.

        `actor` supplies the display name of whoever decided. The id always
        comes from the audit pair the transition recorded.
        """
        if new_status is TravelRequestStatus.APPROVED:
            actor_id, occurred_at = request.approved_by, request.approved_at
        else:
            actor_id, occurred_at = request.cancelled_by, request.cancelled_at
        return cls(
            request_id=request.id,
            destination=request.destination,
            departure_date=request.departure_date,
            return_date=request.return_date,
            old_status=old_status,
            new_status=new_status,
            requester_id=request.requester_id,
            requester_name=request.requester_name,
            actor_id=actor_id,
            actor_name=(actor.name or actor.id) if actor is not None else None,
            occurred_at=occurred_at,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "request_id": self.request_id,
            "destination": self.destination,
            "departure_date": self.departure_date.isoformat(),
            "return_date": self.return_date.isoformat(),
            "old_status": self.old_status.value,
            "new_status": self.new_status.value,
            "requester": {"id": self.requester_id, "name": self.requester_name},
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
            "occurred_at": self.occurred_at.isoformat() if self.occurred_at else None,
        }


def should_notify(new_status: TravelRequestStatus) -> bool:
    return new_status in (TravelRequestStatus.APPROVED, TravelRequestStatus.CANCELLED)


# ------------------------------
# Field invariants
# ------------------------------

def _text_error(field_name: str, value: str | None) -> str | None:
    label = field_name.replace('_', ' ')
    text = (value or "").strip()
    if not text:
        return f"The {label} is required."
    if len(text) > MAX_TEXT_LENGTH:
        return f"The {label} may not be greater than {MAX_TEXT_LENGTH} characters."
    return None


def _date_errors(
    departure_date: date,
    return_date: date,
    *,
    today: date,
    check_departure: bool,
) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    if check_departure and departure_date < today:
        errors["departure_date"] = ["The departure date must be today or a future date."]
    if return_date <= departure_date:
        errors["return_date"] = ["The return date must be after the departure date."]
    return errors


def validate_trip_dates(
    departure_date: date,
    return_date: date,
    *,
    today: date,
    check_departure: bool = True,
) -> None:
    """Enforce date ordering; `check_departure` also requires a future departure."""
    errors = _date_errors(departure_date, return_date, today=today, check_departure=check_departure)
    if errors:
        raise ValidationError("The given data was invalid.", errors=errors)


def validate_new_request(data: NewTravelRequest, *, default_name: str, today: date) -> NewTravelRequest:
    """Check a creation payload and return it with normalized text fields."""
    requester_name = data.requester_name if data.requester_name is not None else default_name
    errors: dict[str, list[str]] = {}
    for name, value in (("requester_name", requester_name), ("destination", data.destination)):
        message = _text_error(name, value)
        if message:
            errors[name] = [message]
    errors.update(_date_errors(data.departure_date, data.return_date, today=today, check_departure=True))
    if errors:
        raise ValidationError("The given data was invalid.", errors=errors)

    return NewTravelRequest(
        destination=data.destination.strip(),
        departure_date=data.departure_date,
        return_date=data.return_date,
        requester_name=requester_name.strip(),
    )


def validate_content_changes(
    request: TravelRequestEntity,
    changes: dict[str, Any],
    *,
    today: date,
) -> dict[str, Any]:
    """Check a partial content update against the stored request.

    Only content fields may change. The date ordering is checked on the merged
    result, and a new departure date must not lie in the past.
    """
    errors: dict[str, list[str]] = {}
    for name in changes:
        if name not in CONTENT_FIELDS:
            errors[name] = [f"The {name} field is prohibited."]

    clean: dict[str, Any] = {}
    for name in ("requester_name", "destination"):
        if name in changes:
            message = _text_error(name, changes[name])
            if message:
                errors[name] = [message]
            else:
                clean[name] = changes[name].strip()

    for name in ("departure_date", "return_date"):
        if name in changes and changes[name] is None:
            errors[name] = [f"The {name.replace('_', ' ')} must be a valid date."]

    departure_date = changes.get("departure_date") or request.departure_date
    return_date = changes.get("return_date") or request.return_date
    errors.update(
        _date_errors(
            departure_date,
            return_date,
            today=today,
            check_departure="departure_date" in changes,
        )
    )
    if errors:
        raise ValidationError("The given data was invalid.", errors=errors)

    for name in ("departure_date", "return_date"):
        if name in changes:
            clean[name] = changes[name]
    return clean
