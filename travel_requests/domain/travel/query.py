"""Listing query for travel requests.

A listing is an ordered list of independent filter stages. Every stage
carries the SQL clause used against the store and the equivalent in-memory
predicate, so each stage can be checked on its own against a fixture list.

Stage order is fixed:
1. ownership scope
2. status
3. destination (case-insensitive substring)
4. departure-date range
5. return-date range
6. created-at range
7. travel-date range (three-way overlap)

Ordering is newest-created first and is not configurable by clients.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from .entities import TravelRequestEntity, TravelRequestFilters
from .models import TravelRequest
from .status import TravelRequestStatus

_LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class FilterStage:
    name: str
    clause: ColumnElement
    matches: Callable[[TravelRequestEntity], bool]


# ------------------------------
# Stages
# ------------------------------

def ownership_stage(owner_id: str) -> FilterStage:
    return FilterStage(
        name="owner",
        clause=TravelRequest.requester_id == owner_id,
        matches=lambda r: r.requester_id == owner_id,
    )


def status_stage(status: TravelRequestStatus | None) -> FilterStage | None:
    if status is None:
        return None
    return FilterStage(
        name="status",
        clause=TravelRequest.status == status,
        matches=lambda r: r.status == status,
    )


def destination_stage(destination: str | None) -> FilterStage | None:
    needle = (destination or "").strip()
    if not needle:
        return None
    pattern = f"%{_escape_like(needle)}%"
    lowered = needle.lower()
    return FilterStage(
        name="destination",
        clause=TravelRequest.destination.ilike(pattern, escape=_LIKE_ESCAPE),
        matches=lambda r: lowered in r.destination.lower(),
    )


def departure_range_stage(start: date | None, end: date | None) -> FilterStage | None:
    if start is None or end is None:
        return None
    return FilterStage(
        name="departure_range",
        clause=TravelRequest.departure_date.between(start, end),
        matches=lambda r: start <= r.departure_date <= end,
    )


def return_range_stage(start: date | None, end: date | None) -> FilterStage | None:
    if start is None or end is None:
        return None
    return FilterStage(
        name="return_range",
        clause=TravelRequest.return_date.between(start, end),
        matches=lambda r: start <= r.return_date <= end,
    )


def created_range_stage(start: date | None, end: date | None) -> FilterStage | None:
    """Inclusive by calendar day: `end` covers the whole day."""
    if start is None or end is None:
        return None
    lower = datetime.combine(start, time.min)
    upper = datetime.combine(end + timedelta(days=1), time.min)
    return FilterStage(
        name="created_range",
        clause=and_(TravelRequest.created_at >= lower, TravelRequest.created_at < upper),
        matches=lambda r: r.created_at is not None and lower <= r.created_at < upper,
    )


def travel_range_stage(start: date | None, end: date | None) -> FilterStage | None:
    """Departure in range, OR return in range, OR the trip encloses the range."""
    if start is None or end is None:
        return None
    clause = or_(
        TravelRequest.departure_date.between(start, end),
        TravelRequest.return_date.between(start, end),
        and_(TravelRequest.departure_date <= start, TravelRequest.return_date >= end),
    )

    def matches(r: TravelRequestEntity) -> bool:
        return (
            start <= r.departure_date <= end
            or start <= r.return_date <= end
            or (r.departure_date <= start and r.return_date >= end)
        )

    return FilterStage(name="travel_range", clause=clause, matches=matches)


# ------------------------------
# Composition
# ------------------------------

def build_stages(filters: TravelRequestFilters, *, owner_id: str | None = None) -> list[FilterStage]:
    """Compose the stages for a listing, skipping the ones without input."""
    candidates = [
        ownership_stage(owner_id) if owner_id is not None else None,
        status_stage(filters.status),
        destination_stage(filters.destination),
        departure_range_stage(filters.departure_from, filters.departure_to),
        return_range_stage(filters.return_from, filters.return_to),
        created_range_stage(filters.created_from, filters.created_to),
        travel_range_stage(filters.travel_from, filters.travel_to),
    ]
    return [stage for stage in candidates if stage is not None]


def where_clauses(stages: Iterable[FilterStage]) -> list[ColumnElement]:
    return [stage.clause for stage in stages]


def order_by_newest() -> list[ColumnElement]:
    return [TravelRequest.created_at.desc(), TravelRequest.id.desc()]


def apply_in_memory(
    stages: Iterable[FilterStage],
    requests: Iterable[TravelRequestEntity],
) -> list[TravelRequestEntity]:
    """Filter and order a fixture collection exactly like the store query."""
    stages = list(stages)
    matched = [r for r in requests if all(stage.matches(r) for stage in stages)]
    return sorted(
        matched,
        key=lambda r: (r.created_at or datetime.min, r.id),
        reverse=True,
    )


def _escape_like(value: str) -> str:
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )
