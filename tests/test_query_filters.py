from __future__ import annotations

from datetime import date, datetime

import pytest

from travel_requests.domain.travel.entities import Pagination, TravelRequestEntity, TravelRequestFilters
from travel_requests.domain.travel.query import (
    apply_in_memory,
    build_stages,
    created_range_stage,
    destination_stage,
    travel_range_stage,
)
from travel_requests.domain.travel.status import TravelRequestStatus


def _entity(
    request_id: int,
    departure: date,
    return_: date,
    *,
    requester_id: str = "alice",
    destination: str = "Lisbon",
    status: TravelRequestStatus = TravelRequestStatus.REQUESTED,
    created_at: datetime | None = None,
) -> TravelRequestEntity:
    return TravelRequestEntity(
        id=request_id,
        requester_id=requester_id,
        requester_name=requester_id.title(),
        destination=destination,
        departure_date=departure,
        return_date=return_,
        status=status,
        created_at=created_at or datetime(2026, 1, 1, 9, 0),
    )


# ------------------------------
# Travel-date overlap
# ------------------------------

@pytest.mark.parametrize(
    "departure, return_, expected",
    [
        (date(2026, 2, 10), date(2026, 2, 28), True),  # departs inside
        (date(2026, 1, 25), date(2026, 2, 5), True),  # returns inside
        (date(2026, 1, 1), date(2026, 2, 28), True),  # encloses the range
        (date(2026, 2, 3), date(2026, 2, 12), True),  # fully inside
        (date(2026, 3, 1), date(2026, 3, 10), False),
        (date(2026, 1, 1), date(2026, 1, 31), False),
    ],
)
def test_travel_range_overlap(departure, return_, expected) -> None:
    stage = travel_range_stage(date(2026, 2, 1), date(2026, 2, 15))

    assert stage.matches(_entity(1, departure, return_)) is expected


def test_travel_range_boundaries_are_inclusive() -> None:
    stage = travel_range_stage(date(2026, 2, 1), date(2026, 2, 15))

    assert stage.matches(_entity(1, date(2026, 2, 15), date(2026, 2, 20)))
    assert stage.matches(_entity(2, date(2026, 1, 20), date(2026, 2, 1)))


def test_half_range_builds_no_stage() -> None:
    assert travel_range_stage(date(2026, 2, 1), None) is None
    assert created_range_stage(None, date(2026, 2, 1)) is None


# ------------------------------
# Other stages
# ------------------------------

def test_destination_is_case_insensitive_substring() -> None:
    stage = destination_stage("  pari ")

    assert stage.matches(_entity(1, date(2026, 2, 1), date(2026, 2, 2), destination="Paris"))
    assert not stage.matches(_entity(2, date(2026, 2, 1), date(2026, 2, 2), destination="Porto"))


def test_blank_destination_is_ignored() -> None:
    assert destination_stage("   ") is None
    assert destination_stage(None) is None


def test_created_range_covers_whole_end_day() -> None:
    stage = created_range_stage(date(2026, 1, 10), date(2026, 1, 12))

    assert stage.matches(_entity(1, date(2026, 2, 1), date(2026, 2, 2), created_at=datetime(2026, 1, 10, 0, 0)))
    assert stage.matches(_entity(2, date(2026, 2, 1), date(2026, 2, 2), created_at=datetime(2026, 1, 12, 23, 59)))
    assert not stage.matches(_entity(3, date(2026, 2, 1), date(2026, 2, 2), created_at=datetime(2026, 1, 13, 0, 0)))


def test_build_stages_keeps_fixed_order_and_skips_empty_filters() -> None:
    filters = TravelRequestFilters(
        status=TravelRequestStatus.APPROVED,
        destination="",
        travel_from=date(2026, 2, 1),
        travel_to=date(2026, 2, 15),
        departure_from=date(2026, 1, 1),
        departure_to=date(2026, 3, 1),
    )

    stages = build_stages(filters, owner_id="alice")

    assert [s.name for s in stages] == ["owner", "status", "departure_range", "travel_range"]


def test_apply_in_memory_scopes_filters_and_orders_newest_first() -> None:
    requests = [
        _entity(1, date(2026, 2, 10), date(2026, 2, 28), created_at=datetime(2026, 1, 1)),
        _entity(2, date(2026, 1, 25), date(2026, 2, 5), created_at=datetime(2026, 1, 3)),
        _entity(3, date(2026, 2, 2), date(2026, 2, 4), requester_id="bob", created_at=datetime(2026, 1, 4)),
        _entity(4, date(2026, 3, 1), date(2026, 3, 10), created_at=datetime(2026, 1, 5)),
        _entity(5, date(2026, 1, 1), date(2026, 2, 28), created_at=datetime(2026, 1, 3)),
    ]
    filters = TravelRequestFilters(travel_from=date(2026, 2, 1), travel_to=date(2026, 2, 15))

    result = apply_in_memory(build_stages(filters, owner_id="alice"), requests)

    # equal created_at falls back to id, highest first
    assert [r.id for r in result] == [5, 2, 1]


# ------------------------------
# Store-backed search
# ------------------------------

def test_search_matches_in_memory_result(repository, make_request) -> None:
    make_request("alice", departure_date=date(2026, 2, 10), return_date=date(2026, 2, 28),
                 created_at=datetime(2026, 1, 1, 8))
    make_request("alice", departure_date=date(2026, 1, 25), return_date=date(2026, 2, 5),
                 created_at=datetime(2026, 1, 2, 8))
    make_request("alice", departure_date=date(2026, 1, 1), return_date=date(2026, 2, 28),
                 created_at=datetime(2026, 1, 3, 8))
    make_request("alice", departure_date=date(2026, 3, 1), return_date=date(2026, 3, 10),
                 created_at=datetime(2026, 1, 4, 8))
    make_request("bob", departure_date=date(2026, 2, 3), return_date=date(2026, 2, 4),
                 created_at=datetime(2026, 1, 5, 8))

    filters = TravelRequestFilters(travel_from=date(2026, 2, 1), travel_to=date(2026, 2, 15))
    stages = build_stages(filters, owner_id="alice")
    page = repository.search(stages, Pagination())

    assert [r.departure_date for r in page.data] == [
        date(2026, 1, 1),
        date(2026, 1, 25),
        date(2026, 2, 10),
    ]
    assert page.meta.total == 3


def test_search_filters_status_and_destination(repository, make_request) -> None:
    make_request(destination="Paris", status=TravelRequestStatus.APPROVED)
    make_request(destination="paris 100%", status=TravelRequestStatus.REQUESTED)
    make_request(destination="Porto", status=TravelRequestStatus.APPROVED)

    by_status = repository.search(
        build_stages(TravelRequestFilters(status=TravelRequestStatus.APPROVED), owner_id="alice"),
        Pagination(),
    )
    by_destination = repository.search(
        build_stages(TravelRequestFilters(destination="PARIS"), owner_id="alice"),
        Pagination(),
    )
    by_wildcard = repository.search(
        build_stages(TravelRequestFilters(destination="100%"), owner_id="alice"),
        Pagination(),
    )

    assert sorted(r.destination for r in by_status.data) == ["Paris", "Porto"]
    assert sorted(r.destination for r in by_destination.data) == ["Paris", "paris 100%"]
    assert [r.destination for r in by_wildcard.data] == ["paris 100%"]


def test_search_created_range_includes_end_day(repository, make_request) -> None:
    make_request(created_at=datetime(2026, 1, 12, 18, 30))
    make_request(created_at=datetime(2026, 1, 13, 0, 1))

    page = repository.search(
        build_stages(
            TravelRequestFilters(created_from=date(2026, 1, 12), created_to=date(2026, 1, 12)),
            owner_id="alice",
        ),
        Pagination(),
    )

    assert [r.created_at for r in page.data] == [datetime(2026, 1, 12, 18, 30)]


def test_search_paginates(repository, make_request) -> None:
    for day in range(1, 8):
        make_request(created_at=datetime(2026, 1, day, 12))

    first = repository.search(build_stages(TravelRequestFilters(), owner_id="alice"), Pagination(per_page=3, page=1))
    last = repository.search(build_stages(TravelRequestFilters(), owner_id="alice"), Pagination(per_page=3, page=3))

    assert [r.created_at.day for r in first.data] == [7, 6, 5]
    assert first.meta.total == 7
    assert first.meta.last_page == 3
    assert first.meta.has_next and not first.meta.has_previous
    assert [r.created_at.day for r in last.data] == [1]
    assert not last.meta.has_next
