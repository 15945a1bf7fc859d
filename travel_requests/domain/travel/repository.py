# ============================================================
# DB access layer
# ============================================================
from __future__ import annotations

from typing import Protocol, Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from .entities import (
    NewTravelRequest,
    PageMeta,
    PageResult,
    Pagination,
    TravelRequestEntity,
)
from .models import TravelRequest
from .query import FilterStage, order_by_newest, where_clauses
from .status import TravelRequestStatus


class TravelRequestRepositoryProtocol(Protocol):
    def create(
            self,
            *,
            requester_id: str,
            data: NewTravelRequest,
            now: Any,
    ) -> TravelRequestEntity:
        """Insert a new request in REQUESTED status"""
        ...

    def get(self, request_id: int, *, for_update: bool = False) -> TravelRequestEntity | None:
        """Get a request by id"""
        ...

    def update_content(self, request_id: int, changes: dict[str, Any], *, now: Any) -> TravelRequestEntity | None:
        """Persist content field changes while the request is still REQUESTED"""
        ...

    def apply_transition(
            self,
            request_id: int,
            *,
            expected_status: TravelRequestStatus,
            values: dict[str, Any],
    ) -> bool:
        """Write a status change if the row still holds `expected_status`"""
        ...

    def delete(self, request_id: int) -> bool:
        """Hard delete a request that is still REQUESTED"""
        ...

    def search(self, stages: list[FilterStage], pagination: Pagination) -> PageResult:
        """List requests matching every stage, newest first"""
        ...

    def rollback(self) -> None:
        ...


class TravelRequestRepository(TravelRequestRepositoryProtocol):
    def __init__(self, db: Session):
        self.db = db

    def create(
            self,
            *,
            requester_id: str,
            data: NewTravelRequest,
            now: Any,
    ) -> TravelRequestEntity:
        """Insert a new request in REQUESTED status"""
        row = TravelRequest(
            requester_id=requester_id,
            requester_name=data.requester_name,
            destination=data.destination,
            departure_date=data.departure_date,
            return_date=data.return_date,
            status=TravelRequestStatus.REQUESTED,
            created_at=now,
            updated_at=now,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row.to_entity()

    def get(self, request_id: int, *, for_update: bool = False) -> TravelRequestEntity | None:
        """Get a request by id.

        With `for_update` the row is locked until the transaction ends on
        stores that support row locks (SQLite ignores the hint).
        """
        query = select(TravelRequest).where(TravelRequest.id == request_id)
        if for_update:
            query = query.with_for_update()
        # Always read the committed state, never a stale identity-map copy.
        query = query.execution_options(populate_existing=True)
        row = self.db.execute(query).scalar_one_or_none()
        return row.to_entity() if row is not None else None

    def update_content(self, request_id: int, changes: dict[str, Any], *, now: Any) -> TravelRequestEntity | None:
        """Persist content field changes while the request is still REQUESTED.

        Returns None, with the transaction rolled back, when the status moved
        on after the row was read.
        """
        query = (
            update(TravelRequest)
            .where(
                TravelRequest.id == request_id,
                TravelRequest.status == TravelRequestStatus.REQUESTED,
            )
            .values(**changes, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if self.db.execute(query).rowcount != 1:
            self.db.rollback()
            return None

        self.db.commit()
        return self.get(request_id)

    def apply_transition(
            self,
            request_id: int,
            *,
            expected_status: TravelRequestStatus,
            values: dict[str, Any],
    ) -> bool:
        """Write a status change if the row still holds `expected_status`.

        Status, audit pair and timestamp go out in one UPDATE and one commit.
        Returns False, with the transaction rolled back, when another
        transition got there first.
        """
        query = (
            update(TravelRequest)
            .where(
                TravelRequest.id == request_id,
                TravelRequest.status == expected_status,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(query)
        if result.rowcount != 1:
            self.db.rollback()
            return False

        self.db.commit()
        return True

    def delete(self, request_id: int) -> bool:
        """Hard delete a request that is still REQUESTED"""
        query = delete(TravelRequest).where(
            TravelRequest.id == request_id,
            TravelRequest.status == TravelRequestStatus.REQUESTED,
        ).execution_options(synchronize_session=False)
        if self.db.execute(query).rowcount != 1:
            self.db.rollback()
            return False

        self.db.commit()
        return True

    def search(self, stages: list[FilterStage], pagination: Pagination) -> PageResult:
        """
        Retrieve requests matching every stage.

        Stages are optional.
        Ordering and pagination are always applied.
        """
        conditions = where_clauses(stages)

        # --- Total Count ---
        count_query = select(func.count()).select_from(TravelRequest).where(*conditions)
        total = int(self.db.execute(count_query).scalar_one())

        # --- Data Query ---
        data_query = (
            select(TravelRequest)
            .where(*conditions)
            .order_by(*order_by_newest())
            .limit(pagination.per_page)
            .offset(pagination.offset)
        )
        records = [row.to_entity() for row in self.db.execute(data_query).scalars()]

        return PageResult(data=records, meta=PageMeta.build(total, pagination))

    def rollback(self) -> None:
        self.db.rollback()
