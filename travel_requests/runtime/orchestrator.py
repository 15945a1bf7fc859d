"""Status transitions: audit fields -> compare-and-set write -> old status.

The orchestrator trusts its caller: authorization has already passed by the
time `change_status` runs. It records who moved the request and when, writes
status and audit pair in a single transaction, and hands back the status the
request had before so the caller can emit the status-change signal.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from travel_requests.core.errors import ConflictError
from travel_requests.domain.travel.entities import Actor, TravelRequestEntity
from travel_requests.domain.travel.repository import TravelRequestRepositoryProtocol
from travel_requests.domain.travel.status import TravelRequestStatus
from .utils import utcnow


class TransitionOrchestrator:
    """Applies validated status changes and records audit fields."""

    def __init__(
        self,
        *,
        repository: TravelRequestRepositoryProtocol,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repo = repository
        self._clock = clock

    def change_status(
        self,
        request: TravelRequestEntity,
        new_status: TravelRequestStatus,
        actor: Actor,
    ) -> TravelRequestStatus:
        """Move `request` to `new_status` on behalf of `actor`.

        Returns:
            The status the request had before the change.

        Raises:
            ConflictError: the stored status no longer matches the one read,
                i.e. a concurrent transition committed first.
        """
        old_status = request.status
        now = self._clock()
        values: dict[str, Any] = {'status': new_status, 'updated_at': now}

        if new_status is TravelRequestStatus.APPROVED:
            values['approved_by'] = actor.id
            values['approved_at'] = now
        elif new_status is TravelRequestStatus.CANCELLED:
            values['cancelled_by'] = actor.id
            values['cancelled_at'] = now
        else:
            raise ValueError(f"'{new_status.value}' is not a valid status change target")

        applied = self._repo.apply_transition(
            request.id,
            expected_status=old_status,
            values=values,
        )
        if not applied:
            raise ConflictError(
                f'Travel request {request.id} changed while it was being updated.'
            )

        for name, value in values.items():
            setattr(request, name, value)

        return old_status
