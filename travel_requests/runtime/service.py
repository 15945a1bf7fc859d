"""Travel request use cases: load -> authorize -> validate -> persist -> notify.

This is the application layer behind the HTTP routes. It is responsible for:
- loading requests and reporting missing ones as not found
- gating every action through the authorization rules
- enforcing the field invariants before anything is written
- running status transitions through the orchestrator
- emitting the status-change signal once per committed transition
- Observability: one event per outcome, timed notification dispatch
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Any, Callable, NoReturn

from travel_requests.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from travel_requests.domain.policies import TravelRequestAction, TravelRequestPolicy, action_for_status
from travel_requests.domain.travel.entities import (
    Actor,
    NewTravelRequest,
    PageResult,
    Pagination,
    StatusChangeSignal,
    TravelRequestEntity,
    TravelRequestFilters,
    should_notify,
    validate_content_changes,
    validate_new_request,
)
from travel_requests.domain.travel.query import build_stages
from travel_requests.domain.travel.repository import TravelRequestRepositoryProtocol
from travel_requests.domain.travel.status import TravelRequestStatus, is_transition_target
from travel_requests.notifications.base import NotificationChannel
from travel_requests.notifications.noop_channel import NoopNotificationChannel
from travel_requests.observability.tracing import Span, log_event, new_trace_id
from .orchestrator import TransitionOrchestrator
from .utils import utcnow


class TravelRequestService:
    """Coordinates authorization, persistence and notifications."""

    def __init__(
        self,
        *,
        repository: TravelRequestRepositoryProtocol,
        policy: TravelRequestPolicy | None = None,
        notifier: NotificationChannel | None = None,
        orchestrator: TransitionOrchestrator | None = None,
        clock: Callable[[], datetime] = utcnow,
        business_timezone: tzinfo = timezone.utc,
    ) -> None:
        self._repo = repository
        self._timezone = business_timezone
        self._policy = policy or TravelRequestPolicy()
        self._notifier = notifier or NoopNotificationChannel()
        self._clock = clock
        self._orchestrator = orchestrator or TransitionOrchestrator(
            repository=repository,
            clock=clock,
        )

    # ------------------------------
    # Queries
    # ------------------------------

    def list_requests(
        self,
        actor: Actor,
        filters: TravelRequestFilters,
        pagination: Pagination,
    ) -> PageResult:
        """List the actor's own requests. Ownership scope is always applied."""
        stages = build_stages(filters, owner_id=actor.id)
        return self._repo.search(stages, pagination)

    def get_request(self, actor: Actor, request_id: int, *, trace_id: str | None = None) -> TravelRequestEntity:
        request = self._get_or_fail(request_id)
        self._authorize(TravelRequestAction.VIEW, actor, request, trace_id=trace_id)
        return request

    # ------------------------------
    # Commands
    # ------------------------------

    def create_request(
        self,
        actor: Actor,
        data: NewTravelRequest,
        *,
        trace_id: str | None = None,
    ) -> TravelRequestEntity:
        """Create a request owned by `actor`. Status is always REQUESTED."""
        self._authorize(TravelRequestAction.CREATE, actor, trace_id=trace_id)
        now = self._clock()
        clean = validate_new_request(data, default_name=actor.name, today=self._today(now))

        request = self._repo.create(requester_id=actor.id, data=clean, now=now)
        log_event(
            'travel_request.created',
            trace_id=trace_id,
            request_id=request.id,
            requester_id=actor.id,
            destination=request.destination,
        )
        return request

    def update_request(
        self,
        actor: Actor,
        request_id: int,
        changes: dict[str, Any],
        *,
        trace_id: str | None = None,
    ) -> TravelRequestEntity:
        """Apply a partial content update while the request is still REQUESTED.

        The write only matches a REQUESTED row, so a decision that lands after
        the read turns the update into a denial instead of editing it.
        """
        request = self._get_or_fail(request_id, for_update=True)
        self._authorize(TravelRequestAction.UPDATE, actor, request, trace_id=trace_id)

        now = self._clock()
        try:
            clean = validate_content_changes(request, changes, today=self._today(now))
        except ValidationError:
            self._repo.rollback()
            raise

        if not clean:
            self._repo.rollback()
            return request

        updated = self._repo.update_content(request_id, clean, now=now)
        if updated is None:
            self._lost_write(TravelRequestAction.UPDATE, actor, request_id, trace_id=trace_id)
        log_event(
            'travel_request.updated',
            trace_id=trace_id,
            request_id=request_id,
            fields=sorted(clean),
        )
        return updated

    async def change_status(
        self,
        actor: Actor,
        request_id: int,
        new_status: TravelRequestStatus,
        *,
        trace_id: str | None = None,
    ) -> TravelRequestEntity:
        """Approve or cancel a request, then notify the requester.

        The row is read with a lock and written with a compare-and-set, so of
        two concurrent conflicting transitions only one commits. The loser
        re-reads the committed state and is rejected by the rules when they
        now deny it, otherwise it gets a ConflictError.
        """
        trace_id = trace_id or new_trace_id()
        if not is_transition_target(new_status):
            raise ValidationError.for_field('status', 'The status must be either APPROVED or CANCELLED.')

        action = action_for_status(new_status)
        request = self._get_or_fail(request_id, for_update=True)
        self._authorize(action, actor, request, trace_id=trace_id)

        try:
            old_status = self._orchestrator.change_status(request, new_status, actor)
        except ConflictError:
            self._lost_write(action, actor, request_id, trace_id=trace_id)

        log_event(
            'travel_request.status_changed',
            trace_id=trace_id,
            request_id=request_id,
            actor_id=actor.id,
            old_status=old_status.value,
            new_status=new_status.value,
        )

        if should_notify(new_status):
            signal = StatusChangeSignal.from_request(request, old_status, new_status, actor=actor)
            await self._emit(signal, trace_id=trace_id)

        return request

    def delete_request(self, actor: Actor, request_id: int, *, trace_id: str | None = None) -> None:
        """Hard delete. Only the requester, only while REQUESTED."""
        request = self._get_or_fail(request_id, for_update=True)
        self._authorize(TravelRequestAction.DELETE, actor, request, trace_id=trace_id)
        if not self._repo.delete(request_id):
            self._lost_write(TravelRequestAction.DELETE, actor, request_id, trace_id=trace_id)
        log_event('travel_request.deleted', trace_id=trace_id, request_id=request_id, actor_id=actor.id)

    # ------------------------------
    # Helpers
    # ------------------------------

    def _today(self, now: datetime) -> date:
        """Calendar date of the naive UTC `now` in the business timezone."""
        return now.replace(tzinfo=timezone.utc).astimezone(self._timezone).date()

    def _lost_write(
        self,
        action: TravelRequestAction,
        actor: Actor,
        request_id: int,
        *,
        trace_id: str | None = None,
    ) -> NoReturn:
        """A guarded write matched no row: the request changed after it was read.

        The committed state is checked again so that a rule the change now
        breaks is reported as such. Otherwise the caller gets a conflict.
        """
        latest = self._get_or_fail(request_id)
        self._repo.rollback()
        self._authorize(action, actor, latest, trace_id=trace_id)
        log_event(
            'travel_request.write_conflict',
            trace_id=trace_id,
            level='warning',
            action=action.value,
            request_id=request_id,
        )
        raise ConflictError(f'Travel request {request_id} changed while it was being updated.')

    def _get_or_fail(self, request_id: int, *, for_update: bool = False) -> TravelRequestEntity:
        request = self._repo.get(request_id, for_update=for_update)
        if request is None:
            self._repo.rollback()
            raise NotFoundError(request_id)
        return request

    def _authorize(
        self,
        action: TravelRequestAction,
        actor: Actor,
        request: TravelRequestEntity | None = None,
        *,
        trace_id: str | None = None,
    ) -> None:
        try:
            self._policy.authorize(action, actor, request)
        except ForbiddenError as exc:
            # release any row lock taken while loading
            self._repo.rollback()
            log_event(
                'travel_request.denied',
                trace_id=trace_id,
                level='warning',
                action=action.value,
                actor_id=actor.id,
                request_id=request.id if request is not None else None,
                reason=exc.message,
            )
            raise

    async def _emit(self, signal: StatusChangeSignal, *, trace_id: str) -> None:
        """Hand the signal to the channel. Failures never undo the committed change."""
        span = Span('notification.dispatch', trace_id).set(
            request_id=signal.request_id,
            new_status=signal.new_status.value,
        )
        try:
            with span:
                await self._notifier.notify(signal)
        except Exception as exc:
            log_event(
                'notification.failed',
                trace_id=trace_id,
                span=span,
                level='error',
                request_id=signal.request_id,
                error=str(exc),
            )
            return

        log_event('notification.sent', trace_id=trace_id, span=span)
