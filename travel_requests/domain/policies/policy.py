"""Authorization rules for travel requests.

Core principles:
- Only the requester sees, edits or deletes a request
- Content is editable only while the request waits for a decision
- Nobody decides on their own request: self-approval is always denied
- Cancelling follows a configurable ownership rule
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from travel_requests.core.errors import ForbiddenError
from travel_requests.domain.travel.entities import Actor, TravelRequestEntity
from travel_requests.domain.travel.status import (
    TravelRequestStatus,
    can_be_approved,
    can_be_cancelled,
)
from .policy_decision import PolicyDecision, TravelRequestAction


class CancelPolicy(str, Enum):
    # requester or any other user may cancel
    ANY_USER = "any_user"
    # only someone other than the requester may cancel
    NON_REQUESTER = "non_requester"


@dataclass(frozen=True)
class TravelRequestPolicy:
    cancel_policy: CancelPolicy = CancelPolicy.NON_REQUESTER

    def view(self, actor: Actor, request: TravelRequestEntity) -> PolicyDecision:
        if not request.is_requested_by(actor.id):
            return PolicyDecision.deny(
                TravelRequestAction.VIEW,
                "You can only view your own travel requests.",
            )
        return PolicyDecision.allow(TravelRequestAction.VIEW)

    def create(self, actor: Actor) -> PolicyDecision:
        return PolicyDecision.allow(TravelRequestAction.CREATE)

    def update(self, actor: Actor, request: TravelRequestEntity) -> PolicyDecision:
        if not request.is_requested_by(actor.id):
            return PolicyDecision.deny(
                TravelRequestAction.UPDATE,
                "You can only update your own travel requests.",
            )
        if request.status is not TravelRequestStatus.REQUESTED:
            return PolicyDecision.deny(
                TravelRequestAction.UPDATE,
                "You can only update travel requests that are in REQUESTED status.",
            )
        return PolicyDecision.allow(TravelRequestAction.UPDATE)

    def approve(self, actor: Actor, request: TravelRequestEntity) -> PolicyDecision:
        """
        Evaluates whether the actor may approve the request.

        The evaluation follows a fixed order:
        1. Self-approval is denied whatever the status.
        2. Only REQUESTED requests can be approved.

        Returns:
            A PolicyDecision carrying the outcome and, on denial, the reason.
        """
        if request.is_requested_by(actor.id):
            return PolicyDecision.deny(
                TravelRequestAction.APPROVE,
                "You cannot approve your own travel request.",
            )
        if not can_be_approved(request.status):
            return PolicyDecision.deny(
                TravelRequestAction.APPROVE,
                "Only travel requests in REQUESTED status can be approved.",
            )
        return PolicyDecision.allow(TravelRequestAction.APPROVE)

    def cancel(self, actor: Actor, request: TravelRequestEntity) -> PolicyDecision:
        if self.cancel_policy == CancelPolicy.NON_REQUESTER and request.is_requested_by(actor.id):
            return PolicyDecision.deny(
                TravelRequestAction.CANCEL,
                "You cannot cancel your own travel request.",
            )
        if not can_be_cancelled(request.status):
            return PolicyDecision.deny(
                TravelRequestAction.CANCEL,
                "This travel request cannot be cancelled.",
            )
        return PolicyDecision.allow(TravelRequestAction.CANCEL)

    def delete(self, actor: Actor, request: TravelRequestEntity) -> PolicyDecision:
        if not request.is_requested_by(actor.id):
            return PolicyDecision.deny(
                TravelRequestAction.DELETE,
                "You can only delete your own travel requests.",
            )
        if request.status is not TravelRequestStatus.REQUESTED:
            return PolicyDecision.deny(
                TravelRequestAction.DELETE,
                "You can only delete travel requests that are in REQUESTED status.",
            )
        return PolicyDecision.allow(TravelRequestAction.DELETE)

    def evaluate(
        self,
        action: TravelRequestAction,
        actor: Actor,
        request: TravelRequestEntity | None = None,
    ) -> PolicyDecision:
        if action == TravelRequestAction.CREATE:
            return self.create(actor)
        if request is None:
            raise ValueError(f"Action '{action.value}' needs a travel request")
        return getattr(self, action.value)(actor, request)

    def authorize(
        self,
        action: TravelRequestAction,
        actor: Actor,
        request: TravelRequestEntity | None = None,
    ) -> PolicyDecision:
        decision = self.evaluate(action, actor, request)
        if not decision.allowed:
            raise ForbiddenError(decision.reason or "This action is unauthorized.")
        return decision


def action_for_status(status: TravelRequestStatus) -> TravelRequestAction:
    """Map a status-change target to the action that guards it."""
    if status is TravelRequestStatus.APPROVED:
        return TravelRequestAction.APPROVE
    if status is TravelRequestStatus.CANCELLED:
        return TravelRequestAction.CANCEL
    raise ValueError(f"'{status.value}' is not a valid status change target")
