from __future__ import annotations

from enum import Enum


class TravelRequestStatus(str, Enum):
    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    CANCELLED = "CANCELLED"

    @classmethod
    def values(cls) -> list[str]:
        return [status.value for status in cls]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_requested(self) -> bool:
        return self is TravelRequestStatus.REQUESTED

    @property
    def is_approved(self) -> bool:
        return self is TravelRequestStatus.APPROVED

    @property
    def is_cancelled(self) -> bool:
        return self is TravelRequestStatus.CANCELLED


_LABELS = {
    TravelRequestStatus.REQUESTED: "Requested",
    TravelRequestStatus.APPROVED: "Approved",
    TravelRequestStatus.CANCELLED: "Cancelled",
}

# Statuses a caller may ask the status-change operation to move to.
TRANSITION_TARGETS = frozenset({TravelRequestStatus.APPROVED, TravelRequestStatus.CANCELLED})


def can_be_approved(status: TravelRequestStatus) -> bool:
    """Only a request still waiting for a decision can be approved."""
    return status is TravelRequestStatus.REQUESTED


def can_be_cancelled(status: TravelRequestStatus) -> bool:
    """Requested and approved trips can be cancelled. CANCELLED is terminal."""
    return status in (TravelRequestStatus.REQUESTED, TravelRequestStatus.APPROVED)


def is_transition_target(status: TravelRequestStatus) -> bool:
    return status in TRANSITION_TARGETS
