from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TravelRequestAction(str, Enum):
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    APPROVE = "approve"
    CANCEL = "cancel"
    DELETE = "delete"


class PolicyOutcome(str, Enum):
    ALLOW = "ALLOW"
    DENY = "DENY"


@dataclass(frozen=True)
class PolicyDecision:
    outcome: PolicyOutcome
    action: Optional[TravelRequestAction] = None
    reason: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.outcome == PolicyOutcome.ALLOW

    @classmethod
    def allow(cls, action: TravelRequestAction) -> "PolicyDecision":
        return cls(outcome=PolicyOutcome.ALLOW, action=action)

    @classmethod
    def deny(cls, action: TravelRequestAction, reason: str) -> "PolicyDecision":
        return cls(outcome=PolicyOutcome.DENY, action=action, reason=reason)
