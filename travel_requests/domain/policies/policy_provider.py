from typing import Protocol

from .policy import CancelPolicy, TravelRequestPolicy


class PolicyProvider(Protocol):
    def for_actor(self, *, actor_id: str | None) -> TravelRequestPolicy:
        ...


class DefaultPolicyProvider:
    """
    PolicyProvider backed by the configured cancel policy.

    Every actor currently gets the same rules.
    """

    def __init__(self, cancel_policy: CancelPolicy = CancelPolicy.NON_REQUESTER) -> None:
        self._policy = TravelRequestPolicy(cancel_policy=cancel_policy)

    def for_actor(self, *, actor_id: str | None) -> TravelRequestPolicy:
        return self._policy
