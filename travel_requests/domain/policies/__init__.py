"""This module manages travel request authorization rules."""
from .policy import CancelPolicy, TravelRequestPolicy, action_for_status
from .policy_decision import PolicyOutcome, PolicyDecision, TravelRequestAction
from .policy_provider import PolicyProvider, DefaultPolicyProvider
