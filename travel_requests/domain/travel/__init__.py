"""Travel requests: status model, entities, persistence and listing queries."""
from .status import (
    TravelRequestStatus,
    TRANSITION_TARGETS,
    can_be_approved,
    can_be_cancelled,
    is_transition_target,
)
from .entities import (
    Actor,
    NewTravelRequest,
    PageMeta,
    PageResult,
    Pagination,
    StatusChangeSignal,
    TravelRequestEntity,
    TravelRequestFilters,
    should_notify,
)
