from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from travel_requests.api.core.container import Container, get_container
from travel_requests.db.connection import get_db
from travel_requests.domain.travel.entities import Actor
from travel_requests.domain.travel.repository import TravelRequestRepository
from travel_requests.observability.tracing import new_trace_id
from travel_requests.runtime.service import TravelRequestService


def get_current_actor(
    x_user_id: Annotated[Optional[str], Header()] = None,
    x_user_name: Annotated[Optional[str], Header()] = None,
) -> Actor:
    """Identity forwarded by the authenticating gateway."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthenticated.")
    user_id = x_user_id.strip()
    return Actor(id=user_id, name=(x_user_name or "").strip() or user_id)


def get_trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", None) or new_trace_id()


def get_travel_request_service(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    container: Container = Depends(get_container),
) -> TravelRequestService:
    return TravelRequestService(
        repository=TravelRequestRepository(db),
        policy=container.policy_provider.for_actor(actor_id=actor.id),
        notifier=container.notifier,
        business_timezone=container.settings.business_tzinfo,
    )
