"""FastAPI "internal notifications" service.

This stands in for a company's notification service:
- receives travel request status changes
- renders the mail for the requester
- hands it to the mail provider (simulated here)

Important:
- The service validates inputs (Pydantic)
- Returns structured, schema-stable outputs
- Can be protected with auth, mTLS, or an API gateway in real deployments
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Optional

from fastapi import FastAPI
from pydantic import BaseModel, Field

from travel_requests.domain.travel.status import TravelRequestStatus
from travel_requests.notifications.messages import build_status_message
from travel_requests.observability.tracing import log_event

app = FastAPI(title='Internal Notification Service', version='1.0.0')


class RequesterIn(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)


class TravelRequestStatusIn(BaseModel):
    request_id: int
    destination: str = Field(min_length=1)
    departure_date: date
    return_date: date
    old_status: TravelRequestStatus
    new_status: TravelRequestStatus
    requester: RequesterIn
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None
    occurred_at: Optional[datetime] = None


class TravelRequestStatusOut(BaseModel):
    ok: bool
    channel: str
    message_id: str
    subject: str
    body: str


@app.post('/notifications/travel-request-status', response_model=TravelRequestStatusOut)
async def travel_request_status(payload: TravelRequestStatusIn) -> TravelRequestStatusOut:
    message = build_status_message(
        requester_name=payload.requester.name,
        destination=payload.destination,
        departure_date=payload.departure_date,
        return_date=payload.return_date,
        new_status=payload.new_status,
        actor_name=payload.actor_name or payload.actor_id,
        occurred_at=payload.occurred_at,
    )
    message_id = f'msg_{uuid.uuid4()}'
    # In production, this might call SendGrid, SES, or an internal mail relay.
    log_event(
        'notification.mail.queued',
        message_id=message_id,
        request_id=payload.request_id,
        recipient=payload.requester.id,
        subject=message.subject,
    )
    return TravelRequestStatusOut(
        ok=True,
        channel='mail',
        message_id=message_id,
        subject=message.subject,
        body=message.body,
    )
