"""Mail content for status-change notifications."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from travel_requests.domain.travel.status import TravelRequestStatus

_DATE_FORMAT = '%d/%m/%Y'
_DATETIME_FORMAT = '%d/%m/%Y %H:%M'


@dataclass(frozen=True)
class StatusMessage:
    subject: str
    greeting: str
    lines: list[str]
    level: str = 'info'

    @property
    def body(self) -> str:
        return '\n'.join([self.greeting, '', *self.lines])


def build_status_message(
    *,
    requester_name: str,
    destination: str,
    departure_date: date,
    return_date: date,
    new_status: TravelRequestStatus,
    actor_name: str | None = None,
    occurred_at: datetime | None = None,
) -> StatusMessage:
    """Render the message sent to the requester after a decision."""
    details = [
        '**Trip details:**',
        f'Destination: {destination}',
        f'Departure: {departure_date.strftime(_DATE_FORMAT)}',
        f'Return: {return_date.strftime(_DATE_FORMAT)}',
    ]
    when = occurred_at.strftime(_DATETIME_FORMAT) if occurred_at else 'N/A'

    if new_status is TravelRequestStatus.APPROVED:
        return StatusMessage(
            subject=f'Trip approved - {destination}',
            greeting=f'Hello {requester_name},',
            lines=[
                'Your travel request has been **approved**.',
                '',
                *details,
                f'Approved by: {actor_name or "N/A"}',
                f'Approved at: {when}',
                '',
                'You can now go ahead with the arrangements for your trip.',
                'Thank you for using the corporate travel service!',
            ],
            level='success',
        )

    if new_status is TravelRequestStatus.CANCELLED:
        return StatusMessage(
            subject=f'Trip cancelled - {destination}',
            greeting=f'Hello {requester_name},',
            lines=[
                'Your travel request has been **cancelled**.',
                '',
                *details,
                f'Cancelled by: {actor_name or "N/A"}',
                f'Cancelled at: {when}',
                '',
                'If you have questions or need a new trip, contact your manager or HR.',
                'Thank you for using the corporate travel service!',
            ],
            level='error',
        )

    return StatusMessage(
        subject=f'Status update - {destination}',
        greeting=f'Hello {requester_name},',
        lines=[*details, f'New status: {new_status.label}'],
    )
