from typing import Protocol

from travel_requests.domain.travel.entities import StatusChangeSignal


class NotificationError(RuntimeError):
    """Raised when the notification service rejects or cannot take a signal."""
    pass


class NotificationChannel(Protocol):
    async def notify(self, signal: StatusChangeSignal) -> None:
        ...
