"""HTTP notification channel that calls the internal notifications service."""

from __future__ import annotations

import httpx

from travel_requests.domain.travel.entities import StatusChangeSignal
from .base import NotificationError

STATUS_ENDPOINT = '/notifications/travel-request-status'


class HttpNotificationChannel:
    """Deliver status-change signals by calling an HTTP service.

    The service owns mail rendering and delivery; this side only posts the
    signal payload and checks that it was accepted.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Create an HTTP notification channel.

        Args:
            base_url: Base URL of the notifications service (e.g. http://notify-svc:8001).
            client: Optional injected httpx client for testing / transport control.
            timeout: Per-request timeout in seconds.
        """
        self._base_url = base_url.rstrip('/')
        self._client = client
        self._timeout = timeout

    async def notify(self, signal: StatusChangeSignal) -> None:
        url = f'{self._base_url}{STATUS_ENDPOINT}'
        payload = signal.to_payload()

        try:
            if self._client is not None:
                resp = await self._client.post(url, json=payload, timeout=self._timeout)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await client.post(url, json=payload, timeout=self._timeout)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise NotificationError(
                f'Notification for travel request {signal.request_id} failed: {exc}'
            ) from exc
