from travel_requests.domain.travel.entities import StatusChangeSignal


class NoopNotificationChannel:
    async def notify(self, signal: StatusChangeSignal) -> None:
        return None
