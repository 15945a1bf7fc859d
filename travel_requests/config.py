from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

from travel_requests.domain.policies.policy import CancelPolicy


class Settings(BaseSettings):
    # Service
    service_name: str = "corporate-travel-api"
    version: str = "1.0.0"

    # Database
    database_url: str = "sqlite:///./travel_requests.sqlite3"

    # Notification service
    notification_base_url: str | None = None
    notification_timeout: float = 10.0

    # Authorization
    cancel_policy: CancelPolicy = CancelPolicy.NON_REQUESTER

    # Calendar "today" for departure checks, as an IANA zone name
    business_timezone: str = "UTC"

    # Listing
    default_per_page: int = 15
    max_per_page: int = 100

    model_config = SettingsConfigDict(env_file=".env", env_prefix="TRAVEL_")

    @property
    def business_tzinfo(self) -> tzinfo:
        if self.business_timezone.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(self.business_timezone)


settings = Settings()
