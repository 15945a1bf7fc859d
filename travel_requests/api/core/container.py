# --------------------------------
# DI container
# --------------------------------
from functools import lru_cache

from travel_requests.config import Settings, settings
from travel_requests.domain.policies import DefaultPolicyProvider, PolicyProvider
from travel_requests.notifications import (
    HttpNotificationChannel,
    NoopNotificationChannel,
    NotificationChannel,
)


class Container:
    def __init__(
        self,
        app_settings: Settings | None = None,
        notifier: NotificationChannel | None = None,
        policy_provider: PolicyProvider | None = None,
    ):
        self._settings = app_settings or settings
        self._policy_provider = policy_provider or DefaultPolicyProvider(
            cancel_policy=self._settings.cancel_policy,
        )
        if notifier is not None:
            self._notifier = notifier
        elif self._settings.notification_base_url:
            self._notifier = HttpNotificationChannel(
                base_url=self._settings.notification_base_url,
                timeout=self._settings.notification_timeout,
            )
        else:
            self._notifier = NoopNotificationChannel()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def policy_provider(self) -> PolicyProvider:
        return self._policy_provider

    @property
    def notifier(self) -> NotificationChannel:
        return self._notifier


@lru_cache
def get_container():
    return Container()
