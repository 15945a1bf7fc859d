"""Outbound status-change notifications."""
from .base import NotificationChannel, NotificationError
from .http_channel import HttpNotificationChannel
from .noop_channel import NoopNotificationChannel
from .messages import StatusMessage, build_status_message
