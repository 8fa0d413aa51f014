"""External API client implementations."""

from .classifier_client import HttpEntityClassifierClient
from .push_client import HttpNotificationChannel

__all__ = [
    "HttpEntityClassifierClient",
    "HttpNotificationChannel",
]
