"""HTTP implementation of NotificationChannel."""

import asyncio

import httpx
import structlog

from limit_automation.core.config import settings
from limit_automation.core.metrics import record_push
from limit_automation.domain.entities import Notification, NotificationType
from limit_automation.domain.exceptions import NotificationDeliveryException
from limit_automation.domain.interfaces import NotificationChannel

logger = structlog.get_logger(__name__)


class HttpNotificationChannel(NotificationChannel):
    """
    Pushes stored notifications to the real-time delivery gateway.

    Delivery is best effort: failures are retried with exponential backoff,
    logged and reported as False, never raised.
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        max_retries: int = 3,
    ):
        self._url = url or settings.notification_push_url
        self._timeout = timeout or settings.notification_push_timeout
        self._max_retries = max_retries

    async def push(self, notification: Notification, notification_type: NotificationType) -> bool:
        """
        Push a notification to its recipient's socket.

        Uses exponential backoff: 0.1s, 0.2s, ...
        """
        payload = {
            "type": notification_type.value,
            "user_id": notification.user_id,
            "user_type": notification.user_type,
            "data": notification.to_dict(),
        }
        log = logger.bind(
            notification_id=str(notification.id),
            notification_type=notification_type.value,
        )

        for attempt in range(self._max_retries):
            try:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(url=self._url, json=payload)

                if response.status_code >= 400:
                    raise NotificationDeliveryException(
                        f"Push gateway returned {response.status_code}"
                    )

                log.info("notification_pushed", status_code=response.status_code)
                record_push(success=True)
                return True

            except httpx.TimeoutException:
                log.warning("notification_push_timeout", attempt=attempt + 1)
            except NotificationDeliveryException as e:
                log.warning("notification_push_failed", attempt=attempt + 1, error=e.message)
            except Exception as e:
                log.error("notification_push_error", attempt=attempt + 1, error=str(e))

            if attempt < self._max_retries - 1:
                await asyncio.sleep(2**attempt * 0.1)

        log.error("notification_push_exhausted_retries", max_retries=self._max_retries)
        record_push(success=False)
        return False
