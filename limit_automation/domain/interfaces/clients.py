"""External collaborator interfaces."""

from abc import ABC, abstractmethod
from uuid import UUID

from limit_automation.domain.entities import (
    AuditLog,
    ClassificationResult,
    Notification,
    NotificationType,
    Task,
)


class EntityClassifier(ABC):
    """
    Abstract client for the entity-type classifier.

    Maps a debtor's legal entity type to a classification token and may
    report its own blockers.
    """

    @abstractmethod
    async def classify(self, debtor_id: UUID, entity_type: str | None) -> ClassificationResult:
        """
        Classify a debtor.

        Raises:
            ClassifierException: If the classifier returns an error
            ClassifierTimeoutException: If the request times out
        """
        ...


class NotificationChannel(ABC):
    """Delivers created notifications to connected users."""

    @abstractmethod
    async def push(self, notification: Notification, notification_type: NotificationType) -> bool:
        """
        Push a notification to its recipient.

        Returns:
            True if delivered

        Note:
            Implementations should handle retries and never raise.
        """
        ...


class TaskSink(ABC):
    @abstractmethod
    async def create_task(self, task: Task) -> Task:
        ...


class NotificationSink(ABC):
    @abstractmethod
    async def notify(self, user_id: str, user_type: str, description: str) -> Notification:
        ...


class AuditSink(ABC):
    @abstractmethod
    async def record(self, entry: AuditLog) -> AuditLog:
        ...
