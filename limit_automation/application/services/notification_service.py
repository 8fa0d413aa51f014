"""Tasks, notifications and audit entries produced by application decisions."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import structlog

from limit_automation.domain.entities import (
    ActorType,
    Application,
    AuditLog,
    Client,
    Notification,
    NotificationType,
    Task,
)
from limit_automation.domain.interfaces import (
    AuditSink,
    NotificationChannel,
    NotificationSink,
    TaskSink,
)
from limit_automation.service.automation import review_due_date
from limit_automation.service.automation.settings import (
    AutomationSettings,
    automation_settings,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PendingPush:
    notification: Notification
    notification_type: NotificationType


class ApplicationNotifier:
    """
    Records the side effects of a decision and delivers them.

    Task, notification and audit rows go through the sinks and therefore
    into the caller's unit of work. Pushes are collected and sent by
    `deliver`, which never raises.
    """

    def __init__(
        self,
        task_sink: TaskSink,
        notification_sink: NotificationSink,
        audit_sink: AuditSink,
        channel: NotificationChannel,
        settings: AutomationSettings = automation_settings,
    ):
        self._tasks = task_sink
        self._notifications = notification_sink
        self._audit = audit_sink
        self._channel = channel
        self._settings = settings

    async def application_approved(
        self,
        application: Application,
        client: Client,
    ) -> List[PendingPush]:
        await self._audit.record(
            AuditLog(
                entity_type="application",
                entity_ref_id=application.id,
                action_type="edit",
                description=f"An application {application.application_id} is being approved",
            )
        )

        pushes = [
            await self._notify(
                str(client.id),
                ActorType.CLIENT_USER,
                f"An application {application.application_id} is being approved",
                NotificationType.APPLICATION_APPROVED,
            )
        ]
        if client.risk_analyst_id:
            pushes.append(
                await self._notify(
                    client.risk_analyst_id,
                    ActorType.USER,
                    f"A new application {application.application_id} is being approved",
                    NotificationType.APPLICATION_APPROVED,
                )
            )
        return pushes

    async def application_referred(
        self,
        application: Application,
        client: Client,
        actor_type: ActorType,
        actor_id: Optional[str],
        now: datetime,
    ) -> List[PendingPush]:
        """Assign a review task to the client's risk analyst, if any."""
        if not client.risk_analyst_id:
            logger.info(
                "review_task_skipped",
                application_id=application.application_id,
                reason="no_risk_analyst",
            )
            return []

        task = await self._tasks.create_task(
            Task(
                title=f"Review Application {application.application_id}",
                assignee_type=ActorType.USER.value,
                assignee_id=client.risk_analyst_id,
                due_date=review_due_date(now, self._settings),
                entity_type="application",
                entity_id=application.id,
                created_by_type=actor_type.value,
                created_by_id=actor_id,
            )
        )
        await self._audit.record(
            AuditLog(
                entity_type="task",
                entity_ref_id=task.id,
                action_type="add",
                description=f"A new task for {application.application_id} is created by system",
                user_type=actor_type.value,
                user_ref_id=actor_id,
            )
        )

        return [
            await self._notify(
                task.assignee_id,
                ActorType(task.assignee_type),
                f"A new task {task.title} is assigned by system",
                NotificationType.TASK_ASSIGNED,
            )
        ]

    async def application_declined(
        self,
        application: Application,
        client: Client,
        user_name: Optional[str],
    ) -> List[PendingPush]:
        description = (
            f"An application {application.application_id} is being declined by {user_name}"
        )
        await self._audit.record(
            AuditLog(
                entity_type="application",
                entity_ref_id=application.id,
                action_type="edit",
                description=description,
            )
        )
        return [
            await self._notify(
                str(client.id),
                ActorType.CLIENT_USER,
                description,
                NotificationType.APPLICATION_DECLINED,
            )
        ]

    async def status_changed(
        self,
        application: Application,
        actor_type: ActorType,
        actor_id: Optional[str],
    ) -> None:
        """Audit a manual move that notifies nobody."""
        await self._audit.record(
            AuditLog(
                entity_type="application",
                entity_ref_id=application.id,
                action_type="edit",
                description=(
                    f"An application {application.application_id} is marked as "
                    f"{application.status.value.lower()}"
                ),
                user_type=actor_type.value,
                user_ref_id=actor_id,
            )
        )

    async def credit_limit_expiring(
        self,
        analyst_id: str,
        client_name: str,
        debtor_name: str,
    ) -> PendingPush:
        return await self._notify(
            analyst_id,
            ActorType.USER,
            f"Credit limit for {client_name} - {debtor_name} is expiring today",
            NotificationType.CREDIT_LIMIT_EXPIRING,
        )

    async def deliver(self, pushes: List[PendingPush]) -> int:
        """
        Push stored notifications on the delivery channel.

        Returns:
            Number of notifications delivered
        """
        delivered = 0
        for pending in pushes:
            if await self._channel.push(pending.notification, pending.notification_type):
                delivered += 1
            else:
                logger.warning(
                    "notification_not_delivered",
                    notification_id=str(pending.notification.id),
                    notification_type=pending.notification_type.value,
                )
        return delivered

    async def _notify(
        self,
        user_id: str,
        user_type: ActorType,
        description: str,
        notification_type: NotificationType,
    ) -> PendingPush:
        notification = await self._notifications.notify(user_id, user_type.value, description)
        return PendingPush(notification=notification, notification_type=notification_type)
