"""
Database-backed sinks for tasks, notifications and audit logs.

All three share the caller's session so the records commit in the same
transaction as the application change that produced them.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from limit_automation.domain.entities import AuditLog, Notification, Task
from limit_automation.domain.interfaces import AuditSink, NotificationSink, TaskSink
from limit_automation.infrastructure.database.models import (
    AuditLogModel,
    NotificationModel,
    TaskModel,
)


class PostgresTaskSink(TaskSink):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def create_task(self, task: Task) -> Task:
        self._session.add(
            TaskModel(
                id=str(task.id),
                title=task.title,
                entity_type=task.entity_type,
                entity_id=str(task.entity_id),
                created_by_type=task.created_by_type,
                created_by_id=task.created_by_id,
                assignee_type=task.assignee_type,
                assignee_id=task.assignee_id,
                due_date=task.due_date,
                is_completed=task.is_completed,
                created_at=task.created_at,
            )
        )
        await self._session.flush()
        return task


class PostgresNotificationSink(NotificationSink):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def notify(self, user_id: str, user_type: str, description: str) -> Notification:
        notification = Notification(
            user_id=user_id,
            user_type=user_type,
            description=description,
        )
        self._session.add(
            NotificationModel(
                id=str(notification.id),
                user_id=notification.user_id,
                user_type=notification.user_type,
                description=notification.description,
                is_read=False,
                created_at=notification.created_at,
            )
        )
        await self._session.flush()
        return notification


class PostgresAuditSink(AuditSink):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def record(self, entry: AuditLog) -> AuditLog:
        self._session.add(
            AuditLogModel(
                id=str(entry.id),
                entity_type=entry.entity_type,
                entity_ref_id=str(entry.entity_ref_id),
                action_type=entry.action_type,
                description=entry.description,
                user_type=entry.user_type,
                user_ref_id=entry.user_ref_id,
                created_at=entry.created_at,
            )
        )
        await self._session.flush()
        return entry
