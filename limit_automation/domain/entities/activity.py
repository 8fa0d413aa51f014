"""Side-effect records produced by decisioning: tasks, notifications, audit logs."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4


class NotificationType(str, Enum):
    """Push event types delivered alongside a notification."""

    APPLICATION_APPROVED = "APPLICATION_APPROVED"
    APPLICATION_DECLINED = "APPLICATION_DECLINED"
    TASK_ASSIGNED = "TASK_ASSIGNED"
    CREDIT_LIMIT_EXPIRING = "CREDIT_LIMIT_EXPIRING"


@dataclass
class Task:
    """A unit of manual work assigned to a user."""

    title: str
    assignee_type: str
    assignee_id: str
    due_date: datetime
    entity_type: str
    entity_id: UUID
    created_by_type: str = "system"
    created_by_id: Optional[str] = None
    is_completed: bool = False
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Notification:
    """An in-app notification for a user."""

    user_id: str
    user_type: str
    description: str
    is_read: bool = False
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "user_type": self.user_type,
            "description": self.description,
            "created_at": self.created_at.isoformat() + "Z",
        }


@dataclass
class AuditLog:
    """An append-only audit trail entry."""

    entity_type: str
    entity_ref_id: UUID
    action_type: str
    description: str
    user_type: str = "system"
    user_ref_id: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)
