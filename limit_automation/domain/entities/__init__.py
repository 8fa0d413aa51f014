"""Domain Entities - Core business objects."""

from .application import (
    ActorType,
    Application,
    ApplicationStatus,
    AWAITING_DECISION_STATUSES,
    CLOSED_STATUSES,
)
from .party import Client, ClientDebtor, Debtor, EntityType
from .policy import Policy, PolicyFigures
from .stakeholder import Address, Stakeholder, StakeholderType
from .activity import AuditLog, Notification, NotificationType, Task
from .classification import ClassificationResult, EntityClassification

__all__ = [
    "ActorType",
    "Application",
    "ApplicationStatus",
    "AWAITING_DECISION_STATUSES",
    "CLOSED_STATUSES",
    "Client",
    "ClientDebtor",
    "Debtor",
    "EntityType",
    "Policy",
    "PolicyFigures",
    "Address",
    "Stakeholder",
    "StakeholderType",
    "AuditLog",
    "Notification",
    "NotificationType",
    "Task",
    "ClassificationResult",
    "EntityClassification",
]
