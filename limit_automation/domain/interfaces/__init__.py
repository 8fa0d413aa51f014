"""
Domain Interfaces (Ports)
"""

from .repositories import (
    ApplicationRepository,
    ClientDebtorRepository,
    ClientRepository,
    DebtorRepository,
    PolicyRepository,
    SequenceRepository,
    StakeholderRepository,
)
from .clients import (
    AuditSink,
    EntityClassifier,
    NotificationChannel,
    NotificationSink,
    TaskSink,
)

__all__ = [
    "ApplicationRepository",
    "ClientDebtorRepository",
    "ClientRepository",
    "DebtorRepository",
    "PolicyRepository",
    "SequenceRepository",
    "StakeholderRepository",
    "AuditSink",
    "EntityClassifier",
    "NotificationChannel",
    "NotificationSink",
    "TaskSink",
]
