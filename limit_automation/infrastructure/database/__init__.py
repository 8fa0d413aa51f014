"""Database infrastructure."""

from .connection import get_db_session, DatabaseSessionManager, db_manager
from .models import (
    Base,
    ApplicationModel,
    AuditLogModel,
    ClientDebtorModel,
    ClientModel,
    DebtorDirectorModel,
    DebtorModel,
    NotificationModel,
    PolicyModel,
    SequenceModel,
    TaskModel,
)

__all__ = [
    "get_db_session",
    "DatabaseSessionManager",
    "db_manager",
    "Base",
    "ApplicationModel",
    "AuditLogModel",
    "ClientDebtorModel",
    "ClientModel",
    "DebtorDirectorModel",
    "DebtorModel",
    "NotificationModel",
    "PolicyModel",
    "SequenceModel",
    "TaskModel",
]
