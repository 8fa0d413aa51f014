"""Repository implementations."""

from .activity_repository import (
    PostgresAuditSink,
    PostgresNotificationSink,
    PostgresTaskSink,
)
from .application_repository import PostgresApplicationRepository
from .party_repository import (
    PostgresClientDebtorRepository,
    PostgresClientRepository,
    PostgresDebtorRepository,
)
from .policy_repository import PostgresPolicyRepository
from .sequence_repository import PostgresSequenceRepository
from .stakeholder_repository import PostgresStakeholderRepository

__all__ = [
    "PostgresApplicationRepository",
    "PostgresAuditSink",
    "PostgresClientDebtorRepository",
    "PostgresClientRepository",
    "PostgresDebtorRepository",
    "PostgresNotificationSink",
    "PostgresPolicyRepository",
    "PostgresSequenceRepository",
    "PostgresStakeholderRepository",
    "PostgresTaskSink",
]
