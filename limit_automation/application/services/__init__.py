"""Application services - use case orchestration."""

from .application_service import ApplicationService, format_application_id
from .automation_runner import AutomationRunner, RunStatus
from .decision_service import DecisionService
from .notification_service import ApplicationNotifier
from .renewal_service import RenewalService

__all__ = [
    "ApplicationNotifier",
    "ApplicationService",
    "AutomationRunner",
    "DecisionService",
    "RenewalService",
    "RunStatus",
    "format_application_id",
]
