"""
Automation decision rules.

Turns an eligibility result into an outcome and applies it to the
application. Persistence and side effects live in the application layer;
everything here is pure so the same gate result always yields the same
decision.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from limit_automation.domain.entities import Application, ApplicationStatus

from .eligibility import GateResult
from .insurers import Insurer
from .lifecycle import transition
from .settings import AutomationSettings, automation_settings

AUTOMATION_FAILED = "Automated assessment failed"


@dataclass(frozen=True)
class AutomationDecision:
    """
    The outcome of one decisioning run.

    Attributes:
        approved: Whether the requested limit is auto-approved
        blockers: Blockers to persist on the application
        insurer: Identified insurer, if the gate reached that step
        failed: True when the gate could not complete
    """

    approved: bool
    blockers: List[str]
    insurer: Optional[Insurer]
    failed: bool = False

    @property
    def status(self) -> ApplicationStatus:
        if self.approved:
            return ApplicationStatus.APPROVED
        return ApplicationStatus.REVIEW_APPLICATION


def should_auto_approve(result: GateResult) -> bool:
    """
    Approve only a completed evaluation with no blockers.

    Euler-insured clients are always referred to an underwriter, even
    with an empty blocker list.
    """
    return not result.failed and not result.blockers and result.insurer is not Insurer.EULER


def decide(result: GateResult) -> AutomationDecision:
    """Build the decision for a gate result."""
    blockers = list(result.blockers)
    if result.failed:
        blockers.append(AUTOMATION_FAILED)

    return AutomationDecision(
        approved=should_auto_approve(result),
        blockers=blockers,
        insurer=result.insurer,
        failed=result.failed,
    )


def approval_window(
    approved_at: datetime,
    settings: AutomationSettings = automation_settings,
) -> Tuple[datetime, datetime]:
    """Return (approval_date, expiry_date) for a limit approved at `approved_at`."""
    return approved_at, approved_at + relativedelta(months=settings.approval_validity_months)


def review_due_date(
    now: datetime,
    settings: AutomationSettings = automation_settings,
) -> datetime:
    return now + timedelta(days=settings.review_task_due_days)


def apply_decision(
    application: Application,
    decision: AutomationDecision,
    now: datetime,
    settings: AutomationSettings = automation_settings,
) -> Application:
    """
    Write the decision onto the application.

    Approval sets the approval/expiry dates, the accepted amount and the
    auto-approved flag. Both paths store the blockers.

    Raises:
        InvalidStatusTransitionException: If the application is not awaiting a decision
    """
    transition(application, decision.status)
    application.blockers = list(decision.blockers)

    if decision.approved:
        application.approval_date, application.expiry_date = approval_window(now, settings)
        application.accepted_amount = application.credit_limit
        application.is_auto_approved = True

    application.updated_at = now
    return application
