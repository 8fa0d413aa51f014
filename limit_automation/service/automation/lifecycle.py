"""
Application lifecycle state machine.

An application moves along two axes:

- stage: intake progress (1 company details, 2 stakeholders or credit
  limit, 3 credit limit after stakeholders)
- status: the decision lifecycle from DRAFT to a terminal outcome
"""

from typing import Dict, FrozenSet

from limit_automation.domain.entities import Application, ApplicationStatus
from limit_automation.domain.exceptions import InvalidStatusTransitionException

from .stakeholders import requires_stakeholder_disclosure

INITIAL_STATUS = ApplicationStatus.DRAFT
INITIAL_STAGE = 1

COMPANY_STAGE = 1
STAKEHOLDER_STAGE = 2
CREDIT_LIMIT_STAGE = 3

S = ApplicationStatus

TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    S.DRAFT: frozenset({S.SUBMITTED, S.CANCELLED, S.WITHDRAWN}),
    S.SUBMITTED: frozenset(
        {S.PENDING_AUTOMATION, S.APPROVED, S.REVIEW_APPLICATION, S.CANCELLED, S.WITHDRAWN}
    ),
    S.PENDING_AUTOMATION: frozenset({S.APPROVED, S.REVIEW_APPLICATION}),
    S.REVIEW_APPLICATION: frozenset({S.APPROVED, S.DECLINED, S.CANCELLED, S.WITHDRAWN}),
    S.APPROVED: frozenset({S.SURRENDERED}),
    S.DECLINED: frozenset(),
    S.CANCELLED: frozenset(),
    S.WITHDRAWN: frozenset(),
    S.SURRENDERED: frozenset(),
}


def can_transition(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    return target in TRANSITIONS[current]


def is_terminal(status: ApplicationStatus) -> bool:
    return not TRANSITIONS[status]


def transition(application: Application, target: ApplicationStatus) -> Application:
    """
    Move an application to a new status.

    Raises:
        InvalidStatusTransitionException: If the lifecycle forbids the move
    """
    if not can_transition(application.status, target):
        raise InvalidStatusTransitionException(application.status.value, target.value)
    application.status = target
    return application


def stage_after_credit_limit(entity_type: str | None) -> int:
    """
    Stage reached once credit-limit details are stored.

    Debtors that went through the stakeholder step land on stage 3,
    simple entities on stage 2.
    """
    if requires_stakeholder_disclosure(entity_type):
        return CREDIT_LIMIT_STAGE
    return STAKEHOLDER_STAGE
