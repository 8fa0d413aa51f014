"""
Credit-Limit Automation Engine
"""

from .settings import AutomationSettings, automation_settings
from .stakeholders import (
    count_stakeholders,
    is_stakeholder_disclosure_sufficient,
    requires_stakeholder_disclosure,
    validate_partner,
)
from .insurers import (
    Insurer,
    InsurerEvaluator,
    InsurerRegistry,
    RuleContext,
    default_registry,
    resolve_insurer,
)
from .lifecycle import (
    INITIAL_STAGE,
    INITIAL_STATUS,
    can_transition,
    is_terminal,
    stage_after_credit_limit,
    transition,
)
from .eligibility import EligibilityGate, GateResult
from .decision import (
    AUTOMATION_FAILED,
    AutomationDecision,
    apply_decision,
    approval_window,
    decide,
    review_due_date,
    should_auto_approve,
)

__all__ = [
    # Settings
    "AutomationSettings",
    "automation_settings",
    # Stakeholders
    "count_stakeholders",
    "is_stakeholder_disclosure_sufficient",
    "requires_stakeholder_disclosure",
    "validate_partner",
    # Insurers
    "Insurer",
    "InsurerEvaluator",
    "InsurerRegistry",
    "RuleContext",
    "default_registry",
    "resolve_insurer",
    # Lifecycle
    "INITIAL_STAGE",
    "INITIAL_STATUS",
    "can_transition",
    "is_terminal",
    "stage_after_credit_limit",
    "transition",
    # Eligibility
    "EligibilityGate",
    "GateResult",
    # Decision
    "AUTOMATION_FAILED",
    "AutomationDecision",
    "apply_decision",
    "approval_window",
    "decide",
    "review_due_date",
    "should_auto_approve",
]
