"""
Eligibility Gate for automated credit-limit decisioning.

The gate runs a fixed sequence of checks against a submitted application:

1. Client allows automation
2. Debtor is registered in an allowed country
3. Client holds in-force Credit-Insurance and Risk-Management policies
4. Requested limit is within the discretionary limit
5. Debtor entity type is classified
6. Insurer-specific rules

Each failing check appends a blocker and stops the remaining checks, except
the insurer step which always runs once reached. A collaborator failure
produces a failed result instead of raising, so callers can tell
"no blockers" apart from "could not evaluate".
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID

import structlog

from limit_automation.core.metrics import track_policy_lookup_latency
from limit_automation.domain.entities import (
    Application,
    Client,
    Debtor,
    EntityClassification,
    Policy,
    PolicyFigures,
)
from limit_automation.domain.exceptions import (
    CollaboratorException,
    PolicyLookupTimeoutException,
)
from limit_automation.domain.interfaces import EntityClassifier, PolicyRepository

from .insurers import Insurer, InsurerRegistry, RuleContext, default_registry
from .settings import AutomationSettings, automation_settings

logger = structlog.get_logger(__name__)

AUTOMATION_NOT_ALLOWED = "Automation is not Allowed"
FOREIGN_BUYER = "Foreign Buyer"
NO_RMP_POLICY = "No RMP policy found"
NO_CI_POLICY = "No CI policy found"
OVER_DISCRETIONARY_LIMIT = "Credit limit is greater than Discretionary limit"
NO_INSURER = "No insurer found"


@dataclass(frozen=True)
class GateResult:
    """
    Output of one eligibility run.

    Attributes:
        blockers: Reasons automation cannot approve, in the order raised
        insurer: Identified insurer, None if the insurer step was not reached
        policy: Effective policy figures, empty if policies were not resolved
        classification: Debtor classification, None if not reached
        failed: True when a collaborator error stopped the evaluation
        error: Description of the collaborator error
    """

    blockers: List[str] = field(default_factory=list)
    insurer: Optional[Insurer] = None
    policy: PolicyFigures = field(default_factory=PolicyFigures)
    classification: Optional[EntityClassification] = None
    failed: bool = False
    error: Optional[str] = None


class EligibilityGate:
    """Runs the ordered eligibility checks for a single application."""

    def __init__(
        self,
        policy_repository: PolicyRepository,
        classifier: EntityClassifier,
        registry: InsurerRegistry | None = None,
        settings: AutomationSettings = automation_settings,
    ):
        self._policy_repo = policy_repository
        self._classifier = classifier
        self._registry = registry or default_registry()
        self._settings = settings

    async def evaluate(
        self,
        application: Application,
        client: Client,
        debtor: Debtor,
        at: datetime | None = None,
    ) -> GateResult:
        """
        Evaluate an application against every check.

        Args:
            application: The submitted application
            client: The application's client (insurer, automation flag)
            debtor: The application's debtor (country, entity type)
            at: Moment policies must be in force, defaults to now

        Returns:
            GateResult with accumulated blockers, or a failed result
        """
        at = at or datetime.utcnow()
        blockers: List[str] = []
        log = logger.bind(application_id=application.application_id)

        try:
            result = await self._run(application, client, debtor, at, blockers)
        except CollaboratorException as e:
            log.warning(
                "eligibility_evaluation_failed",
                error=e.message,
                code=e.code,
                blockers=blockers,
            )
            return GateResult(blockers=list(blockers), failed=True, error=e.message)

        log.info(
            "eligibility_evaluated",
            blockers=result.blockers,
            insurer=result.insurer.value if result.insurer else None,
        )
        return result

    async def _run(
        self,
        application: Application,
        client: Client,
        debtor: Debtor,
        at: datetime,
        blockers: List[str],
    ) -> GateResult:
        if not client.is_auto_approve_allowed:
            blockers.append(AUTOMATION_NOT_ALLOWED)
            return GateResult(blockers=blockers)

        country = (debtor.country_code or "").upper()
        if country and country not in self._settings.allowed_countries:
            blockers.append(FOREIGN_BUYER)
            return GateResult(blockers=blockers)

        ci_policy, rmp_policy = await asyncio.gather(
            self._find_policy(client.id, self._settings.credit_insurance_product, at),
            self._find_policy(client.id, self._settings.risk_management_product, at),
        )
        if rmp_policy is None:
            blockers.append(NO_RMP_POLICY)
        if ci_policy is None:
            blockers.append(NO_CI_POLICY)
        if ci_policy is None or rmp_policy is None:
            return GateResult(blockers=blockers)

        figures = PolicyFigures.resolve(ci_policy, rmp_policy)
        requested = application.credit_limit or 0
        if figures.discretionary_limit and requested > figures.discretionary_limit:
            blockers.append(OVER_DISCRETIONARY_LIMIT)
            return GateResult(blockers=blockers, policy=figures)

        classified = await self._classifier.classify(debtor.id, debtor.entity_type)
        blockers.extend(classified.blockers)
        if not classified.continue_automation:
            return GateResult(
                blockers=blockers,
                policy=figures,
                classification=classified.classification,
            )

        insurer = self._registry.resolve(client.insurer_name)
        if insurer is Insurer.UNRESOLVED:
            # Does not halt: the blocker alone routes the application to review.
            blockers.append(NO_INSURER)
        else:
            context = RuleContext(
                application=application,
                classification=classified.classification,
                policy=figures,
            )
            blockers.extend(self._registry.evaluate(insurer, context))

        return GateResult(
            blockers=blockers,
            insurer=insurer,
            policy=figures,
            classification=classified.classification,
        )

    async def _find_policy(
        self,
        client_id: UUID,
        product: str,
        at: datetime,
    ) -> Optional[Policy]:
        """Look up one in-force policy within the configured time budget."""
        timeout = self._settings.policy_lookup_timeout_seconds
        try:
            with track_policy_lookup_latency():
                return await asyncio.wait_for(
                    self._policy_repo.find_active_policy(client_id, product, at),
                    timeout=timeout,
                )
        except asyncio.TimeoutError:
            raise PolicyLookupTimeoutException(timeout)
