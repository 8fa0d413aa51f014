"""Decision service - finalizes automated credit-limit decisions."""

from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID

import structlog

from limit_automation.core.metrics import record_decision, track_decision_latency
from limit_automation.domain.entities import ActorType, Application, Client, Debtor
from limit_automation.domain.exceptions import (
    ApplicationNotFoundException,
    ClientDebtorNotFoundException,
    ClientNotFoundException,
)
from limit_automation.domain.interfaces import (
    ApplicationRepository,
    ClientDebtorRepository,
    ClientRepository,
    DebtorRepository,
)
from limit_automation.service.automation import (
    AutomationDecision,
    EligibilityGate,
    GateResult,
    apply_decision,
    decide,
)
from limit_automation.service.automation.settings import (
    AutomationSettings,
    automation_settings,
)

from .notification_service import ApplicationNotifier

logger = structlog.get_logger(__name__)


class DecisionService:
    """
    Application service that turns a submitted application into a decision.

    Runs the eligibility gate, writes the outcome onto the application and
    the credit-limit record, and records the resulting task, notifications
    and audit entries in the same unit of work.
    """

    def __init__(
        self,
        application_repository: ApplicationRepository,
        client_repository: ClientRepository,
        debtor_repository: DebtorRepository,
        client_debtor_repository: ClientDebtorRepository,
        gate: EligibilityGate,
        notifier: ApplicationNotifier,
        settings: AutomationSettings = automation_settings,
    ):
        self._application_repo = application_repository
        self._client_repo = client_repository
        self._debtor_repo = debtor_repository
        self._client_debtor_repo = client_debtor_repository
        self._gate = gate
        self._notifier = notifier
        self._settings = settings

    async def finalize(
        self,
        application_uuid: UUID,
        actor_type: Optional[ActorType] = None,
        actor_id: Optional[str] = None,
    ) -> Application:
        """
        Decide a submitted application.

        Finalizing an application that is no longer awaiting a decision is
        a no-op returning the stored state, so replays are safe.

        Args:
            application_uuid: The application's unique identifier
            actor_type: Who triggered the decision (used on the review task);
                defaults to whoever created the application
            actor_id: Identifier of that actor

        Returns:
            The decided application

        Raises:
            ApplicationNotFoundException: If the application does not exist
            ClientNotFoundException: If its client does not exist
        """
        application = await self._load(application_uuid)
        log = logger.bind(application_id=application.application_id)

        if not application.is_awaiting_decision:
            log.info("decision_skipped", status=application.status.value)
            return application

        if actor_type is None:
            actor_type, actor_id = application.created_by_type, application.created_by_id

        client, debtor = await self._load_parties(application)
        now = datetime.utcnow()

        with track_decision_latency():
            result = await self._gate.evaluate(application, client, debtor, at=now)
            decision = decide(result)

        return await self._apply(application, client, decision, now, actor_type, actor_id)

    async def route_to_review(
        self,
        application_uuid: UUID,
        error: str,
    ) -> Application:
        """
        Refer an application whose decisioning could not complete.

        Used once every attempt has failed. The application gets the
        failure blocker and follows the review path.
        """
        application = await self._load(application_uuid)
        if not application.is_awaiting_decision:
            return application

        client = await self._client_repo.get_by_id(application.client_id)
        if client is None:
            raise ClientNotFoundException(str(application.client_id))

        decision = decide(GateResult(failed=True, error=error))
        return await self._apply(
            application,
            client,
            decision,
            datetime.utcnow(),
            application.created_by_type,
            application.created_by_id,
        )

    async def _apply(
        self,
        application: Application,
        client: Client,
        decision: AutomationDecision,
        now: datetime,
        actor_type: ActorType,
        actor_id: Optional[str],
    ) -> Application:
        apply_decision(application, decision, now, self._settings)
        await self._application_repo.update(application)

        if decision.approved:
            await self._client_debtor_repo.update_active_limit(
                client_debtor_id=application.client_debtor_id,
                credit_limit=application.accepted_amount,
                active_application_id=application.id,
                expiry_date=application.expiry_date,
            )
            pushes = await self._notifier.application_approved(application, client)
        else:
            pushes = await self._notifier.application_referred(
                application, client, actor_type, actor_id, now
            )

        insurer = decision.insurer.value if decision.insurer else None
        record_decision(decision.approved, insurer, decision.blockers)
        logger.info(
            "decision_made",
            application_id=application.application_id,
            status=application.status.value,
            insurer=insurer,
            blockers=decision.blockers,
            failed=decision.failed,
        )

        await self._notifier.deliver(pushes)
        return application

    async def _load(self, application_uuid: UUID) -> Application:
        application = await self._application_repo.get_by_id(application_uuid)
        if application is None:
            raise ApplicationNotFoundException(str(application_uuid))
        return application

    async def _load_parties(self, application: Application) -> Tuple[Client, Debtor]:
        client = await self._client_repo.get_by_id(application.client_id)
        if client is None:
            raise ClientNotFoundException(str(application.client_id))

        debtor = await self._debtor_repo.get_by_id(application.debtor_id)
        if debtor is None:
            raise ClientDebtorNotFoundException(str(application.client_debtor_id))

        return client, debtor
