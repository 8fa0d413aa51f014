"""Renewal service - re-applies approved limits and flags expiring ones."""

from datetime import datetime, time
from typing import Awaitable, Callable, List, Optional, Set, Tuple
from uuid import UUID

import structlog

from limit_automation.application.dto import ApplicationResponse, RenewalStatusResponse
from limit_automation.core.metrics import record_renewal
from limit_automation.domain.entities import ActorType, Application, ApplicationStatus
from limit_automation.domain.exceptions import (
    ApplicationAlreadyExistsException,
    ClientDebtorNotFoundException,
    ClientNotFoundException,
    InvalidApplicationRequestException,
)
from limit_automation.domain.interfaces import (
    ApplicationRepository,
    ClientDebtorRepository,
    ClientRepository,
    DebtorRepository,
    SequenceRepository,
)
from limit_automation.service.automation import transition

from .application_service import mint_application_id
from .automation_runner import AutomationRunner
from .notification_service import ApplicationNotifier, PendingPush

logger = structlog.get_logger(__name__)


class RenewalService:
    """
    Application service for credit-limit renewals.

    A renewal clones the latest approved application for a credit-limit
    record with a new requested amount, commits it, and hands it to the
    AutomationRunner. The caller gets the new application straight away
    while decisioning continues in the background.
    """

    def __init__(
        self,
        application_repository: ApplicationRepository,
        client_repository: ClientRepository,
        debtor_repository: DebtorRepository,
        client_debtor_repository: ClientDebtorRepository,
        sequence_repository: SequenceRepository,
        notifier: ApplicationNotifier,
        runner: AutomationRunner,
        commit: Callable[[], Awaitable[None]],
    ):
        self._application_repo = application_repository
        self._client_repo = client_repository
        self._debtor_repo = debtor_repository
        self._client_debtor_repo = client_debtor_repository
        self._sequence_repo = sequence_repository
        self._notifier = notifier
        self._runner = runner
        self._commit = commit

    async def renew(
        self,
        client_debtor_id: UUID,
        credit_limit: int,
        created_by_type: ActorType = ActorType.USER,
        created_by_id: Optional[str] = None,
    ) -> Optional[Application]:
        """
        Request a new limit based on the latest approved application.

        Returns:
            The new application (PENDING_AUTOMATION), or None when the record
            has no approved application to renew

        Raises:
            ClientDebtorNotFoundException: If the credit-limit record does not exist
            ApplicationAlreadyExistsException: If the pair already has an open application
        """
        if credit_limit <= 0:
            raise InvalidApplicationRequestException("credit_limit must be positive")

        link = await self._client_debtor_repo.get_by_id(client_debtor_id)
        if link is None:
            raise ClientDebtorNotFoundException(str(client_debtor_id))

        log = logger.bind(client_debtor_id=str(client_debtor_id))

        latest = await self._application_repo.find_latest_approved(client_debtor_id)
        if latest is None:
            log.info("renewal_skipped", reason="no_approved_application")
            record_renewal(submitted=False)
            return None

        open_application = await self._application_repo.find_open(
            latest.client_id, latest.debtor_id
        )
        if open_application is not None:
            log.info(
                "renewal_rejected",
                reason="open_application",
                application_id=open_application.application_id,
            )
            raise ApplicationAlreadyExistsException()

        client = await self._client_repo.get_by_id(latest.client_id)
        if client is None:
            raise ClientNotFoundException(str(latest.client_id))
        debtor = await self._debtor_repo.get_by_id(latest.debtor_id)

        now = datetime.utcnow()
        application = Application(
            application_id=await mint_application_id(self._sequence_repo, client, debtor, now),
            client_id=latest.client_id,
            debtor_id=latest.debtor_id,
            client_debtor_id=client_debtor_id,
            stage=latest.stage,
            status=ApplicationStatus.SUBMITTED,
            credit_limit=credit_limit,
            is_extended_payment_terms=latest.is_extended_payment_terms,
            extended_payment_terms_details=latest.extended_payment_terms_details,
            is_passed_overdue_amount=latest.is_passed_overdue_amount,
            passed_overdue_details=latest.passed_overdue_details,
            note=latest.note,
            created_by_type=created_by_type,
            created_by_id=created_by_id,
            created_at=now,
            updated_at=now,
        )
        await self._application_repo.save(application)

        transition(application, ApplicationStatus.PENDING_AUTOMATION)
        await self._application_repo.update(application)

        # The runner reads the application from its own session
        await self._commit()
        self._runner.submit(application.id)

        record_renewal(submitted=True)
        log.info(
            "renewal_submitted",
            application_id=application.application_id,
            renewed_from=latest.application_id,
            credit_limit=credit_limit,
        )
        return application

    async def get_renewal(
        self,
        client_debtor_id: UUID,
        application_uuid: UUID,
    ) -> Optional[RenewalStatusResponse]:
        """Return a renewal application and the state of its background run."""
        application = await self._application_repo.get_by_id(application_uuid)
        if application is None or application.client_debtor_id != client_debtor_id:
            return None
        return RenewalStatusResponse(
            application=ApplicationResponse.from_entity(application),
            run_status=self._runner.status(application_uuid).value,
        )

    async def notify_expiring_limits(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        """
        Tell risk analysts about limits expiring inside [start, end].

        The window defaults to today (UTC). Each debtor is reported at most
        once per analyst.

        Returns:
            Number of notifications created
        """
        today = datetime.utcnow().date()
        start = start or datetime.combine(today, time.min)
        end = end or datetime.combine(today, time.max)

        records = await self._client_debtor_repo.find_expiring(start, end)
        seen: Set[Tuple[UUID, str]] = set()
        pushes: List[PendingPush] = []

        for record in records:
            client = await self._client_repo.get_by_id(record.client_id)
            if client is None or not client.risk_analyst_id:
                continue

            key = (record.debtor_id, client.risk_analyst_id)
            if key in seen:
                continue
            seen.add(key)

            debtor = await self._debtor_repo.get_by_id(record.debtor_id)
            pushes.append(
                await self._notifier.credit_limit_expiring(
                    client.risk_analyst_id,
                    client.name,
                    debtor.entity_name,
                )
            )

        logger.info(
            "expiring_limits_notified",
            window_start=start.isoformat(),
            window_end=end.isoformat(),
            records=len(records),
            notifications=len(pushes),
        )
        await self._notifier.deliver(pushes)
        return len(pushes)
