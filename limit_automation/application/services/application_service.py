"""Application service - credit application intake and manual underwriting."""

import asyncio
from datetime import datetime
from typing import Optional
from uuid import UUID
from weakref import WeakValueDictionary

import structlog

from limit_automation.domain.entities import (
    ActorType,
    Application,
    ApplicationStatus,
    Client,
    Debtor,
    Stakeholder,
)
from limit_automation.domain.exceptions import (
    ApplicationAlreadyExistsException,
    ApplicationNotEditableException,
    ApplicationNotFoundException,
    ClientNotFoundException,
    CreditLimitRequiredException,
    InsufficientPartnersException,
    InvalidApplicationRequestException,
    InvalidStatusTransitionException,
    RequiredFieldMissingException,
)
from limit_automation.domain.interfaces import (
    ApplicationRepository,
    ClientDebtorRepository,
    ClientRepository,
    DebtorRepository,
    SequenceRepository,
    StakeholderRepository,
)
from limit_automation.application.dto import (
    ApplicationResponse,
    CompanyDetailsRequest,
    CreditLimitDetailsRequest,
    PartnerDetailsRequest,
    StatusChangeRequest,
)
from limit_automation.service.automation import (
    INITIAL_STAGE,
    INITIAL_STATUS,
    approval_window,
    count_stakeholders,
    is_stakeholder_disclosure_sufficient,
    stage_after_credit_limit,
    transition,
    validate_partner,
)
from limit_automation.service.automation.lifecycle import STAKEHOLDER_STAGE
from limit_automation.service.automation.settings import (
    AutomationSettings,
    automation_settings,
)

from .decision_service import DecisionService
from .notification_service import ApplicationNotifier

logger = structlog.get_logger(__name__)

APPLICATION_SEQUENCE = "application"
DEBTOR_SEQUENCE = "debtor"

# Statuses an underwriter may set by hand
MANUAL_STATUSES = frozenset(
    {
        ApplicationStatus.APPROVED,
        ApplicationStatus.DECLINED,
        ApplicationStatus.CANCELLED,
        ApplicationStatus.WITHDRAWN,
        ApplicationStatus.SURRENDERED,
    }
)

_stakeholder_locks: "WeakValueDictionary[str, asyncio.Lock]" = WeakValueDictionary()


def _stakeholder_lock(natural_key: str) -> asyncio.Lock:
    lock = _stakeholder_locks.get(natural_key)
    if lock is None:
        lock = asyncio.Lock()
        _stakeholder_locks[natural_key] = lock
    return lock


def format_application_id(client_code: str, debtor_code: str, day: datetime, sequence: int) -> str:
    """Build `<client_code>-<debtor_code>-<YYYYMMDD>-<seq:03d>`."""
    return f"{client_code}-{debtor_code}-{day:%Y%m%d}-{sequence:03d}"


async def mint_application_id(
    sequence_repository: SequenceRepository,
    client: Client,
    debtor: Debtor,
    now: datetime,
) -> str:
    """Take the next organization application number and format the code."""
    sequence = await sequence_repository.next_value(APPLICATION_SEQUENCE)
    return format_application_id(client.client_code, debtor.debtor_code, now, sequence)


class ApplicationService:
    """
    Application service for credit application intake.

    Covers the three intake stages, submission (which decides inline) and
    manual status changes made by underwriters.
    """

    def __init__(
        self,
        application_repository: ApplicationRepository,
        client_repository: ClientRepository,
        debtor_repository: DebtorRepository,
        client_debtor_repository: ClientDebtorRepository,
        stakeholder_repository: StakeholderRepository,
        sequence_repository: SequenceRepository,
        decision_service: DecisionService,
        notifier: ApplicationNotifier,
        settings: AutomationSettings = automation_settings,
    ):
        self._application_repo = application_repository
        self._client_repo = client_repository
        self._debtor_repo = debtor_repository
        self._client_debtor_repo = client_debtor_repository
        self._stakeholder_repo = stakeholder_repository
        self._sequence_repo = sequence_repository
        self._decision_service = decision_service
        self._notifier = notifier
        self._settings = settings

    async def store_company_details(self, request: CompanyDetailsRequest) -> ApplicationResponse:
        """
        Create an application for a debtor, or re-point an existing draft.

        A known debtor is reused by registration number, ABN or ACN, in that
        order. Unknown debtors are created with a freshly minted code.

        Returns:
            The application and the debtor's stakeholders on record

        Raises:
            InvalidApplicationRequestException: If the request is invalid
            ClientNotFoundException: If the client does not exist
            ApplicationAlreadyExistsException: If the pair has an open application
        """
        errors = request.validate()
        if errors:
            raise InvalidApplicationRequestException("; ".join(errors))

        client = await self._client_repo.get_by_id(request.client_id)
        if client is None:
            raise ClientNotFoundException(str(request.client_id))

        log = logger.bind(client_id=str(client.id))

        existing_application = None
        if request.application_uuid:
            existing_application = await self._load_draft(request.application_uuid)

        debtor = await self._debtor_repo.find_by_identifier(
            registration_number=request.registration_number,
            abn=request.abn,
            acn=request.acn,
        )
        if debtor is not None:
            open_application = await self._application_repo.find_open(client.id, debtor.id)
            if open_application is not None and (
                existing_application is None or open_application.id != existing_application.id
            ):
                raise ApplicationAlreadyExistsException()
        else:
            sequence = await self._sequence_repo.next_value(DEBTOR_SEQUENCE)
            debtor = Debtor(debtor_code=f"D{sequence:04d}", entity_name=request.entity_name)
            log.info("debtor_created", debtor_code=debtor.debtor_code)

        debtor.entity_name = request.entity_name
        debtor.entity_type = request.entity_type
        debtor.country_code = request.country_code.upper()
        debtor.abn = request.abn or debtor.abn
        debtor.acn = request.acn or debtor.acn
        debtor.registration_number = request.registration_number or debtor.registration_number
        await self._debtor_repo.save(debtor)

        link = await self._client_debtor_repo.get_or_create(client.id, debtor.id)
        now = datetime.utcnow()

        if existing_application is not None:
            application = existing_application
            _, _, day, sequence = application.application_id.rsplit("-", 3)
            application.application_id = (
                f"{client.client_code}-{debtor.debtor_code}-{day}-{sequence}"
            )
            application.client_id = client.id
            application.debtor_id = debtor.id
            application.client_debtor_id = link.id
            application.updated_at = now
            await self._application_repo.update(application)
            log.info("application_company_updated", application_id=application.application_id)
        else:
            application = Application(
                application_id=await mint_application_id(self._sequence_repo, client, debtor, now),
                client_id=client.id,
                debtor_id=debtor.id,
                client_debtor_id=link.id,
                stage=INITIAL_STAGE,
                status=INITIAL_STATUS,
                created_by_type=request.created_by_type,
                created_by_id=request.created_by_id,
                created_at=now,
                updated_at=now,
            )
            await self._application_repo.save(application)
            log.info("application_created", application_id=application.application_id)

        stakeholders = await self._stakeholder_repo.get_by_debtor(debtor.id)
        return ApplicationResponse.from_entity(application, stakeholders)

    async def store_partner_details(
        self,
        application_uuid: UUID,
        request: PartnerDetailsRequest,
    ) -> ApplicationResponse:
        """
        Store the stakeholders disclosed against the application's debtor.

        Raises:
            ApplicationNotFoundException: If the application does not exist
            RequiredFieldMissingException: If a partner lacks mandatory fields
            InsufficientPartnersException: If the counts fail the entity-type rule
        """
        application = await self._load_draft(application_uuid)
        debtor = await self._debtor_repo.get_by_id(application.debtor_id)

        missing = [
            f"partners[{index}].{name}"
            for index, partner in enumerate(request.partners)
            for name in validate_partner(partner)
        ]
        if missing:
            raise RequiredFieldMissingException(missing)

        individuals, companies = count_stakeholders(request.partners)
        if not is_stakeholder_disclosure_sufficient(debtor.entity_type, individuals, companies):
            raise InsufficientPartnersException(debtor.entity_type)

        stakeholders = await asyncio.gather(
            *(self._upsert_stakeholder(s) for s in request.to_stakeholders(debtor.id))
        )

        application.stage = STAKEHOLDER_STAGE
        application.updated_at = datetime.utcnow()
        await self._application_repo.update(application)

        logger.info(
            "stakeholders_stored",
            application_id=application.application_id,
            individuals=individuals,
            companies=companies,
        )
        return ApplicationResponse.from_entity(application, list(stakeholders))

    async def store_credit_limit_details(
        self,
        application_uuid: UUID,
        request: CreditLimitDetailsRequest,
    ) -> ApplicationResponse:
        """Store the requested limit and the trading details behind it."""
        errors = request.validate()
        if errors:
            raise InvalidApplicationRequestException("; ".join(errors))

        application = await self._load_draft(application_uuid)
        debtor = await self._debtor_repo.get_by_id(application.debtor_id)

        application.credit_limit = request.credit_limit
        application.is_extended_payment_terms = request.is_extended_payment_terms
        application.extended_payment_terms_details = request.extended_payment_terms_details
        application.is_passed_overdue_amount = request.is_passed_overdue_amount
        application.passed_overdue_details = request.passed_overdue_details
        application.outstanding_amount = request.outstanding_amount
        application.order_on_hand = request.order_on_hand
        application.note = request.note
        application.stage = stage_after_credit_limit(debtor.entity_type)
        application.updated_at = datetime.utcnow()

        await self._application_repo.update(application)
        logger.info(
            "credit_limit_stored",
            application_id=application.application_id,
            credit_limit=application.credit_limit,
            stage=application.stage,
        )
        return ApplicationResponse.from_entity(application)

    async def submit_application(
        self,
        application_uuid: UUID,
        actor_type: ActorType = ActorType.USER,
        actor_id: Optional[str] = None,
    ) -> ApplicationResponse:
        """
        Submit a draft and decide it inline.

        Raises:
            ApplicationNotFoundException: If the application does not exist
            InvalidStatusTransitionException: If the application is not a draft
            CreditLimitRequiredException: If no credit limit was stored
        """
        application = await self._load(application_uuid)

        if application.credit_limit is None:
            raise CreditLimitRequiredException(application.application_id)

        transition(application, ApplicationStatus.SUBMITTED)
        application.updated_at = datetime.utcnow()
        await self._application_repo.update(application)
        logger.info("application_submitted", application_id=application.application_id)

        decided = await self._decision_service.finalize(application.id, actor_type, actor_id)
        return ApplicationResponse.from_entity(decided)

    async def change_status(
        self,
        application_uuid: UUID,
        request: StatusChangeRequest,
    ) -> ApplicationResponse:
        """
        Apply a manual underwriting decision.

        Raises:
            InvalidApplicationRequestException: If the request is invalid
            InvalidStatusTransitionException: If the lifecycle forbids the move
        """
        errors = request.validate()
        if errors:
            raise InvalidApplicationRequestException("; ".join(errors))

        application = await self._load(application_uuid)
        if request.status not in MANUAL_STATUSES:
            raise InvalidStatusTransitionException(
                application.status.value, request.status.value
            )

        client = await self._client_repo.get_by_id(application.client_id)
        if client is None:
            raise ClientNotFoundException(str(application.client_id))

        previous = application.status
        now = datetime.utcnow()
        transition(application, request.status)
        application.updated_at = now
        pushes = []

        if request.status == ApplicationStatus.APPROVED:
            application.accepted_amount = request.accepted_amount
            application.approval_date, application.expiry_date = approval_window(
                now, self._settings
            )
            application.is_auto_approved = False
            await self._application_repo.update(application)
            await self._client_debtor_repo.update_active_limit(
                client_debtor_id=application.client_debtor_id,
                credit_limit=application.accepted_amount,
                active_application_id=application.id,
                expiry_date=application.expiry_date,
            )
            pushes = await self._notifier.application_approved(application, client)

        elif request.status == ApplicationStatus.DECLINED:
            await self._application_repo.update(application)
            pushes = await self._notifier.application_declined(
                application, client, request.user_name
            )

        else:
            await self._application_repo.update(application)
            if request.status == ApplicationStatus.SURRENDERED:
                await self._client_debtor_repo.deactivate_limit(
                    application.client_debtor_id, application.id
                )
            await self._notifier.status_changed(
                application, request.user_type, request.user_id
            )

        logger.info(
            "application_status_changed",
            application_id=application.application_id,
            previous=previous.value,
            status=application.status.value,
            user_type=request.user_type.value,
        )
        await self._notifier.deliver(pushes)
        return ApplicationResponse.from_entity(application)

    async def get_application(self, application_uuid: UUID) -> ApplicationResponse:
        application = await self._load(application_uuid)
        stakeholders = await self._stakeholder_repo.get_by_debtor(application.debtor_id)
        return ApplicationResponse.from_entity(application, stakeholders)

    async def _upsert_stakeholder(self, stakeholder: Stakeholder) -> Stakeholder:
        async with _stakeholder_lock(stakeholder.natural_key):
            return await self._stakeholder_repo.upsert(stakeholder)

    async def _load(self, application_uuid: UUID) -> Application:
        application = await self._application_repo.get_by_id(application_uuid)
        if application is None:
            raise ApplicationNotFoundException(str(application_uuid))
        return application

    async def _load_draft(self, application_uuid: UUID) -> Application:
        application = await self._load(application_uuid)
        if application.status != ApplicationStatus.DRAFT:
            raise ApplicationNotEditableException(
                application.application_id, application.status.value
            )
        return application
