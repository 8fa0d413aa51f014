"""PostgreSQL implementation of ApplicationRepository."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from limit_automation.domain.entities import (
    ActorType,
    Application,
    ApplicationStatus,
    CLOSED_STATUSES,
)
from limit_automation.domain.exceptions import ApplicationNotFoundException
from limit_automation.domain.interfaces import ApplicationRepository
from limit_automation.infrastructure.database.models import ApplicationModel

# Fields copied verbatim between the entity and the model
_FIELDS = (
    "application_id",
    "stage",
    "credit_limit",
    "accepted_amount",
    "is_auto_approved",
    "approval_date",
    "expiry_date",
    "is_extended_payment_terms",
    "extended_payment_terms_details",
    "is_passed_overdue_amount",
    "passed_overdue_details",
    "outstanding_amount",
    "order_on_hand",
    "note",
    "created_by_id",
    "created_at",
    "updated_at",
)


class PostgresApplicationRepository(ApplicationRepository):
    """
    PostgreSQL implementation of the Application repository.

    Uses SQLAlchemy async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, application: Application) -> Application:
        """Persist a new application."""
        model = ApplicationModel(
            id=str(application.id),
            client_id=str(application.client_id),
            debtor_id=str(application.debtor_id),
            client_debtor_id=str(application.client_debtor_id),
        )
        self._copy_to_model(application, model)

        self._session.add(model)
        await self._session.flush()

        return application

    async def update(self, application: Application) -> Application:
        """Write all mutable fields of an existing application."""
        model = await self._session.get(ApplicationModel, str(application.id))
        if model is None:
            raise ApplicationNotFoundException(str(application.id))

        model.client_id = str(application.client_id)
        model.debtor_id = str(application.debtor_id)
        model.client_debtor_id = str(application.client_debtor_id)
        self._copy_to_model(application, model)

        await self._session.flush()

        return application

    async def get_by_id(self, application_uuid: UUID) -> Optional[Application]:
        model = await self._session.get(ApplicationModel, str(application_uuid))
        if model is None:
            return None
        return self._to_entity(model)

    async def find_open(self, client_id: UUID, debtor_id: UUID) -> Optional[Application]:
        stmt = (
            select(ApplicationModel)
            .where(
                ApplicationModel.client_id == str(client_id),
                ApplicationModel.debtor_id == str(debtor_id),
                ApplicationModel.status.not_in([s.value for s in CLOSED_STATUSES]),
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_latest_approved(self, client_debtor_id: UUID) -> Optional[Application]:
        stmt = (
            select(ApplicationModel)
            .where(
                ApplicationModel.client_debtor_id == str(client_debtor_id),
                ApplicationModel.status == ApplicationStatus.APPROVED.value,
            )
            .order_by(
                ApplicationModel.approval_date.desc(),
                ApplicationModel.created_at.desc(),
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    def _copy_to_model(self, application: Application, model: ApplicationModel) -> None:
        for name in _FIELDS:
            setattr(model, name, getattr(application, name))
        model.status = application.status.value
        model.blockers = list(application.blockers)
        model.created_by_type = application.created_by_type.value

    def _to_entity(self, model: ApplicationModel) -> Application:
        """Convert database model to domain entity."""
        values = {name: getattr(model, name) for name in _FIELDS}
        return Application(
            id=UUID(model.id),
            client_id=UUID(model.client_id),
            debtor_id=UUID(model.debtor_id),
            client_debtor_id=UUID(model.client_debtor_id),
            status=ApplicationStatus(model.status),
            blockers=list(model.blockers or []),
            created_by_type=ActorType(model.created_by_type),
            **values,
        )
