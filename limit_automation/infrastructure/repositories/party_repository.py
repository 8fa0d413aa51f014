"""PostgreSQL implementations of the client, debtor and credit-limit repositories."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from limit_automation.domain.entities import Client, ClientDebtor, Debtor
from limit_automation.domain.exceptions import ClientDebtorNotFoundException
from limit_automation.domain.interfaces import (
    ClientDebtorRepository,
    ClientRepository,
    DebtorRepository,
)
from limit_automation.infrastructure.database.models import (
    ClientDebtorModel,
    ClientModel,
    DebtorModel,
)


class PostgresClientRepository(ClientRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, client_id: UUID) -> Optional[Client]:
        model = await self._session.get(ClientModel, str(client_id))
        if model is None:
            return None
        return Client(
            id=UUID(model.id),
            client_code=model.client_code,
            name=model.name,
            is_auto_approve_allowed=model.is_auto_approve_allowed,
            insurer_name=model.insurer_name,
            risk_analyst_id=model.risk_analyst_id,
        )


class PostgresDebtorRepository(DebtorRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, debtor_id: UUID) -> Optional[Debtor]:
        model = await self._session.get(DebtorModel, str(debtor_id))
        return self._to_entity(model) if model else None

    async def find_by_identifier(
        self,
        registration_number: Optional[str] = None,
        abn: Optional[str] = None,
        acn: Optional[str] = None,
    ) -> Optional[Debtor]:
        if registration_number:
            condition = DebtorModel.registration_number == registration_number
        elif abn:
            condition = DebtorModel.abn == abn
        elif acn:
            condition = DebtorModel.acn == acn
        else:
            return None

        result = await self._session.execute(select(DebtorModel).where(condition).limit(1))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def save(self, debtor: Debtor) -> Debtor:
        model = await self._session.get(DebtorModel, str(debtor.id))
        if model is None:
            model = DebtorModel(id=str(debtor.id))
            self._session.add(model)

        model.debtor_code = debtor.debtor_code
        model.entity_name = debtor.entity_name
        model.entity_type = debtor.entity_type
        model.abn = debtor.abn
        model.acn = debtor.acn
        model.registration_number = debtor.registration_number
        model.country_code = debtor.country_code

        await self._session.flush()
        return debtor

    def _to_entity(self, model: DebtorModel) -> Debtor:
        return Debtor(
            id=UUID(model.id),
            debtor_code=model.debtor_code,
            entity_name=model.entity_name,
            entity_type=model.entity_type,
            abn=model.abn,
            acn=model.acn,
            registration_number=model.registration_number,
            country_code=model.country_code,
        )


class PostgresClientDebtorRepository(ClientDebtorRepository):
    """
    PostgreSQL implementation of the credit-limit record store.

    Shares the caller's session so limit updates commit together with the
    application decision.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, client_debtor_id: UUID) -> Optional[ClientDebtor]:
        model = await self._session.get(ClientDebtorModel, str(client_debtor_id))
        return self._to_entity(model) if model else None

    async def get_or_create(self, client_id: UUID, debtor_id: UUID) -> ClientDebtor:
        stmt = select(ClientDebtorModel).where(
            ClientDebtorModel.client_id == str(client_id),
            ClientDebtorModel.debtor_id == str(debtor_id),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            link = ClientDebtor(client_id=client_id, debtor_id=debtor_id)
            model = ClientDebtorModel(
                id=str(link.id),
                client_id=str(client_id),
                debtor_id=str(debtor_id),
                is_endorsed_limit=False,
                is_active=False,
            )
            self._session.add(model)
            await self._session.flush()

        return self._to_entity(model)

    async def update_active_limit(
        self,
        client_debtor_id: UUID,
        credit_limit: int,
        active_application_id: UUID,
        expiry_date: datetime,
        is_endorsed_limit: bool = False,
    ) -> None:
        model = await self._session.get(ClientDebtorModel, str(client_debtor_id))
        if model is None:
            raise ClientDebtorNotFoundException(str(client_debtor_id))

        model.credit_limit = credit_limit
        model.is_endorsed_limit = is_endorsed_limit
        model.active_application_id = str(active_application_id)
        model.expiry_date = expiry_date
        model.is_active = True

        await self._session.flush()

    async def deactivate_limit(self, client_debtor_id: UUID, application_id: UUID) -> bool:
        model = await self._session.get(ClientDebtorModel, str(client_debtor_id))
        if model is None or model.active_application_id != str(application_id):
            return False

        model.is_active = False
        await self._session.flush()
        return True

    async def find_expiring(self, start: datetime, end: datetime) -> List[ClientDebtor]:
        stmt = select(ClientDebtorModel).where(
            ClientDebtorModel.is_active.is_(True),
            ClientDebtorModel.expiry_date >= start,
            ClientDebtorModel.expiry_date <= end,
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    def _to_entity(self, model: ClientDebtorModel) -> ClientDebtor:
        return ClientDebtor(
            id=UUID(model.id),
            client_id=UUID(model.client_id),
            debtor_id=UUID(model.debtor_id),
            credit_limit=model.credit_limit,
            is_endorsed_limit=model.is_endorsed_limit,
            active_application_id=(
                UUID(model.active_application_id) if model.active_application_id else None
            ),
            expiry_date=model.expiry_date,
            is_active=model.is_active,
        )
