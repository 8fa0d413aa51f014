"""PostgreSQL implementation of StakeholderRepository."""

from dataclasses import asdict
from typing import AsyncContextManager, Callable, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from limit_automation.domain.entities import Address, Stakeholder, StakeholderType
from limit_automation.domain.interfaces import StakeholderRepository
from limit_automation.infrastructure.database.models import DebtorDirectorModel

SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]


class PostgresStakeholderRepository(StakeholderRepository):
    """
    Stakeholder store keyed by natural identity.

    Upserts for one submission run concurrently, so every upsert is its
    own unit of work. The unique `natural_key` column makes a lost insert
    race fall back to an update.
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def upsert(self, stakeholder: Stakeholder) -> Stakeholder:
        try:
            return await self._write(stakeholder)
        except IntegrityError:
            # Another writer inserted the same key first
            return await self._write(stakeholder)

    async def get_by_debtor(self, debtor_id: UUID) -> List[Stakeholder]:
        stmt = (
            select(DebtorDirectorModel)
            .where(DebtorDirectorModel.debtor_id == str(debtor_id))
            .order_by(DebtorDirectorModel.natural_key)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [self._to_entity(model) for model in result.scalars().all()]

    async def _write(self, stakeholder: Stakeholder) -> Stakeholder:
        key = stakeholder.natural_key

        async with self._session_factory() as session:
            result = await session.execute(
                select(DebtorDirectorModel).where(DebtorDirectorModel.natural_key == key)
            )
            model = result.scalar_one_or_none()

            if model is None:
                model = DebtorDirectorModel(
                    id=str(stakeholder.id),
                    debtor_id=str(stakeholder.debtor_id),
                    natural_key=key,
                )
                session.add(model)

            model.type = stakeholder.type.value
            model.title = stakeholder.title
            model.first_name = stakeholder.first_name
            model.last_name = stakeholder.last_name
            model.date_of_birth = stakeholder.date_of_birth
            model.driver_licence_number = stakeholder.driver_licence_number
            model.address = asdict(stakeholder.address) if stakeholder.address else None
            model.entity_name = stakeholder.entity_name
            model.entity_type = stakeholder.entity_type
            model.abn = stakeholder.abn
            model.acn = stakeholder.acn
            model.registration_number = stakeholder.registration_number

            await session.flush()
            return self._to_entity(model)

    def _to_entity(self, model: DebtorDirectorModel) -> Stakeholder:
        return Stakeholder(
            id=UUID(model.id),
            debtor_id=UUID(model.debtor_id),
            type=StakeholderType(model.type),
            title=model.title,
            first_name=model.first_name,
            last_name=model.last_name,
            date_of_birth=model.date_of_birth,
            driver_licence_number=model.driver_licence_number,
            address=Address(**model.address) if model.address else None,
            entity_name=model.entity_name,
            entity_type=model.entity_type,
            abn=model.abn,
            acn=model.acn,
            registration_number=model.registration_number,
        )
