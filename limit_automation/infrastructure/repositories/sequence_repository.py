"""PostgreSQL implementation of SequenceRepository."""

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from limit_automation.domain.interfaces import SequenceRepository
from limit_automation.infrastructure.database.models import SequenceModel


class PostgresSequenceRepository(SequenceRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def next_value(self, name: str) -> int:
        stmt = (
            update(SequenceModel)
            .where(SequenceModel.name == name)
            .values(value=SequenceModel.value + 1)
            .returning(SequenceModel.value)
        )
        result = await self._session.execute(stmt)
        value = result.scalar_one_or_none()

        if value is None:
            self._session.add(SequenceModel(name=name, value=1))
            await self._session.flush()
            value = 1

        return value
