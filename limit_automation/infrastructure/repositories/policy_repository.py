"""PostgreSQL implementation of PolicyRepository."""

from datetime import datetime
from typing import AsyncContextManager, Callable, Optional
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from limit_automation.domain.entities import Policy
from limit_automation.domain.exceptions import PolicyLookupException
from limit_automation.domain.interfaces import PolicyRepository
from limit_automation.infrastructure.database.models import PolicyModel

logger = structlog.get_logger(__name__)

SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]


class PostgresPolicyRepository(PolicyRepository):
    """
    PostgreSQL implementation of the policy lookup.

    The eligibility gate queries the Credit-Insurance and Risk-Management
    policies concurrently, so each lookup opens its own session from the
    factory instead of sharing the request session.
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def find_active_policy(
        self,
        client_id: UUID,
        product_pattern: str,
        at: datetime,
    ) -> Optional[Policy]:
        stmt = (
            select(PolicyModel)
            .where(
                PolicyModel.client_id == str(client_id),
                PolicyModel.product.ilike(f"%{product_pattern}%"),
                PolicyModel.inception_date <= at,
                PolicyModel.expiry_date > at,
            )
            .order_by(PolicyModel.inception_date.desc())
            .limit(1)
        )

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                model = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "policy_lookup_failed",
                client_id=str(client_id),
                product=product_pattern,
                error=str(e),
            )
            raise PolicyLookupException(f"Policy lookup failed: {e}")

        return self._to_entity(model) if model else None

    def _to_entity(self, model: PolicyModel) -> Policy:
        return Policy(
            id=UUID(model.id),
            client_id=UUID(model.client_id),
            product=model.product,
            inception_date=model.inception_date,
            expiry_date=model.expiry_date,
            discretionary_limit=model.discretionary_limit,
            excess=model.excess,
        )
