"""
Integration tests for the SQL repositories.

These tests verify:
1. Sequences are organization-wide counters
2. Policy lookups match product fragments and in-force windows
3. Stakeholder upserts are idempotent per natural key, also when concurrent
4. Latest approved application lookup for renewals
"""

import asyncio
import pytest
from datetime import date, datetime, timedelta
from uuid import UUID, uuid4

from limit_automation.domain.entities import (
    Application,
    ApplicationStatus,
    Debtor,
    Stakeholder,
    StakeholderType,
)
from limit_automation.infrastructure.database import PolicyModel, db_manager
from limit_automation.infrastructure.repositories import (
    PostgresApplicationRepository,
    PostgresClientDebtorRepository,
    PostgresDebtorRepository,
    PostgresPolicyRepository,
    PostgresSequenceRepository,
    PostgresStakeholderRepository,
)


class TestSequenceRepository:
    @pytest.mark.asyncio
    async def test_counters_are_independent(self, database):
        async with db_manager.session() as session:
            repo = PostgresSequenceRepository(session)
            assert await repo.next_value("application") == 1
            assert await repo.next_value("application") == 2
            assert await repo.next_value("debtor") == 1

        async with db_manager.session() as session:
            repo = PostgresSequenceRepository(session)
            assert await repo.next_value("application") == 3


class TestPolicyRepository:
    @pytest.mark.asyncio
    async def test_matches_product_fragment_case_insensitively(self, seeded_client):
        repo = PostgresPolicyRepository(db_manager.session)

        policy = await repo.find_active_policy(
            UUID(seeded_client.id), "credit insurance", datetime.utcnow()
        )

        assert policy is not None
        assert policy.product == "Credit Insurance Policy"
        assert policy.discretionary_limit == 100000

    @pytest.mark.asyncio
    async def test_expiry_is_exclusive(self, seeded_client):
        repo = PostgresPolicyRepository(db_manager.session)
        policy = await repo.find_active_policy(
            UUID(seeded_client.id), "Risk Management", datetime.utcnow()
        )

        at_expiry = await repo.find_active_policy(
            UUID(seeded_client.id), "Risk Management", policy.expiry_date
        )
        before_inception = await repo.find_active_policy(
            UUID(seeded_client.id),
            "Risk Management",
            policy.inception_date - timedelta(seconds=1),
        )

        assert at_expiry is None
        assert before_inception is None

    @pytest.mark.asyncio
    async def test_latest_inception_wins(self, seeded_client):
        now = datetime.utcnow()
        async with db_manager.session() as session:
            session.add(
                PolicyModel(
                    client_id=seeded_client.id,
                    product="Credit Insurance Policy 2026",
                    inception_date=now - timedelta(days=1),
                    expiry_date=now + timedelta(days=364),
                    discretionary_limit=250000,
                )
            )

        repo = PostgresPolicyRepository(db_manager.session)
        policy = await repo.find_active_policy(UUID(seeded_client.id), "Credit Insurance", now)

        assert policy.discretionary_limit == 250000


class TestStakeholderRepository:
    async def _debtor(self) -> Debtor:
        debtor = Debtor(debtor_code="D0100", entity_name="Family Trust", entity_type="TRUST")
        async with db_manager.session() as session:
            await PostgresDebtorRepository(session).save(debtor)
        return debtor

    @pytest.mark.asyncio
    async def test_upsert_updates_same_identity(self, database):
        debtor = await self._debtor()
        repo = PostgresStakeholderRepository(db_manager.session)
        stakeholder = Stakeholder(
            debtor_id=debtor.id,
            type=StakeholderType.INDIVIDUAL,
            first_name="Jane",
            last_name="Citizen",
            date_of_birth=date(1980, 4, 2),
        )

        first = await repo.upsert(stakeholder)
        stakeholder.last_name = "Smith"
        stakeholder.id = uuid4()
        second = await repo.upsert(stakeholder)

        assert second.id == first.id
        stored = await repo.get_by_debtor(debtor.id)
        assert [s.last_name for s in stored] == ["Smith"]

    @pytest.mark.asyncio
    async def test_concurrent_upserts_store_one_row(self, database):
        debtor = await self._debtor()
        repo = PostgresStakeholderRepository(db_manager.session)

        def company() -> Stakeholder:
            return Stakeholder(
                debtor_id=debtor.id,
                type=StakeholderType.COMPANY,
                entity_name="Trustee Co Pty Ltd",
                entity_type="PROPRIETARY_LIMITED",
                abn="22222222222",
            )

        await asyncio.gather(*(repo.upsert(company()) for _ in range(3)))

        stored = await repo.get_by_debtor(debtor.id)
        assert len(stored) == 1
        assert stored[0].abn == "22222222222"


class TestApplicationRepository:
    @pytest.mark.asyncio
    async def test_latest_approved_application(self, seeded_client):
        debtor = Debtor(debtor_code="D0200", entity_name="Debtor Pty Ltd")
        now = datetime.utcnow()

        async with db_manager.session() as session:
            await PostgresDebtorRepository(session).save(debtor)
            link = await PostgresClientDebtorRepository(session).get_or_create(
                UUID(seeded_client.id), debtor.id
            )
            repo = PostgresApplicationRepository(session)
            for sequence, (status, approved_at) in enumerate(
                [
                    (ApplicationStatus.APPROVED, now - timedelta(days=300)),
                    (ApplicationStatus.APPROVED, now - timedelta(days=10)),
                    (ApplicationStatus.DECLINED, None),
                ],
                start=1,
            ):
                await repo.save(
                    Application(
                        application_id=f"C001-D0200-20260101-{sequence:03d}",
                        client_id=UUID(seeded_client.id),
                        debtor_id=debtor.id,
                        client_debtor_id=link.id,
                        status=status,
                        approval_date=approved_at,
                    )
                )

        async with db_manager.session() as session:
            repo = PostgresApplicationRepository(session)
            latest = await repo.find_latest_approved(link.id)
            open_application = await repo.find_open(UUID(seeded_client.id), debtor.id)

        assert latest.application_id == "C001-D0200-20260101-002"
        assert open_application is None
