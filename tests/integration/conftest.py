"""
Fixtures for integration tests.

Provides:
- A file-backed SQLite database behind the shared session manager
- Seeded clients and policies
- Fake entity classifier and push channel
- An automation runner wired to the fakes
- Test client for the FastAPI app
"""

from datetime import datetime, timedelta
from typing import AsyncGenerator, List, Tuple
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select

from limit_automation.application.services import AutomationRunner
from limit_automation.core.dependencies import (
    build_decision_service,
    get_automation_runner,
    get_classifier,
    get_notification_channel,
)
from limit_automation.domain.entities import (
    ClassificationResult,
    EntityClassification,
    Notification,
    NotificationType,
)
from limit_automation.domain.exceptions import ClassifierException
from limit_automation.domain.interfaces import EntityClassifier, NotificationChannel
from limit_automation.infrastructure.database import (
    Base,
    ClientModel,
    NotificationModel,
    PolicyModel,
    db_manager,
)
from limit_automation.main import app
from limit_automation.service.automation import AutomationSettings


# =============================================================================
# Fake Clients
# =============================================================================

class FakeEntityClassifier(EntityClassifier):
    """Classifier returning a fixed result, or failing on demand."""

    def __init__(self, result: ClassificationResult = None, fail_mode: bool = False):
        self.result = result or ClassificationResult(EntityClassification.COMPANY)
        self.fail_mode = fail_mode
        self.call_count = 0

    async def classify(self, debtor_id: UUID, entity_type: str | None) -> ClassificationResult:
        self.call_count += 1
        if self.fail_mode:
            raise ClassifierException("Classifier unavailable", status_code=503)
        return self.result


class FakeNotificationChannel(NotificationChannel):
    """Channel that records every push."""

    def __init__(self, fail_mode: bool = False):
        self.fail_mode = fail_mode
        self.pushed: List[Tuple[Notification, NotificationType]] = []

    async def push(self, notification: Notification, notification_type: NotificationType) -> bool:
        if self.fail_mode:
            return False
        self.pushed.append((notification, notification_type))
        return True

    def types(self) -> List[NotificationType]:
        return [notification_type for _, notification_type in self.pushed]


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[None, None]:
    """
    Point the session manager at a fresh SQLite file.

    A file is used instead of :memory: because decisioning opens its own
    sessions next to the request session.
    """
    db_manager.init(f"sqlite+aiosqlite:///{tmp_path}/limit_automation.db")
    async with db_manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    await db_manager.close()


def make_policies(client_id: str, discretionary_limit: int = 100000, excess: int = 5000):
    now = datetime.utcnow()
    return [
        PolicyModel(
            client_id=client_id,
            product=product,
            inception_date=now - timedelta(days=30),
            expiry_date=now + timedelta(days=335),
            discretionary_limit=discretionary_limit,
            excess=excess,
        )
        for product in ("Credit Insurance Policy", "Risk Management Policy")
    ]


@pytest_asyncio.fixture
async def seeded_client(database) -> ClientModel:
    """A QBE-insured client allowed automation, with both policies in force."""
    client = ClientModel(
        id=str(uuid4()),
        client_code="C001",
        name="Acme Insured Pty Ltd",
        is_auto_approve_allowed=True,
        insurer_name="QBE Insurance (Australia) Ltd",
        risk_analyst_id="analyst-1",
    )
    async with db_manager.session() as session:
        session.add(client)
        session.add_all(make_policies(client.id))
    return client


@pytest_asyncio.fixture
async def euler_client(database) -> ClientModel:
    """A Euler-insured client that would otherwise pass every check."""
    client = ClientModel(
        id=str(uuid4()),
        client_code="C002",
        name="Euler Insured Pty Ltd",
        is_auto_approve_allowed=True,
        insurer_name="Euler Hermes",
        risk_analyst_id="analyst-2",
    )
    async with db_manager.session() as session:
        session.add(client)
        session.add_all(make_policies(client.id))
    return client


@pytest_asyncio.fixture
async def manual_client(database) -> ClientModel:
    """A client that does not allow automation."""
    client = ClientModel(
        id=str(uuid4()),
        client_code="C003",
        name="Manual Insured Pty Ltd",
        is_auto_approve_allowed=False,
        insurer_name="QBE Insurance",
        risk_analyst_id="analyst-1",
    )
    async with db_manager.session() as session:
        session.add(client)
    return client


# =============================================================================
# Collaborator Fixtures
# =============================================================================

@pytest.fixture
def fake_classifier() -> FakeEntityClassifier:
    return FakeEntityClassifier()


@pytest.fixture
def fake_channel() -> FakeNotificationChannel:
    return FakeNotificationChannel()


@pytest_asyncio.fixture
async def runner(
    database,
    fake_classifier: FakeEntityClassifier,
    fake_channel: FakeNotificationChannel,
) -> AsyncGenerator[AutomationRunner, None]:
    """Automation runner deciding with the fake collaborators."""
    runner = AutomationRunner(
        session_scope=db_manager.session,
        service_factory=lambda session: build_decision_service(
            session, fake_classifier, fake_channel
        ),
        settings=AutomationSettings(max_attempts=2, retry_base_delay_seconds=0.0),
    )
    yield runner
    await runner.shutdown()


# =============================================================================
# App Client Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def client(
    database,
    fake_classifier: FakeEntityClassifier,
    fake_channel: FakeNotificationChannel,
    runner: AutomationRunner,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with faked collaborators.

    This client:
    - Uses the SQLite file database
    - Classifies every debtor as a company
    - Records pushes instead of sending them
    """
    app.dependency_overrides[get_classifier] = lambda: fake_classifier
    app.dependency_overrides[get_notification_channel] = lambda: fake_channel
    app.dependency_overrides[get_automation_runner] = lambda: runner

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Request Helpers
# =============================================================================

def company_request(client: ClientModel, **overrides) -> dict:
    body = {
        "client_id": client.id,
        "entity_name": "Debtor Trading Pty Ltd",
        "entity_type": "PROPRIETARY_LIMITED",
        "country_code": "AUS",
        "abn": "51824753556",
        "created_by_id": "user-1",
    }
    body.update(overrides)
    return body


@pytest.fixture
def create_draft(client: AsyncClient):
    """Store company details and return the draft application."""

    async def create(owner: ClientModel, **overrides) -> dict:
        response = await client.post(
            "/v1/applications/company", json=company_request(owner, **overrides)
        )
        assert response.status_code == 200, response.text
        return response.json()

    return create


@pytest.fixture
def submit_new_application(client: AsyncClient, create_draft):
    """Run a debtor through intake, submit it and return the decided application."""

    async def submit(owner: ClientModel, credit_limit: int = 50000, **overrides) -> dict:
        draft = await create_draft(owner, **overrides)
        response = await client.put(
            f"/v1/applications/{draft['id']}/credit-limit",
            json={"credit_limit": credit_limit},
        )
        assert response.status_code == 200, response.text

        response = await client.post(f"/v1/applications/{draft['id']}/submit")
        assert response.status_code == 200, response.text
        return response.json()

    return submit


@pytest.fixture
def notifications_for():
    """Read the notifications stored for a user."""

    async def read(user_id: str) -> List[NotificationModel]:
        async with db_manager.session() as session:
            result = await session.execute(
                select(NotificationModel).where(NotificationModel.user_id == user_id)
            )
            return list(result.scalars().all())

    return read
