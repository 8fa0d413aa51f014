"""
Unit tests for the HTTP collaborator clients.

These tests verify:
1. Classifier responses are parsed into ClassificationResult
2. Classifier HTTP errors are final while timeouts are retried
3. Push delivery retries and reports failure without raising
"""

import json
import pytest
from uuid import uuid4

import httpx

from limit_automation.domain.entities import (
    EntityClassification,
    Notification,
    NotificationType,
)
from limit_automation.domain.exceptions import (
    ClassifierException,
    ClassifierTimeoutException,
)
from limit_automation.infrastructure.clients import (
    HttpEntityClassifierClient,
    HttpNotificationChannel,
)

RealAsyncClient = httpx.AsyncClient


class Gateway:
    """Records requests and answers them from a list of canned responses."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def gateway(monkeypatch):
    """Route every httpx.AsyncClient through a MockTransport."""

    def install(*answers) -> Gateway:
        handler = Gateway(*answers)
        transport = httpx.MockTransport(handler)
        monkeypatch.setattr(
            httpx,
            "AsyncClient",
            lambda **kwargs: RealAsyncClient(transport=transport, **kwargs),
        )
        return handler

    return install


class TestEntityClassifierClient:
    @pytest.mark.asyncio
    async def test_parses_classification(self, gateway):
        handler = gateway(
            httpx.Response(
                200,
                json={
                    "classification": "SOLE_TRADER",
                    "blockers": ["ABN recently registered"],
                    "continue": False,
                },
            )
        )
        debtor_id = uuid4()
        client = HttpEntityClassifierClient(base_url="http://classifier")

        result = await client.classify(debtor_id, "SOLE_TRADER")

        assert result.classification is EntityClassification.SOLE_TRADER
        assert result.blockers == ["ABN recently registered"]
        assert result.continue_automation is False

        request = handler.requests[0]
        assert str(request.url) == "http://classifier/classify"
        assert json.loads(request.content) == {
            "debtor_id": str(debtor_id),
            "entity_type": "SOLE_TRADER",
        }

    @pytest.mark.asyncio
    async def test_defaults_continue(self, gateway):
        gateway(httpx.Response(200, json={"classification": "company"}))
        client = HttpEntityClassifierClient(base_url="http://classifier")

        result = await client.classify(uuid4(), "PROPRIETARY_LIMITED")

        assert result.classification is EntityClassification.COMPANY
        assert result.blockers == []
        assert result.continue_automation is True

    @pytest.mark.asyncio
    async def test_http_error_is_not_retried(self, gateway):
        handler = gateway(httpx.Response(422, text="bad entity type"))
        client = HttpEntityClassifierClient(base_url="http://classifier", max_retries=3)

        with pytest.raises(ClassifierException) as exc_info:
            await client.classify(uuid4(), "UNKNOWN")

        assert exc_info.value.status_code == 422
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_timeouts_are_retried(self, gateway):
        handler = gateway(httpx.ReadTimeout("slow"))
        client = HttpEntityClassifierClient(base_url="http://classifier", max_retries=2)

        with pytest.raises(ClassifierTimeoutException):
            await client.classify(uuid4(), "TRUST")

        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_unknown_classification(self, gateway):
        gateway(httpx.Response(200, json={"classification": "cooperative"}))
        client = HttpEntityClassifierClient(base_url="http://classifier")

        with pytest.raises(ClassifierException, match="Unknown entity classification"):
            await client.classify(uuid4(), "TRUST")


class TestNotificationChannel:
    @pytest.mark.asyncio
    async def test_push_payload(self, gateway):
        handler = gateway(httpx.Response(202))
        notification = Notification(
            user_id="analyst-1",
            user_type="user",
            description="A new task Review Application X is assigned by system",
        )
        channel = HttpNotificationChannel(url="http://push/notifications")

        delivered = await channel.push(notification, NotificationType.TASK_ASSIGNED)

        assert delivered is True
        body = json.loads(handler.requests[0].content)
        assert body["type"] == "TASK_ASSIGNED"
        assert body["user_id"] == "analyst-1"
        assert body["user_type"] == "user"
        assert body["data"]["id"] == str(notification.id)
        assert body["data"]["description"] == notification.description

    @pytest.mark.asyncio
    async def test_retries_until_delivered(self, gateway):
        handler = gateway(httpx.Response(503), httpx.Response(503), httpx.Response(200))
        channel = HttpNotificationChannel(url="http://push/notifications", max_retries=3)

        delivered = await channel.push(
            Notification(user_id="u", user_type="user", description="d"),
            NotificationType.APPLICATION_APPROVED,
        )

        assert delivered is True
        assert len(handler.requests) == 3

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self, gateway):
        handler = gateway(httpx.ConnectError("refused"))
        channel = HttpNotificationChannel(url="http://push/notifications", max_retries=2)

        delivered = await channel.push(
            Notification(user_id="u", user_type="user", description="d"),
            NotificationType.APPLICATION_DECLINED,
        )

        assert delivered is False
        assert len(handler.requests) == 2
