"""
Integration tests for metrics tracking.

These tests verify:
1. Metrics endpoint returns valid Prometheus format
2. Business metrics (decisions, blockers, renewals) are tracked
3. HTTP metrics are labelled by route template
4. Health endpoint
"""

import pytest
from httpx import AsyncClient

from limit_automation.core.metrics import REGISTRY


def sample(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


# =============================================================================
# Metrics Endpoint Tests
# =============================================================================

class TestMetricsEndpoint:
    """Tests for GET /metrics endpoint."""

    @pytest.mark.asyncio
    async def test_metrics_endpoint_returns_prometheus_format(self, client: AsyncClient):
        response = await client.get("/metrics")

        assert response.status_code == 200
        content_type = response.headers.get("content-type", "")
        assert "text/plain" in content_type
        assert "# HELP limit_automation_decision_total" in response.text
        assert "limit_automation_runs_in_flight" in response.text


# =============================================================================
# Decision Metrics Tests
# =============================================================================

class TestDecisionMetrics:
    @pytest.mark.asyncio
    async def test_approval_counted_by_insurer(
        self,
        seeded_client,
        submit_new_application,
    ):
        before = sample("limit_automation_decision_total", outcome="approved", insurer="qbe")

        await submit_new_application(seeded_client)

        after = sample("limit_automation_decision_total", outcome="approved", insurer="qbe")
        assert after == before + 1

    @pytest.mark.asyncio
    async def test_blockers_counted(
        self,
        manual_client,
        submit_new_application,
    ):
        before = sample("limit_automation_blocker_total", blocker="Automation is not Allowed")

        await submit_new_application(manual_client)

        after = sample("limit_automation_blocker_total", blocker="Automation is not Allowed")
        assert after == before + 1

    @pytest.mark.asyncio
    async def test_skipped_renewal_counted(
        self,
        client: AsyncClient,
        manual_client,
        submit_new_application,
    ):
        referred = await submit_new_application(manual_client)
        before = sample("limit_automation_renewal_total", outcome="skipped")

        await client.post(
            f"/v1/credit-limits/{referred['client_debtor_id']}/renew",
            json={"credit_limit": 1000},
        )

        assert sample("limit_automation_renewal_total", outcome="skipped") == before + 1


# =============================================================================
# HTTP Metrics Tests
# =============================================================================

class TestHttpMetrics:
    @pytest.mark.asyncio
    async def test_requests_labelled_by_route(self, client: AsyncClient, database):
        labels = {
            "method": "GET",
            "endpoint": "/v1/applications/{application_id}",
            "status": "404",
        }
        before = sample("limit_automation_http_requests_total", **labels)

        await client.get("/v1/applications/550e8400-e29b-41d4-a716-446655440000")

        assert sample("limit_automation_http_requests_total", **labels) == before + 1


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "ok"
