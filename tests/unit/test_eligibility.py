"""
Unit tests for the eligibility gate.

These tests verify:
1. Check order and which checks stop the pipeline
2. Concurrent policy lookups and the discretionary limit
3. Classifier and insurer steps
4. Collaborator failures produce a failed result instead of raising
"""

import asyncio
import pytest
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from limit_automation.domain.entities import (
    Application,
    ApplicationStatus,
    ClassificationResult,
    Client,
    Debtor,
    EntityClassification,
    Policy,
)
from limit_automation.domain.exceptions import ClassifierException, PolicyLookupException
from limit_automation.domain.interfaces import EntityClassifier, PolicyRepository
from limit_automation.service.automation import (
    AutomationSettings,
    EligibilityGate,
    Insurer,
)
from limit_automation.service.automation.eligibility import (
    AUTOMATION_NOT_ALLOWED,
    FOREIGN_BUYER,
    NO_CI_POLICY,
    NO_INSURER,
    NO_RMP_POLICY,
    OVER_DISCRETIONARY_LIMIT,
)

NOW = datetime(2026, 1, 5, 12, 0)


# =============================================================================
# Fakes
# =============================================================================

class FakePolicyRepository(PolicyRepository):
    """In-memory policy store keyed by product name."""

    def __init__(self, policies: Dict[str, Policy], delay: float = 0.0, fail: bool = False):
        self.policies = policies
        self.delay = delay
        self.fail = fail
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def find_active_policy(
        self,
        client_id: UUID,
        product_pattern: str,
        at: datetime,
    ) -> Optional[Policy]:
        self.calls.append(product_pattern)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail:
                raise PolicyLookupException("database unavailable")
            policy = self.policies.get(product_pattern)
            if policy and policy.is_in_force(at):
                return policy
            return None
        finally:
            self.in_flight -= 1


class FakeClassifier(EntityClassifier):
    def __init__(self, result: ClassificationResult = None, fail: bool = False):
        self.result = result or ClassificationResult(EntityClassification.COMPANY)
        self.fail = fail
        self.call_count = 0

    async def classify(self, debtor_id: UUID, entity_type: str | None) -> ClassificationResult:
        self.call_count += 1
        if self.fail:
            raise ClassifierException("classifier unavailable", status_code=502)
        return self.result


def make_policy(client_id: UUID, product: str, discretionary_limit=100000, excess=None) -> Policy:
    return Policy(
        client_id=client_id,
        product=product,
        inception_date=NOW - timedelta(days=30),
        expiry_date=NOW + timedelta(days=335),
        discretionary_limit=discretionary_limit,
        excess=excess,
    )


def make_parties(insurer_name="QBE Insurance", allowed=True, country="AUS"):
    client = Client(
        client_code="C001",
        name="Client One",
        is_auto_approve_allowed=allowed,
        insurer_name=insurer_name,
        risk_analyst_id="analyst-1",
    )
    debtor = Debtor(
        debtor_code="D0001",
        entity_name="Debtor One Pty Ltd",
        entity_type="PROPRIETARY_LIMITED",
        country_code=country,
    )
    application = Application(
        application_id="C001-D0001-20260105-001",
        client_id=client.id,
        debtor_id=debtor.id,
        client_debtor_id=uuid4(),
        status=ApplicationStatus.SUBMITTED,
        credit_limit=50000,
    )
    return client, debtor, application


def make_policies(client_id: UUID, ci=True, rmp=True, **figures) -> Dict[str, Policy]:
    policies = {}
    if ci:
        policies["Credit Insurance"] = make_policy(client_id, "Credit Insurance", **figures)
    if rmp:
        policies["Risk Management"] = make_policy(client_id, "Risk Management", **figures)
    return policies


# =============================================================================
# Tests
# =============================================================================

class TestGateOrder:
    """Checks that stop the pipeline."""

    @pytest.mark.asyncio
    async def test_clean_application_passes(self):
        client, debtor, application = make_parties()
        gate = EligibilityGate(FakePolicyRepository(make_policies(client.id)), FakeClassifier())

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.blockers == []
        assert result.insurer is Insurer.QBE
        assert result.classification is EntityClassification.COMPANY
        assert not result.failed

    @pytest.mark.asyncio
    async def test_automation_not_allowed_stops_everything(self):
        client, debtor, application = make_parties(allowed=False, country="USA")
        policies = FakePolicyRepository({})
        classifier = FakeClassifier()
        gate = EligibilityGate(policies, classifier)

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.blockers == [AUTOMATION_NOT_ALLOWED]
        assert policies.calls == []
        assert classifier.call_count == 0
        assert result.insurer is None

    @pytest.mark.asyncio
    async def test_foreign_buyer(self):
        client, debtor, application = make_parties(country="usa")
        policies = FakePolicyRepository(make_policies(client.id))
        gate = EligibilityGate(policies, FakeClassifier())

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.blockers == [FOREIGN_BUYER]
        assert policies.calls == []

    @pytest.mark.asyncio
    async def test_lowercase_allowed_country(self):
        client, debtor, application = make_parties(country="nzl")
        gate = EligibilityGate(FakePolicyRepository(make_policies(client.id)), FakeClassifier())

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.blockers == []

    @pytest.mark.asyncio
    async def test_missing_policies_report_rmp_before_ci(self):
        client, debtor, application = make_parties()
        classifier = FakeClassifier()
        gate = EligibilityGate(FakePolicyRepository({}), classifier)

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.blockers == [NO_RMP_POLICY, NO_CI_POLICY]
        assert classifier.call_count == 0

    @pytest.mark.asyncio
    async def test_missing_ci_policy_only(self):
        client, debtor, application = make_parties()
        gate = EligibilityGate(
            FakePolicyRepository(make_policies(client.id, ci=False)),
            FakeClassifier(),
        )

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.blockers == [NO_CI_POLICY]

    @pytest.mark.asyncio
    async def test_expired_policy_is_not_in_force(self):
        client, debtor, application = make_parties()
        gate = EligibilityGate(FakePolicyRepository(make_policies(client.id)), FakeClassifier())

        result = await gate.evaluate(
            application, client, debtor, at=NOW + timedelta(days=400)
        )

        assert result.blockers == [NO_RMP_POLICY, NO_CI_POLICY]


class TestPolicyLimits:
    @pytest.mark.asyncio
    async def test_lookups_run_concurrently(self):
        client, debtor, application = make_parties()
        policies = FakePolicyRepository(make_policies(client.id), delay=0.05)
        gate = EligibilityGate(policies, FakeClassifier())

        await gate.evaluate(application, client, debtor, at=NOW)

        assert policies.max_in_flight == 2
        assert sorted(policies.calls) == ["Credit Insurance", "Risk Management"]

    @pytest.mark.asyncio
    async def test_limit_equal_to_discretionary_passes(self):
        client, debtor, application = make_parties()
        application.credit_limit = 100000
        gate = EligibilityGate(FakePolicyRepository(make_policies(client.id)), FakeClassifier())

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.blockers == []

    @pytest.mark.asyncio
    async def test_limit_over_discretionary_stops(self):
        client, debtor, application = make_parties()
        application.credit_limit = 100001
        classifier = FakeClassifier()
        gate = EligibilityGate(FakePolicyRepository(make_policies(client.id)), classifier)

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.blockers == [OVER_DISCRETIONARY_LIMIT]
        assert result.policy.discretionary_limit == 100000
        assert classifier.call_count == 0

    @pytest.mark.asyncio
    async def test_ci_figures_win_over_rmp(self):
        client, debtor, application = make_parties()
        policies = {
            "Credit Insurance": make_policy(client.id, "Credit Insurance", discretionary_limit=40000),
            "Risk Management": make_policy(client.id, "Risk Management", discretionary_limit=90000),
        }
        gate = EligibilityGate(FakePolicyRepository(policies), FakeClassifier())

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.blockers == [OVER_DISCRETIONARY_LIMIT]

    @pytest.mark.asyncio
    async def test_rmp_figures_fill_gaps(self):
        client, debtor, application = make_parties(insurer_name="Atradius")
        policies = {
            "Credit Insurance": make_policy(client.id, "Credit Insurance", excess=None),
            "Risk Management": make_policy(client.id, "Risk Management", excess=60000),
        }
        gate = EligibilityGate(FakePolicyRepository(policies), FakeClassifier())

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.policy.excess == 60000
        assert result.blockers == ["Credit limit is within policy excess for Atradius"]


class TestClassifierAndInsurer:
    @pytest.mark.asyncio
    async def test_classifier_blockers_and_stop(self):
        client, debtor, application = make_parties()
        classifier = FakeClassifier(
            ClassificationResult(
                classification=None,
                blockers=["Entity type not recognised"],
                continue_automation=False,
            )
        )
        gate = EligibilityGate(FakePolicyRepository(make_policies(client.id)), classifier)

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.blockers == ["Entity type not recognised"]
        assert result.insurer is None

    @pytest.mark.asyncio
    async def test_classifier_blockers_without_stop(self):
        client, debtor, application = make_parties(insurer_name="Trad")
        classifier = FakeClassifier(
            ClassificationResult(
                classification=EntityClassification.COMPANY,
                blockers=["ABN recently registered"],
            )
        )
        gate = EligibilityGate(FakePolicyRepository(make_policies(client.id)), classifier)

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.blockers == ["ABN recently registered", "RMP only insurer"]
        assert result.insurer is Insurer.TRAD

    @pytest.mark.asyncio
    async def test_unresolved_insurer_adds_blocker(self):
        client, debtor, application = make_parties(insurer_name="Zurich")
        application.is_passed_overdue_amount = True
        gate = EligibilityGate(FakePolicyRepository(make_policies(client.id)), FakeClassifier())

        result = await gate.evaluate(application, client, debtor, at=NOW)

        # No evaluator runs, so the overdue rule is not applied
        assert result.blockers == [NO_INSURER]
        assert result.insurer is Insurer.UNRESOLVED
        assert not result.failed

    @pytest.mark.asyncio
    async def test_same_snapshot_same_result(self):
        client, debtor, application = make_parties(insurer_name="Bond")
        application.is_extended_payment_terms = True
        gate = EligibilityGate(FakePolicyRepository(make_policies(client.id)), FakeClassifier())

        first = await gate.evaluate(application, client, debtor, at=NOW)
        second = await gate.evaluate(application, client, debtor, at=NOW)

        assert first == second


class TestCollaboratorFailures:
    @pytest.mark.asyncio
    async def test_policy_store_error(self):
        client, debtor, application = make_parties()
        gate = EligibilityGate(FakePolicyRepository({}, fail=True), FakeClassifier())

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.failed
        assert result.error == "database unavailable"
        assert result.blockers == []

    @pytest.mark.asyncio
    async def test_policy_lookup_timeout(self):
        client, debtor, application = make_parties()
        settings = AutomationSettings(policy_lookup_timeout_seconds=0.01)
        gate = EligibilityGate(
            FakePolicyRepository(make_policies(client.id), delay=1.0),
            FakeClassifier(),
            settings=settings,
        )

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.failed
        assert "timed out" in result.error

    @pytest.mark.asyncio
    async def test_classifier_error(self):
        client, debtor, application = make_parties()
        gate = EligibilityGate(
            FakePolicyRepository(make_policies(client.id)),
            FakeClassifier(fail=True),
        )

        result = await gate.evaluate(application, client, debtor, at=NOW)

        assert result.failed
        assert result.error == "classifier unavailable"
        assert result.insurer is None
