"""
Unit tests for stakeholder completeness rules.

These tests verify:
1. Entity-type quotas for disclosed individuals and companies
2. Mandatory field checks for individual and company partners
3. Which entity types go through the stakeholder step
"""

import pytest

from limit_automation.domain.entities import EntityType
from limit_automation.service.automation import (
    count_stakeholders,
    is_stakeholder_disclosure_sufficient,
    requires_stakeholder_disclosure,
    validate_partner,
)


def make_individual(**overrides) -> dict:
    partner = {
        "type": "individual",
        "title": "Mr",
        "first_name": "John",
        "last_name": "Citizen",
        "date_of_birth": "1980-02-01",
        "address": {"state": "NSW", "post_code": "2000", "street_number": "12"},
    }
    partner.update(overrides)
    return partner


def make_company(**overrides) -> dict:
    partner = {
        "type": "company",
        "entity_name": "Holding Co Pty Ltd",
        "entity_type": "PROPRIETARY_LIMITED",
        "abn": "51824753556",
    }
    partner.update(overrides)
    return partner


class TestDisclosureQuota:
    """Tests for the per-entity-type stakeholder counts."""

    @pytest.mark.parametrize(
        "entity_type",
        [
            EntityType.PROPRIETARY_LIMITED,
            EntityType.LIMITED_COMPANY,
            EntityType.GOVERNMENT,
            EntityType.REGISTERED_BODY,
        ],
    )
    def test_company_needs_an_individual_and_no_companies(self, entity_type):
        assert is_stakeholder_disclosure_sufficient(entity_type.value, 1, 0)
        assert is_stakeholder_disclosure_sufficient(entity_type.value, 3, 0)
        assert not is_stakeholder_disclosure_sufficient(entity_type.value, 0, 0)
        assert not is_stakeholder_disclosure_sufficient(entity_type.value, 1, 1)

    def test_partnership_needs_two_parties(self):
        assert is_stakeholder_disclosure_sufficient("PARTNERSHIP", 2, 0)
        assert is_stakeholder_disclosure_sufficient("PARTNERSHIP", 1, 1)
        assert is_stakeholder_disclosure_sufficient("PARTNERSHIP", 0, 2)
        assert not is_stakeholder_disclosure_sufficient("PARTNERSHIP", 1, 0)
        assert not is_stakeholder_disclosure_sufficient("PARTNERSHIP", 0, 1)

    def test_sole_trader_needs_exactly_one_individual(self):
        assert is_stakeholder_disclosure_sufficient("SOLE_TRADER", 1, 0)
        assert not is_stakeholder_disclosure_sufficient("SOLE_TRADER", 2, 0)
        assert not is_stakeholder_disclosure_sufficient("SOLE_TRADER", 1, 1)
        assert not is_stakeholder_disclosure_sufficient("SOLE_TRADER", 0, 0)

    def test_trust_needs_anyone(self):
        assert is_stakeholder_disclosure_sufficient("TRUST", 1, 0)
        assert is_stakeholder_disclosure_sufficient("TRUST", 0, 1)
        assert not is_stakeholder_disclosure_sufficient("TRUST", 0, 0)

    def test_unknown_entity_type_is_never_sufficient(self):
        assert not is_stakeholder_disclosure_sufficient("CO_OPERATIVE", 5, 5)
        assert not is_stakeholder_disclosure_sufficient(None, 1, 0)

    def test_count_stakeholders(self):
        partners = [make_individual(), make_company(), make_individual(), {"type": "Company"}]
        assert count_stakeholders(partners) == (2, 2)

    def test_untyped_partner_counts_as_individual(self):
        assert count_stakeholders([{"first_name": "Jane"}]) == (1, 0)


class TestPartnerFields:
    """Tests for mandatory partner fields."""

    def test_complete_individual(self):
        assert validate_partner(make_individual()) == []

    def test_driver_licence_replaces_date_of_birth(self):
        partner = make_individual(date_of_birth=None, driver_licence_number="DL123")
        assert validate_partner(partner) == []

    def test_individual_without_identity(self):
        partner = make_individual(date_of_birth=None)
        assert validate_partner(partner) == ["date_of_birth|driver_licence_number"]

    def test_individual_missing_name_and_title(self):
        partner = make_individual(title="", first_name=None)
        assert validate_partner(partner) == ["title", "first_name"]

    def test_individual_address_fields(self):
        partner = make_individual(address={"state": "VIC"})
        assert validate_partner(partner) == ["address.post_code", "address.street_number"]

    def test_individual_without_address(self):
        partner = make_individual(address=None)
        assert validate_partner(partner) == ["address"]

    def test_complete_company(self):
        assert validate_partner(make_company()) == []

    def test_company_with_acn_only(self):
        assert validate_partner(make_company(abn=None, acn="004085616")) == []

    def test_company_without_identifier(self):
        partner = make_company(abn=None)
        assert validate_partner(partner) == ["abn|acn|registration_number"]

    def test_company_missing_name_and_type(self):
        partner = make_company(entity_name="", entity_type=None)
        assert validate_partner(partner) == ["entity_name", "entity_type"]


class TestStakeholderStep:
    def test_trust_and_partnership_disclose_stakeholders(self):
        assert requires_stakeholder_disclosure("TRUST")
        assert requires_stakeholder_disclosure("PARTNERSHIP")

    def test_companies_skip_stakeholder_step(self):
        assert not requires_stakeholder_disclosure("PROPRIETARY_LIMITED")
        assert not requires_stakeholder_disclosure(None)
