"""
Stakeholder completeness rules.

Before an application can leave the stakeholder step, the disclosed
individuals and companies must satisfy the quota of the debtor's entity type,
and each disclosed partner must carry the fields needed to identify them.
"""

from typing import Any, Callable, Dict, List, Mapping

from limit_automation.domain.entities import EntityType, StakeholderType


def _company_rule(individuals: int, companies: int) -> bool:
    return individuals >= 1 and companies == 0


def _partnership_rule(individuals: int, companies: int) -> bool:
    return (
        individuals >= 2
        or (individuals >= 1 and companies >= 1)
        or companies >= 2
    )


def _sole_trader_rule(individuals: int, companies: int) -> bool:
    return individuals == 1 and companies == 0


def _trust_rule(individuals: int, companies: int) -> bool:
    return individuals >= 1 or companies >= 1


DISCLOSURE_RULES: Dict[EntityType, Callable[[int, int], bool]] = {
    EntityType.PROPRIETARY_LIMITED: _company_rule,
    EntityType.LIMITED_COMPANY: _company_rule,
    EntityType.BUSINESS: _company_rule,
    EntityType.CORPORATION: _company_rule,
    EntityType.GOVERNMENT: _company_rule,
    EntityType.INCORPORATED: _company_rule,
    EntityType.NO_LIABILITY: _company_rule,
    EntityType.PROPRIETARY: _company_rule,
    EntityType.REGISTERED_BODY: _company_rule,
    EntityType.PARTNERSHIP: _partnership_rule,
    EntityType.SOLE_TRADER: _sole_trader_rule,
    EntityType.TRUST: _trust_rule,
}

# Entity types whose intake includes a stakeholder step before the credit limit
STAKEHOLDER_DISCLOSURE_TYPES = frozenset({EntityType.TRUST, EntityType.PARTNERSHIP})


def is_stakeholder_disclosure_sufficient(
    entity_type: str | None,
    individual_count: int,
    company_count: int,
) -> bool:
    """
    Check disclosed stakeholder counts against the entity-type quota.

    Args:
        entity_type: The debtor's legal entity type (EntityType value)
        individual_count: Number of disclosed individuals
        company_count: Number of disclosed companies

    Returns:
        True if the disclosure is sufficient; False for unknown entity types
    """
    try:
        rule = DISCLOSURE_RULES[EntityType(entity_type)]
    except ValueError:
        return False
    return rule(individual_count, company_count)


def requires_stakeholder_disclosure(entity_type: str | None) -> bool:
    return entity_type in {t.value for t in STAKEHOLDER_DISCLOSURE_TYPES}


def count_stakeholders(partners: List[Mapping[str, Any]]) -> tuple[int, int]:
    """
    Count (individuals, companies) in a partner payload.

    Anything not typed as a company counts as an individual.
    """
    companies = sum(
        1 for p in partners
        if str(p.get("type", "")).lower() == StakeholderType.COMPANY.value
    )
    return len(partners) - companies, companies


def validate_partner(partner: Mapping[str, Any]) -> List[str]:
    """
    List the mandatory fields a partner payload is missing.

    Individuals need a name, a title, a date of birth or driver licence
    and an address with state, post code and street number. Companies need
    a name, an entity type and at least one business identifier.

    Returns:
        Names of missing fields (empty when the partner is complete)
    """
    missing: List[str] = []

    if str(partner.get("type", "")).lower() == StakeholderType.COMPANY.value:
        for name in ("entity_name", "entity_type"):
            if not partner.get(name):
                missing.append(name)
        if not any(partner.get(k) for k in ("abn", "acn", "registration_number")):
            missing.append("abn|acn|registration_number")
        return missing

    for name in ("title", "first_name", "last_name"):
        if not partner.get(name):
            missing.append(name)
    if not partner.get("date_of_birth") and not partner.get("driver_licence_number"):
        missing.append("date_of_birth|driver_licence_number")

    address = partner.get("address") or {}
    if not address:
        missing.append("address")
    else:
        for name in ("state", "post_code", "street_number"):
            if not address.get(name):
                missing.append(f"address.{name}")

    return missing
