"""Client, debtor and credit-limit record entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4


class EntityType(str, Enum):
    """Legal entity type of a debtor or corporate stakeholder."""

    PROPRIETARY_LIMITED = "PROPRIETARY_LIMITED"
    LIMITED_COMPANY = "LIMITED_COMPANY"
    PARTNERSHIP = "PARTNERSHIP"
    SOLE_TRADER = "SOLE_TRADER"
    TRUST = "TRUST"
    BUSINESS = "BUSINESS"
    CORPORATION = "CORPORATION"
    GOVERNMENT = "GOVERNMENT"
    INCORPORATED = "INCORPORATED"
    NO_LIABILITY = "NO_LIABILITY"
    PROPRIETARY = "PROPRIETARY"
    REGISTERED_BODY = "REGISTERED_BODY"


@dataclass
class Client:
    """An insured client that trades with debtors on credit."""

    client_code: str
    name: str
    is_auto_approve_allowed: bool = False
    insurer_name: Optional[str] = None
    risk_analyst_id: Optional[str] = None
    id: UUID = field(default_factory=uuid4)


@dataclass
class Debtor:
    """A buyer the client extends credit to."""

    debtor_code: str
    entity_name: str
    entity_type: Optional[str] = None
    abn: Optional[str] = None
    acn: Optional[str] = None
    registration_number: Optional[str] = None
    country_code: Optional[str] = None
    id: UUID = field(default_factory=uuid4)


@dataclass
class ClientDebtor:
    """
    The currently effective credit limit for a client/debtor pair.

    Distinct from any single Application: applications request limits,
    this record holds the one in force.
    """

    client_id: UUID
    debtor_id: UUID
    credit_limit: Optional[int] = None
    is_endorsed_limit: bool = False
    active_application_id: Optional[UUID] = None
    expiry_date: Optional[datetime] = None
    is_active: bool = False
    id: UUID = field(default_factory=uuid4)
