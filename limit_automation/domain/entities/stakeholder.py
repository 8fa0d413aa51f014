"""Debtor stakeholder (director, partner, trustee) entities."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4


class StakeholderType(str, Enum):
    INDIVIDUAL = "individual"
    COMPANY = "company"


@dataclass(frozen=True)
class Address:
    street_number: Optional[str] = None
    street_name: Optional[str] = None
    suburb: Optional[str] = None
    state: Optional[str] = None
    post_code: Optional[str] = None
    country_code: Optional[str] = None


@dataclass
class Stakeholder:
    """
    An individual or company disclosed against a debtor.

    Stakeholders are keyed by a natural identity so that repeated
    disclosures update the same record instead of duplicating it.
    """

    debtor_id: UUID
    type: StakeholderType
    title: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    driver_licence_number: Optional[str] = None
    address: Optional[Address] = None
    entity_name: Optional[str] = None
    entity_type: Optional[str] = None
    abn: Optional[str] = None
    acn: Optional[str] = None
    registration_number: Optional[str] = None
    id: UUID = field(default_factory=uuid4)

    @property
    def natural_key(self) -> str:
        """
        Identity used for idempotent upserts.

        Individuals: debtor + date of birth (driver licence when absent).
        Companies: debtor + abn, acn or registration number.
        """
        if self.type == StakeholderType.INDIVIDUAL:
            identity = (
                self.date_of_birth.isoformat()
                if self.date_of_birth
                else f"dl:{self.driver_licence_number}"
            )
        else:
            identity = self.abn or self.acn or self.registration_number
        return f"{self.debtor_id}:{self.type.value}:{identity}"
