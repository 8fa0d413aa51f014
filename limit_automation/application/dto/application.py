"""Data transfer objects for application intake and decisioning."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from limit_automation.domain.entities import (
    ActorType,
    Address,
    Application,
    ApplicationStatus,
    EntityType,
    Stakeholder,
    StakeholderType,
)


@dataclass(frozen=True)
class CompanyDetailsRequest:
    """Input for stage 1: the debtor the client wants a limit on."""

    client_id: UUID
    entity_name: str
    entity_type: str
    country_code: str
    abn: Optional[str] = None
    acn: Optional[str] = None
    registration_number: Optional[str] = None
    application_uuid: Optional[UUID] = None
    created_by_type: ActorType = ActorType.USER
    created_by_id: Optional[str] = None

    def validate(self) -> List[str]:
        errors = []

        if not self.entity_name or not self.entity_name.strip():
            errors.append("entity_name is required")

        if self.entity_type not in {t.value for t in EntityType}:
            errors.append(f"entity_type {self.entity_type!r} is not supported")

        if not self.country_code or not self.country_code.strip():
            errors.append("country_code is required")

        if not (self.abn or self.acn or self.registration_number):
            errors.append("one of abn, acn or registration_number is required")

        return errors


@dataclass(frozen=True)
class PartnerDetailsRequest:
    """Input for stage 2: stakeholders disclosed against the debtor."""

    partners: List[Dict[str, Any]]

    def to_stakeholders(self, debtor_id: UUID) -> List[Stakeholder]:
        """Build stakeholder entities from validated partner payloads."""
        stakeholders = []
        for partner in self.partners:
            is_company = str(partner.get("type", "")).lower() == StakeholderType.COMPANY.value
            address = partner.get("address")
            dob = partner.get("date_of_birth")
            if isinstance(dob, str):
                dob = date.fromisoformat(dob)

            stakeholders.append(
                Stakeholder(
                    debtor_id=debtor_id,
                    type=StakeholderType.COMPANY if is_company else StakeholderType.INDIVIDUAL,
                    title=partner.get("title"),
                    first_name=partner.get("first_name"),
                    last_name=partner.get("last_name"),
                    date_of_birth=dob,
                    driver_licence_number=partner.get("driver_licence_number"),
                    address=Address(**address) if address and not is_company else None,
                    entity_name=partner.get("entity_name"),
                    entity_type=partner.get("entity_type"),
                    abn=partner.get("abn"),
                    acn=partner.get("acn"),
                    registration_number=partner.get("registration_number"),
                )
            )
        return stakeholders


@dataclass(frozen=True)
class CreditLimitDetailsRequest:
    """Input for the credit-limit stage."""

    credit_limit: int
    is_extended_payment_terms: bool = False
    extended_payment_terms_details: str = ""
    is_passed_overdue_amount: bool = False
    passed_overdue_details: str = ""
    outstanding_amount: Optional[int] = None
    order_on_hand: Optional[int] = None
    note: str = ""

    def validate(self) -> List[str]:
        errors = []

        if self.credit_limit <= 0:
            errors.append("credit_limit must be positive")

        if self.is_extended_payment_terms and not self.extended_payment_terms_details:
            errors.append("extended_payment_terms_details is required")

        if self.is_passed_overdue_amount and not self.passed_overdue_details:
            errors.append("passed_overdue_details is required")

        return errors


@dataclass(frozen=True)
class StatusChangeRequest:
    """A manual underwriting move."""

    status: ApplicationStatus
    accepted_amount: Optional[int] = None
    user_type: ActorType = ActorType.USER
    user_id: Optional[str] = None
    user_name: Optional[str] = None

    def validate(self) -> List[str]:
        errors = []

        if self.status == ApplicationStatus.APPROVED:
            if self.accepted_amount is None or self.accepted_amount <= 0:
                errors.append("accepted_amount must be positive when approving")

        return errors


@dataclass(frozen=True)
class StakeholderDTO:
    id: str
    type: str
    name: Optional[str]

    @classmethod
    def from_entity(cls, stakeholder: Stakeholder) -> "StakeholderDTO":
        if stakeholder.type == StakeholderType.COMPANY:
            name = stakeholder.entity_name
        else:
            name = " ".join(p for p in (stakeholder.first_name, stakeholder.last_name) if p)
        return cls(id=str(stakeholder.id), type=stakeholder.type.value, name=name or None)


@dataclass(frozen=True)
class ApplicationResponse:
    """Response data for a credit application."""

    id: str
    application_id: str
    client_id: str
    debtor_id: str
    client_debtor_id: str
    stage: int
    status: str
    credit_limit: Optional[int]
    accepted_amount: Optional[int]
    blockers: List[str]
    is_auto_approved: bool
    approval_date: Optional[str]
    expiry_date: Optional[str]
    stakeholders: List[StakeholderDTO] = field(default_factory=list)

    @classmethod
    def from_entity(
        cls,
        application: Application,
        stakeholders: Optional[List[Stakeholder]] = None,
    ) -> "ApplicationResponse":
        data = application.to_dict()
        return cls(
            stakeholders=[StakeholderDTO.from_entity(s) for s in stakeholders or []],
            **data,
        )


@dataclass(frozen=True)
class RenewalStatusResponse:
    """Progress of a detached renewal decisioning run."""

    application: ApplicationResponse
    run_status: str
