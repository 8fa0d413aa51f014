"""Application-related Pydantic schemas."""

from datetime import date, datetime, timezone
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from limit_automation.domain.entities import (
    ActorType,
    ApplicationStatus,
    EntityType,
    StakeholderType,
)


class CompanyDetailsSchema(BaseModel):
    """Schema for POST /v1/applications/company request body."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "client_id": "550e8400-e29b-41d4-a716-446655440000",
                    "entity_name": "Acme Trading Pty Ltd",
                    "entity_type": "PROPRIETARY_LIMITED",
                    "country_code": "AUS",
                    "abn": "51824753556",
                }
            ]
        }
    )

    client_id: UUID
    entity_name: str = Field(..., min_length=1, max_length=255)
    entity_type: EntityType
    country_code: str = Field(..., min_length=2, max_length=3, examples=["AUS"])
    abn: Optional[str] = Field(None, max_length=50)
    acn: Optional[str] = Field(None, max_length=50)
    registration_number: Optional[str] = Field(None, max_length=100)
    application_id: Optional[UUID] = Field(
        None,
        description="Existing draft to update instead of creating a new application",
    )
    created_by_type: ActorType = ActorType.USER
    created_by_id: Optional[str] = None

    @field_validator("entity_name")
    @classmethod
    def validate_entity_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("entity_name cannot be empty or whitespace")
        return v.strip()


class AddressSchema(BaseModel):
    street_number: Optional[str] = None
    street_name: Optional[str] = None
    suburb: Optional[str] = None
    state: Optional[str] = None
    post_code: Optional[str] = None
    country_code: Optional[str] = None


class PartnerSchema(BaseModel):
    """
    One disclosed stakeholder.

    Every field is optional here; missing mandatory fields are reported
    together by the service as REQUIRE_FIELD_MISSING.
    """

    type: StakeholderType = StakeholderType.INDIVIDUAL
    title: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    driver_licence_number: Optional[str] = None
    address: Optional[AddressSchema] = None
    entity_name: Optional[str] = None
    entity_type: Optional[str] = None
    abn: Optional[str] = None
    acn: Optional[str] = None
    registration_number: Optional[str] = None


class PartnerDetailsSchema(BaseModel):
    partners: List[PartnerSchema] = Field(default_factory=list)


class CreditLimitDetailsSchema(BaseModel):
    credit_limit: int = Field(..., gt=0, examples=[50000])
    is_extended_payment_terms: bool = False
    extended_payment_terms_details: str = ""
    is_passed_overdue_amount: bool = False
    passed_overdue_details: str = ""
    outstanding_amount: Optional[int] = Field(None, ge=0)
    order_on_hand: Optional[int] = Field(None, ge=0)
    note: str = ""


class SubmitApplicationSchema(BaseModel):
    user_type: ActorType = ActorType.USER
    user_id: Optional[str] = None


class StatusChangeSchema(BaseModel):
    """Schema for PUT /v1/applications/{id}/status request body."""

    status: ApplicationStatus
    accepted_amount: Optional[int] = Field(None, gt=0)
    user_type: ActorType = ActorType.USER
    user_id: Optional[str] = None
    user_name: Optional[str] = None


class StakeholderSchema(BaseModel):
    id: str
    type: str
    name: Optional[str] = None


class ApplicationResponseSchema(BaseModel):
    """Schema for application responses."""

    id: str = Field(..., description="Application UUID")
    application_id: str = Field(
        ...,
        description="Human readable code",
        examples=["C001-D0001-20260105-001"],
    )
    client_id: str
    debtor_id: str
    client_debtor_id: str
    stage: int = Field(..., ge=1, le=3)
    status: ApplicationStatus
    credit_limit: Optional[int] = None
    accepted_amount: Optional[int] = None
    blockers: List[str] = Field(default_factory=list)
    is_auto_approved: bool = False
    approval_date: Optional[str] = None
    expiry_date: Optional[str] = None
    stakeholders: List[StakeholderSchema] = Field(default_factory=list)


class RenewalRequestSchema(BaseModel):
    credit_limit: int = Field(..., gt=0)
    created_by_type: ActorType = ActorType.USER
    created_by_id: Optional[str] = None


class RenewalResponseSchema(BaseModel):
    """Renewal outcome; `application` is null when nothing could be renewed."""

    submitted: bool
    application: Optional[ApplicationResponseSchema] = None


class RenewalStatusSchema(BaseModel):
    application: ApplicationResponseSchema
    run_status: str = Field(..., examples=["running", "succeeded", "failed", "unknown"])


class ExpiringNotifyRequestSchema(BaseModel):
    """Expiry window; stored expiry dates are naive UTC, so aware bounds are converted."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @field_validator("start", "end")
    @classmethod
    def to_naive_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


class ExpiringNotifyResponseSchema(BaseModel):
    notifications: int = Field(..., ge=0)
