"""Pydantic schemas for API request/response validation."""

from .application import (
    AddressSchema,
    ApplicationResponseSchema,
    CompanyDetailsSchema,
    CreditLimitDetailsSchema,
    ExpiringNotifyRequestSchema,
    ExpiringNotifyResponseSchema,
    PartnerDetailsSchema,
    PartnerSchema,
    RenewalRequestSchema,
    RenewalResponseSchema,
    RenewalStatusSchema,
    StakeholderSchema,
    StatusChangeSchema,
    SubmitApplicationSchema,
)
from .error import ErrorResponseSchema

__all__ = [
    "AddressSchema",
    "ApplicationResponseSchema",
    "CompanyDetailsSchema",
    "CreditLimitDetailsSchema",
    "ErrorResponseSchema",
    "ExpiringNotifyRequestSchema",
    "ExpiringNotifyResponseSchema",
    "PartnerDetailsSchema",
    "PartnerSchema",
    "RenewalRequestSchema",
    "RenewalResponseSchema",
    "RenewalStatusSchema",
    "StakeholderSchema",
    "StatusChangeSchema",
    "SubmitApplicationSchema",
]
