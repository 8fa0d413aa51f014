"""Data Transfer Objects for application layer."""

from .application import (
    ApplicationResponse,
    CompanyDetailsRequest,
    CreditLimitDetailsRequest,
    PartnerDetailsRequest,
    RenewalStatusResponse,
    StakeholderDTO,
    StatusChangeRequest,
)

__all__ = [
    "ApplicationResponse",
    "CompanyDetailsRequest",
    "CreditLimitDetailsRequest",
    "PartnerDetailsRequest",
    "RenewalStatusResponse",
    "StakeholderDTO",
    "StatusChangeRequest",
]
