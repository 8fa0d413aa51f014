"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException
from .application import (
    ApplicationAlreadyExistsException,
    ApplicationNotEditableException,
    ApplicationNotFoundException,
    ClientDebtorNotFoundException,
    ClientNotFoundException,
    CreditLimitRequiredException,
    InsufficientPartnersException,
    InvalidApplicationRequestException,
    InvalidStatusTransitionException,
    RequiredFieldMissingException,
)
from .collaborator import (
    ClassifierException,
    ClassifierTimeoutException,
    CollaboratorException,
    NotificationDeliveryException,
    PolicyLookupException,
    PolicyLookupTimeoutException,
)

__all__ = [
    "DomainException",
    "ApplicationAlreadyExistsException",
    "ApplicationNotEditableException",
    "ApplicationNotFoundException",
    "ClientDebtorNotFoundException",
    "ClientNotFoundException",
    "CreditLimitRequiredException",
    "InsufficientPartnersException",
    "InvalidApplicationRequestException",
    "InvalidStatusTransitionException",
    "RequiredFieldMissingException",
    "ClassifierException",
    "ClassifierTimeoutException",
    "CollaboratorException",
    "NotificationDeliveryException",
    "PolicyLookupException",
    "PolicyLookupTimeoutException",
]
