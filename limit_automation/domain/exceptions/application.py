"""Application intake and lifecycle exceptions."""

from .base import DomainException


class ApplicationNotFoundException(DomainException):
    """Raised when an application cannot be found."""

    def __init__(self, application_id: str):
        super().__init__(
            message=f"No application found: {application_id}",
            code="NO_APPLICATION_FOUND",
        )
        self.application_id = application_id


class ApplicationAlreadyExistsException(DomainException):
    """Raised when an open application already exists for a client/debtor pair."""

    def __init__(self):
        super().__init__(
            message="Application already exists, please create with another debtor",
            code="APPLICATION_ALREADY_EXISTS",
        )


class InsufficientPartnersException(DomainException):
    """Raised when disclosed stakeholders do not satisfy the entity-type rule."""

    def __init__(self, entity_type: str | None):
        super().__init__(
            message=f"Insufficient partners details for entity type {entity_type}",
            code="INSUFFICIENT_DATA",
        )
        self.entity_type = entity_type


class RequiredFieldMissingException(DomainException):
    """Raised when a partner payload is missing mandatory fields."""

    def __init__(self, missing: list[str]):
        super().__init__(
            message=f"Require fields are missing: {', '.join(missing)}",
            code="REQUIRE_FIELD_MISSING",
        )
        self.missing = missing


class CreditLimitRequiredException(DomainException):
    """Raised when an application is submitted without a requested limit."""

    def __init__(self, application_id: str):
        super().__init__(
            message=f"Credit limit details are required before submitting {application_id}",
            code="CREDIT_LIMIT_REQUIRED",
        )


class InvalidStatusTransitionException(DomainException):
    """Raised when a status change is not allowed by the lifecycle."""

    def __init__(self, current: str, target: str):
        super().__init__(
            message=f"Cannot move application from {current} to {target}",
            code="INVALID_STATUS_TRANSITION",
        )
        self.current = current
        self.target = target


class ClientNotFoundException(DomainException):
    def __init__(self, client_id: str):
        super().__init__(
            message=f"Client not found: {client_id}",
            code="CLIENT_NOT_FOUND",
        )


class ClientDebtorNotFoundException(DomainException):
    def __init__(self, client_debtor_id: str):
        super().__init__(
            message=f"Credit limit not found: {client_debtor_id}",
            code="CLIENT_DEBTOR_NOT_FOUND",
        )


class InvalidApplicationRequestException(DomainException):
    """Raised when intake input fails validation."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_REQUEST")


class ApplicationNotEditableException(DomainException):
    """Raised when intake details are changed after the application left DRAFT."""

    def __init__(self, application_id: str, status: str):
        super().__init__(
            message=f"Application {application_id} can no longer be edited ({status})",
            code="APPLICATION_NOT_EDITABLE",
        )
        self.status = status
