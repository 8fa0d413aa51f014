"""Failures raised by collaborators the engine depends on."""

from .base import DomainException


class CollaboratorException(DomainException):
    """Base class for failures of an external dependency."""

    def __init__(self, message: str, code: str = "COLLABORATOR_ERROR"):
        super().__init__(message=message, code=code)


class PolicyLookupException(CollaboratorException):
    """Raised when the policy store cannot be queried."""

    def __init__(self, message: str):
        super().__init__(message=message, code="POLICY_LOOKUP_ERROR")


class PolicyLookupTimeoutException(PolicyLookupException):
    """Raised when a policy lookup exceeds its time budget."""

    def __init__(self, timeout: float):
        super().__init__(message=f"Policy lookup timed out after {timeout}s")
        self.code = "POLICY_LOOKUP_TIMEOUT"
        self.timeout = timeout


class ClassifierException(CollaboratorException):
    """Raised when the entity classifier returns an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message=message, code="CLASSIFIER_ERROR")
        self.status_code = status_code


class ClassifierTimeoutException(ClassifierException):
    """Raised when the entity classifier times out."""

    def __init__(self):
        super().__init__(message="Entity classifier request timed out")
        self.code = "CLASSIFIER_TIMEOUT"


class NotificationDeliveryException(CollaboratorException):
    """Raised when a notification cannot be pushed to its recipient."""

    def __init__(self, message: str):
        super().__init__(message=message, code="NOTIFICATION_DELIVERY_ERROR")
