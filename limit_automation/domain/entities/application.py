"""Credit application entity and its lifecycle enumerations."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4


class ApplicationStatus(str, Enum):
    """Lifecycle status of a credit application."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    PENDING_AUTOMATION = "PENDING_AUTOMATION"
    REVIEW_APPLICATION = "REVIEW_APPLICATION"
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"
    WITHDRAWN = "WITHDRAWN"
    CANCELLED = "CANCELLED"
    SURRENDERED = "SURRENDERED"


# Statuses that do not block a new application for the same client/debtor
CLOSED_STATUSES = frozenset(
    {
        ApplicationStatus.DECLINED,
        ApplicationStatus.CANCELLED,
        ApplicationStatus.WITHDRAWN,
        ApplicationStatus.SURRENDERED,
        ApplicationStatus.APPROVED,
    }
)

# Statuses the decision finalizer is allowed to move out of
AWAITING_DECISION_STATUSES = frozenset(
    {
        ApplicationStatus.SUBMITTED,
        ApplicationStatus.PENDING_AUTOMATION,
    }
)


class ActorType(str, Enum):
    """Who created or changed a record."""

    USER = "user"
    CLIENT_USER = "client-user"
    SYSTEM = "system"


@dataclass
class Application:
    """
    A single credit-limit request for a client/debtor pair.

    The `stage` tracks intake progress (company, stakeholders, credit limit)
    while `status` tracks the decision lifecycle.
    """

    application_id: str
    client_id: UUID
    debtor_id: UUID
    client_debtor_id: UUID
    stage: int = 1
    status: ApplicationStatus = ApplicationStatus.DRAFT
    credit_limit: Optional[int] = None
    accepted_amount: Optional[int] = None
    blockers: List[str] = field(default_factory=list)
    is_auto_approved: bool = False
    approval_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    is_extended_payment_terms: bool = False
    extended_payment_terms_details: str = ""
    is_passed_overdue_amount: bool = False
    passed_overdue_details: str = ""
    outstanding_amount: Optional[int] = None
    order_on_hand: Optional[int] = None
    note: str = ""
    created_by_type: ActorType = ActorType.SYSTEM
    created_by_id: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_open(self) -> bool:
        """Whether this application blocks a new one for the same pair."""
        return self.status not in CLOSED_STATUSES

    @property
    def is_awaiting_decision(self) -> bool:
        return self.status in AWAITING_DECISION_STATUSES

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": str(self.id),
            "application_id": self.application_id,
            "client_id": str(self.client_id),
            "debtor_id": str(self.debtor_id),
            "client_debtor_id": str(self.client_debtor_id),
            "stage": self.stage,
            "status": self.status.value,
            "credit_limit": self.credit_limit,
            "accepted_amount": self.accepted_amount,
            "blockers": list(self.blockers),
            "is_auto_approved": self.is_auto_approved,
            "approval_date": (
                self.approval_date.isoformat() + "Z" if self.approval_date else None
            ),
            "expiry_date": (
                self.expiry_date.isoformat() + "Z" if self.expiry_date else None
            ),
        }
