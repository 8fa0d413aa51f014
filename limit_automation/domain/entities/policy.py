"""Insurance policy entities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4


@dataclass(frozen=True)
class Policy:
    """An insurance policy held by a client."""

    client_id: UUID
    product: str
    inception_date: datetime
    expiry_date: datetime
    discretionary_limit: Optional[int] = None
    excess: Optional[int] = None
    id: UUID = field(default_factory=uuid4)

    def is_in_force(self, at: datetime) -> bool:
        """Check whether the policy covers the given moment."""
        return self.inception_date <= at < self.expiry_date


@dataclass(frozen=True)
class PolicyFigures:
    """
    Effective policy figures used by the insurer rules.

    Each value is taken from the Credit-Insurance policy when it carries one,
    falling back to the Risk-Management policy.
    """

    discretionary_limit: Optional[int] = None
    excess: Optional[int] = None

    @classmethod
    def resolve(cls, ci_policy: Policy, rmp_policy: Policy) -> "PolicyFigures":
        return cls(
            discretionary_limit=ci_policy.discretionary_limit or rmp_policy.discretionary_limit,
            excess=ci_policy.excess or rmp_policy.excess,
        )
