"""Result of classifying a debtor's legal entity type."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class EntityClassification(str, Enum):
    """Classification tokens understood by the insurer rules."""

    COMPANY = "company"
    INDIVIDUAL = "individual"
    SOLE_TRADER = "sole_trader"
    PARTNERSHIP = "partnership"
    TRUST = "trust"
    GOVERNMENT = "government"


@dataclass(frozen=True)
class ClassificationResult:
    """
    Outcome of the entity classifier.

    `continue_automation` is False when the classifier itself found a
    reason to stop; its reasons are carried in `blockers`.
    """

    classification: Optional[EntityClassification]
    blockers: List[str] = field(default_factory=list)
    continue_automation: bool = True
