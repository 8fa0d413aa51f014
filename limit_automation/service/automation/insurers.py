"""
Insurer Rule Registry.

Each supported insurer has its own underwriting appetite. The registry maps
an identified insurer to an evaluator that inspects the application, the
debtor classification and the effective policy figures, and returns the
blockers that stop the limit from being auto-approved.

An insurer name that matches none of the known keywords resolves to
`Insurer.UNRESOLVED`, which has no evaluator.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from limit_automation.domain.entities import (
    Application,
    EntityClassification,
    PolicyFigures,
)


class Insurer(str, Enum):
    """Insurers with registered underwriting rules."""

    QBE = "qbe"
    BOND = "bond"
    ATRADIUS = "atradius"
    COFACE = "coface"
    EULER = "euler"
    TRAD = "trad"
    UNRESOLVED = "unresolved"

    @property
    def display_name(self) -> str:
        return self.value.upper() if self is Insurer.QBE else self.value.capitalize()


def resolve_insurer(insurer_name: str | None) -> Insurer:
    """
    Identify an insurer from its registered name.

    Matching is a case-insensitive keyword search, so "QBE Insurance
    (Australia) Ltd" resolves to QBE.
    """
    if not insurer_name:
        return Insurer.UNRESOLVED
    lowered = insurer_name.lower()
    for insurer in Insurer:
        if insurer is not Insurer.UNRESOLVED and insurer.value in lowered:
            return insurer
    return Insurer.UNRESOLVED


@dataclass(frozen=True)
class RuleContext:
    """Everything an insurer rule may inspect."""

    application: Application
    classification: Optional[EntityClassification]
    policy: PolicyFigures


Rule = Callable[[RuleContext], Optional[str]]


# =============================================================================
# Appetite Rules
# =============================================================================

def overdue_rule(context: RuleContext) -> Optional[str]:
    """Debtors with amounts overdue past terms need an underwriter."""
    if context.application.is_passed_overdue_amount:
        return "Overdue amount passed terms"
    return None


def extended_terms_rule(context: RuleContext) -> Optional[str]:
    if context.application.is_extended_payment_terms:
        return "Extended payment terms requested"
    return None


def rmp_only_rule(context: RuleContext) -> Optional[str]:
    return "RMP only insurer"


def below_excess_rule(insurer: Insurer) -> Rule:
    """Limits at or below the policy excess are not insured by this insurer."""

    def rule(context: RuleContext) -> Optional[str]:
        excess = context.policy.excess
        limit = context.application.credit_limit or 0
        if excess is not None and limit <= excess:
            return f"Credit limit is within policy excess for {insurer.display_name}"
        return None

    return rule


def excluded_classification_rule(
    insurer: Insurer,
    excluded: Sequence[EntityClassification],
) -> Rule:
    """Build a rule blocking debtor classifications the insurer will not cover."""

    def rule(context: RuleContext) -> Optional[str]:
        if context.classification in excluded:
            label = context.classification.value.replace("_", " ").capitalize()
            return f"{label} debtors are not covered by {insurer.display_name}"
        return None

    return rule


# =============================================================================
# Evaluators and Registry
# =============================================================================

@dataclass(frozen=True)
class InsurerEvaluator:
    """An ordered set of appetite rules for one insurer."""

    insurer: Insurer
    rules: Sequence[Rule]

    def evaluate(self, context: RuleContext) -> List[str]:
        """Run every rule in order and collect the blockers raised."""
        blockers = []
        for rule in self.rules:
            blocker = rule(context)
            if blocker:
                blockers.append(blocker)
        return blockers


class InsurerRegistry:
    """Maps identified insurers to their evaluators."""

    def __init__(self, evaluators: Sequence[InsurerEvaluator] = ()):
        self._evaluators: Dict[Insurer, InsurerEvaluator] = {}
        for evaluator in evaluators:
            self.register(evaluator)

    def register(self, evaluator: InsurerEvaluator) -> None:
        if evaluator.insurer is Insurer.UNRESOLVED:
            raise ValueError("Cannot register rules for an unresolved insurer")
        self._evaluators[evaluator.insurer] = evaluator

    def resolve(self, insurer_name: str | None) -> Insurer:
        """Identify the insurer; unregistered insurers count as unresolved."""
        insurer = resolve_insurer(insurer_name)
        return insurer if insurer in self._evaluators else Insurer.UNRESOLVED

    def evaluate(self, insurer: Insurer, context: RuleContext) -> List[str]:
        evaluator = self._evaluators.get(insurer)
        if evaluator is None:
            return []
        return evaluator.evaluate(context)


def default_registry() -> InsurerRegistry:
    """Registry with the rules of every supported insurer."""
    common = (overdue_rule, extended_terms_rule)

    return InsurerRegistry(
        [
            InsurerEvaluator(Insurer.QBE, common),
            InsurerEvaluator(
                Insurer.BOND,
                common + (
                    excluded_classification_rule(
                        Insurer.BOND, [EntityClassification.SOLE_TRADER]
                    ),
                ),
            ),
            InsurerEvaluator(
                Insurer.ATRADIUS,
                common + (
                    excluded_classification_rule(
                        Insurer.ATRADIUS,
                        [EntityClassification.INDIVIDUAL, EntityClassification.SOLE_TRADER],
                    ),
                    below_excess_rule(Insurer.ATRADIUS),
                ),
            ),
            InsurerEvaluator(
                Insurer.COFACE,
                common + (
                    excluded_classification_rule(
                        Insurer.COFACE, [EntityClassification.TRUST]
                    ),
                    below_excess_rule(Insurer.COFACE),
                ),
            ),
            InsurerEvaluator(Insurer.EULER, common),
            InsurerEvaluator(Insurer.TRAD, (rmp_only_rule,) + common),
        ]
    )
