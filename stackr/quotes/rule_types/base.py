from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Type, TYPE_CHECKING

from ..engine.context import Priority, Recommendation

D = Decimal

# Decisions (avoid string typos)
DECISION_APPLIED = "APPLIED"
DECISION_SKIPPED = "SKIPPED"

if TYPE_CHECKING:
    from ..engine.context import AdvisoryContext


@dataclass(frozen=True)
class RuleResult:
    """
    Result of evaluating a rule.
    - decision: APPLIED / SKIPPED
    - recommendation: set only when APPLIED
    - meta: why the rule fired (or not)
    """

    decision: str
    recommendation: Optional[Recommendation]
    meta: Dict[str, Any]

    @staticmethod
    def applied(
        recommendation: Recommendation, meta: Optional[Dict[str, Any]] = None
    ) -> "RuleResult":
        return RuleResult(
            decision=DECISION_APPLIED, recommendation=recommendation, meta=meta or {}
        )

    @staticmethod
    def skipped(meta: Optional[Dict[str, Any]] = None) -> "RuleResult":
        return RuleResult(decision=DECISION_SKIPPED, recommendation=None, meta=meta or {})


@dataclass(frozen=True)
class RecommendationTemplate:
    """
    params.recommendation in the rule set:
      {type: pricing, title: ..., description: "... {percent_diff}% ...", priority: high}
    description is filled with AdvisoryContext.template_vars().
    """

    type: str
    title: str
    description: str
    priority: Priority

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "RecommendationTemplate":
        if not isinstance(d, Mapping):
            raise ValueError("recommendation must be a mapping")
        for key in ("type", "title", "description"):
            if not str(d.get(key) or "").strip():
                raise ValueError(f"recommendation.{key} is required")
        return RecommendationTemplate(
            type=str(d["type"]),
            title=str(d["title"]),
            description=str(d["description"]),
            priority=Priority(str(d.get("priority") or "medium")),
        )

    def render(self, ctx: "AdvisoryContext") -> Recommendation:
        return Recommendation(
            type=self.type,
            title=self.title,
            description=self.description.format_map(ctx.template_vars()),
            priority=self.priority,
        )


class Rule:
    """
    Base class for all recommendation rules. Every rule must implement evaluate(ctx).

    Rules are read-only: they inspect the AdvisoryContext and emit at most one
    Recommendation. Params are validated once, at construction (rule set load).
    """

    type_name: str = "base"

    def __init__(self, rule_id: str, title: str, params: Dict[str, Any]):
        self.rule_id = str(rule_id)
        self.title = str(title)
        self.params = params or {}
        self.validate_params()

    def validate_params(self) -> None:
        """Override to fail fast on bad params. Raise ValueError."""

    def template(self, key: str = "recommendation") -> RecommendationTemplate:
        return RecommendationTemplate.from_dict(self.params.get(key) or {})

    def evaluate(self, ctx: "AdvisoryContext") -> RuleResult:
        raise NotImplementedError


# Registry: rule_type -> Rule class
rule_registry: Dict[str, Type[Rule]] = {}


def register(rule_cls: Type[Rule]) -> Type[Rule]:
    """
    Decorator to register a rule by its type_name.
    Fails fast on duplicate registrations (useful during dev/reload).
    """
    key = getattr(rule_cls, "type_name", None)
    if not key:
        raise ValueError(f"Rule class {rule_cls.__name__} has no type_name")

    if key in rule_registry and rule_registry[key] is not rule_cls:
        raise ValueError(
            f"Duplicate rule registration for type '{key}': "
            f"{rule_registry[key].__name__} vs {rule_cls.__name__}"
        )

    rule_registry[key] = rule_cls
    return rule_cls
