from __future__ import annotations

from dataclasses import dataclass
from decimal import InvalidOperation
from typing import Any, Dict, List, Optional, Tuple, Type

from .context import AdvisoryContext, Recommendation
from .errors import TableError
from ..rule_types.base import DECISION_APPLIED, Rule, RuleResult, rule_registry


# -----------------------
# Ruleset models
# -----------------------


@dataclass(frozen=True)
class RuleSpec:
    id: str
    type: str
    title: str
    enabled: bool = True
    params: Dict[str, Any] | None = None

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "RuleSpec":
        return RuleSpec(
            id=str(d["id"]),
            type=str(d["type"]),
            title=str(d.get("title") or d["id"]),
            enabled=bool(d.get("enabled", True)),
            params=dict(d.get("params") or {}),
        )


def _duplicates(values: List[str]) -> List[str]:
    seen, dups = set(), []
    for v in values:
        if v in seen and v not in dups:
            dups.append(v)
        seen.add(v)
    return dups


@dataclass(frozen=True)
class RuleSet:
    rule_set_version: str
    execution_order: List[str]
    rules: List[RuleSpec]

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "RuleSet":
        rules = [RuleSpec.from_dict(x) for x in d.get("rules", [])]
        execution_order = list(d.get("executionOrder") or [])
        rule_set_version = str(d.get("ruleSetVersion") or d.get("version") or "v1")

        # Cross-validation
        ids = [r.id for r in rules]

        dups = _duplicates(ids)
        if dups:
            raise TableError(f"Duplicate rule ids in ruleset: {dups}")

        dups = _duplicates(execution_order)
        if dups:
            raise TableError(f"Duplicate rule ids in executionOrder: {dups}")

        missing = sorted(set(execution_order) - set(ids))
        if missing:
            raise TableError(f"executionOrder references unknown rule ids: {missing}")

        unlisted = sorted(set(ids) - set(execution_order))
        if unlisted:
            raise TableError(f"Rules not listed in executionOrder: {unlisted}")

        if not execution_order:
            raise TableError("executionOrder must contain at least one rule id.")

        return RuleSet(
            rule_set_version=rule_set_version,
            execution_order=execution_order,
            rules=rules,
        )


# -----------------------
# Runner
# -----------------------


@dataclass(frozen=True)
class RuleTrace:
    rule_id: str
    rule_type: str
    decision: str
    meta: Dict[str, Any]


class RecommendationRunner:
    """
    Deterministic recommendation runner.

    - rules are instantiated once, at load time (unknown type / bad params -> TableError)
    - for rule in executionOrder: evaluate(ctx); each rule yields at most one Recommendation
    - disabled rules are skipped; no short-circuit, no dedup, no re-sorting
    """

    def __init__(self, ruleset: RuleSet):
        self.ruleset = ruleset
        self._compiled: List[Tuple[RuleSpec, Optional[Rule]]] = self._compile(ruleset)

    @staticmethod
    def _compile(ruleset: RuleSet) -> List[Tuple[RuleSpec, Optional[Rule]]]:
        specs: Dict[str, RuleSpec] = {r.id: r for r in ruleset.rules}
        compiled: List[Tuple[RuleSpec, Optional[Rule]]] = []

        for rule_id in ruleset.execution_order:
            spec = specs[rule_id]
            rule_cls: Optional[Type[Rule]] = rule_registry.get(spec.type)
            if rule_cls is None:
                raise TableError(f"Unknown rule type '{spec.type}' (rule '{spec.id}')")

            if not spec.enabled:
                compiled.append((spec, None))
                continue

            try:
                rule = rule_cls(rule_id=spec.id, title=spec.title, params=spec.params or {})
            except (ValueError, InvalidOperation) as e:
                raise TableError(f"Rule '{spec.id}' has invalid params: {e}") from e
            compiled.append((spec, rule))

        return compiled

    def run(self, ctx: AdvisoryContext) -> Tuple[Recommendation, ...]:
        recommendations, _ = self.run_with_trace(ctx)
        return recommendations

    def run_with_trace(
        self, ctx: AdvisoryContext
    ) -> Tuple[Tuple[Recommendation, ...], Tuple[RuleTrace, ...]]:
        out: List[Recommendation] = []
        trace: List[RuleTrace] = []

        for spec, rule in self._compiled:
            if rule is None:
                trace.append(RuleTrace(spec.id, spec.type, "SKIPPED", {"reason": "disabled"}))
                continue

            result: RuleResult = rule.evaluate(ctx)
            trace.append(RuleTrace(spec.id, spec.type, result.decision, result.meta))

            if result.decision == DECISION_APPLIED and result.recommendation is not None:
                out.append(result.recommendation)

        return tuple(out), tuple(trace)
