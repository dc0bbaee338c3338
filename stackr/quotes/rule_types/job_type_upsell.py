from __future__ import annotations

from typing import Dict

from ..engine.context import normalize_key
from .base import RecommendationTemplate, Rule, RuleResult, register


@register
class JobTypeUpsellRule(Rule):
    """
    Static upsell per known job type (case-insensitive).

    params:
      upsells:
        Bathroom Remodel: {type: upsell, title: ..., description: ..., priority: low}
        Lawn Mowing: {...}
    """

    type_name = "job_type_upsell"

    def _upsells(self) -> Dict[str, RecommendationTemplate]:
        raw = self.params.get("upsells") or {}
        if not isinstance(raw, dict):
            raise ValueError("job_type_upsell params.upsells must be a mapping")
        return {normalize_key(k): RecommendationTemplate.from_dict(v) for k, v in raw.items()}

    def validate_params(self) -> None:
        if not self._upsells():
            raise ValueError("job_type_upsell requires at least one upsell")

    def evaluate(self, ctx) -> RuleResult:
        key = normalize_key(ctx.request.job_type)
        template = self._upsells().get(key)
        if template is None:
            return RuleResult.skipped({"job_type": key, "reason": "no_upsell"})
        return RuleResult.applied(template.render(ctx), {"job_type": key})
