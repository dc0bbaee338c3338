from __future__ import annotations

from .base import D, Rule, RuleResult, register


@register
class TotalThresholdRule(Rule):
    """Fires when the headline total is strictly above params.above."""

    type_name = "total_threshold"

    def validate_params(self) -> None:
        if self.params.get("above") is None:
            raise ValueError("total_threshold requires params.above")
        D(str(self.params["above"]))
        self.template()

    def evaluate(self, ctx) -> RuleResult:
        above = D(str(self.params["above"]))
        meta = {"total": str(ctx.total), "above": str(above)}
        if ctx.total > above:
            return RuleResult.applied(self.template().render(ctx), meta)
        return RuleResult.skipped(meta)
