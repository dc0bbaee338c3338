from __future__ import annotations

from ..engine.context import MarketPosition
from .base import D, Rule, RuleResult, register


@register
class CompetitivePositionRule(Rule):
    """
    Fires when the quote sits on one side of the regional benchmark by more
    than `min_percent_diff` percent.

    params:
      position: above-market | below-market
      min_percent_diff: 15
      recommendation: {...}
    """

    type_name = "competitive_position"

    def validate_params(self) -> None:
        MarketPosition(str(self.params.get("position")))
        D(str(self.params.get("min_percent_diff", "15")))
        self.template()

    def evaluate(self, ctx) -> RuleResult:
        position = MarketPosition(str(self.params["position"]))
        threshold = D(str(self.params.get("min_percent_diff", "15")))
        actual = ctx.competitive_position

        meta = {
            "position": actual.position.value,
            "percent_diff": str(actual.percent_diff),
            "threshold": str(threshold),
        }
        if actual.position is not position or actual.percent_diff <= threshold:
            return RuleResult.skipped(meta)
        return RuleResult.applied(self.template().render(ctx), meta)
