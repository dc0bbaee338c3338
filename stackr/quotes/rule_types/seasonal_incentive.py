from __future__ import annotations

from ..engine.context import Season
from .base import Rule, RuleResult, register


@register
class SeasonalIncentiveRule(Rule):
    """
    params:
      season: winter
      industry: construction
      recommendation: {...}
    """

    type_name = "seasonal_incentive"

    def validate_params(self) -> None:
        Season(str(self.params.get("season")))
        if not str(self.params.get("industry") or "").strip():
            raise ValueError("seasonal_incentive requires params.industry")
        self.template()

    def evaluate(self, ctx) -> RuleResult:
        season = Season(str(self.params["season"]))
        industry = str(self.params["industry"])
        meta = {"season": ctx.season.value, "industry": ctx.industry}

        if ctx.season is not season or ctx.industry != industry:
            return RuleResult.skipped(meta)
        return RuleResult.applied(self.template().render(ctx), meta)
