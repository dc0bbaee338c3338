from __future__ import annotations

from typing import Optional

from .base import D, Rule, RuleResult, register


@register
class ExperienceBandRule(Rule):
    """
    Fires when experienceYears < below, or experienceYears > above.
    Exactly one of the two bounds must be configured.
    """

    type_name = "experience_band"

    def _bound(self, key: str) -> Optional[D]:
        raw = self.params.get(key)
        return None if raw is None else D(str(raw))

    def validate_params(self) -> None:
        below, above = self._bound("below"), self._bound("above")
        if (below is None) == (above is None):
            raise ValueError("experience_band needs exactly one of params.below / params.above")
        self.template()

    def evaluate(self, ctx) -> RuleResult:
        years = ctx.request.experience_years
        below, above = self._bound("below"), self._bound("above")
        meta = {"experience_years": str(years)}

        if below is not None and years < below:
            return RuleResult.applied(self.template().render(ctx), {**meta, "below": str(below)})
        if above is not None and years > above:
            return RuleResult.applied(self.template().render(ctx), {**meta, "above": str(above)})
        return RuleResult.skipped(meta)
