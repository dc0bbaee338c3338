from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple

from ..engine.context import IndustryParameters, MarginFactors, ServiceRequest

D = Decimal

MARGIN_MIN = D("0.15")
MARGIN_MAX = D("0.60")
EXPERIENCE_CAP_YEARS = D("30")

COMPETITION_FACTORS = {
    "high": D("0.92"),
    "medium": D("1.0"),
    "low": D("1.08"),
}
URGENCY_FACTOR = D("1.15")


def round_to_step(value: D) -> D:
    """Nearest 0.005 (x * 200, round half up, / 200)."""
    return (value * 200).quantize(D("1"), rounding=ROUND_HALF_UP) / 200


def clamp(value: D, lo: D = MARGIN_MIN, hi: D = MARGIN_MAX) -> D:
    return max(lo, min(hi, value))


def calc_margin(
    request: ServiceRequest, params: IndustryParameters, seasonal_factor: D
) -> Tuple[D, MarginFactors]:
    """
    Multiplicative margin model:

      base * complexity * (1 + min(30, years) * experienceWeight)
           * seasonal * region * competition * urgency

    then rounded to 0.005 and clamped to [0.15, 0.60].
    Returns (margin, factors) so callers can explain the number.
    """
    complexity = params.complexity_factor(request.complexity)
    years = min(EXPERIENCE_CAP_YEARS, request.experience_years)
    experience = D("1") + years * params.experience_weight
    competition = COMPETITION_FACTORS.get(request.competition_level, D("1.0"))
    urgency = URGENCY_FACTOR if request.is_urgent else D("1.0")

    raw = (
        params.base_margin
        * complexity
        * experience
        * seasonal_factor
        * params.region_factor
        * competition
        * urgency
    )
    margin = clamp(round_to_step(raw))

    factors = MarginFactors(
        base_margin=params.base_margin,
        complexity=complexity,
        experience=experience,
        seasonal=seasonal_factor,
        region=params.region_factor,
        competition=competition,
        urgency=urgency,
        raw_margin=raw,
    )
    return margin, factors
