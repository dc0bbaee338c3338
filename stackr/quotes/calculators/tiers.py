from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple

from ..engine.context import TierName, TierOption, money
from ..engine.tables import PricingTables

D = Decimal

TIER_MULTIPLIERS = (
    (TierName.BASIC, D("0.85")),
    (TierName.STANDARD, D("1.0")),
    (TierName.PREMIUM, D("1.25")),
)
# keeps 1 - margin > 0 for very high base margins
TIER_MARGIN_CAP = D("0.95")


def calc_cost_base(labor_hours: D, labor_rate: D, material_cost: D) -> D:
    return money(labor_hours * labor_rate) + money(material_cost)


def price_for_margin(cost_base: D, margin: D) -> D:
    """round(costBase / (1 - margin)) to whole currency units, half up."""
    return (cost_base / (D("1") - margin)).quantize(D("1"), rounding=ROUND_HALF_UP)


def build_tiers(
    tables: PricingTables, industry: str, base_margin: D, cost_base: D
) -> Tuple[TierOption, ...]:
    """
    Basic / Standard / Premium from the *parameter* base margin
    (x0.85 / x1.0 / x1.25). Prices are non-decreasing because
    price_for_margin is increasing in margin.
    """
    out = []
    for tier, multiplier in TIER_MULTIPLIERS:
        tier_margin = min(TIER_MARGIN_CAP, base_margin * multiplier)
        price = price_for_margin(cost_base, tier_margin)
        content = tables.tier_content_for(industry, tier)
        out.append(
            TierOption(
                name=tier.value,
                description=content.description,
                price=price,
                profit=money(price - cost_base),
                profit_margin=tier_margin,
                features=content.features,
                recommended=tier is TierName.STANDARD,
            )
        )
    return tuple(out)
