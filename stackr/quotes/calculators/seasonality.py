from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Tuple

from ..engine.context import Season
from ..engine.tables import PricingTables

D = Decimal

_SEASON_BY_MONTH = {
    3: Season.SPRING,
    4: Season.SPRING,
    5: Season.SPRING,
    6: Season.SUMMER,
    7: Season.SUMMER,
    8: Season.SUMMER,
    9: Season.FALL,
    10: Season.FALL,
    11: Season.FALL,
}


def season_for(today: date) -> Season:
    """March-May spring, June-August summer, September-November fall, else winter."""
    return _SEASON_BY_MONTH.get(today.month, Season.WINTER)


def calc_seasonality_factor(
    tables: PricingTables, industry: str, season: Season
) -> Tuple[D, Dict[str, Any]]:
    row = tables.seasonality.get(industry)
    if row is None:
        return D("1.0"), {"reason": "industry_not_seasonal", "season": season.value}
    return row.get(season, D("1.0")), {"season": season.value}
