from __future__ import annotations

from decimal import Decimal

from ..engine.context import CompetitivePosition, MarketPosition

D = Decimal

POSITION_THRESHOLD_PCT = D("10")


def evaluate_position(margin: D, benchmark: D) -> CompetitivePosition:
    """
    percentDiff = |margin - benchmark| / benchmark * 100 (2 decimals).
    More than 10% away from the benchmark -> below/above market.
    """
    if benchmark <= 0:
        return CompetitivePosition(position=MarketPosition.AT, percent_diff=D("0.00"))

    percent_diff = (abs(margin - benchmark) / benchmark * D("100")).quantize(D("0.01"))

    if percent_diff > POSITION_THRESHOLD_PCT:
        position = MarketPosition.BELOW if margin < benchmark else MarketPosition.ABOVE
    else:
        position = MarketPosition.AT
    return CompetitivePosition(position=position, percent_diff=percent_diff)
