from __future__ import annotations

import re
from functools import lru_cache
from typing import Pattern, Tuple

from ..engine.context import DEFAULT_REGION
from ..engine.tables import PricingTables, RegionEntry


@lru_cache(maxsize=8)
def _compiled(
    regions: Tuple[RegionEntry, ...],
) -> Tuple[Tuple[Tuple[str, Pattern[str]], ...], Tuple[Tuple[str, Pattern[str]], ...]]:
    # abbreviations: exact case, whole token ("TX" matches "Austin, TX" but not "Texarkana")
    abbrs = tuple(
        (r.name, re.compile(rf"\b{re.escape(s.abbr)}\b"))
        for r in regions
        for s in r.states
    )
    names = tuple(
        (r.name, re.compile(rf"\b{re.escape(s.name)}\b", re.IGNORECASE))
        for r in regions
        for s in r.states
    )
    return abbrs, names


def resolve_region(tables: PricingTables, location: str) -> str:
    """
    Abbreviations are scanned before full names, both in table order.
    First hit wins; nothing found -> "default".
    """
    location = str(location or "")
    if not location.strip():
        return DEFAULT_REGION

    abbrs, names = _compiled(tables.regions)
    for patterns in (abbrs, names):
        for region, pattern in patterns:
            if pattern.search(location):
                return region
    return DEFAULT_REGION
