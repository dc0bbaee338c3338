from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional

from stackr.core.logging_config import logger

from .context import IndustryParameters
from .tables import PricingTables
from ..parameter_store import ParameterOverrideSource


class ParameterResolver:
    """
    Resolves IndustryParameters for one calculation.

    fetch_overrides() is the only awaitable step of the whole pipeline and the
    only one with a timeout. A failing or slow override source degrades to the
    static defaults; it never fails the quote.

    to_parameters() parses what was fetched. Corrupt override data raises
    InvalidParametersError, which the assembler turns into a generation error.
    """

    def __init__(
        self,
        tables: PricingTables,
        overrides: Optional[ParameterOverrideSource] = None,
        *,
        timeout_seconds: float = 2.0,
    ):
        self.tables = tables
        self.overrides = overrides
        self.timeout_seconds = float(timeout_seconds)

    async def fetch_overrides(
        self, user_id: Optional[str], industry: str
    ) -> Optional[Mapping[str, Any]]:
        if not user_id or self.overrides is None:
            return None

        log = logger.bind(user_id=user_id, industry=industry)
        try:
            return await asyncio.wait_for(
                self.overrides.get_industry_parameter_overrides(user_id, industry),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            log.warning(
                "parameter_override_fetch_timeout", timeout_seconds=self.timeout_seconds
            )
        except Exception as e:
            log.warning("parameter_override_fetch_failed", error=repr(e))
        return None

    def to_parameters(
        self, industry: str, override: Optional[Mapping[str, Any]]
    ) -> IndustryParameters:
        if override is not None:
            return IndustryParameters.from_dict(industry, override)
        return self.tables.industry_defaults(industry)

    async def resolve(self, user_id: Optional[str], industry: str) -> IndustryParameters:
        return self.to_parameters(industry, await self.fetch_overrides(user_id, industry))
