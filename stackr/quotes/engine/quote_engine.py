from __future__ import annotations

import json
from datetime import date, timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from jsonschema import ValidationError, validate

from stackr.config import Settings, get_settings
from stackr.core.logging_config import logger

from .context import (
    AdvisoryContext,
    IndustryParameters,
    Quote,
    ServiceRequest,
    money,
    normalize_key,
)
from .errors import QuoteGenerationError, TableError
from .parameter_resolver import ParameterResolver
from .rule_runner import RecommendationRunner, RuleSet
from .tables import PricingTables, load_tables
from ..calculators.benchmark import lookup_regional_average
from ..calculators.competitive import evaluate_position
from ..calculators.deposit import calc_deposit
from ..calculators.margin import calc_margin
from ..calculators.region import resolve_region
from ..calculators.seasonality import calc_seasonality_factor, season_for
from ..calculators.tiers import build_tiers, price_for_margin
from ..parameter_store import JsonParameterStore, ParameterOverrideSource


def load_ruleset_file(path: Path | str) -> RuleSet:
    """YAML -> JSON-Schema (rules/schemas/rule_set.schema.json) -> RuleSet cross-validation."""
    ruleset_path = Path(path)

    with ruleset_path.open("r", encoding="utf-8") as f:
        d = yaml.safe_load(f)

    schema_path = ruleset_path.parents[1] / "schemas" / "rule_set.schema.json"
    with schema_path.open("r", encoding="utf-8") as f:
        schema = json.load(f)

    try:
        validate(instance=d, schema=schema)
    except ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path)
        raise TableError(f"{ruleset_path.name} invalid at '{where}': {e.message}") from e
    return RuleSet.from_dict(d)


class QuoteEngine:
    """
    ServiceRequest x IndustryParameters -> Quote.

    Tables and rules are immutable after construction, so a single engine can
    serve concurrent calculations. The only I/O is the optional override fetch
    at the start of generate_quote().
    """

    def __init__(
        self,
        tables: PricingTables,
        ruleset: RuleSet | Dict[str, Any],
        *,
        overrides: Optional[ParameterOverrideSource] = None,
        currency: str = "USD",
        quote_validity_days: int = 30,
        override_timeout_seconds: float = 2.0,
    ):
        self.tables = tables
        self.ruleset = ruleset if isinstance(ruleset, RuleSet) else RuleSet.from_dict(ruleset)
        self.runner = RecommendationRunner(self.ruleset)
        self.resolver = ParameterResolver(
            tables, overrides, timeout_seconds=override_timeout_seconds
        )
        self.currency = currency
        self.quote_validity_days = int(quote_validity_days)

    @classmethod
    def from_yaml_file(
        cls,
        path: Path | str,
        *,
        tables_dir: Optional[Path | str] = None,
        **kwargs: Any,
    ) -> "QuoteEngine":
        tables = load_tables(Path(tables_dir) if tables_dir else None)
        return cls(tables, load_ruleset_file(path), **kwargs)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        overrides: Optional[ParameterOverrideSource] = None,
    ) -> "QuoteEngine":
        s = settings or get_settings()
        if overrides is None and s.overrides_path is not None:
            overrides = JsonParameterStore(s.overrides_path)
        return cls.from_yaml_file(
            s.ruleset_path,
            tables_dir=s.tables_dir,
            overrides=overrides,
            currency=s.currency,
            quote_validity_days=s.quote_validity_days,
            override_timeout_seconds=s.override_fetch_timeout_seconds,
        )

    # -----------------
    # pipeline
    # -----------------

    def resolve_industry(self, request: ServiceRequest) -> str:
        explicit = normalize_key(request.service_industry).replace(" ", "_")
        if explicit:
            return explicit
        return self.tables.industry_for_job_type(request.job_type)

    def calculate(
        self,
        request: ServiceRequest,
        params: IndustryParameters,
        *,
        today: date,
        industry: Optional[str] = None,
    ) -> Quote:
        """
        Pure and synchronous: same request, params and date -> equal Quote.
        The margin is computed once here and reused for total and position.
        """
        tables = self.tables
        industry = industry or self.resolve_industry(request)

        season = season_for(today)
        seasonal_factor, _ = calc_seasonality_factor(tables, industry, season)
        margin, factors = calc_margin(request, params, seasonal_factor)

        region = resolve_region(tables, request.location)
        regional_average, _ = lookup_regional_average(tables, request.job_type, region)
        position = evaluate_position(margin, regional_average)

        labor_cost = money(request.labor_hours * request.labor_rate)
        material_cost = money(request.material_cost)
        subtotal = labor_cost + material_cost

        total = price_for_margin(subtotal, margin)
        tiers = build_tiers(tables, industry, params.base_margin, subtotal)
        deposit = calc_deposit(total)

        recommendations = self.runner.run(
            AdvisoryContext(
                request=request,
                industry=industry,
                season=season,
                margin=margin,
                total=total,
                regional_average=regional_average,
                competitive_position=position,
            )
        )

        customer = request.customer_name.strip()
        return Quote(
            quote_name=request.quote_name or f"Quote for {customer or 'Client'}",
            customer_name=customer,
            job_type=request.job_type,
            service_industry=industry,
            description=request.description,
            location=request.location,
            region=region,
            currency=self.currency,
            labor_hours=request.labor_hours,
            labor_rate=request.labor_rate,
            labor_cost=labor_cost,
            material_cost=material_cost,
            subtotal=subtotal,
            profit_margin=margin,
            profit_amount=money(total - subtotal),
            total=total,
            deposit=deposit,
            regional_average=regional_average,
            competitive_position=position,
            season=season,
            seasonality_factor=seasonal_factor,
            margin_factors=factors,
            tiers=tiers,
            recommendations=recommendations,
            created_on=today,
            valid_until=today + timedelta(days=self.quote_validity_days),
        )

    async def generate_quote(
        self,
        request: ServiceRequest,
        user_id: Optional[str] = None,
        *,
        today: Optional[date] = None,
    ) -> Quote:
        """
        Fetch overrides (may suspend), then run the synchronous pipeline.
        Every failure past the fetch surfaces as QuoteGenerationError.
        """
        if today is None:
            today = date.today()

        industry = self.resolve_industry(request)
        log = logger.bind(job_type=request.job_type, industry=industry, user_id=user_id)

        override = await self.resolver.fetch_overrides(user_id, industry)

        try:
            params = self.resolver.to_parameters(industry, override)
            quote = self.calculate(request, params, today=today, industry=industry)
        except Exception as e:
            log.error("quote_generation_failed", error=repr(e))
            raise QuoteGenerationError(
                "quote generation failed", cause=e, job_type=request.job_type
            ) from e

        log.info(
            "quote_generated",
            region=quote.region,
            margin=str(quote.profit_margin),
            total=str(quote.total),
            position=quote.competitive_position.position.value,
            recommendations=len(quote.recommendations),
        )
        return quote


@lru_cache(maxsize=1)
def get_default_engine() -> QuoteEngine:
    return QuoteEngine.from_settings()


async def generate_quote(
    request: ServiceRequest,
    user_id: Optional[str] = None,
    *,
    today: Optional[date] = None,
    engine: Optional[QuoteEngine] = None,
) -> Quote:
    return await (engine or get_default_engine()).generate_quote(
        request, user_id, today=today
    )
