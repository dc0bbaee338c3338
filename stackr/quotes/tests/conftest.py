from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

import stackr.quotes.rule_types  # noqa: F401 (register all rules)

from stackr.quotes.engine.context import (
    AdvisoryContext,
    CompetitivePosition,
    MarketPosition,
    Season,
    ServiceRequest,
)
from stackr.quotes.engine.quote_engine import QuoteEngine, load_ruleset_file
from stackr.quotes.engine.tables import load_tables, vertical_root

RULESET_PATH = vertical_root() / "rules" / "rule_sets" / "v1.yaml"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def summer_day():
    return date(2025, 7, 15)


@pytest.fixture
def winter_day():
    return date(2025, 1, 15)


@pytest.fixture(scope="session")
def tables():
    return load_tables()


@pytest.fixture(scope="session")
def ruleset():
    # real YAML rule set (schema + executionOrder cross validation)
    return load_ruleset_file(RULESET_PATH)


@pytest.fixture
def engine(tables, ruleset):
    return QuoteEngine(tables, ruleset)


@pytest.fixture
def oil_change():
    return ServiceRequest(
        job_type="Oil Change",
        service_industry="automotive",
        labor_hours=Decimal("0.5"),
        labor_rate=Decimal("95"),
        material_cost=Decimal("45"),
        location="Austin, TX",
        experience_years=Decimal("5"),
        complexity="low",
        competition_level="high",
        is_urgent=False,
        customer_name="Jane Doe",
    )


@pytest.fixture
def make_ctx():
    """Minimal AdvisoryContext for unit-testing rules directly."""

    def _make(
        *,
        job_type="Oil Change",
        industry="automotive",
        season=Season.SUMMER,
        experience_years="5",
        margin="0.31",
        total="134",
        regional_average="0.34",
        position=MarketPosition.AT,
        percent_diff="8.82",
    ):
        return AdvisoryContext(
            request=ServiceRequest(
                job_type=job_type, experience_years=Decimal(experience_years)
            ),
            industry=industry,
            season=season,
            margin=Decimal(margin),
            total=Decimal(total),
            regional_average=Decimal(regional_average),
            competitive_position=CompetitivePosition(
                position=position, percent_diff=Decimal(percent_diff)
            ),
        )

    return _make
