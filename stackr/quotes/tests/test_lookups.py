from datetime import date
from decimal import Decimal

import pytest

from stackr.quotes.calculators.benchmark import lookup_regional_average
from stackr.quotes.calculators.competitive import evaluate_position
from stackr.quotes.calculators.region import resolve_region
from stackr.quotes.calculators.seasonality import calc_seasonality_factor, season_for
from stackr.quotes.engine.context import MarketPosition, Season

D = Decimal


@pytest.mark.parametrize(
    "month,season",
    [
        (1, Season.WINTER),
        (2, Season.WINTER),
        (3, Season.SPRING),
        (5, Season.SPRING),
        (6, Season.SUMMER),
        (8, Season.SUMMER),
        (9, Season.FALL),
        (11, Season.FALL),
        (12, Season.WINTER),
    ],
)
def test_season_for_month(month, season):
    assert season_for(date(2025, month, 10)) is season


def test_seasonality_lookup(tables):
    assert calc_seasonality_factor(tables, "automotive", Season.SUMMER)[0] == D("1.1")
    assert calc_seasonality_factor(tables, "hvac", Season.WINTER)[0] == D("1.2")


def test_seasonality_unknown_industry_is_neutral(tables):
    factor, meta = calc_seasonality_factor(tables, "default", Season.WINTER)
    assert factor == D("1.0")
    assert meta["reason"] == "industry_not_seasonal"


@pytest.mark.parametrize(
    "location,region",
    [
        ("Austin, TX", "Southwest"),
        ("Portland, Oregon", "West"),
        ("portland, oregon", "West"),
        ("Boston MA 02108", "Northeast"),
        ("Kansas City, MO", "Midwest"),
        # abbreviations are scanned before names
        ("New York, TX", "Southwest"),
        ("Washington, DC", "Southeast"),
        ("Texarkana", "default"),
        ("in the city", "default"),
        ("", "default"),
        ("   ", "default"),
    ],
)
def test_resolve_region(tables, location, region):
    assert resolve_region(tables, location) == region


def test_resolve_region_is_pure(tables):
    assert resolve_region(tables, "Miami, FL") == resolve_region(tables, "Miami, FL") == "Southeast"


def test_resolve_region_handles_none(tables):
    assert resolve_region(tables, None) == "default"


@pytest.mark.parametrize("location", ["austin, tx", "Austin, Tx", "Texarkana", "TXA 12"])
def test_resolve_region_abbreviation_needs_upper_case_token(tables, location):
    # lower-case or embedded "tx" is not an abbreviation match
    assert resolve_region(tables, location) == "default"


def test_resolve_region_name_is_case_insensitive(tables):
    assert resolve_region(tables, "austin, texas") == "Southwest"


def test_benchmark_exact_and_fallbacks(tables):
    assert lookup_regional_average(tables, "Oil Change", "Southwest")[0] == D("0.34")
    assert lookup_regional_average(tables, "oil  change", "Southwest")[0] == D("0.34")
    assert lookup_regional_average(tables, "Oil Change", "default")[0] == D("0.35")

    value, meta = lookup_regional_average(tables, "Piano Tuning", "Southwest")
    assert value == D("0.31")
    assert meta["jobBucket"] == "default"

    assert lookup_regional_average(tables, "Piano Tuning", "default")[0] == D("0.30")


@pytest.mark.parametrize(
    "margin,benchmark,position,diff",
    [
        ("0.31", "0.34", MarketPosition.AT, "8.82"),
        ("0.272", "0.34", MarketPosition.BELOW, "20.00"),
        ("0.40", "0.34", MarketPosition.ABOVE, "17.65"),
        ("0.33", "0.30", MarketPosition.AT, "10.00"),
        ("0.30", "0.30", MarketPosition.AT, "0.00"),
    ],
)
def test_competitive_position(margin, benchmark, position, diff):
    out = evaluate_position(D(margin), D(benchmark))
    assert out.position is position
    assert out.percent_diff == D(diff)
