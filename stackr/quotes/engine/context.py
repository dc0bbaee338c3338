from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from .errors import InvalidParametersError

D = Decimal

COMPLEXITY_LEVELS = ("low", "medium", "high")

# Numeric defaults for missing / non-numeric input
DEFAULT_LABOR_HOURS = D("0")
DEFAULT_LABOR_RATE = D("75")
DEFAULT_MATERIAL_COST = D("0")
DEFAULT_EXPERIENCE_YEARS = D("0")

_REQUEST_NUMERIC_DEFAULTS = (
    ("labor_hours", DEFAULT_LABOR_HOURS),
    ("labor_rate", DEFAULT_LABOR_RATE),
    ("material_cost", DEFAULT_MATERIAL_COST),
    ("experience_years", DEFAULT_EXPERIENCE_YEARS),
)


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"


class MarketPosition(str, Enum):
    BELOW = "below-market"
    AT = "at-market"
    ABOVE = "above-market"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TierName(str, Enum):
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"


DEFAULT_REGION = "default"
DEFAULT_INDUSTRY = "default"
DEFAULT_JOB_TYPE = "default"


def to_decimal(value: Any, default: D) -> D:
    """
    Lenient numeric coercion: None, "", "abc", NaN and negatives -> default.
    bool is rejected too (True is not 1 hour of labor).
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        d = D(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not d.is_finite() or d < 0:
        return default
    return d


_TRUE_STRINGS = frozenset({"true", "1", "yes", "on", "t", "y"})


def to_bool(value: Any) -> bool:
    """"false", "0", "no" and anything unrecognised -> False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, D)):
        return value == 1
    return str(value or "").strip().lower() in _TRUE_STRINGS


def money(value: D) -> D:
    return value.quantize(D("0.01"), rounding=ROUND_HALF_UP)


def normalize_level(value: Any) -> str:
    v = str(value or "").strip().lower()
    return v if v in COMPLEXITY_LEVELS else "medium"


def normalize_key(value: Any) -> str:
    return " ".join(str(value or "").strip().lower().split())


# -----------------------------
# Input
# -----------------------------


@dataclass(frozen=True)
class ServiceRequest:
    job_type: str
    service_industry: str = ""
    description: str = ""
    labor_hours: D = DEFAULT_LABOR_HOURS
    labor_rate: D = DEFAULT_LABOR_RATE
    material_cost: D = DEFAULT_MATERIAL_COST
    location: str = ""
    experience_years: D = DEFAULT_EXPERIENCE_YEARS
    complexity: str = "medium"
    competition_level: str = "medium"
    is_urgent: bool = False
    customer_name: str = ""
    quote_name: str = ""

    def __post_init__(self) -> None:
        if not str(self.job_type or "").strip():
            raise ValueError("job_type is required")
        # frozen: coerce plain int/float/str numbers in place
        for name, default in _REQUEST_NUMERIC_DEFAULTS:
            object.__setattr__(self, name, to_decimal(getattr(self, name), default))

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "ServiceRequest":
        """
        Accepts camelCase (UI payload) or snake_case keys.
        Missing / non-numeric numbers fall back to their defaults.
        """

        def pick(*keys: str) -> Any:
            for k in keys:
                if k in d:
                    return d[k]
            return None

        return ServiceRequest(
            job_type=str(pick("jobType", "job_type") or "").strip(),
            service_industry=str(
                pick("serviceIndustry", "service_industry") or ""
            ).strip(),
            description=str(pick("description") or ""),
            labor_hours=to_decimal(
                pick("laborHours", "labor_hours"), DEFAULT_LABOR_HOURS
            ),
            labor_rate=to_decimal(pick("laborRate", "labor_rate"), DEFAULT_LABOR_RATE),
            material_cost=to_decimal(
                pick("materialCost", "material_cost"), DEFAULT_MATERIAL_COST
            ),
            location=str(pick("location") or ""),
            experience_years=to_decimal(
                pick("experienceYears", "experience_years"), DEFAULT_EXPERIENCE_YEARS
            ),
            complexity=normalize_level(pick("complexity")),
            competition_level=normalize_level(
                pick("competitionLevel", "competition_level")
            ),
            is_urgent=to_bool(pick("isUrgent", "is_urgent")),
            customer_name=str(pick("customerName", "customer_name") or ""),
            quote_name=str(pick("quoteName", "quote_name") or "").strip(),
        )


# -----------------------------
# Industry parameters
# -----------------------------


@dataclass(frozen=True)
class IndustryParameters:
    industry: str
    base_margin: D
    labor_multiplier: D
    material_markup: D
    experience_weight: D
    region_factor: D
    complexity_factors: Tuple[Tuple[str, D], ...]

    def complexity_factor(self, level: str) -> D:
        return dict(self.complexity_factors).get(level, D("1.0"))

    @staticmethod
    def from_dict(industry: str, d: Mapping[str, Any]) -> "IndustryParameters":
        def num(key: str) -> D:
            raw = d.get(key)
            if raw is None or isinstance(raw, bool):
                raise InvalidParametersError(industry, f"{key} is missing")
            try:
                v = D(str(raw))
            except (InvalidOperation, ValueError):
                raise InvalidParametersError(industry, f"{key} is not numeric: {raw!r}")
            if not v.is_finite() or v < 0:
                raise InvalidParametersError(industry, f"{key} must be >= 0, got {raw!r}")
            return v

        base_margin = num("baseMargin")
        if not (D("0") < base_margin < D("1")):
            raise InvalidParametersError(
                industry, f"baseMargin must be in (0, 1), got {base_margin}"
            )

        complexity = d.get("complexity")
        if not isinstance(complexity, Mapping):
            raise InvalidParametersError(industry, "complexity must be a mapping")

        factors = []
        for level in COMPLEXITY_LEVELS:
            if level not in complexity:
                raise InvalidParametersError(
                    industry, f"complexity.{level} is missing"
                )
            try:
                f = D(str(complexity[level]))
            except (InvalidOperation, ValueError):
                raise InvalidParametersError(
                    industry, f"complexity.{level} is not numeric"
                )
            if not f.is_finite() or f <= 0:
                raise InvalidParametersError(
                    industry, f"complexity.{level} must be > 0"
                )
            factors.append((level, f))

        return IndustryParameters(
            industry=industry,
            base_margin=base_margin,
            labor_multiplier=num("laborMultiplier"),
            material_markup=num("materialMarkup"),
            experience_weight=num("experienceWeight"),
            region_factor=num("regionFactor"),
            complexity_factors=tuple(factors),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseMargin": str(self.base_margin),
            "laborMultiplier": str(self.labor_multiplier),
            "materialMarkup": str(self.material_markup),
            "experienceWeight": str(self.experience_weight),
            "regionFactor": str(self.region_factor),
            "complexity": {k: str(v) for k, v in self.complexity_factors},
        }


# -----------------------------
# Output models
# -----------------------------


@dataclass(frozen=True)
class MarginFactors:
    base_margin: D
    complexity: D
    experience: D
    seasonal: D
    region: D
    competition: D
    urgency: D
    raw_margin: D


@dataclass(frozen=True)
class CompetitivePosition:
    position: MarketPosition
    percent_diff: D


@dataclass(frozen=True)
class TierOption:
    name: str
    description: str
    price: D
    profit: D
    profit_margin: D
    features: Tuple[str, ...] = ()
    recommended: bool = False


@dataclass(frozen=True)
class DepositPolicy:
    required: bool
    percent: int
    amount: D
    balance_due: D


@dataclass(frozen=True)
class Recommendation:
    type: str
    title: str
    description: str
    priority: Priority


@dataclass(frozen=True)
class Quote:
    quote_name: str
    customer_name: str
    job_type: str
    service_industry: str
    description: str
    location: str
    region: str
    currency: str
    labor_hours: D
    labor_rate: D
    labor_cost: D
    material_cost: D
    subtotal: D
    profit_margin: D
    profit_amount: D
    total: D
    deposit: DepositPolicy
    regional_average: D
    competitive_position: CompetitivePosition
    season: Season
    seasonality_factor: D
    margin_factors: MarginFactors
    tiers: Tuple[TierOption, ...]
    recommendations: Tuple[Recommendation, ...]
    created_on: date
    valid_until: date


# -----------------------------
# Recommendation context (per request)
# -----------------------------


@dataclass(frozen=True)
class AdvisoryContext:
    """
    Read-only view of everything computed before the recommendation rules run.
    Rules only read from it; they never change a price.
    """

    request: ServiceRequest
    industry: str
    season: Season
    margin: D
    total: D
    regional_average: D
    competitive_position: CompetitivePosition
    extra: Dict[str, Any] = field(default_factory=dict)

    def template_vars(self) -> Dict[str, Any]:
        return {
            "job_type": self.request.job_type,
            "industry": self.industry,
            "season": self.season.value,
            "margin_pct": f"{self.margin * 100:.1f}",
            "total": f"{self.total:.0f}",
            "regional_average_pct": f"{self.regional_average * 100:.1f}",
            "percent_diff": f"{self.competitive_position.percent_diff:.1f}",
            "experience_years": f"{self.request.experience_years.normalize():f}",
            **self.extra,
        }
