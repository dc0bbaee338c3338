# stackr/quotes/schemas/quote_output_v1.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, List, Literal

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from ..engine.context import Quote

# Decimal inside, JSON number on the wire
Number = Annotated[
    Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")
]


class _Out(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class DepositV1(_Out):
    required: bool
    percent: int
    amount: Number
    balance_due: Number


class CompetitivePositionV1(_Out):
    position: Literal["below-market", "at-market", "above-market"]
    percent_diff: Number


class MarginFactorsV1(_Out):
    base_margin: Number
    complexity: Number
    experience: Number
    seasonal: Number
    region: Number
    competition: Number
    urgency: Number
    raw_margin: Number


class TierOptionV1(_Out):
    name: Literal["basic", "standard", "premium"]
    description: str
    price: Number
    profit: Number
    profit_margin: Number
    features: List[str]
    recommended: bool


class RecommendationV1(_Out):
    type: str
    title: str
    description: str
    priority: Literal["low", "medium", "high"]


class QuoteOutputV1(_Out):
    """
    Wire contract for a Quote:
    - every Quote field, nothing else (extra="forbid")
    - tiers in basic/standard/premium order, recommendations in rule order
    - camelCase keys, decimals as JSON numbers
    """

    version: Literal["v1"] = "v1"
    quote_name: str
    customer_name: str
    job_type: str
    service_industry: str
    description: str
    location: str
    region: str
    currency: str
    labor_hours: Number
    labor_rate: Number
    labor_cost: Number
    material_cost: Number
    subtotal: Number
    profit_margin: Number
    profit_amount: Number
    total: Number
    deposit: DepositV1
    regional_average: Number
    competitive_position: CompetitivePositionV1
    season: Literal["spring", "summer", "fall", "winter"]
    seasonality_factor: Number
    margin_factors: MarginFactorsV1
    tiers: List[TierOptionV1]
    recommendations: List[RecommendationV1]
    created_on: date
    valid_until: date

    @classmethod
    def from_quote(cls, q: Quote) -> "QuoteOutputV1":
        mf = q.margin_factors
        return cls(
            quote_name=q.quote_name,
            customer_name=q.customer_name,
            job_type=q.job_type,
            service_industry=q.service_industry,
            description=q.description,
            location=q.location,
            region=q.region,
            currency=q.currency,
            labor_hours=q.labor_hours,
            labor_rate=q.labor_rate,
            labor_cost=q.labor_cost,
            material_cost=q.material_cost,
            subtotal=q.subtotal,
            profit_margin=q.profit_margin,
            profit_amount=q.profit_amount,
            total=q.total,
            deposit=DepositV1(
                required=q.deposit.required,
                percent=q.deposit.percent,
                amount=q.deposit.amount,
                balance_due=q.deposit.balance_due,
            ),
            regional_average=q.regional_average,
            competitive_position=CompetitivePositionV1(
                position=q.competitive_position.position.value,
                percent_diff=q.competitive_position.percent_diff,
            ),
            season=q.season.value,
            seasonality_factor=q.seasonality_factor,
            margin_factors=MarginFactorsV1(
                base_margin=mf.base_margin,
                complexity=mf.complexity,
                experience=mf.experience,
                seasonal=mf.seasonal,
                region=mf.region,
                competition=mf.competition,
                urgency=mf.urgency,
                raw_margin=mf.raw_margin,
            ),
            tiers=[
                TierOptionV1(
                    name=t.name,
                    description=t.description,
                    price=t.price,
                    profit=t.profit,
                    profit_margin=t.profit_margin,
                    features=list(t.features),
                    recommended=t.recommended,
                )
                for t in q.tiers
            ],
            recommendations=[
                RecommendationV1(
                    type=r.type,
                    title=r.title,
                    description=r.description,
                    priority=r.priority.value,
                )
                for r in q.recommendations
            ],
            created_on=q.created_on,
            valid_until=q.valid_until,
        )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
