# stackr/quotes/schemas/quote_input_v1.py
from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..engine.context import (
    DEFAULT_EXPERIENCE_YEARS,
    DEFAULT_LABOR_HOURS,
    DEFAULT_LABOR_RATE,
    DEFAULT_MATERIAL_COST,
    ServiceRequest,
    normalize_level,
    to_decimal,
)

_NUMERIC_DEFAULTS = {
    "labor_hours": DEFAULT_LABOR_HOURS,
    "labor_rate": DEFAULT_LABOR_RATE,
    "material_cost": DEFAULT_MATERIAL_COST,
    "experience_years": DEFAULT_EXPERIENCE_YEARS,
}


class ServiceRequestV1(BaseModel):
    """
    Boundary model for a quote request (camelCase on the wire).
    Allowlist: unknown fields are rejected. Numbers are lenient:
    missing / non-numeric / negative -> default, never a validation error.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    job_type: str = Field(min_length=1)
    service_industry: str = ""
    description: str = ""
    labor_hours: Decimal = DEFAULT_LABOR_HOURS
    labor_rate: Decimal = DEFAULT_LABOR_RATE
    material_cost: Decimal = DEFAULT_MATERIAL_COST
    location: str = ""
    experience_years: Decimal = DEFAULT_EXPERIENCE_YEARS
    complexity: str = "medium"
    competition_level: str = "medium"
    is_urgent: bool = False
    customer_name: str = ""
    quote_name: str = ""

    @field_validator("job_type", mode="before")
    @classmethod
    def _strip_job_type(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator(
        "labor_hours", "labor_rate", "material_cost", "experience_years", mode="before"
    )
    @classmethod
    def _lenient_number(cls, v: Any, info) -> Decimal:
        return to_decimal(v, _NUMERIC_DEFAULTS[info.field_name])

    @field_validator("complexity", "competition_level", mode="before")
    @classmethod
    def _level(cls, v: Any) -> str:
        return normalize_level(v)

    @field_validator(
        "service_industry",
        "description",
        "location",
        "customer_name",
        "quote_name",
        mode="before",
    )
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    def to_request(self) -> ServiceRequest:
        return ServiceRequest(
            job_type=self.job_type,
            service_industry=self.service_industry.strip(),
            description=self.description,
            labor_hours=self.labor_hours,
            labor_rate=self.labor_rate,
            material_cost=self.material_cost,
            location=self.location,
            experience_years=self.experience_years,
            complexity=self.complexity,
            competition_level=self.competition_level,
            is_urgent=self.is_urgent,
            customer_name=self.customer_name,
            quote_name=self.quote_name.strip(),
        )
