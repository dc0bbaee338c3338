from decimal import Decimal

import pytest
from pydantic import ValidationError

from stackr.quotes.engine.context import ServiceRequest
from stackr.quotes.schemas.quote_input_v1 import ServiceRequestV1
from stackr.quotes.schemas.quote_output_v1 import QuoteOutputV1

D = Decimal


def test_camel_case_payload_maps_to_request():
    req = ServiceRequestV1.model_validate(
        {
            "jobType": " Oil Change ",
            "serviceIndustry": "automotive",
            "laborHours": "0.5",
            "laborRate": 95,
            "materialCost": 45,
            "location": "Austin, TX",
            "experienceYears": 5,
            "complexity": "LOW",
            "competitionLevel": "high",
            "isUrgent": False,
            "customerName": "Jane Doe",
        }
    ).to_request()

    assert isinstance(req, ServiceRequest)
    assert req.job_type == "Oil Change"
    assert req.labor_hours == D("0.5")
    assert req.complexity == "low"
    assert req.competition_level == "high"


def test_numbers_default_instead_of_failing():
    m = ServiceRequestV1.model_validate(
        {"jobType": "Haircut", "laborHours": "abc", "laborRate": None, "materialCost": -10, "experienceYears": "nan"}
    )

    assert m.labor_hours == D("0")
    assert m.labor_rate == D("75")
    assert m.material_cost == D("0")
    assert m.experience_years == D("0")


def test_unknown_levels_become_medium():
    m = ServiceRequestV1.model_validate({"jobType": "Haircut", "complexity": "extreme", "competitionLevel": None})
    assert m.complexity == "medium"
    assert m.competition_level == "medium"


def test_snake_case_is_accepted_too():
    m = ServiceRequestV1.model_validate({"job_type": "Haircut", "labor_hours": 2})
    assert m.labor_hours == D("2")


def test_job_type_is_required():
    with pytest.raises(ValidationError):
        ServiceRequestV1.model_validate({"laborHours": 1})
    with pytest.raises(ValidationError):
        ServiceRequestV1.model_validate({"jobType": "   "})


def test_unknown_fields_are_rejected():
    with pytest.raises(ValidationError):
        ServiceRequestV1.model_validate({"jobType": "Haircut", "discount": 50})


@pytest.mark.anyio
async def test_output_preserves_every_field(engine, oil_change, summer_day):
    q = await engine.generate_quote(oil_change, today=summer_day)
    wire = QuoteOutputV1.from_quote(q).to_wire()

    assert wire["version"] == "v1"
    assert wire["jobType"] == "Oil Change"
    assert wire["region"] == "Southwest"
    assert wire["total"] == 134
    assert isinstance(wire["total"], float)
    assert wire["profitMargin"] == 0.31
    assert wire["deposit"] == {"required": False, "percent": 50, "amount": 0, "balanceDue": 134}
    assert wire["competitivePosition"] == {"position": "at-market", "percentDiff": 8.82}
    assert wire["season"] == "summer"
    assert [t["name"] for t in wire["tiers"]] == ["basic", "standard", "premium"]
    assert [t["recommended"] for t in wire["tiers"]] == [False, True, False]
    assert [r["title"] for r in wire["recommendations"]] == [r.title for r in q.recommendations]
    assert wire["createdOn"] == "2025-07-15"
    assert wire["validUntil"] == "2025-08-14"
    assert wire["marginFactors"]["rawMargin"] == pytest.approx(0.309672)


def test_output_rejects_extra_fields():
    with pytest.raises(ValidationError):
        QuoteOutputV1.model_validate({"version": "v1", "unexpected": True})


def test_service_request_from_dict_is_lenient():
    req = ServiceRequest.from_dict(
        {
            "jobType": "Lawn Mowing",
            "labor_hours": "3",
            "laborRate": "",
            "materialCost": True,
            "competitionLevel": "HIGH",
            "quoteName": " Spring cleanup ",
        }
    )

    assert req.labor_hours == D("3")
    assert req.labor_rate == D("75")
    assert req.material_cost == D("0")
    assert req.complexity == "medium"
    assert req.competition_level == "high"
    assert req.quote_name == "Spring cleanup"


def test_service_request_needs_job_type():
    with pytest.raises(ValueError):
        ServiceRequest.from_dict({"laborHours": 2})


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("false", False),
        ("False", False),
        ("0", False),
        ("no", False),
        ("off", False),
        ("", False),
        (None, False),
        (0, False),
        ("true", True),
        (" TRUE ", True),
        ("1", True),
        ("yes", True),
        ("on", True),
        (1, True),
        (True, True),
    ],
)
def test_service_request_from_dict_urgency_flag(raw, expected):
    req = ServiceRequest.from_dict({"jobType": "Oil Change", "isUrgent": raw})
    assert req.is_urgent is expected


@pytest.mark.parametrize("raw", ["false", "true", "0", "1"])
def test_urgency_flag_matches_input_schema(raw):
    payload = {"jobType": "Oil Change", "isUrgent": raw}
    from_dict = ServiceRequest.from_dict(payload)
    from_schema = ServiceRequestV1.model_validate(payload).to_request()
    assert from_dict.is_urgent is from_schema.is_urgent
