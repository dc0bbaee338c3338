import shutil

import pytest
import yaml

from stackr.quotes.engine.context import MarketPosition, Priority, Season
from stackr.quotes.engine.errors import TableError
from stackr.quotes.engine.quote_engine import load_ruleset_file
from stackr.quotes.engine.rule_runner import RecommendationRunner, RuleSet
from stackr.quotes.engine.tables import vertical_root

REC = {"type": "payment", "title": "Plans", "description": "At {total}"}


def _rule(rule_id, **kw):
    return {"id": rule_id, "type": "total_threshold", "params": {"above": 100, "recommendation": REC}, **kw}


def test_shipped_ruleset_order(ruleset):
    assert ruleset.execution_order == [
        "above_market",
        "below_market",
        "winter_construction",
        "spring_landscaping",
        "new_business",
        "veteran_business",
        "payment_plans",
        "job_upsells",
    ]


@pytest.mark.parametrize(
    "doc,msg",
    [
        ({"executionOrder": ["a"], "rules": [_rule("a"), _rule("a")]}, "Duplicate rule ids in ruleset"),
        ({"executionOrder": ["a", "a"], "rules": [_rule("a")]}, "Duplicate rule ids in executionOrder"),
        ({"executionOrder": ["a", "b"], "rules": [_rule("a")]}, "unknown rule ids"),
        ({"executionOrder": ["a"], "rules": [_rule("a"), _rule("b")]}, "not listed"),
        ({"executionOrder": [], "rules": []}, "at least one"),
    ],
)
def test_ruleset_cross_validation(doc, msg):
    with pytest.raises(TableError, match=msg):
        RuleSet.from_dict(doc)


def test_unknown_rule_type_fails_at_load():
    rs = RuleSet.from_dict({"executionOrder": ["a"], "rules": [{"id": "a", "type": "nope"}]})
    with pytest.raises(TableError, match="Unknown rule type"):
        RecommendationRunner(rs)


def test_invalid_params_fail_at_load():
    rs = RuleSet.from_dict(
        {"executionOrder": ["a"], "rules": [{"id": "a", "type": "total_threshold", "params": {"above": "lots", "recommendation": REC}}]}
    )
    with pytest.raises(TableError, match="invalid params"):
        RecommendationRunner(rs)


def test_disabled_rule_is_skipped(make_ctx):
    rs = RuleSet.from_dict(
        {
            "executionOrder": ["off", "on"],
            "rules": [_rule("off", enabled=False), _rule("on")],
        }
    )
    recs, trace = RecommendationRunner(rs).run_with_trace(make_ctx(total="500"))

    assert len(recs) == 1
    assert [(t.rule_id, t.decision) for t in trace] == [("off", "SKIPPED"), ("on", "APPLIED")]
    assert trace[0].meta == {"reason": "disabled"}


def test_scenario_d_below_market_single_pricing_recommendation(ruleset, make_ctx):
    ctx = make_ctx(
        job_type="Piano Tuning",
        margin="0.272",
        regional_average="0.34",
        position=MarketPosition.BELOW,
        percent_diff="20",
    )
    recs = RecommendationRunner(ruleset).run(ctx)

    pricing = [r for r in recs if r.type == "pricing"]
    assert len(recs) == 1
    assert len(pricing) == 1
    assert pricing[0].priority is Priority.HIGH


def test_rules_do_not_short_circuit(ruleset, make_ctx):
    ctx = make_ctx(
        job_type="Bathroom Remodel",
        industry="construction",
        season=Season.WINTER,
        experience_years="1",
        total="5000",
        position=MarketPosition.ABOVE,
        percent_diff="30",
    )
    recs = RecommendationRunner(ruleset).run(ctx)

    assert [r.type for r in recs] == ["pricing", "seasonal", "experience", "payment", "upsell"]
    assert [r.priority for r in recs] == [
        Priority.MEDIUM,
        Priority.MEDIUM,
        Priority.HIGH,
        Priority.MEDIUM,
        Priority.LOW,
    ]


def _copy_rules_tree(tmp_path):
    src = vertical_root() / "rules"
    dst = tmp_path / "rules"
    shutil.copytree(src, dst)
    return dst / "rule_sets" / "v1.yaml"


def test_ruleset_schema_violation_is_table_error(tmp_path):
    path = _copy_rules_tree(tmp_path)
    doc = yaml.safe_load(path.read_text(encoding="utf-8"))
    doc["rules"][0]["colour"] = "red"
    path.write_text(yaml.safe_dump(doc), encoding="utf-8")

    with pytest.raises(TableError, match="invalid at 'rules/0'"):
        load_ruleset_file(path)
