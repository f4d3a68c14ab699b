import json

import pytest
import yaml
from pydantic import ValidationError

from common.expense_audit.catalog import (
    DEFAULT_REQUEST_TYPE_NAMES,
    DEFAULT_RULES,
    PRESET_RULES,
    RECEIPT_TYPES,
    RulePreset,
    build_kind_catalog,
    default_request_types,
    dump_request_types,
    dump_rule_catalog,
    load_request_types,
    load_rule_catalog,
    main,
)
from common.expense_audit.config import RiskWeights
from common.expense_audit.errors import RuleCatalogError
from common.expense_audit.models import ALL, LinkageState, RuleKind


def test_default_rules_cover_every_kind():
    kinds = {rule.kind for rule in DEFAULT_RULES}
    assert kinds == {k.value for k in RuleKind}
    assert len({rule.id for rule in DEFAULT_RULES}) == len(DEFAULT_RULES)
    weekend = next(r for r in DEFAULT_RULES if r.kind == RuleKind.WEEKEND_BAN)
    assert weekend.enabled is False


def test_preset_instantiates_enabled_rule():
    rule = PRESET_RULES[-1].instantiate("abc")
    assert rule.id == "abc"
    assert rule.enabled is True
    assert rule.kind == RuleKind.MAX_AMOUNT
    assert rule.applicable_document_type == "taxi receipt"


def test_preset_mints_fresh_ids():
    first = PRESET_RULES[0].instantiate()
    second = PRESET_RULES[0].instantiate()
    assert first.id and second.id
    assert first.id != second.id


def test_presets_and_defaults_use_known_receipt_types():
    allowed = set(RECEIPT_TYPES) | {ALL}
    assert {p.applicable_document_type for p in PRESET_RULES} <= allowed
    assert {r.applicable_document_type for r in DEFAULT_RULES} <= allowed
    with pytest.raises(ValidationError):
        RulePreset(name="Boat fares", kind=RuleKind.MAX_AMOUNT, threshold=1, applicable_document_type="boat")


def test_default_request_types_link_every_rule():
    ids = iter(f"rt_{n}" for n in range(100))
    types = default_request_types(DEFAULT_RULES, id_factory=lambda: next(ids))
    assert [rt.name for rt in types] == list(DEFAULT_REQUEST_TYPE_NAMES)
    assert types[0].id == "rt_0"
    expected = tuple(rule.id for rule in DEFAULT_RULES)
    assert all(rt.linked_rule_ids == expected for rt in types)


def test_load_rule_catalog_accepts_wire_format():
    payload = [
        {
            "id": 7,
            "name": "Hotel cap",
            "type": "MAX_AMOUNT",
            "value": 800,
            "enabled": True,
            "description": "Nightly hotel limit",
            "receiptType": "invoice",
        },
        {"id": "8", "name": "Weekend", "kind": "WEEKEND_BAN", "enabled": False},
        {"id": "9", "name": "Legacy", "type": "FORBIDDEN_CATEGORY", "value": "bar", "linkedRequestType": "rt_1"},
    ]
    rules = load_rule_catalog(payload)
    assert [r.id for r in rules] == ["7", "8", "9"]
    assert rules[0].threshold == 800
    assert rules[0].applicable_document_type == "invoice"
    assert rules[1].kind == "WEEKEND_BAN"
    assert rules[1].applicable_document_type == ALL
    assert rules[2].linked_request_type == "rt_1"


def test_load_rule_catalog_keeps_unknown_kinds():
    rules = load_rule_catalog([{"id": "x", "name": "Future", "type": "SPEND_VELOCITY"}])
    assert rules[0].kind == "SPEND_VELOCITY"


@pytest.mark.parametrize(
    "payload",
    [
        {"id": "1"},
        [{"id": "1", "name": "no kind"}],
        [{"type": "MAX_AMOUNT", "name": "no id"}],
        [{"id": "1", "type": "MAX_AMOUNT"}],
        ["not an object"],
        [
            {"id": "1", "name": "a", "type": "MAX_AMOUNT"},
            {"id": "1", "name": "b", "type": "WEEKEND_BAN"},
        ],
    ],
)
def test_load_rule_catalog_rejects_incomplete_entries(payload):
    with pytest.raises(RuleCatalogError):
        load_rule_catalog(payload)


def test_dump_rule_catalog_round_trips_defaults():
    dumped = dump_rule_catalog(DEFAULT_RULES)
    assert dumped[0]["type"] == "MAX_AMOUNT"
    assert dumped[0]["value"] == 2000
    assert dumped[0]["receiptType"] == ALL
    assert load_rule_catalog(json.loads(json.dumps(dumped))) == list(DEFAULT_RULES)


def test_request_types_load_legacy_and_dump_linked():
    types = load_request_types([{"id": "rt_1", "name": "Travel"}, {"id": "rt_2", "name": "Meals", "linkedRuleIds": ["1"]}])
    assert types[0].linkage_state is LinkageState.LEGACY
    assert types[1].linked_rule_ids == ("1",)
    assert dump_request_types(types) == [
        {"id": "rt_1", "name": "Travel"},
        {"id": "rt_2", "name": "Meals", "linkedRuleIds": ["1"]},
    ]
    with pytest.raises(RuleCatalogError):
        load_request_types({"id": "rt_1"})


def test_build_kind_catalog_reports_weights():
    entries = build_kind_catalog(RiskWeights().with_overrides({RuleKind.WEEKEND_BAN: 45}))
    by_kind = {e.kind: e for e in entries}
    assert set(by_kind) == {k.value for k in RuleKind}
    assert by_kind["WEEKEND_BAN"].weight == 45
    assert by_kind["FORBIDDEN_CATEGORY"].weight == 100
    assert by_kind["MAX_AMOUNT"].class_name == "MAX_AMOUNT"


def test_catalog_main_prints_yaml_and_json(capsys):
    main([])
    kinds = yaml.safe_load(capsys.readouterr().out)
    assert [k["kind"] for k in kinds] == sorted(k.value for k in RuleKind)

    main(["--format", "json", "--defaults"])
    rules = json.loads(capsys.readouterr().out)
    assert [r["id"] for r in rules] == [r.id for r in DEFAULT_RULES]
