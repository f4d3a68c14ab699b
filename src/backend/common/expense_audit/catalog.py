from __future__ import annotations

import argparse
import json
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from .config import RiskWeights
from .errors import RuleCatalogError
from .linkage import new_request_type_id, new_rule_id
from .models import ALL, RequestType, Rule, RuleKind
from .registry import registry

# Ensure built-in checks are imported/registered when generating a catalog.
from . import checks as _builtin_checks  # noqa: F401


RECEIPT_TYPES = (
    "invoice",
    "receipt",
    "train ticket",
    "air ticket",
    "taxi receipt",
    "contract",
    "itinerary",
    "other",
)

DEFAULT_REQUEST_TYPE_NAMES = (
    "Daily Expenses",
    "Business Travel",
    "Small Purchases",
    "Client Entertainment",
    "Team Building",
    "Training & Conferences",
    "Other",
)


DEFAULT_RULES: tuple[Rule, ...] = (
    Rule(
        id="1",
        name="Large expense alert",
        kind=RuleKind.MAX_AMOUNT,
        threshold=2000,
        description="Single expenses above 2000 need a closer review.",
        linked_request_type=ALL,
    ),
    Rule(
        id="2",
        name="No entertainment expenses",
        kind=RuleKind.FORBIDDEN_CATEGORY,
        threshold="entertainment",
        description="Karaoke, spa and similar entertainment costs are not reimbursable.",
        linked_request_type=ALL,
    ),
    Rule(
        id="3",
        name="Weekend spending check",
        kind=RuleKind.WEEKEND_BAN,
        threshold=ALL,
        enabled=False,
        description="Costs incurred on non-working days need manual review.",
        linked_request_type=ALL,
    ),
    Rule(
        id="4",
        name="Merchant name required",
        kind=RuleKind.REQUIRED_FIELD,
        threshold="Merchant",
        description="Blocks receipts where no merchant name was recognised.",
        linked_request_type=ALL,
    ),
    Rule(
        id="5",
        name="Tobacco and alcohol",
        kind=RuleKind.FORBIDDEN_CATEGORY,
        threshold="tobacco",
        description="Tobacco and alcohol purchases are not reimbursable.",
        linked_request_type=ALL,
    ),
    Rule(
        id="6",
        name="Taxi fare limit",
        kind=RuleKind.MAX_AMOUNT,
        threshold=200,
        description="A single taxi receipt may not exceed 200.",
        applicable_document_type="taxi receipt",
        linked_request_type=ALL,
    ),
)


class RulePreset(BaseModel):
    name: str
    kind: RuleKind
    threshold: Any = None
    description: str = ""
    applicable_document_type: str = ALL

    @field_validator("applicable_document_type")
    @classmethod
    def _known_document_type(cls, value: str) -> str:
        if value != ALL and value not in RECEIPT_TYPES:
            raise ValueError(f"Unknown receipt type: {value!r}")
        return value

    def instantiate(self, rule_id: Optional[str] = None) -> Rule:
        """Build an enabled rule from this preset; a fresh id is minted when none is given."""
        return Rule(
            id=rule_id or new_rule_id(),
            name=self.name,
            kind=self.kind,
            threshold=self.threshold,
            description=self.description,
            applicable_document_type=self.applicable_document_type,
        )


PRESET_RULES: tuple[RulePreset, ...] = (
    RulePreset(
        name="Large expense alert",
        kind=RuleKind.MAX_AMOUNT,
        threshold=2000,
        description="Single expenses above 2000 need a closer review.",
    ),
    RulePreset(
        name="No entertainment expenses",
        kind=RuleKind.FORBIDDEN_CATEGORY,
        threshold="entertainment",
        description="Karaoke, spa and similar entertainment costs are not reimbursable.",
    ),
    RulePreset(
        name="Weekend spending check",
        kind=RuleKind.WEEKEND_BAN,
        threshold=ALL,
        description="Costs incurred on non-working days must be explained.",
    ),
    RulePreset(
        name="Merchant name required",
        kind=RuleKind.REQUIRED_FIELD,
        threshold="Merchant",
        description="Blocks receipts where no merchant name was recognised.",
    ),
    RulePreset(
        name="Taxi fare limit",
        kind=RuleKind.MAX_AMOUNT,
        threshold=200,
        description="A single taxi receipt may not exceed 200.",
        applicable_document_type="taxi receipt",
    ),
)


def default_request_types(
    rules: Sequence[Rule],
    *,
    names: Iterable[str] = DEFAULT_REQUEST_TYPE_NAMES,
    id_factory: Callable[[], str] = new_request_type_id,
) -> List[RequestType]:
    """Seed request types for a fresh install, each linked to every rule."""
    rule_ids = tuple(rule.id for rule in rules)
    return [RequestType(id=id_factory(), name=name, linked_rule_ids=rule_ids) for name in names]


def load_rule_catalog(payload: Any) -> List[Rule]:
    """Validate an imported rule catalog (a JSON array of rule objects).

    Every entry needs ``id``, ``type`` (or ``kind``) and ``name``; the whole
    import is rejected otherwise.
    """
    if not isinstance(payload, list):
        raise RuleCatalogError("Rule catalog must be a JSON array of rules.")

    rules: List[Rule] = []
    seen: set[str] = set()
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise RuleCatalogError(f"Rule #{index} must be an object.")
        kind = entry.get("type", entry.get("kind"))
        if not entry.get("id") or not kind or not entry.get("name"):
            raise RuleCatalogError(f"Rule #{index} is missing one of: id, type, name.")
        raw = {k: v for k, v in entry.items() if k != "kind"}
        raw["type"] = kind
        raw["id"] = str(entry["id"])
        try:
            rule = Rule.model_validate(raw)
        except ValidationError as exc:
            raise RuleCatalogError(f"Rule #{index} is invalid: {exc}") from exc
        if rule.id in seen:
            raise RuleCatalogError(f"Duplicate rule id in catalog: {rule.id}")
        seen.add(rule.id)
        rules.append(rule)
    return rules


def dump_rule_catalog(rules: Iterable[Rule]) -> List[Dict[str, Any]]:
    return [rule.model_dump(mode="json", by_alias=True, exclude_none=True) for rule in rules]


def load_request_types(payload: Any) -> List[RequestType]:
    if not isinstance(payload, list):
        raise RuleCatalogError("Request types must be a JSON array.")
    try:
        return [RequestType.model_validate(entry) for entry in payload]
    except ValidationError as exc:
        raise RuleCatalogError(f"Invalid request type: {exc}") from exc


def dump_request_types(request_types: Iterable[RequestType]) -> List[Dict[str, Any]]:
    return [rt.model_dump(mode="json", by_alias=True, exclude_none=True) for rt in request_types]


class KindCatalogEntry(BaseModel):
    kind: str
    title: str
    weight: int
    threshold_semantics: str

    module: str
    class_name: str


def build_kind_catalog(weights: Optional[RiskWeights] = None) -> List[KindCatalogEntry]:
    weights = weights or RiskWeights()
    entries: List[KindCatalogEntry] = []
    for kind in registry.kinds():
        check_cls = registry.get(kind)
        entries.append(
            KindCatalogEntry(
                kind=kind,
                title=getattr(check_cls, "title", ""),
                weight=weights.weight_for(kind),
                threshold_semantics=getattr(check_cls, "threshold_semantics", ""),
                module=getattr(check_cls, "__module__", ""),
                class_name=getattr(check_cls, "__name__", ""),
            )
        )

    entries.sort(key=lambda e: e.kind)
    return entries


def _dump_json(catalog: list[dict[str, Any]]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True, ensure_ascii=False)


def _dump_yaml(catalog: list[dict[str, Any]]) -> str:
    return yaml.safe_dump(catalog, sort_keys=True, allow_unicode=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Print the rule kinds the engine can evaluate.")
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    parser.add_argument(
        "--defaults",
        action="store_true",
        help="Print the default rule catalog instead of the rule kinds.",
    )
    args = parser.parse_args(argv)

    if args.defaults:
        catalog = dump_rule_catalog(DEFAULT_RULES)
    else:
        catalog = [e.model_dump() for e in build_kind_catalog()]
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()
