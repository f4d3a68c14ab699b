"""Category (request type) to rule linkage.

Each request type carries the set of rule ids that are candidates for
documents filed under it. Catalogs stored before that field existed tagged
each rule with a single request type instead; ``migrate_linkage`` derives the
per-category sets from those tags exactly once.

Every function here is pure: inputs are left untouched and fresh lists are
returned, so callers persist whatever comes back.
"""

from __future__ import annotations

import logging
import uuid
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .errors import (
    DuplicateRequestTypeError,
    DuplicateRuleError,
    RequestTypeNotFoundError,
    RuleNotFoundError,
)
from .models import ALL, LinkageState, RequestType, Rule


logger = logging.getLogger(__name__)


def new_rule_id() -> str:
    return uuid.uuid4().hex


def new_request_type_id() -> str:
    return f"rt_{uuid.uuid4().hex}"


def active_rule_ids_for(
    category_name: str,
    request_types: Iterable[RequestType],
) -> Optional[FrozenSet[str]]:
    """Return the rule ids linked to the named category.

    ``None`` means "no restriction": the category is unknown, or it has not
    been migrated yet. Callers must pass it through to the evaluator as-is;
    an empty set would instead mean that no rule applies.
    """
    for request_type in request_types:
        if request_type.name != category_name:
            continue
        if request_type.linked_rule_ids is None:
            return None
        return frozenset(request_type.linked_rule_ids)
    return None


def _legacy_tag_matches(rule: Rule, request_type: RequestType) -> bool:
    tag = rule.linked_request_type
    return not tag or tag == ALL or tag == request_type.id


def _with_links(request_type: RequestType, rule_ids: Iterable[str]) -> RequestType:
    return request_type.model_copy(update={"linked_rule_ids": tuple(dict.fromkeys(rule_ids))})


def migrate_linkage(
    request_types: Sequence[RequestType],
    rules: Sequence[Rule],
) -> List[RequestType]:
    """Populate ``linked_rule_ids`` for request types still in the legacy state.

    A rule is linked to a category when its legacy tag is missing, ``ALL``, or
    equal to the category id. Already-linked categories pass through
    unchanged, so running this on its own output is a no-op.
    """
    migrated: List[RequestType] = []
    count = 0
    for request_type in request_types:
        if request_type.linkage_state is LinkageState.LINKED:
            migrated.append(request_type)
            continue
        linked = [rule.id for rule in rules if _legacy_tag_matches(rule, request_type)]
        migrated.append(_with_links(request_type, linked))
        count += 1

    if count:
        logger.info("Migrated rule linkage for %d request type(s).", count)
    return migrated


def needs_migration(request_types: Iterable[RequestType]) -> bool:
    return any(rt.linkage_state is LinkageState.LEGACY for rt in request_types)


def _require_rule(rules: Sequence[Rule], rule_id: str) -> Rule:
    for rule in rules:
        if rule.id == rule_id:
            return rule
    raise RuleNotFoundError(f"Unknown rule id: {rule_id}")


def add_rule(
    rules: Sequence[Rule],
    request_types: Sequence[RequestType],
    rule: Rule,
) -> Tuple[List[Rule], List[RequestType]]:
    """Append a rule and link it to every migrated request type."""
    if any(existing.id == rule.id for existing in rules):
        raise DuplicateRuleError(f"Rule id already exists: {rule.id}")

    updated_types = [
        rt if rt.linked_rule_ids is None else _with_links(rt, [*rt.linked_rule_ids, rule.id])
        for rt in request_types
    ]
    return [*rules, rule], updated_types


def replace_rule(rules: Sequence[Rule], rule: Rule) -> List[Rule]:
    _require_rule(rules, rule.id)
    return [rule if existing.id == rule.id else existing for existing in rules]


def toggle_rule(rules: Sequence[Rule], rule_id: str) -> List[Rule]:
    current = _require_rule(rules, rule_id)
    return replace_rule(rules, current.model_copy(update={"enabled": not current.enabled}))


def delete_rule(
    rules: Sequence[Rule],
    request_types: Sequence[RequestType],
    rule_id: str,
) -> Tuple[List[Rule], List[RequestType]]:
    """Remove a rule and prune its id from every request type's linkage."""
    _require_rule(rules, rule_id)
    remaining = [rule for rule in rules if rule.id != rule_id]
    updated_types = [
        rt
        if rt.linked_rule_ids is None
        else _with_links(rt, [rid for rid in rt.linked_rule_ids if rid != rule_id])
        for rt in request_types
    ]
    return remaining, updated_types


def prune_dangling_rule_ids(
    request_types: Sequence[RequestType],
    rules: Sequence[Rule],
) -> List[RequestType]:
    known = {rule.id for rule in rules}
    return [
        rt
        if rt.linked_rule_ids is None
        else _with_links(rt, [rid for rid in rt.linked_rule_ids if rid in known])
        for rt in request_types
    ]


def _clean_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError("Request type name must not be blank.")
    return cleaned


def _ensure_unique_name(
    request_types: Sequence[RequestType],
    name: str,
    *,
    exclude_id: Optional[str] = None,
) -> None:
    for rt in request_types:
        if rt.name == name and rt.id != exclude_id:
            raise DuplicateRequestTypeError(f"Request type already exists: {name}")


def add_request_type(
    request_types: Sequence[RequestType],
    name: str,
    rules: Sequence[Rule],
    *,
    type_id: Optional[str] = None,
) -> List[RequestType]:
    """Create a request type linked to every currently known rule."""
    cleaned = _clean_name(name)
    _ensure_unique_name(request_types, cleaned)
    created = RequestType(
        id=type_id or new_request_type_id(),
        name=cleaned,
        linked_rule_ids=tuple(rule.id for rule in rules),
    )
    return [*request_types, created]


def update_request_type(
    request_types: Sequence[RequestType],
    type_id: str,
    *,
    name: Optional[str] = None,
    linked_rule_ids: Optional[Iterable[str]] = None,
) -> List[RequestType]:
    if not any(rt.id == type_id for rt in request_types):
        raise RequestTypeNotFoundError(f"Unknown request type id: {type_id}")

    update: dict = {}
    if name is not None:
        cleaned = _clean_name(name)
        _ensure_unique_name(request_types, cleaned, exclude_id=type_id)
        update["name"] = cleaned
    if linked_rule_ids is not None:
        update["linked_rule_ids"] = tuple(dict.fromkeys(linked_rule_ids))

    return [rt.model_copy(update=update) if rt.id == type_id else rt for rt in request_types]


def remove_request_type(request_types: Sequence[RequestType], type_id: str) -> List[RequestType]:
    if not any(rt.id == type_id for rt in request_types):
        raise RequestTypeNotFoundError(f"Unknown request type id: {type_id}")
    return [rt for rt in request_types if rt.id != type_id]
