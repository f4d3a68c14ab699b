from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from common.expense_audit.catalog import (
    DEFAULT_RULES,
    default_request_types,
    dump_request_types,
    load_request_types,
    load_rule_catalog,
)
from common.expense_audit.linkage import migrate_linkage, needs_migration
from common.expense_audit.models import RequestType, Rule


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogInputs:
    rules: tuple[Rule, ...]
    request_types: tuple[RequestType, ...]
    migrated: bool = False


class CatalogStore(Protocol):
    def load_rules(self) -> list[Rule]:
        """Return the full rule catalog, enabled or not."""
        ...

    def load_request_types(self, rules: list[Rule]) -> list[RequestType]:
        """Return the request type catalog as stored (possibly un-migrated)."""
        ...

    def save_request_types(self, request_types: list[RequestType]) -> None:
        ...


@dataclass(frozen=True)
class LocalCatalogStore:
    """JSON files on disk; missing files fall back to the seeded defaults."""

    rules_path: Path
    request_types_path: Path

    def load_rules(self) -> list[Rule]:
        payload = _load_optional_json(self.rules_path)
        if payload is None:
            logger.info("No rule catalog at %s; using default rules.", self.rules_path)
            return list(DEFAULT_RULES)
        return load_rule_catalog(payload)

    def load_request_types(self, rules: list[Rule]) -> list[RequestType]:
        payload = _load_optional_json(self.request_types_path)
        if payload is None:
            logger.info("No request types at %s; seeding defaults.", self.request_types_path)
            return default_request_types(rules)
        return load_request_types(payload)

    def save_request_types(self, request_types: list[RequestType]) -> None:
        self.request_types_path.parent.mkdir(parents=True, exist_ok=True)
        self.request_types_path.write_text(
            json.dumps(dump_request_types(request_types), indent=2, ensure_ascii=False)
        )


def load_catalogs(store: CatalogStore, *, persist_migration: bool = False) -> CatalogInputs:
    """Load both catalogs, migrating legacy request-type linkage when present."""
    rules = store.load_rules()
    request_types = store.load_request_types(rules)
    migrated = False
    if needs_migration(request_types):
        request_types = migrate_linkage(request_types, rules)
        migrated = True
        if persist_migration:
            store.save_request_types(request_types)
    return CatalogInputs(rules=tuple(rules), request_types=tuple(request_types), migrated=migrated)


def _load_optional_json(path: Path) -> Any:
    if not path.exists():
        return None
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)
