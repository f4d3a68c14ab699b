from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


ALL = "ALL"

# Placeholder merchant names the OCR service emits when it could not read one.
UNKNOWN_MERCHANT_VALUES = frozenset({"Unknown", "未知"})


class RuleKind(str, Enum):
    MAX_AMOUNT = "MAX_AMOUNT"
    FORBIDDEN_CATEGORY = "FORBIDDEN_CATEGORY"
    WEEKEND_BAN = "WEEKEND_BAN"
    REQUIRED_FIELD = "REQUIRED_FIELD"


class LinkageState(str, Enum):
    LEGACY = "LEGACY"
    LINKED = "LINKED"


def kind_key(kind: Any) -> str:
    """Normalize a rule kind (enum member or raw string) to its wire value."""
    if isinstance(kind, Enum):
        return str(kind.value)
    return str(kind)


class Rule(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    description: str = ""
    # Kept as a plain string so rules of an unknown kind still load and stay inert.
    kind: str = Field(alias="type")
    threshold: Union[int, float, str, None] = Field(default=None, alias="value")
    enabled: bool = True
    applicable_document_type: str = Field(default=ALL, alias="receiptType")
    # Deprecated single-category tag; only read when migrating old catalogs.
    linked_request_type: Optional[str] = Field(default=None, alias="linkedRequestType")

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return kind_key(value)
        return value

    @field_validator("applicable_document_type", mode="before")
    @classmethod
    def _default_document_type(cls, value: Any) -> Any:
        if value is None or value == "":
            return ALL
        return value

    def applies_to_document_type(self, document_type: str) -> bool:
        if not self.applicable_document_type or self.applicable_document_type == ALL:
            return True
        return self.applicable_document_type in (document_type or "")


class RequestType(BaseModel):
    """An expense category and the rule ids that are candidates for it.

    ``linked_rule_ids`` is ``None`` for catalogs stored before per-category
    linkage existed; ``migrate_linkage`` turns those into explicit tuples.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    linked_rule_ids: Optional[Tuple[str, ...]] = Field(default=None, alias="linkedRuleIds")

    @field_validator("linked_rule_ids", mode="after")
    @classmethod
    def _dedupe(cls, value: Optional[Tuple[str, ...]]) -> Optional[Tuple[str, ...]]:
        if value is None:
            return None
        return tuple(dict.fromkeys(value))

    @property
    def linkage_state(self) -> LinkageState:
        if self.linked_rule_ids is None:
            return LinkageState.LEGACY
        return LinkageState.LINKED


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str = ""
    amount: Decimal = Decimal("0")


class Document(BaseModel):
    """Fields extracted from a receipt by the OCR service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    merchant_name: str = Field(default="", alias="merchantName")
    # Calendar date, YYYY-MM-DD. Left as text so unparseable values reach the checks.
    issue_date: str = Field(default="", alias="date")
    total_amount: Decimal = Field(default=Decimal("0"), alias="totalAmount")
    currency: str = ""
    category: str = ""
    document_type: str = Field(default="", alias="type")
    items: Tuple[LineItem, ...] = ()
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class AuditResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    passed: bool
    triggered_rule_ids: Tuple[str, ...] = Field(default=(), alias="triggeredRules")
    score: int = Field(default=0, ge=0, le=100)

    @model_validator(mode="after")
    def _passed_matches_violations(self) -> "AuditResult":
        if self.passed != (len(self.triggered_rule_ids) == 0):
            raise ValueError("passed must be true exactly when no rules were triggered")
        return self
