from __future__ import annotations

from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import RuleKind, kind_key


DEFAULT_KIND_WEIGHTS: Dict[str, int] = {
    RuleKind.FORBIDDEN_CATEGORY.value: 100,
    RuleKind.MAX_AMOUNT.value: 60,
    RuleKind.WEEKEND_BAN.value: 30,
    RuleKind.REQUIRED_FIELD.value: 20,
}

# Weight for kinds that have a check registered but no entry in the table.
DEFAULT_FALLBACK_WEIGHT = 10

MAX_SCORE = 100


class RiskWeights(BaseModel):
    """Risk weight per rule kind, summed over triggered rules and clamped to 0..100."""

    model_config = ConfigDict(frozen=True)

    by_kind: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_KIND_WEIGHTS))
    default_weight: int = Field(default=DEFAULT_FALLBACK_WEIGHT, ge=0)

    @field_validator("by_kind", mode="before")
    @classmethod
    def _normalize_keys(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {kind_key(k): v for k, v in value.items()}
        return value

    @field_validator("by_kind", mode="after")
    @classmethod
    def _non_negative(cls, value: Dict[str, int]) -> Dict[str, int]:
        for kind, weight in value.items():
            if weight < 0:
                raise ValueError(f"Weight for {kind} must be >= 0 (got {weight}).")
        return value

    def weight_for(self, kind: Any) -> int:
        return self.by_kind.get(kind_key(kind), self.default_weight)

    def with_overrides(self, overrides: Mapping[Any, int]) -> "RiskWeights":
        merged = dict(self.by_kind)
        merged.update({kind_key(k): v for k, v in overrides.items()})
        return RiskWeights(by_kind=merged, default_weight=self.default_weight)


def clamp_score(total: int) -> int:
    return min(max(total, 0), MAX_SCORE)
