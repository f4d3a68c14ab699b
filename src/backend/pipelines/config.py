from __future__ import annotations

import json
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from common.expense_audit.config import DEFAULT_FALLBACK_WEIGHT, RiskWeights


load_dotenv()


RULES_PATH_DEFAULT = "data/rules.json"
REQUEST_TYPES_PATH_DEFAULT = "data/request_types.json"


@dataclass(frozen=True)
class AuditEngineConfig:
    rules_path: str
    request_types_path: str
    weights: RiskWeights = field(default_factory=RiskWeights)
    log_level: str = "INFO"


def get_engine_config() -> AuditEngineConfig:
    """
    Load audit engine configuration from environment variables.

    Reads:
      EXPENSE_AUDIT_RULES_PATH, EXPENSE_AUDIT_REQUEST_TYPES_PATH,
      EXPENSE_AUDIT_WEIGHTS (JSON object of kind -> weight overrides),
      EXPENSE_AUDIT_DEFAULT_WEIGHT, EXPENSE_AUDIT_LOG_LEVEL
    """
    default_weight = _int_env("EXPENSE_AUDIT_DEFAULT_WEIGHT", DEFAULT_FALLBACK_WEIGHT)
    weights = RiskWeights(default_weight=default_weight).with_overrides(_weight_overrides())

    return AuditEngineConfig(
        rules_path=os.getenv("EXPENSE_AUDIT_RULES_PATH", RULES_PATH_DEFAULT).strip() or RULES_PATH_DEFAULT,
        request_types_path=(
            os.getenv("EXPENSE_AUDIT_REQUEST_TYPES_PATH", REQUEST_TYPES_PATH_DEFAULT).strip()
            or REQUEST_TYPES_PATH_DEFAULT
        ),
        weights=weights,
        log_level=os.getenv("EXPENSE_AUDIT_LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer (got {raw!r}).") from exc
    if value < 0:
        raise ValueError(f"{name} must be >= 0 (got {value}).")
    return value


def _weight_overrides() -> dict[str, int]:
    raw = os.getenv("EXPENSE_AUDIT_WEIGHTS", "").strip()
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("EXPENSE_AUDIT_WEIGHTS must be a JSON object.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("EXPENSE_AUDIT_WEIGHTS must be a JSON object.")
    overrides: dict[str, int] = {}
    for kind, weight in parsed.items():
        if isinstance(weight, bool) or not isinstance(weight, int) or weight < 0:
            raise ValueError(f"EXPENSE_AUDIT_WEIGHTS[{kind!r}] must be a non-negative integer.")
        overrides[str(kind)] = weight
    return overrides
