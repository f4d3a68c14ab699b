"""Source-agnostic audit engine for expense receipts.

This package intentionally contains only domain logic:
- Inputs are OCR-extracted document fields, the rule catalog and the
  request type (category) catalog, all passed explicitly on every call.
- No OCR, storage, or network calls live here.
"""

from .config import RiskWeights
from .evaluator import AuditEvaluator, evaluate
from .linkage import active_rule_ids_for, migrate_linkage
from .models import (
    ALL,
    AuditResult,
    Document,
    LineItem,
    LinkageState,
    RequestType,
    Rule,
    RuleKind,
)

# Import built-in checks so they self-register with the global registry.
from . import checks as _builtin_checks  # noqa: F401
