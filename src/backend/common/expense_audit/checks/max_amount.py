from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from ..check import RuleCheck
from ..models import Document, Rule, RuleKind
from ..registry import register_check


def _threshold_amount(value) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


@register_check
class MAX_AMOUNT(RuleCheck):
    kind = RuleKind.MAX_AMOUNT.value
    title = "Amount ceiling"
    threshold_semantics = "Numeric ceiling; totals strictly above it are violations."

    def is_violation(self, rule: Rule, document: Document) -> bool:
        ceiling = _threshold_amount(rule.threshold)
        if ceiling is None:
            return False
        if not document.total_amount.is_finite():
            return False
        return document.total_amount > ceiling
