from __future__ import annotations

from ..check import RuleCheck
from ..models import UNKNOWN_MERCHANT_VALUES, Document, Rule, RuleKind
from ..registry import register_check

MERCHANT_FIELD = "Merchant"


@register_check
class REQUIRED_FIELD(RuleCheck):
    kind = RuleKind.REQUIRED_FIELD.value
    title = "Required field"
    threshold_semantics = (
        f"Field token. Only '{MERCHANT_FIELD}' is checked; other tokens never match."
    )

    def is_violation(self, rule: Rule, document: Document) -> bool:
        if rule.threshold != MERCHANT_FIELD:
            return False
        # Compared as-is: padded or whitespace-only names are present.
        merchant = document.merchant_name
        return not merchant or merchant in UNKNOWN_MERCHANT_VALUES
