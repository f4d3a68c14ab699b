from __future__ import annotations

from ..check import RuleCheck
from ..models import Document, Rule, RuleKind
from ..registry import register_check


@register_check
class FORBIDDEN_CATEGORY(RuleCheck):
    kind = RuleKind.FORBIDDEN_CATEGORY.value
    title = "Forbidden category"
    threshold_semantics = "Token matched case-insensitively as a substring of the document category."

    def is_violation(self, rule: Rule, document: Document) -> bool:
        if not document.category or rule.threshold is None:
            return False
        token = str(rule.threshold).lower()
        return token in document.category.lower()
