from __future__ import annotations

import logging
from typing import Iterable, Optional

from .check import RuleCheck
from .config import RiskWeights, clamp_score
from .models import AuditResult, Document, Rule
from .registry import registry


logger = logging.getLogger(__name__)


class AuditEvaluator:
    """Scores a document against a rule catalog.

    Rules are visited in catalog order and every candidate is checked; there
    is no short-circuit on the first violation. The evaluator never mutates
    its inputs and keeps no state between calls.
    """

    def __init__(
        self,
        checks: Optional[Iterable[RuleCheck]] = None,
        weights: Optional[RiskWeights] = None,
    ):
        checks = list(checks) if checks is not None else registry.create_all()
        self._checks = {check.kind: check for check in checks}
        self._weights = weights or RiskWeights()

    @property
    def weights(self) -> RiskWeights:
        return self._weights

    def evaluate(
        self,
        document: Document,
        rules: Iterable[Rule],
        active_rule_ids: Optional[Iterable[str]] = None,
    ) -> AuditResult:
        # None means no category restriction; an empty collection means nothing applies.
        active = frozenset(active_rule_ids) if active_rule_ids is not None else None

        triggered: list[str] = []
        total = 0
        for rule in rules:
            if not rule.enabled:
                continue
            if active is not None and rule.id not in active:
                continue
            if not rule.applies_to_document_type(document.document_type):
                continue
            if not self._is_violation(rule, document):
                continue
            triggered.append(rule.id)
            total += self._weights.weight_for(rule.kind)

        return AuditResult(
            passed=not triggered,
            triggered_rule_ids=tuple(triggered),
            score=clamp_score(total),
        )

    def _is_violation(self, rule: Rule, document: Document) -> bool:
        check = self._checks.get(rule.kind)
        if check is None:
            logger.debug("Rule %s has unknown kind %r; skipping.", rule.id, rule.kind)
            return False
        try:
            return check.is_violation(rule, document)
        except Exception:
            # A failing check counts as no violation and never aborts the run.
            logger.debug("Check %s failed for rule %s; skipping.", check.kind, rule.id, exc_info=True)
            return False


def evaluate(
    document: Document,
    rules: Iterable[Rule],
    active_rule_ids: Optional[Iterable[str]] = None,
    *,
    weights: Optional[RiskWeights] = None,
) -> AuditResult:
    return AuditEvaluator(weights=weights).evaluate(document, rules, active_rule_ids)
