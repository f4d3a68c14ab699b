from __future__ import annotations

import re
from datetime import date
from typing import Optional

from ..check import RuleCheck
from ..models import Document, Rule, RuleKind
from ..registry import register_check

# date.weekday(): Monday == 0
WEEKEND_DAYS = frozenset({5, 6})

_ISO_CALENDAR_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_issue_date(value: str) -> Optional[date]:
    """Parse a receipt date as a UTC calendar date.

    Receipt dates carry no time or zone, so only the ``YYYY-MM-DD`` part is
    read; a trailing ISO time component is ignored. Compact and week-date
    forms are rejected.
    """
    text = (value or "").strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    if not _ISO_CALENDAR_DATE.fullmatch(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


@register_check
class WEEKEND_BAN(RuleCheck):
    kind = RuleKind.WEEKEND_BAN.value
    title = "Weekend spending"
    threshold_semantics = "Unused."

    def is_violation(self, rule: Rule, document: Document) -> bool:
        issued = parse_issue_date(document.issue_date)
        if issued is None:
            return False
        return issued.weekday() in WEEKEND_DAYS
