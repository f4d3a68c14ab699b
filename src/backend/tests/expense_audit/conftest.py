import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from decimal import Decimal

import pytest

from common.expense_audit.models import ALL, Document, RequestType, Rule


@pytest.fixture
def make_rule():
    def _make(
        rule_id: str = "r1",
        *,
        kind,
        threshold=None,
        enabled: bool = True,
        document_type: str = ALL,
        legacy_tag: str | None = None,
        name: str = "",
    ) -> Rule:
        return Rule(
            id=rule_id,
            name=name or f"rule {rule_id}",
            kind=kind,
            threshold=threshold,
            enabled=enabled,
            applicable_document_type=document_type,
            linked_request_type=legacy_tag,
        )

    return _make


@pytest.fixture
def make_document():
    def _make(
        *,
        merchant: str = "Acme Supplies",
        issue_date: str = "2024-01-03",
        amount="100",
        category: str = "Office",
        document_type: str = "invoice",
        currency: str = "CNY",
    ) -> Document:
        return Document(
            merchant_name=merchant,
            issue_date=issue_date,
            total_amount=Decimal(str(amount)),
            currency=currency,
            category=category,
            document_type=document_type,
            confidence=0.9,
        )

    return _make


@pytest.fixture
def make_request_type():
    def _make(type_id: str = "rt_1", *, name: str = "Travel", linked=None) -> RequestType:
        return RequestType(
            id=type_id,
            name=name,
            linked_rule_ids=tuple(linked) if linked is not None else None,
        )

    return _make
