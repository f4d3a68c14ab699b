from datetime import date
from decimal import Decimal

import pytest

from adapters.ocr import OCRPayloadAdapterError, document_from_ocr_payload


def test_ocr_payload_maps_all_fields():
    doc = document_from_ocr_payload(
        {
            "merchantName": " Golden Dragon ",
            "date": "2024-01-06",
            "totalAmount": 388.5,
            "currency": "CNY",
            "category": "Food",
            "type": "invoice",
            "items": [{"description": "Dinner", "amount": "388.50"}, "garbage"],
            "confidence": 0.92,
        }
    )
    assert doc.merchant_name == "Golden Dragon"
    assert doc.issue_date == "2024-01-06"
    assert doc.total_amount == Decimal("388.5")
    assert doc.document_type == "invoice"
    assert len(doc.items) == 1
    assert doc.items[0].amount == Decimal("388.50")
    assert doc.confidence == pytest.approx(0.92)


def test_ocr_payload_parses_text_amounts():
    assert document_from_ocr_payload({"totalAmount": "¥1,234.50"}).total_amount == Decimal("1234.50")
    assert document_from_ocr_payload({"totalAmount": "$12"}).total_amount == Decimal("12")


def test_ocr_payload_defaults_missing_and_bad_values():
    doc = document_from_ocr_payload({"totalAmount": "n/a", "confidence": "high", "items": "none"})
    assert doc.merchant_name == ""
    assert doc.issue_date == ""
    assert doc.total_amount == Decimal("0")
    assert doc.confidence == 0.0
    assert doc.items == ()

    assert document_from_ocr_payload({"totalAmount": -5}).total_amount == Decimal("0")
    assert document_from_ocr_payload({"confidence": 1.7}).confidence == 1.0


def test_ocr_payload_accepts_date_objects():
    assert document_from_ocr_payload({"date": date(2024, 1, 6)}).issue_date == "2024-01-06"


def test_ocr_payload_rejects_non_objects():
    with pytest.raises(OCRPayloadAdapterError):
        document_from_ocr_payload(["not", "an", "object"])
