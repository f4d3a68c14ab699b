from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from common.expense_audit.models import Document, LineItem


class OCRPayloadAdapterError(ValueError):
    pass


def _parse_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        # Avoid float binary artifacts: go through str.
        return Decimal(str(value))
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        # The OCR model sometimes echoes the printed total, symbols and separators included.
        for symbol in ("$", "¥", "￥", "€", "£", ","):
            s = s.replace(symbol, "")
        try:
            parsed = Decimal(s.strip())
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def _amount(value: Any) -> Decimal:
    parsed = _parse_decimal(value)
    if parsed is None or parsed < 0:
        return Decimal("0")
    return parsed


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _date_text(value: Any) -> str:
    # Dates stay textual; the weekend check decides what is parseable.
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return _text(value)


def _confidence(value: Any) -> float:
    try:
        conf = float(value)
    except (TypeError, ValueError):
        return 0.0
    if conf != conf:  # NaN
        return 0.0
    return min(max(conf, 0.0), 1.0)


def _line_items(raw: Any) -> Iterable[LineItem]:
    if not isinstance(raw, list):
        return
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        yield LineItem(
            description=_text(entry.get("description")),
            amount=_amount(entry.get("amount")),
        )


def document_from_ocr_payload(payload: Any) -> Document:
    """
    Build a Document from the OCR service's JSON payload.

    Expected shape:
      {
        "merchantName": "...",
        "date": "YYYY-MM-DD",
        "totalAmount": 123.45,
        "currency": "CNY",
        "category": "Food",
        "type": "invoice",
        "items": [{"description": "...", "amount": 12.5}],
        "confidence": 0.93
      }

    Notes:
    - missing text fields become empty strings, a missing or negative total becomes 0
    - amounts given as text ("1,234.50", "$12") are accepted
    - confidence is clamped to [0, 1]
    """
    if not isinstance(payload, dict):
        raise OCRPayloadAdapterError("OCR payload must be a JSON object.")

    return Document(
        merchant_name=_text(payload.get("merchantName")),
        issue_date=_date_text(payload.get("date")),
        total_amount=_amount(payload.get("totalAmount")),
        currency=_text(payload.get("currency")),
        category=_text(payload.get("category")),
        document_type=_text(payload.get("type")),
        items=tuple(_line_items(payload.get("items"))),
        confidence=_confidence(payload.get("confidence")),
    )
