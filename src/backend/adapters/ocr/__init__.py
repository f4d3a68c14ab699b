"""Adapters from the OCR service's receipt payloads (no I/O)."""

from .receipt_payload import OCRPayloadAdapterError, document_from_ocr_payload

__all__ = [
    "OCRPayloadAdapterError",
    "document_from_ocr_payload",
]
