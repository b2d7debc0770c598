"""Receipt module."""

from .models import (
    ExtendedReceipt,
    Receipt,
    ReceiptStatus,
    create_extended_receipt,
    create_receipt,
    generate_receipt_id,
)
from .utils import (
    ReceiptValidation,
    format_receipt_date,
    format_receipt_time,
    generate_receipt_text,
    validate_receipt,
)

__all__ = [
    "ExtendedReceipt",
    "Receipt",
    "ReceiptStatus",
    "ReceiptValidation",
    "create_extended_receipt",
    "create_receipt",
    "format_receipt_date",
    "format_receipt_time",
    "generate_receipt_id",
    "generate_receipt_text",
    "validate_receipt",
]
