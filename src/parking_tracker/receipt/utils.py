"""Receipt formatting and validation."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..billing import DEFAULT_POLICY, BillingPolicy, format_amount, format_duration
from .models import ExtendedReceipt

DIVIDER = "=" * 32


@dataclass
class ReceiptValidation:
    """Outcome of receipt validation."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


def format_receipt_date(value: datetime) -> str:
    """Format as "23/09/2025, 05:42:00 pm"."""
    return f"{value:%d/%m/%Y}, {format_receipt_time(value)}"


def format_receipt_time(value: datetime) -> str:
    """Format as "05:42:00 pm"."""
    return f"{value:%I:%M:%S} {'am' if value.hour < 12 else 'pm'}"


def generate_receipt_text(
    receipt: ExtendedReceipt,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> str:
    """
    Render a receipt as plain text for printing or download.

    Args:
        receipt: Receipt to render
        policy: Billing policy used for amount and duration formatting

    Returns:
        Multi-line receipt text
    """
    first_tier = format_duration(policy.first_tier_units, policy)

    lines = [
        DIVIDER,
        "       PARKING RECEIPT",
        DIVIDER,
        f"Receipt: {receipt.id}",
        "",
        f"Slot Number: {receipt.slot_id}",
        f"Car Number: {receipt.car_number}",
        "",
        f"Entry Time: {format_receipt_date(receipt.entry_time)}",
        f"Exit Time:  {format_receipt_date(receipt.exit_time)}",
        "",
        f"Duration: {format_duration(receipt.duration, policy)}",
        f"Initial {first_tier}: {format_amount(receipt.initial_charge, policy)}",
        f"Additional time ({receipt.additional_intervals} intervals): "
        f"{format_amount(receipt.additional_charge, policy)}",
        f"Total Amount: {format_amount(receipt.amount, policy)}",
        "",
        DIVIDER,
        f"Generated: {format_receipt_date(receipt.generated_at)}",
        "",
        "Thank you for using our parking!",
        DIVIDER,
    ]
    return "\n".join(lines)


def validate_receipt(receipt: Optional[ExtendedReceipt]) -> ReceiptValidation:
    """Check that a receipt is complete and internally consistent."""
    if receipt is None:
        return ReceiptValidation(is_valid=False, errors=["Receipt is required"])

    errors = []

    if not receipt.id:
        errors.append("Receipt ID is required")
    if not receipt.slot_id or receipt.slot_id < 1:
        errors.append("Valid slot ID is required")
    if not receipt.car_number:
        errors.append("Car number is required")
    if not receipt.entry_time:
        errors.append("Entry time is required")
    if not receipt.exit_time:
        errors.append("Exit time is required")
    if receipt.duration < 0:
        errors.append("Duration cannot be negative")
    if receipt.amount < 0:
        errors.append("Amount cannot be negative")

    if receipt.entry_time and receipt.exit_time and receipt.entry_time >= receipt.exit_time:
        errors.append("Exit time must be after entry time")

    return ReceiptValidation(is_valid=not errors, errors=errors)
