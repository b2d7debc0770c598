"""Receipt models and factories."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..billing import BillingBreakdown

RECEIPT_ID_PREFIX = "PMS"

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


class ReceiptStatus(str, Enum):
    """Lifecycle marker for a receipt shown to the operator."""

    GENERATED = "generated"
    PRINTED = "printed"
    COMPLETED = "completed"


class Receipt(BaseModel):
    """Billing snapshot taken when a car leaves."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    slot_id: int
    car_number: str
    entry_time: datetime
    exit_time: datetime
    duration: int
    amount: float


class ExtendedReceipt(Receipt):
    """Receipt with display metadata and the billing breakdown."""

    id: str
    status: ReceiptStatus = ReceiptStatus.GENERATED
    generated_at: datetime
    reg_index: int
    initial_charge: float = 0.0
    additional_intervals: int = 0
    additional_charge: float = 0.0


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_receipt_id(reg_index: int, now: Optional[datetime] = None) -> str:
    """
    Create a receipt ID such as "PMS-0001-MFVT2C80".

    Args:
        reg_index: Registration index, zero-padded to four digits
        now: Generation time; its epoch milliseconds form the suffix

    Returns:
        Uppercase receipt ID
    """
    if now is None:
        now = datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    return f"{RECEIPT_ID_PREFIX}-{reg_index:04d}-{_to_base36(millis)}".upper()


def create_receipt(
    slot_id: int,
    car_number: str,
    entry_time: datetime,
    exit_time: datetime,
    duration: int,
    amount: float,
) -> Receipt:
    """Create a basic receipt."""
    return Receipt(
        slot_id=slot_id,
        car_number=car_number,
        entry_time=entry_time,
        exit_time=exit_time,
        duration=duration,
        amount=amount,
    )


def create_extended_receipt(
    receipt: Receipt,
    reg_index: int,
    breakdown: Optional[BillingBreakdown] = None,
    generated_at: Optional[datetime] = None,
) -> ExtendedReceipt:
    """
    Attach an ID and display metadata to a receipt.

    Args:
        receipt: Basic receipt data
        reg_index: Registration index at generation time
        breakdown: Optional tier breakdown of the amount
        generated_at: Generation time, defaults to now

    Returns:
        ExtendedReceipt with status GENERATED
    """
    if generated_at is None:
        generated_at = datetime.now(timezone.utc)

    extra = {}
    if breakdown is not None:
        extra = {
            "initial_charge": breakdown.initial_charge,
            "additional_intervals": breakdown.additional_intervals,
            "additional_charge": breakdown.additional_charge,
        }

    return ExtendedReceipt(
        **receipt.model_dump(),
        id=generate_receipt_id(reg_index, generated_at),
        status=ReceiptStatus.GENERATED,
        generated_at=generated_at,
        reg_index=reg_index,
        **extra,
    )
