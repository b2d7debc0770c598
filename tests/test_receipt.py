"""Unit tests for receipts."""

import re
from datetime import datetime, timedelta, timezone

from parking_tracker.billing import calculate_breakdown
from parking_tracker.receipt import (
    ReceiptStatus,
    create_extended_receipt,
    create_receipt,
    format_receipt_date,
    format_receipt_time,
    generate_receipt_id,
    generate_receipt_text,
    validate_receipt,
)

ENTRY = datetime(2025, 9, 23, 17, 0, 0, tzinfo=timezone.utc)
EXIT = ENTRY + timedelta(seconds=45)
RECEIPT_ID = re.compile(r"^PMS-\d{4}-[A-Z0-9]{8,}$")


def make_extended(**overrides):
    receipt = create_receipt(1, "MH12AB1234", ENTRY, EXIT, 45, 7)
    extended = create_extended_receipt(receipt, 5, breakdown=calculate_breakdown(45), generated_at=EXIT)
    return extended.model_copy(update=overrides)


class TestReceiptId:
    def test_format(self):
        assert RECEIPT_ID.match(generate_receipt_id(1))
        assert generate_receipt_id(12, ENTRY).startswith("PMS-0012-")

    def test_differs_by_time_and_index(self):
        assert generate_receipt_id(1, ENTRY) != generate_receipt_id(1, EXIT)
        assert generate_receipt_id(1, ENTRY) != generate_receipt_id(2, ENTRY)

    def test_is_uppercase(self):
        receipt_id = generate_receipt_id(3, ENTRY)
        assert receipt_id == receipt_id.upper()


class TestReceiptFactories:
    def test_create_receipt(self):
        receipt = create_receipt(1, "MH12AB1234", ENTRY, EXIT, 45, 7)
        assert receipt.slot_id == 1
        assert receipt.entry_time == ENTRY
        assert receipt.exit_time == EXIT
        assert receipt.amount == 7

    def test_create_extended_receipt(self):
        extended = make_extended()
        assert extended.slot_id == 1
        assert extended.car_number == "MH12AB1234"
        assert extended.reg_index == 5
        assert extended.status == ReceiptStatus.GENERATED
        assert extended.generated_at == EXIT
        assert extended.initial_charge == 5
        assert extended.additional_intervals == 2
        assert RECEIPT_ID.match(extended.id)
        assert extended.id.startswith("PMS-0005-")

    def test_serializes_with_camel_case(self):
        data = make_extended().model_dump(by_alias=True)
        assert {"slotId", "carNumber", "generatedAt", "regIndex", "additionalIntervals"} <= set(data)


class TestReceiptFormatting:
    def test_format_receipt_date(self):
        assert format_receipt_date(datetime(2025, 9, 23, 17, 42, 0)) == "23/09/2025, 05:42:00 pm"
        assert format_receipt_date(datetime(2025, 1, 2, 9, 5, 7)) == "02/01/2025, 09:05:07 am"

    def test_format_receipt_time(self):
        assert format_receipt_time(datetime(2025, 9, 23, 0, 15, 0)) == "12:15:00 am"

    def test_generate_receipt_text(self):
        receipt = make_extended(id="PMS-0001-ABCD1234")
        text = generate_receipt_text(receipt)

        assert "PARKING RECEIPT" in text
        assert "PMS-0001-ABCD1234" in text
        assert "MH12AB1234" in text
        assert "Duration: 45s" in text
        assert "Additional time (2 intervals): $2.00" in text
        assert "Total Amount: $7.00" in text


class TestValidateReceipt:
    def test_valid(self):
        result = validate_receipt(make_extended())
        assert result.is_valid
        assert result.errors == []

    def test_none_is_invalid(self):
        assert not validate_receipt(None).is_valid

    def test_reports_each_problem(self):
        result = validate_receipt(make_extended(id="", slot_id=0, amount=-1, exit_time=ENTRY))
        assert not result.is_valid
        assert "Receipt ID is required" in result.errors
        assert "Valid slot ID is required" in result.errors
        assert "Amount cannot be negative" in result.errors
        assert "Exit time must be after entry time" in result.errors
