"""Slot lookup queries and car number validation."""

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from .models import Slot, SlotStatus

CAR_NUMBER_MIN_LENGTH = 4
CAR_NUMBER_MAX_LENGTH = 10

_WHITESPACE = re.compile(r"\s+")
_LETTER = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"[0-9]")


@dataclass(frozen=True)
class SlotCounts:
    """Slot totals by status."""

    available: int
    occupied: int
    total: int


def find_slot_by_id(slots: Sequence[Slot], slot_id: int) -> Optional[Slot]:
    """Find a slot by its ID."""
    return next((slot for slot in slots if slot.id == slot_id), None)


def find_slot_by_car_number(slots: Sequence[Slot], car_number: str) -> Optional[Slot]:
    """Find the occupied slot holding a car, ignoring case and surrounding whitespace."""
    wanted = format_car_number(car_number)
    if not wanted:
        return None
    return next(
        (
            slot
            for slot in slots
            if slot.status == SlotStatus.OCCUPIED and slot.car_number.upper() == wanted
        ),
        None,
    )


def get_available_slots(slots: Sequence[Slot]) -> list[Slot]:
    """Get all available slots."""
    return [slot for slot in slots if slot.status == SlotStatus.AVAILABLE]


def get_occupied_slots(slots: Sequence[Slot]) -> list[Slot]:
    """Get all occupied slots."""
    return [slot for slot in slots if slot.status == SlotStatus.OCCUPIED]


def get_slot_counts(slots: Sequence[Slot]) -> SlotCounts:
    """Count slots by status."""
    occupied = len(get_occupied_slots(slots))
    return SlotCounts(
        available=len(slots) - occupied,
        occupied=occupied,
        total=len(slots),
    )


def is_valid_car_number(car_number: object) -> bool:
    """
    Check a car registration number.

    Whitespace is removed and the value uppercased before checking that it
    has at least one letter, at least one digit, and 4 to 10 characters.
    """
    if not car_number or not isinstance(car_number, str):
        return False

    cleaned = _WHITESPACE.sub("", car_number).upper()

    return (
        bool(_LETTER.search(cleaned))
        and bool(_DIGIT.search(cleaned))
        and CAR_NUMBER_MIN_LENGTH <= len(cleaned) <= CAR_NUMBER_MAX_LENGTH
    )


def format_car_number(car_number: Optional[str]) -> str:
    """Normalize a car number for storage and display."""
    if not car_number:
        return ""
    return car_number.upper().strip()
