"""Errors raised by parking operations before a command reaches the store."""


class ParkingError(Exception):
    """Base class for parking operation failures."""


class InvalidCarNumberError(ParkingError):
    """Car number is missing or badly formatted."""


class InvalidReceiptError(ParkingError):
    """Receipt failed validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


class SlotNotFoundError(ParkingError):
    """No slot with the given ID exists."""


class CarNotFoundError(ParkingError):
    """No occupied slot holds the given car."""


class SlotUnavailableError(ParkingError):
    """Slot is already occupied."""


class SlotNotOccupiedError(ParkingError):
    """Slot has no car to release."""


class DuplicateCarError(ParkingError):
    """Car is already parked in another slot."""
