"""Parking operations with the input checks the store leaves to its callers."""

import logging
from datetime import datetime, timezone
from typing import Optional

from .billing import DEFAULT_POLICY, BillingPolicy, BillingResult, calculate_breakdown, compute_billing
from .exceptions import (
    CarNotFoundError,
    DuplicateCarError,
    InvalidCarNumberError,
    InvalidReceiptError,
    SlotNotFoundError,
    SlotNotOccupiedError,
    SlotUnavailableError,
)
from .metrics import record_receipt
from .receipt import ExtendedReceipt, ReceiptStatus, create_extended_receipt, create_receipt, validate_receipt
from .state.commands import AddRevenue, AssignCar, IncrementRegIndex, ReleaseCar, ResetState
from .state.models import AppState, Slot
from .state.slots import find_slot_by_car_number, format_car_number, get_occupied_slots, is_valid_car_number
from .state.store import ParkingStore

logger = logging.getLogger(__name__)


def _as_utc(value: Optional[datetime]) -> datetime:
    """Current UTC time for None, naive times read as UTC, aware times converted."""
    if value is None:
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ParkingService:
    """
    Validated parking workflows on top of a ParkingStore.

    Parking a car checks the number format, slot availability and
    duplicates before dispatching. Checkout is two-step: preview a
    receipt (no state change), then close the session with it.
    """

    def __init__(self, store: ParkingStore, policy: BillingPolicy = DEFAULT_POLICY):
        self.store = store
        self.policy = policy

    @property
    def state(self) -> AppState:
        return self.store.state

    def get_slot(self, slot_id: int) -> Slot:
        """Get a slot or raise SlotNotFoundError."""
        slot = self.store.get_slot(slot_id)
        if slot is None:
            raise SlotNotFoundError(f"Slot {slot_id} does not exist")
        return slot

    def assign_car(
        self,
        slot_id: int,
        car_number: str,
        entry_time: Optional[datetime] = None,
    ) -> Slot:
        """
        Park a car in an available slot.

        Args:
            slot_id: Target slot
            car_number: Registration number, any case
            entry_time: Entry time, defaults to now

        Returns:
            The now-occupied slot

        Raises:
            InvalidCarNumberError: Car number is empty or malformed
            SlotNotFoundError: Slot does not exist
            SlotUnavailableError: Slot is already occupied
            DuplicateCarError: Car is already parked elsewhere
        """
        if not car_number or not car_number.strip():
            raise InvalidCarNumberError("Please enter a car number")
        if not is_valid_car_number(car_number):
            raise InvalidCarNumberError("Please enter a valid car number (e.g., MH12AB1234)")

        slot = self.get_slot(slot_id)
        if slot.is_occupied:
            raise SlotUnavailableError(f"Slot {slot_id} is already occupied")

        existing = find_slot_by_car_number(self.state.slots, car_number)
        if existing is not None:
            raise DuplicateCarError(
                f"Car {format_car_number(car_number)} is already parked in slot {existing.id}"
            )

        entry_time = _as_utc(entry_time)

        self.store.dispatch(AssignCar(slot_id, car_number, entry_time))
        logger.info(f"Assigned {format_car_number(car_number)} to slot {slot_id}")
        return self.get_slot(slot_id)

    def find_car(self, car_number: str) -> Slot:
        """
        Find the slot a car is parked in.

        Raises:
            InvalidCarNumberError: Car number is empty or malformed
            CarNotFoundError: Car is not parked here
        """
        if not car_number or not car_number.strip():
            raise InvalidCarNumberError("Please enter a car registration number")
        if not is_valid_car_number(car_number):
            raise InvalidCarNumberError("Please enter a valid registration number format")

        slot = find_slot_by_car_number(self.state.slots, car_number)
        if slot is None:
            raise CarNotFoundError(f"Car {format_car_number(car_number)} not found in the parking system")
        return slot

    def live_billing(self, slot_id: int, now: Optional[datetime] = None) -> BillingResult:
        """Billing for an occupied slot as of now."""
        slot = self.get_slot(slot_id)
        if not slot.is_occupied:
            raise SlotNotOccupiedError(f"Slot {slot_id} is not occupied")
        return compute_billing(_as_utc(slot.entry_time), _as_utc(now), self.policy)

    def preview_receipt(self, car_number: str, exit_time: Optional[datetime] = None) -> ExtendedReceipt:
        """
        Build the receipt a car would get if it left now.

        The state is not changed; pass the receipt to close_parking to
        complete the session.
        """
        slot = self.find_car(car_number)
        entry_time = _as_utc(slot.entry_time)
        exit_time = _as_utc(exit_time)

        billing = compute_billing(entry_time, exit_time, self.policy)
        receipt = create_receipt(
            slot.id,
            slot.car_number,
            entry_time,
            exit_time,
            billing.duration,
            billing.amount,
        )
        return create_extended_receipt(
            receipt,
            self.state.reg_index,
            breakdown=calculate_breakdown(billing.duration, self.policy),
        )

    def close_parking(self, receipt: ExtendedReceipt) -> ExtendedReceipt:
        """
        Complete a parking session: release the slot, book the revenue and
        advance the registration index.

        Args:
            receipt: Receipt from preview_receipt

        Returns:
            The receipt marked COMPLETED

        Raises:
            InvalidReceiptError: Receipt is incomplete, inconsistent, or
                does not match the parked car and the billing policy
            SlotNotFoundError: Receipt points at an unknown slot
            SlotNotOccupiedError: Slot no longer holds the receipt's car
        """
        receipt = receipt.model_copy(
            update={
                "entry_time": _as_utc(receipt.entry_time),
                "exit_time": _as_utc(receipt.exit_time),
            }
        )
        validation = validate_receipt(receipt)
        if not validation.is_valid:
            raise InvalidReceiptError(validation.errors)

        slot = self.get_slot(receipt.slot_id)
        if not slot.is_occupied or slot.car_number != format_car_number(receipt.car_number):
            raise SlotNotOccupiedError(
                f"Slot {receipt.slot_id} is not occupied by {format_car_number(receipt.car_number)}"
            )

        # The booked amount always comes from the policy, never from the caller.
        entry_time = _as_utc(slot.entry_time)
        if receipt.entry_time != entry_time:
            raise InvalidReceiptError(["Entry time does not match the parked car"])
        billing = compute_billing(entry_time, receipt.exit_time, self.policy)
        if billing.duration != receipt.duration or billing.amount != receipt.amount:
            raise InvalidReceiptError(["Amount does not match the billing policy"])

        self.store.dispatch(ReleaseCar(receipt.slot_id, receipt.exit_time))
        self.store.dispatch(AddRevenue(billing.amount))
        self.store.dispatch(IncrementRegIndex())

        record_receipt(
            amount=billing.amount,
            duration_seconds=(receipt.exit_time - entry_time).total_seconds(),
        )
        logger.info(
            f"Closed parking for {receipt.car_number} in slot {receipt.slot_id}: "
            f"{billing.amount:.2f} (receipt {receipt.id})"
        )

        return receipt.model_copy(update={"status": ReceiptStatus.COMPLETED})

    def potential_revenue(self, now: Optional[datetime] = None) -> float:
        """Total that would be billed if every parked car left now."""
        now = _as_utc(now)
        return sum(
            compute_billing(_as_utc(slot.entry_time), now, self.policy).amount
            for slot in get_occupied_slots(self.state.slots)
        )

    def reset(self) -> AppState:
        """Clear all slots, revenue and the registration index."""
        logger.info("Resetting parking state")
        return self.store.dispatch(ResetState())
