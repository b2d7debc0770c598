"""Parking state store and its transition function."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Optional

from pydantic import ValidationError

from ..metrics import record_command, update_ledger, update_slot_counts
from .commands import (
    AddRevenue,
    AssignCar,
    Command,
    IncrementRegIndex,
    LoadState,
    ReleaseCar,
    ResetState,
)
from .models import DEFAULT_SLOT_COUNT, AppState, Slot, SlotStatus, create_initial_state
from .slots import format_car_number, get_slot_counts

logger = logging.getLogger(__name__)

Listener = Callable[[AppState, Command], None]


def _replace_slot(state: AppState, slot_id: int, build: Callable[[Slot], Slot]) -> AppState:
    """Return a copy of state with the matching slot rebuilt."""
    slots = [build(slot) if slot.id == slot_id else slot for slot in state.slots]
    return state.model_copy(update={"slots": slots})


def _load_snapshot(snapshot: Any, slot_count: int) -> AppState:
    """Merge a snapshot over fresh defaults, falling back to defaults if it is malformed."""
    defaults = create_initial_state(slot_count)

    if isinstance(snapshot, AppState):
        return snapshot.model_copy(deep=True)

    if not isinstance(snapshot, Mapping):
        logger.warning("Invalid state structure (not a mapping), using initial state")
        return defaults

    slots = snapshot.get("slots")
    if isinstance(slots, (str, bytes)) or not isinstance(slots, Sequence):
        logger.warning("Invalid state structure (slots is not a sequence), using initial state")
        return defaults

    # Snapshot keys may be camelCase aliases or field names
    merged = defaults.to_snapshot()
    for name, info in AppState.model_fields.items():
        alias = info.alias or name
        if alias in snapshot:
            merged[alias] = snapshot[alias]
        elif name in snapshot:
            merged[alias] = snapshot[name]

    try:
        state = AppState.model_validate(merged)
    except ValidationError as e:
        logger.warning(f"Invalid state snapshot, using initial state: {e.error_count()} error(s)")
        return defaults

    if len(state.slots) != slot_count:
        logger.warning(
            f"Snapshot has {len(state.slots)} slots, facility is configured for {slot_count}; "
            f"keeping the snapshot layout"
        )
    return state


def reduce(state: AppState, command: Command, slot_count: int = DEFAULT_SLOT_COUNT) -> AppState:
    """
    Compute the next state for a command.

    The input state is never mutated. Preconditions (slot exists and is in
    the right status, car number is valid and unique) are the caller's
    responsibility and are not checked here.

    Args:
        state: Current state
        command: Command to apply
        slot_count: Number of slots used when state is rebuilt from defaults

    Returns:
        The new state, or the unchanged state for an unknown command
    """
    if isinstance(command, AssignCar):
        return _replace_slot(
            state,
            command.slot_id,
            lambda slot: Slot(
                id=slot.id,
                status=SlotStatus.OCCUPIED,
                car_number=format_car_number(command.car_number),
                entry_time=command.entry_time,
            ),
        )

    if isinstance(command, ReleaseCar):
        return _replace_slot(state, command.slot_id, lambda slot: Slot(id=slot.id))

    if isinstance(command, AddRevenue):
        return state.model_copy(update={"total_revenue": state.total_revenue + command.amount})

    if isinstance(command, IncrementRegIndex):
        return state.model_copy(update={"reg_index": state.reg_index + 1})

    if isinstance(command, ResetState):
        return create_initial_state(slot_count)

    if isinstance(command, LoadState):
        return _load_snapshot(command.snapshot, slot_count)

    logger.warning(f"Unknown command type: {type(command).__name__}")
    return state


class ParkingStore:
    """
    Owns the application state and serializes every change through `reduce`.

    Subscribers are notified after each transition, which is how the
    persistence layer learns about changes without the store knowing
    about storage.
    """

    def __init__(self, slot_count: int = DEFAULT_SLOT_COUNT, initial_snapshot: Any = None):
        """
        Initialize the store.

        Args:
            slot_count: Number of parking slots in the facility
            initial_snapshot: Persisted snapshot to start from, if any
        """
        self.slot_count = slot_count
        self._listeners: list[Listener] = []

        if initial_snapshot is None:
            self._state = create_initial_state(slot_count)
        else:
            self._state = reduce(create_initial_state(slot_count), LoadState(initial_snapshot), slot_count)

        self._publish_metrics()
        logger.info(f"Initialized ParkingStore with {len(self._state.slots)} slots")

    @property
    def state(self) -> AppState:
        """Current application state."""
        return self._state

    def dispatch(self, command: Command) -> AppState:
        """
        Apply a command and notify subscribers.

        Args:
            command: Command to apply

        Returns:
            The new state
        """
        self._state = reduce(self._state, command, self.slot_count)

        name = type(command).__name__
        record_command(name)
        self._publish_metrics()
        logger.debug(f"Applied {name}")

        for listener in list(self._listeners):
            try:
                listener(self._state, command)
            except Exception as e:
                logger.error(f"State listener failed after {name}: {e}")

        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked after every transition.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def assign_car(self, slot_id: int, car_number: str, entry_time=None) -> AppState:
        """Dispatch AssignCar, defaulting entry time to now."""
        if entry_time is None:
            return self.dispatch(AssignCar(slot_id, car_number))
        return self.dispatch(AssignCar(slot_id, car_number, entry_time))

    def release_car(self, slot_id: int, exit_time=None) -> AppState:
        """Dispatch ReleaseCar, defaulting exit time to now."""
        if exit_time is None:
            return self.dispatch(ReleaseCar(slot_id))
        return self.dispatch(ReleaseCar(slot_id, exit_time))

    def add_revenue(self, amount: float) -> AppState:
        return self.dispatch(AddRevenue(amount))

    def increment_reg_index(self) -> AppState:
        return self.dispatch(IncrementRegIndex())

    def reset_state(self) -> AppState:
        return self.dispatch(ResetState())

    def load_state(self, snapshot: Any) -> AppState:
        return self.dispatch(LoadState(snapshot))

    def get_slot(self, slot_id: int) -> Optional[Slot]:
        """Get a specific slot."""
        return next((slot for slot in self._state.slots if slot.id == slot_id), None)

    def _publish_metrics(self) -> None:
        counts = get_slot_counts(self._state.slots)
        update_slot_counts(total=counts.total, available=counts.available, occupied=counts.occupied)
        update_ledger(total_revenue=self._state.total_revenue, reg_index=self._state.reg_index)
