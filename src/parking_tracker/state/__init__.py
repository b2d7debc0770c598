"""State management module."""

from .commands import AddRevenue, AssignCar, Command, IncrementRegIndex, LoadState, ReleaseCar, ResetState
from .models import DEFAULT_SLOT_COUNT, AppState, Slot, SlotStatus, create_initial_state, create_slot
from .store import ParkingStore, reduce

__all__ = [
    "AddRevenue",
    "AppState",
    "AssignCar",
    "Command",
    "DEFAULT_SLOT_COUNT",
    "IncrementRegIndex",
    "LoadState",
    "ParkingStore",
    "ReleaseCar",
    "ResetState",
    "Slot",
    "SlotStatus",
    "create_initial_state",
    "create_slot",
    "reduce",
]
