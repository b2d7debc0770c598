"""Commands accepted by the state transition function."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AssignCar:
    """Park a car in a slot."""

    slot_id: int
    car_number: str
    entry_time: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class ReleaseCar:
    """Free a slot when its car leaves."""

    slot_id: int
    exit_time: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class AddRevenue:
    """Add a completed session's charge to the revenue total."""

    amount: float


@dataclass(frozen=True)
class IncrementRegIndex:
    """Advance the registration index after a completed billing cycle."""


@dataclass(frozen=True)
class ResetState:
    """Replace all state with fresh defaults."""


@dataclass(frozen=True)
class LoadState:
    """Replace state with an externally supplied snapshot."""

    snapshot: Any


Command = Union[AssignCar, ReleaseCar, AddRevenue, IncrementRegIndex, ResetState, LoadState]
