"""Data models for parking slot state."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_SLOT_COUNT = 30


class SlotStatus(str, Enum):
    """Status of a parking slot."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"


class Slot(BaseModel):
    """A single parking slot and the car currently parked in it."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int = Field(ge=1)
    status: SlotStatus = SlotStatus.AVAILABLE
    car_number: Optional[str] = None
    entry_time: Optional[datetime] = None

    @model_validator(mode="after")
    def check_occupancy(self) -> "Slot":
        """Occupied slots carry both a car number and an entry time; available slots carry neither."""
        has_car = self.car_number is not None
        has_entry = self.entry_time is not None
        if self.status == SlotStatus.OCCUPIED and not (has_car and has_entry):
            raise ValueError(f"Occupied slot {self.id} requires carNumber and entryTime")
        if self.status == SlotStatus.AVAILABLE and (has_car or has_entry):
            raise ValueError(f"Available slot {self.id} must not carry carNumber or entryTime")
        return self

    @property
    def is_occupied(self) -> bool:
        return self.status == SlotStatus.OCCUPIED


class AppState(BaseModel):
    """Overall parking facility state."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    slots: list[Slot]
    reg_index: int = Field(default=1, ge=1)
    total_revenue: float = Field(default=0.0, ge=0)

    def to_snapshot(self) -> dict:
        """Dump to the persisted snapshot shape (camelCase keys, datetimes kept)."""
        return self.model_dump(by_alias=True)


def create_slot(slot_id: int) -> Slot:
    """Create an empty parking slot."""
    return Slot(id=slot_id)


def create_initial_state(slot_count: int = DEFAULT_SLOT_COUNT) -> AppState:
    """
    Create fresh application state.

    Args:
        slot_count: Number of slots, numbered 1..slot_count

    Returns:
        AppState with every slot available, reg_index 1 and no revenue
    """
    return AppState(
        slots=[create_slot(i + 1) for i in range(slot_count)],
        reg_index=1,
        total_revenue=0.0,
    )
