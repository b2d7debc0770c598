"""API request and response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..state.models import SlotStatus


class APIModel(BaseModel):
    """Base schema with camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BillingResponse(APIModel):
    """Live billing for an occupied slot."""

    duration: int
    amount: float
    formatted_duration: str
    formatted_amount: str
    initial_charge: float
    additional_intervals: int
    additional_charge: float


class SlotResponse(APIModel):
    """Response schema for a single parking slot."""

    id: int
    status: SlotStatus
    car_number: Optional[str] = None
    entry_time: Optional[datetime] = None
    billing: Optional[BillingResponse] = None


class StatusResponse(APIModel):
    """Response schema for overall parking status."""

    facility: str
    total_slots: int
    available: int
    occupied: int
    reg_index: int
    total_revenue: float
    slots: list[SlotResponse]


class SummaryResponse(APIModel):
    """Billing summary."""

    occupied: int
    total_revenue: float
    potential_revenue: float
    formatted_total_revenue: str
    formatted_potential_revenue: str
    reg_index: int


class HealthResponse(APIModel):
    """Health check response."""

    status: str
    storage_available: bool
    storage_used_bytes: int
    uptime_seconds: float


class AssignRequest(APIModel):
    """Request to park a car."""

    car_number: str
    entry_time: Optional[datetime] = None


class PreviewRequest(APIModel):
    """Request for a checkout receipt preview."""

    car_number: str
    exit_time: Optional[datetime] = None
