"""FastAPI route definitions."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Response

from ..billing import BillingResult, format_amount, format_duration
from ..exceptions import (
    CarNotFoundError,
    DuplicateCarError,
    ParkingError,
    SlotNotFoundError,
    SlotNotOccupiedError,
    SlotUnavailableError,
)
from ..metrics import get_metrics
from ..receipt import ExtendedReceipt, generate_receipt_text
from ..service import ParkingService
from ..state.models import Slot
from ..state.slots import get_slot_counts
from ..storage import StateStorage
from .schemas import (
    AssignRequest,
    BillingResponse,
    HealthResponse,
    PreviewRequest,
    SlotResponse,
    StatusResponse,
    SummaryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Dependencies injected at startup
_service: Optional[ParkingService] = None
_storage: Optional[StateStorage] = None
_facility_name: str = "Parking Facility"
_start_time: datetime = datetime.now()


def init_router(
    service: ParkingService,
    storage: Optional[StateStorage] = None,
    facility_name: str = "Parking Facility",
) -> None:
    """
    Initialize router with dependencies.

    Args:
        service: ParkingService wrapping the application's store
        storage: Snapshot storage, reported by the health check
        facility_name: Display name of the facility
    """
    global _service, _storage, _facility_name, _start_time

    _service = service
    _storage = storage
    _facility_name = facility_name
    _start_time = datetime.now()

    logger.info("API router initialized")


def _get_service() -> ParkingService:
    if _service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _service


def _http_error(error: ParkingError) -> HTTPException:
    """Map a parking error onto an HTTP status."""
    if isinstance(error, (SlotNotFoundError, CarNotFoundError)):
        status_code = 404
    elif isinstance(error, (SlotUnavailableError, SlotNotOccupiedError, DuplicateCarError)):
        status_code = 409
    else:
        status_code = 400
    return HTTPException(status_code=status_code, detail=str(error))


def _billing_response(billing: BillingResult, service: ParkingService) -> BillingResponse:
    return BillingResponse(
        duration=billing.duration,
        amount=billing.amount,
        formatted_duration=format_duration(billing.duration, service.policy),
        formatted_amount=format_amount(billing.amount, service.policy),
        initial_charge=billing.initial_charge,
        additional_intervals=billing.additional_intervals,
        additional_charge=billing.additional_charge,
    )


def _slot_response(slot: Slot, service: ParkingService, with_billing: bool = False) -> SlotResponse:
    billing = None
    if with_billing and slot.is_occupied:
        billing = _billing_response(service.live_billing(slot.id), service)

    return SlotResponse(
        id=slot.id,
        status=slot.status,
        car_number=slot.car_number,
        entry_time=slot.entry_time,
        billing=billing,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns basic health information about the service.
    """
    uptime = (datetime.now() - _start_time).total_seconds()

    storage_available = False
    storage_used = 0
    if _storage is not None:
        info = _storage.get_info()
        storage_available = info.available
        storage_used = info.used

    return HealthResponse(
        status="healthy" if _service is not None else "starting",
        storage_available=storage_available,
        storage_used_bytes=storage_used,
        uptime_seconds=uptime,
    )


@router.get("/status", response_model=StatusResponse)
async def get_status() -> StatusResponse:
    """
    Get overall parking status.

    Returns slot counts, revenue, the registration index and every slot.
    """
    service = _get_service()
    state = service.state
    counts = get_slot_counts(state.slots)

    return StatusResponse(
        facility=_facility_name,
        total_slots=counts.total,
        available=counts.available,
        occupied=counts.occupied,
        reg_index=state.reg_index,
        total_revenue=state.total_revenue,
        slots=[_slot_response(slot, service) for slot in state.slots],
    )


@router.get("/slots/{slot_id}", response_model=SlotResponse)
async def get_slot(slot_id: int) -> SlotResponse:
    """
    Get a specific parking slot, with live billing when occupied.

    Args:
        slot_id: The ID of the parking slot to query
    """
    service = _get_service()
    try:
        return _slot_response(service.get_slot(slot_id), service, with_billing=True)
    except ParkingError as e:
        raise _http_error(e)


@router.post("/slots/{slot_id}/assign", response_model=SlotResponse)
async def assign_car(slot_id: int, request: AssignRequest) -> SlotResponse:
    """Park a car in an available slot."""
    service = _get_service()
    try:
        slot = service.assign_car(slot_id, request.car_number, request.entry_time)
    except ParkingError as e:
        logger.warning(f"Rejected assignment to slot {slot_id}: {e}")
        raise _http_error(e)
    return _slot_response(slot, service, with_billing=True)


@router.get("/cars/{car_number}", response_model=SlotResponse)
async def find_car(car_number: str) -> SlotResponse:
    """Find the slot a car is parked in."""
    service = _get_service()
    try:
        return _slot_response(service.find_car(car_number), service, with_billing=True)
    except ParkingError as e:
        raise _http_error(e)


@router.post("/billing/preview", response_model=ExtendedReceipt)
async def preview_receipt(request: PreviewRequest) -> ExtendedReceipt:
    """
    Generate a checkout receipt without changing state.

    The returned receipt is passed back to /billing/close to complete
    the session.
    """
    service = _get_service()
    try:
        return service.preview_receipt(request.car_number, request.exit_time)
    except ParkingError as e:
        raise _http_error(e)


@router.post("/billing/close", response_model=ExtendedReceipt)
async def close_parking(receipt: ExtendedReceipt) -> ExtendedReceipt:
    """Release the slot, book the revenue and advance the registration index."""
    service = _get_service()
    try:
        return service.close_parking(receipt)
    except ParkingError as e:
        logger.warning(f"Rejected checkout for receipt {receipt.id}: {e}")
        raise _http_error(e)


@router.post("/billing/receipt-text")
async def receipt_text(receipt: ExtendedReceipt) -> Response:
    """Render a receipt as downloadable plain text."""
    service = _get_service()
    return Response(
        content=generate_receipt_text(receipt, service.policy),
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="parking-receipt-{receipt.id}.txt"'},
    )


@router.get("/billing/summary", response_model=SummaryResponse)
async def billing_summary() -> SummaryResponse:
    """Revenue collected so far and revenue pending from parked cars."""
    service = _get_service()
    state = service.state
    potential = service.potential_revenue()

    return SummaryResponse(
        occupied=get_slot_counts(state.slots).occupied,
        total_revenue=state.total_revenue,
        potential_revenue=potential,
        formatted_total_revenue=format_amount(state.total_revenue, service.policy),
        formatted_potential_revenue=format_amount(potential, service.policy),
        reg_index=state.reg_index,
    )


@router.post("/reset", response_model=StatusResponse)
async def reset_state() -> StatusResponse:
    """Clear every slot, the revenue total and the registration index."""
    _get_service().reset()
    return await get_status()


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format including:
    - parking_slots_total / _available / _occupied: Slot gauges
    - parking_revenue_total: Cumulative revenue
    - parking_registration_index: Current registration index
    - parking_commands_applied_total: State commands by type
    - parking_receipts_completed_total: Closed billing cycles
    - parking_billed_amount: Histogram of charges
    - parking_session_duration_seconds: Histogram of session lengths
    - parking_storage_writes_total: Snapshot writes by result
    """
    return Response(
        content=get_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
