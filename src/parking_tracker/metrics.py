"""Prometheus metrics for the parking slot tracker."""

from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

# State transitions applied, by command name
COMMANDS_APPLIED = Counter(
    "parking_commands_applied_total",
    "Total number of state commands applied",
    ["command"],
    registry=REGISTRY,
)

# Total slots gauges
TOTAL_SLOTS = Gauge(
    "parking_slots_total",
    "Total number of parking slots",
    registry=REGISTRY,
)

AVAILABLE_SLOTS = Gauge(
    "parking_slots_available",
    "Number of available parking slots",
    registry=REGISTRY,
)

OCCUPIED_SLOTS = Gauge(
    "parking_slots_occupied",
    "Number of occupied parking slots",
    registry=REGISTRY,
)

TOTAL_REVENUE = Gauge(
    "parking_revenue_total",
    "Cumulative revenue from completed parking sessions",
    registry=REGISTRY,
)

REG_INDEX = Gauge(
    "parking_registration_index",
    "Current registration index",
    registry=REGISTRY,
)

# Closed billing cycles
RECEIPTS_ISSUED = Counter(
    "parking_receipts_completed_total",
    "Total number of parking sessions closed with a receipt",
    registry=REGISTRY,
)

BILLED_AMOUNT = Histogram(
    "parking_billed_amount",
    "Amount charged per completed parking session",
    buckets=(5, 6, 8, 10, 15, 20, 30, 50, 100, 250, 500),
    registry=REGISTRY,
)

# Session duration in seconds
SESSION_DURATION = Histogram(
    "parking_session_duration_seconds",
    "Duration of completed parking sessions",
    buckets=(30, 60, 300, 900, 1800, 3600, 7200, 14400, 43200, 86400),
    registry=REGISTRY,
)

STORAGE_WRITES = Counter(
    "parking_storage_writes_total",
    "State snapshot writes by result",
    ["result"],
    registry=REGISTRY,
)


def record_command(command: str) -> None:
    """Record an applied state command."""
    COMMANDS_APPLIED.labels(command=command).inc()


def update_slot_counts(total: int, available: int, occupied: int) -> None:
    """Update overall slot count gauges."""
    TOTAL_SLOTS.set(total)
    AVAILABLE_SLOTS.set(available)
    OCCUPIED_SLOTS.set(occupied)


def update_ledger(total_revenue: float, reg_index: int) -> None:
    """Update revenue and registration index gauges."""
    TOTAL_REVENUE.set(total_revenue)
    REG_INDEX.set(reg_index)


def record_receipt(amount: float, duration_seconds: float) -> None:
    """Record a completed billing cycle."""
    RECEIPTS_ISSUED.inc()
    BILLED_AMOUNT.observe(amount)
    SESSION_DURATION.observe(duration_seconds)


def record_storage_write(success: bool) -> None:
    """Record the outcome of a snapshot write."""
    STORAGE_WRITES.labels(result="success" if success else "failure").inc()


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)
