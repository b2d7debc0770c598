"""Billing engine module."""

from .calculator import (
    BillingBreakdown,
    BillingResult,
    calculate_amount,
    calculate_breakdown,
    calculate_duration,
    compute_billing,
)
from .formatting import format_amount, format_duration
from .policy import DEFAULT_POLICY, BillingPolicy

__all__ = [
    "BillingBreakdown",
    "BillingPolicy",
    "BillingResult",
    "DEFAULT_POLICY",
    "calculate_amount",
    "calculate_breakdown",
    "calculate_duration",
    "compute_billing",
    "format_amount",
    "format_duration",
]
