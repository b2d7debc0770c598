"""Duration and tiered charge calculation for parking sessions."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .policy import DEFAULT_POLICY, BillingPolicy


@dataclass(frozen=True)
class BillingBreakdown:
    """How a charge splits between the initial and recurring tiers."""

    initial_charge: float
    additional_intervals: int
    additional_charge: float

    @property
    def total(self) -> float:
        return self.initial_charge + self.additional_charge


@dataclass(frozen=True)
class BillingResult:
    """Billing outcome for a single parking session."""

    duration: int  # Elapsed billing units
    amount: float
    initial_charge: float = 0.0
    additional_intervals: int = 0
    additional_charge: float = 0.0


def _now_like(reference: datetime) -> datetime:
    """Current time in the same timezone style as the reference."""
    if reference.tzinfo is None:
        return datetime.now()
    return datetime.now(timezone.utc)


def calculate_duration(
    entry_time: datetime,
    exit_time: datetime,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> int:
    """
    Calculate elapsed billing units between entry and exit.

    Partial units are rounded up. A non-positive interval yields 0.

    Args:
        entry_time: When the car entered
        exit_time: When the car left
        policy: Billing policy supplying the unit size

    Returns:
        Number of elapsed units
    """
    delta = exit_time - entry_time
    if delta <= timedelta(0):
        return 0
    return math.ceil(delta / timedelta(seconds=policy.unit_seconds))


def calculate_breakdown(
    duration: int,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> BillingBreakdown:
    """
    Split the charge for a duration into its tiers.

    Args:
        duration: Elapsed billing units
        policy: Billing policy

    Returns:
        BillingBreakdown with the initial and recurring parts
    """
    if duration <= 0:
        return BillingBreakdown(initial_charge=0.0, additional_intervals=0, additional_charge=0.0)

    overage = duration - policy.first_tier_units
    intervals = math.ceil(overage / policy.additional_interval_units) if overage > 0 else 0

    return BillingBreakdown(
        initial_charge=policy.first_tier_rate,
        additional_intervals=intervals,
        additional_charge=intervals * policy.additional_interval_rate,
    )


def calculate_amount(duration: int, policy: BillingPolicy = DEFAULT_POLICY) -> float:
    """Calculate the charge for a duration in billing units."""
    return calculate_breakdown(duration, policy).total


def compute_billing(
    entry_time: datetime,
    exit_time: Optional[datetime] = None,
    policy: BillingPolicy = DEFAULT_POLICY,
) -> BillingResult:
    """
    Compute duration and charge for a parking session.

    Args:
        entry_time: When the car entered
        exit_time: When the car left; defaults to now
        policy: Billing policy

    Returns:
        BillingResult with duration, amount and tier breakdown
    """
    if exit_time is None:
        exit_time = _now_like(entry_time)

    duration = calculate_duration(entry_time, exit_time, policy)
    breakdown = calculate_breakdown(duration, policy)

    return BillingResult(
        duration=duration,
        amount=breakdown.total,
        initial_charge=breakdown.initial_charge,
        additional_intervals=breakdown.additional_intervals,
        additional_charge=breakdown.additional_charge,
    )
