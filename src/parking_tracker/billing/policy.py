"""Tiered billing policy constants and model."""

from pydantic import BaseModel, Field

# Time granularity: number of seconds per billing unit
BILLING_UNIT_SECONDS = 1

# Initial tier: flat charge covering the first FIRST_TIER_UNITS units
FIRST_TIER_UNITS = 30
FIRST_TIER_RATE = 5.0

# Recurring tier: charge per ADDITIONAL_INTERVAL_UNITS units (or part thereof)
ADDITIONAL_INTERVAL_UNITS = 10
ADDITIONAL_INTERVAL_RATE = 1.0

CURRENCY_SYMBOL = "$"


class BillingPolicy(BaseModel):
    """Tiered pricing configuration."""

    unit_seconds: int = Field(default=BILLING_UNIT_SECONDS, ge=1)
    first_tier_units: int = Field(default=FIRST_TIER_UNITS, ge=0)
    first_tier_rate: float = Field(default=FIRST_TIER_RATE, ge=0)
    additional_interval_units: int = Field(default=ADDITIONAL_INTERVAL_UNITS, ge=1)
    additional_interval_rate: float = Field(default=ADDITIONAL_INTERVAL_RATE, ge=0)
    currency_symbol: str = CURRENCY_SYMBOL


DEFAULT_POLICY = BillingPolicy()
