"""Display formatting for billing values."""

from .policy import DEFAULT_POLICY, BillingPolicy


def format_duration(duration: int, policy: BillingPolicy = DEFAULT_POLICY) -> str:
    """
    Format a duration in billing units as e.g. "45s", "2m 5s" or "1h".

    Zero-valued trailing components are dropped; inner ones are kept
    so "1h 0m 5s" stays unambiguous.
    """
    total_seconds = max(0, int(duration)) * policy.unit_seconds

    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    parts = [(hours, "h"), (minutes, "m"), (seconds, "s")]
    while parts and parts[0][0] == 0:
        parts.pop(0)
    while parts and parts[-1][0] == 0:
        parts.pop()

    if not parts:
        return "0s"

    return " ".join(f"{value}{suffix}" for value, suffix in parts)


def format_amount(amount: float, policy: BillingPolicy = DEFAULT_POLICY) -> str:
    """Format a currency amount, e.g. "$7.00"."""
    return f"{policy.currency_symbol}{amount:.2f}"
