"""
Duration and Amount Formatting

Conversions used when proposals are created from human input (a voting
window of "3 days", an amount of "0.5" ether) and when they are displayed.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Literal

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3_600
SECONDS_PER_DAY = 86_400

WEI_PER_ETHER = 10**18

DurationUnit = Literal["seconds", "minutes", "hours", "days"]

_UNIT_SECONDS: dict[str, int] = {
    "seconds": 1,
    "minutes": SECONDS_PER_MINUTE,
    "hours": SECONDS_PER_HOUR,
    "days": SECONDS_PER_DAY,
}


def to_seconds(amount: float, unit: DurationUnit = "seconds") -> int:
    """Convert an amount of `unit` to whole seconds. Non-positive amounts give 0."""
    if amount <= 0:
        return 0
    try:
        factor = _UNIT_SECONDS[unit]
    except KeyError:
        raise ValueError(f"Unknown duration unit: {unit}") from None
    return int(amount * factor)


def format_duration(seconds: int) -> str:
    """
    Render seconds as "1d 2h 3m 4s".

    Zero components are omitted except seconds, which are always shown
    (3600 -> "1h 0s"). Non-positive input renders as "0s".
    """
    if seconds <= 0:
        return "0s"
    seconds = int(seconds)
    days, rest = divmod(seconds, SECONDS_PER_DAY)
    hours, rest = divmod(rest, SECONDS_PER_HOUR)
    minutes, secs = divmod(rest, SECONDS_PER_MINUTE)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    parts.append(f"{secs}s")
    return " ".join(parts)


def format_ether(wei: int | str) -> str:
    """Wei to an ether string with exactly 4 decimals ("1.5000")."""
    ether = Decimal(int(wei)) / Decimal(WEI_PER_ETHER)
    return str(ether.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP))


def parse_ether(amount: str) -> int:
    """Ether decimal string to wei. More than 18 decimals is an error."""
    try:
        value = Decimal(amount.strip())
    except InvalidOperation:
        raise ValueError(f"Invalid ether amount: {amount!r}") from None
    if not value.is_finite() or value < 0:
        raise ValueError(f"Invalid ether amount: {amount!r}")
    wei = value * WEI_PER_ETHER
    if wei != wei.to_integral_value():
        raise ValueError(f"Too many decimals in ether amount: {amount!r}")
    return int(wei)
