"""Display formatting for costs, times and charging durations."""

from .models import ChargingDuration
from .tariffs import parse_time


def format_currency(amount: float) -> str:
    """Format pounds as GBP, e.g. £1,162.03."""
    sign = "-" if amount < 0 else ""
    return f"{sign}£{abs(amount):,.2f}"


def format_time(time_str: str | None) -> str:
    """Convert a 24-hour HH:MM string to 12-hour clock, e.g. 1:30 AM."""
    if not time_str:
        return ""
    t = parse_time(time_str)
    period = "PM" if t.hour >= 12 else "AM"
    hours12 = t.hour % 12 or 12
    return f"{hours12}:{t.minute:02d} {period}"


def format_duration(duration: ChargingDuration) -> str:
    """Format a charging duration, e.g. 45 mins, 2 hrs, 13 hrs 53 mins."""
    if duration.hours == 0:
        return f"{duration.minutes} mins"

    hours = f"{duration.hours} hr{'s' if duration.hours != 1 else ''}"
    if duration.minutes == 0:
        return hours
    return f"{hours} {duration.minutes} mins"


def format_rate(pence: float | None) -> str:
    """Format a rate in pence to 2 decimal places, or N/A."""
    return "N/A" if pence is None else f"{pence:.2f}"
