"""Human-readable renderings of a TimeBreakdown."""

from ..data.models import TimeBreakdown


def format_time_compact(breakdown: TimeBreakdown) -> str:
    """Render as ``"1h 26m"``; the form annotations append to prices."""
    return f"{breakdown.hours}h {breakdown.minutes}m"


def format_time_verbose(breakdown: TimeBreakdown) -> str:
    """Render as ``"1 hour, 26 minutes"``."""
    hours = f"{breakdown.hours} hour{'' if breakdown.hours == 1 else 's'}"
    minutes = f"{breakdown.minutes} minute{'' if breakdown.minutes == 1 else 's'}"
    if breakdown.hours == 0:
        return minutes
    if breakdown.minutes == 0:
        return hours
    return f"{hours}, {minutes}"


def format_price_with_time(original_text: str, breakdown: TimeBreakdown) -> str:
    """Original price followed by its work-time annotation: ``"$10 (1h 26m)"``."""
    return f"{original_text} ({format_time_compact(breakdown)})"
