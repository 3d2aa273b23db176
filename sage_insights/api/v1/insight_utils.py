# sage_insights/api/v1/insight_utils.py
import calendar
import datetime
from typing import Any, Optional


# ============================================================
# Time helpers used by the aggregator and the templates
# ============================================================
def parse_timestamp(ts: Any) -> Optional[datetime.datetime]:
    """Normalize an upstream time value to an aware UTC datetime.

    Accepts datetimes, ISO strings (trailing ``Z`` allowed) and epoch
    milliseconds. Returns None when the value cannot be read.
    """
    if ts is None or isinstance(ts, bool):
        return None
    if isinstance(ts, datetime.datetime):
        parsed = ts
    elif isinstance(ts, (int, float)):
        try:
            return datetime.datetime.fromtimestamp(ts / 1000.0, tz=datetime.timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(ts, str):
        try:
            parsed = datetime.datetime.fromisoformat(ts.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def months_before(now: datetime.datetime, months: int = 1) -> datetime.datetime:
    """Step the month field back, clamping the day to the target month length."""
    index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def format_duration(seconds: Optional[float]) -> str:
    seconds = seconds or 0
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)

    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m"
    return f"{round(seconds)}s"
