from datetime import datetime, date, time
from typing import Optional


def parse_time_str(t: str) -> time:
    return datetime.strptime(t, "%H:%M").time()


def parse_date_str(d: str) -> date:
    return datetime.strptime(d, "%Y-%m-%d").date()


def try_parse_date(d: str) -> Optional[date]:
    try:
        return parse_date_str(d.strip())
    except (ValueError, AttributeError):
        return None


def try_parse_time(t: str) -> Optional[time]:
    try:
        return parse_time_str(t.strip())
    except (ValueError, AttributeError):
        return None


def combine_date_time(d: str, t: str) -> datetime:
    """Build the naive datetime stored for a booking window boundary."""
    return datetime.combine(parse_date_str(d.strip()), parse_time_str(t.strip()))


def date_to_datetime(d: str) -> datetime:
    return datetime.combine(parse_date_str(d.strip()), time.min)
