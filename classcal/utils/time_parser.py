from datetime import date
from typing import Optional


def minute_of_day(value: str) -> int:
    """
    Convert a wall-clock time to minutes since midnight.
    Accepts "HH:MM" and unpadded "H:MM" / "HH:M".
    Examples: "09:30" -> 570, "9:00" -> 540
    """
    if value is None:
        raise ValueError("Time is empty")

    s = str(value).strip()
    if not s:
        raise ValueError("Time is empty")

    parts = s.split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time: {value!r}")

    hours, minutes = int(parts[0]), int(parts[1])
    if hours > 23 or minutes > 59:
        raise ValueError(f"Time out of range: {value!r}")
    return hours * 60 + minutes


def start_sort_key(value: str) -> tuple[int, int]:
    # Unparseable times go after every valid one
    try:
        return (0, minute_of_day(value))
    except ValueError:
        return (1, 0)


def parse_iso_date(s: str) -> Optional[date]:
    s = (s or "").strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        return None
