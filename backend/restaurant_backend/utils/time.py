from datetime import date, datetime, time, timezone


def utc_now_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def day_of_week(day: date) -> int:
    """Weekday of a calendar date, 0 = Sunday through 6 = Saturday.

    The date is taken as-is in the restaurant's local calendar; it is never
    converted through UTC, so a booking date cannot drift to the previous day.
    """
    return day.isoweekday() % 7


def parse_slot(slot: str) -> time:
    """Parse an ``HH:MM`` slot label. Raises ValueError on anything else."""
    if len(slot) != 5 or slot[2] != ":":
        raise ValueError(f"invalid slot label: {slot!r}")
    return time.fromisoformat(slot)


def slot_starts_at(day: date, slot: str) -> datetime:
    return datetime.combine(day, parse_slot(slot))
