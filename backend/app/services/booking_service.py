"""Slot template, availability flags and price estimate for booking."""
from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from app.config import DURATIONS, TIME_SLOTS

CENT = Decimal("0.01")


def allowed_durations() -> set[int]:
    return {d["value"] for d in DURATIONS}


def parse_slot(value: str) -> Optional[time]:
    """'HH:MM' -> time, or None when it is not one of the template slots."""
    if value not in TIME_SLOTS:
        return None
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def slot_datetime(day: date, slot: str) -> datetime:
    """Appointment start in UTC for a template slot on `day`."""
    t = parse_slot(slot)
    if t is None:
        raise ValueError(f"Unknown time slot: {slot}")
    return datetime.combine(day, t, tzinfo=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def build_slots(day: date, booked_starts: Iterable[datetime], now: Optional[datetime] = None) -> list[dict]:
    """
    Template slots for `day`. A slot is unavailable when it has already
    started or a booked appointment for the therapist starts exactly then.
    """
    now = now or datetime.now(timezone.utc)
    taken = {_as_utc(s) for s in booked_starts}
    slots = []
    for label in TIME_SLOTS:
        start = slot_datetime(day, label)
        slots.append({"time": label, "available": start > now and start not in taken})
    return slots


def estimate_price(hourly_rate: Optional[float], duration_minutes: int) -> Optional[float]:
    """rate x minutes / 60, rounded half-up to whole cents."""
    if hourly_rate is None:
        return None
    price = Decimal(str(hourly_rate)) * duration_minutes / 60
    return float(price.quantize(CENT, rounding=ROUND_HALF_UP))
