# app/hours.py
"""
🕘 WEEKLY HOURS

Everything about the `hours` field of the shop-info document:
- normalize_info: migrate any stored document (legacy grouped hours
  "Mon–Fri"/"Sat"/"Sun" or per-day entries) into the canonical shape
- compress_hours: per-day entries → minimal list of day-range groups
- parse_day_spec / set_day_hours: live edits coming from the bot

All functions here are pure: no I/O, no hidden state.
"""

import re
from datetime import datetime
from typing import Any, Iterable, Optional

from pydantic import TypeAdapter, ValidationError

from app.models import DAY_KEYS, DayHours, DayRangeGroup, ShopInfo, default_info

# ==========================================
# LEGACY GROUPS
# ==========================================

LEGACY_GROUPS = {
    "Mon–Fri": DAY_KEYS[:5],
    "Sat": ("Sat",),
    "Sun": ("Sun",),
}

DAY_ALIASES = {
    "mon": "Mon", "monday": "Mon",
    "tue": "Tue", "tues": "Tue", "tuesday": "Tue",
    "wed": "Wed", "wednesday": "Wed",
    "thu": "Thu", "thur": "Thu", "thurs": "Thu", "thursday": "Thu",
    "fri": "Fri", "friday": "Fri",
    "sat": "Sat", "saturday": "Sat",
    "sun": "Sun", "sunday": "Sun",
}

GROUP_ALIASES = {
    "daily": DAY_KEYS,
    "everyday": DAY_KEYS,
    "every day": DAY_KEYS,
    "all week": DAY_KEYS,
    "weekdays": DAY_KEYS[:5],
    "weekend": DAY_KEYS[5:],
    "weekends": DAY_KEYS[5:],
}

_timestamp_adapter = TypeAdapter(datetime)


def expand_legacy_label(label: str) -> tuple[str, ...]:
    """
    "Mon–Fri" → five weekdays, "Sat"/"Sun" → themselves.

    Any other label is kept as a single (unrecognized) day label.
    """
    return LEGACY_GROUPS.get(label, (label,))

# ==========================================
# NORMALIZER
# ==========================================

def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return _timestamp_adapter.validate_python(value)
    except ValidationError:
        return None


def _day_entry(entry: dict) -> DayHours:
    return DayHours(
        day=str(entry.get("day")),
        open=_text(entry.get("open")),
        close=_text(entry.get("close")),
        closed=entry.get("closed") is True,
    )


def _expand_legacy(entries: list) -> list[DayHours]:
    # Duplicates for the same day are kept in expansion order.
    hours = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        for day in expand_legacy_label(str(entry.get("days", ""))):
            hours.append(
                DayHours(
                    day=day,
                    open=_text(entry.get("open")),
                    close=_text(entry.get("close")),
                    closed=entry.get("closed") is True,
                )
            )
    return hours


def is_canonical(hours: Any) -> bool:
    """Per-day shape: non-empty list whose first entry carries `day`."""
    return (
        isinstance(hours, list)
        and len(hours) > 0
        and isinstance(hours[0], dict)
        and "day" in hours[0]
    )


def normalize_info(raw: Any) -> ShopInfo:
    """
    Turn a decoded document of unknown shape into a canonical ShopInfo.

    Flow:
    1. Not an object at all → the default document
    2. `hours` not a list → default hours
    3. `hours` already per-day → entries kept as they are
    4. otherwise → legacy groups expanded to one entry per day
    5. Missing (or non-string) top-level fields come from the default document

    Never raises for a structurally odd document.
    """
    fallback = default_info()
    if not isinstance(raw, dict):
        return fallback

    hours_raw = raw.get("hours")
    if not isinstance(hours_raw, list):
        hours = fallback.hours
    elif is_canonical(hours_raw):
        hours = [
            _day_entry(entry)
            for entry in hours_raw
            if isinstance(entry, dict) and "day" in entry
        ]
    else:
        hours = _expand_legacy(hours_raw)

    return ShopInfo(
        name=_text(raw.get("name")) or fallback.name,
        address=_text(raw.get("address")) or fallback.address,
        city=_text(raw.get("city")) or fallback.city,
        hours=hours,
        background_url=_text(raw.get("backgroundUrl")) or fallback.background_url,
        weekly_note=_text(raw.get("weeklyNote")),
        updated_at=_timestamp(raw.get("updatedAt")),
    )

# ==========================================
# RANGE COMPRESSOR
# ==========================================

def _schedule_key(entry: DayHours) -> str:
    # Exact string comparison, "09:00" and "09:00 " are different schedules.
    if not entry.is_open:
        return "closed"
    return f"{entry.open}-{entry.close}"


def compress_hours(hours: Iterable[DayHours]) -> list[DayRangeGroup]:
    """
    Group the week (Mon→Sun) into runs of consecutive days with the same schedule.

    Days without an entry count as closed. When a day appears more than once
    the last entry wins. The result always covers all seven days exactly once.

    Example:
        Mon-Fri 09:00-18:00, Sat 10:00-17:00, Sun closed
        → [Mon–Fri 09:00 – 18:00, Sat 10:00 – 17:00, Sun Closed]
    """
    by_day = {}
    for entry in hours:
        by_day[entry.day] = entry

    groups: list[DayRangeGroup] = []
    keys: list[str] = []

    for day in DAY_KEYS:
        entry = by_day.get(day) or DayHours(day=day, closed=True)
        key = _schedule_key(entry)

        if keys and keys[-1] == key:
            groups[-1].to_day = day
            continue

        keys.append(key)
        if key == "closed":
            groups.append(DayRangeGroup(from_day=day, to_day=day, closed=True))
        else:
            groups.append(
                DayRangeGroup(
                    from_day=day,
                    to_day=day,
                    closed=False,
                    open=entry.open,
                    close=entry.close,
                )
            )

    return groups


def expand_groups(groups: Iterable[DayRangeGroup]) -> list[DayHours]:
    """Replay every group across its day range (inverse of compress_hours)."""
    hours = []
    for group in groups:
        start = DAY_KEYS.index(group.from_day)
        end = DAY_KEYS.index(group.to_day)
        for day in DAY_KEYS[start:end + 1]:
            hours.append(
                DayHours(day=day, open=group.open, close=group.close, closed=group.closed)
            )
    return hours


def format_hours(hours: Iterable[DayHours]) -> list[str]:
    """Human-readable lines, e.g. "Mon–Fri: 08:00 – 18:00"."""
    return [f"{group.label}: {group.schedule}" for group in compress_hours(hours)]

# ==========================================
# LIVE EDITS
# ==========================================

def _resolve_day(token: str) -> str:
    day = DAY_ALIASES.get(token.strip().rstrip("."))
    if day is None:
        raise ValueError(f"Unknown day: {token.strip()}")
    return day


def parse_day_spec(spec: str) -> list[str]:
    """
    Parse the day part of an edit into canonical days (Mon→Sun, unique).

    Accepts single days ("sat", "Saturday"), ranges ("Mon–Fri", "mon-fri",
    wrapping "Fri-Mon"), lists ("Sat,Sun", "sat & sun") and the aliases
    from GROUP_ALIASES ("daily", "weekdays", "weekend").

    Raises ValueError for anything it can't read.
    """
    text = spec.strip().lower().replace("—", "-").replace("–", "-")
    if not text:
        raise ValueError("No days given")

    days: list[str] = []
    for token in re.split(r"\s*(?:,|&|/|\band\b)\s*", text):
        token = token.strip()
        if not token:
            continue
        if token in GROUP_ALIASES:
            days.extend(GROUP_ALIASES[token])
        elif "-" in token:
            start_raw, end_raw = token.split("-", 1)
            start = DAY_KEYS.index(_resolve_day(start_raw))
            end = DAY_KEYS.index(_resolve_day(end_raw))
            if end < start:
                end += len(DAY_KEYS)
            days.extend(DAY_KEYS[i % len(DAY_KEYS)] for i in range(start, end + 1))
        else:
            days.append(_resolve_day(token))

    if not days:
        raise ValueError(f"No days in: {spec}")

    wanted = set(days)
    return [day for day in DAY_KEYS if day in wanted]


def set_day_hours(
    hours: Iterable[DayHours],
    days: Iterable[str],
    open: Optional[str] = None,
    close: Optional[str] = None,
    closed: bool = False,
) -> list[DayHours]:
    """
    Replace the entries of `days` and return the new per-day list.

    Entries are keyed by day, so a day never appears twice in the result.
    Canonical days come first in Mon→Sun order, unrecognized labels after.
    """
    by_day = {entry.day: entry for entry in hours}
    for day in days:
        if closed:
            by_day[day] = DayHours(day=day, closed=True)
        else:
            by_day[day] = DayHours(day=day, open=open, close=close)

    ordered = [by_day[day] for day in DAY_KEYS if day in by_day]
    extras = [entry for day, entry in by_day.items() if day not in DAY_KEYS]
    return ordered + extras
