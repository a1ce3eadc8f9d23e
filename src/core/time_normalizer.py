"""Reminder time normalizer — pure business logic.

Turns a free-form time expression ("5pm", "tomorrow at 9:30 am", "monday")
into an absolute naive local ISO-8601 timestamp.

Deliberately narrow: only "tomorrow" moves the date, and a clock time that
has already passed today rolls over to tomorrow. No timezone conversion,
no "next week", no explicit dates.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)

_CLOCK_RE = re.compile(r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)?", re.IGNORECASE)


def _to_24h(hour: int, meridiem: str | None) -> int:
    """Apply 12-hour clock rules: PM adds 12 below noon, 12 AM is midnight."""
    if meridiem is None:
        return hour
    meridiem = meridiem.lower()
    if meridiem == "pm" and hour < 12:
        return hour + 12
    if meridiem == "am" and hour == 12:
        return 0
    return hour


def resolve_datetime(expression: str, now: datetime | None = None) -> datetime:
    """Resolve a time expression relative to ``now`` (defaults to the local clock).

    Without a clock time the result keeps the current time of day.
    Out-of-range clock values (e.g. "25:00") are ignored the same way.
    """
    if now is None:
        now = datetime.now()

    tomorrow = "tomorrow" in expression.lower()
    base = now + timedelta(days=1) if tomorrow else now

    match = _CLOCK_RE.search(expression)
    if not match:
        return base

    hour = _to_24h(int(match.group(1)), match.group(3))
    minute = int(match.group(2) or "0")
    try:
        target = base.replace(hour=hour, minute=minute, second=0, microsecond=0)
    except ValueError:
        logger.warning("Ignoring out-of-range time %02d:%02d in '%s'", hour, minute, expression)
        return base

    if not tomorrow and target < now:
        target += timedelta(days=1)
        logger.debug("Time '%s' already passed today, rolled to %s", expression, target.date())

    return target


def resolve_to_iso(expression: str, now: datetime | None = None) -> str:
    """Resolve a time expression to an ISO-8601 string (seconds precision)."""
    return resolve_datetime(expression, now).isoformat(timespec="seconds")
