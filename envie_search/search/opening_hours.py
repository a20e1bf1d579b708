from __future__ import annotations

import logging
from datetime import datetime
from typing import Mapping

from .models import DaySchedule

logger = logging.getLogger(__name__)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
MINUTES_PER_DAY = 24 * 60


def _to_minutes(value: str) -> int:
    """Parse ``HH:MM`` into minutes since midnight."""
    hours, minutes = value.strip().split(":")
    return int(hours) * 60 + int(minutes)


def is_open_now(schedule: Mapping[str, DaySchedule] | None, now: datetime) -> bool:
    """Return True when *now* falls inside one of today's opening slots.

    No schedule at all means "always open". A day that is missing or marked
    closed means closed. A slot whose closing time is earlier than its
    opening time runs past midnight.
    """
    if schedule is None:
        return True

    today = schedule.get(WEEKDAYS[now.weekday()])
    if today is None or not today.is_open:
        return False

    now_minutes = now.hour * 60 + now.minute
    try:
        for slot in today.slots:
            open_minutes = _to_minutes(slot.open)
            close_minutes = _to_minutes(slot.close)
            if close_minutes < open_minutes:
                close_minutes += MINUTES_PER_DAY
            if open_minutes <= now_minutes <= close_minutes:
                return True
    except ValueError:
        logger.warning("Malformed opening hours %s, treating venue as open", today, exc_info=True)
        return True

    return False
