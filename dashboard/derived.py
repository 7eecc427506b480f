"""Derived dashboard values: countdowns, D-Day labels, progress and quotes.

Everything here is a pure function of the document and the current time.
Nothing is persisted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, Optional, Sequence

from .models import Category, DDay, GoalItem

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR

URGENCY_CRITICAL = "critical"
URGENCY_WARNING = "warning"
URGENCY_NEUTRAL = "neutral"
URGENCY_PASSED = "passed"

QUOTES = (
    "Another day of focused study. Let's go!",
    "Mastery of big data analysis is not far away!",
    "Data never lies, and neither does your effort.",
    "One line of code today makes tomorrow's pass.",
    "The moment you refuse to give up, you have already passed.",
    "Consistency is the most powerful algorithm.",
    "An error is a sign of growth. Time to debug!",
    "The star of the 2026 big data analyst exam is you.",
    "Just do it. Data analysis.",
    "Trust the version of you that is smarter than yesterday.",
)


@dataclass(slots=True, frozen=True)
class CountdownState:
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    reached: bool = False

    def to_dict(self):
        return {
            "days": self.days,
            "hours": self.hours,
            "minutes": self.minutes,
            "seconds": self.seconds,
            "reached": self.reached,
        }


@dataclass(slots=True, frozen=True)
class DDayStatus:
    label: str
    urgency: str
    days: int


def parse_instant(value: str) -> Optional[datetime]:
    """Parse an ISO instant into an aware datetime.

    Naive values are taken as server-local time, a trailing ``Z`` as UTC.
    Returns ``None`` when the value cannot be parsed.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def _aware(now: datetime) -> datetime:
    return now if now.tzinfo is not None else now.astimezone()


def countdown(dday: DDay, now: datetime) -> CountdownState:
    """Break the time left until ``dday`` into days/hours/minutes/seconds.

    All units derive from one millisecond difference so they never drift
    against each other. A past, present or unparsable target is reported
    as reached.
    """
    target = parse_instant(dday.date)
    if target is None:
        return CountdownState(reached=True)

    remaining = (target - _aware(now)) // timedelta(milliseconds=1)
    if remaining <= 0:
        return CountdownState(reached=True)

    return CountdownState(
        days=remaining // MS_PER_DAY,
        hours=(remaining // MS_PER_HOUR) % 24,
        minutes=(remaining // MS_PER_MINUTE) % 60,
        seconds=(remaining // MS_PER_SECOND) % 60,
    )


def countdowns(ddays: Iterable[DDay], now: datetime) -> Dict[str, CountdownState]:
    return {dday.id: countdown(dday, now) for dday in ddays}


def parse_calendar_date(value: str) -> Optional[date]:
    """Return the calendar date of an ISO date or datetime string."""
    if not value:
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def dday_status(target_date: str, today: date) -> Optional[DDayStatus]:
    """Classify a goal's target date against ``today``.

    Only calendar dates are compared. Returns ``None`` when there is no
    usable target date.
    """
    target = parse_calendar_date(target_date)
    if target is None:
        return None

    days = math.ceil((target - today) / timedelta(days=1))
    if days == 0:
        return DDayStatus(label="D-Day", urgency=URGENCY_CRITICAL, days=0)
    if days < 0:
        return DDayStatus(label=f"D+{abs(days)}", urgency=URGENCY_PASSED, days=days)
    if days <= 3:
        urgency = URGENCY_CRITICAL
    elif days <= 7:
        urgency = URGENCY_WARNING
    else:
        urgency = URGENCY_NEUTRAL
    return DDayStatus(label=f"D-{days}", urgency=urgency, days=days)


def _percentage(checked: int, total: int) -> int:
    if total == 0:
        return 0
    # half-up, not banker's rounding
    return math.floor(100 * checked / total + 0.5)


def goal_progress(item: GoalItem) -> int:
    checked = sum(1 for sub in item.sub_items if sub.checked)
    return _percentage(checked, len(item.sub_items))


def category_progress(category: Optional[Category]) -> int:
    """Aggregate progress over every sub-item in the category."""
    if category is None:
        return 0
    subs = [sub for item in category.items for sub in item.sub_items]
    return _percentage(sum(1 for sub in subs if sub.checked), len(subs))


def day_of_year(now: datetime) -> int:
    """Days since the last day of the previous year; 1 January is day 1."""
    start = datetime(now.year, 1, 1) - timedelta(days=1)
    local_now = now.replace(tzinfo=None)
    return (local_now - start) // timedelta(milliseconds=MS_PER_DAY)


def quote_index(now: datetime, count: int) -> int:
    return day_of_year(now) % count


def daily_quote(now: Optional[datetime] = None, quotes: Sequence[str] = QUOTES) -> str:
    """Pick the quote of the day; the same for everyone until local midnight."""
    if now is None:
        now = datetime.now()
    return quotes[quote_index(now, len(quotes))]
