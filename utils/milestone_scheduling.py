# utils/milestone_scheduling.py
"""Due-date assignment for milestone suggestions that arrive without one."""

from __future__ import annotations

import calendar
from collections.abc import Callable, Iterable, Sequence
from datetime import date
from typing import TypeVar

T = TypeVar("T")


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by whole calendar months, clamping to the month's last day."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def months_after(existing_count: int) -> int:
    """Gap before the next milestone: 1 month early on, up to 3 as the plan grows."""
    return min(3, max(1, 1 + existing_count // 2))


def assign_due_dates(
    items: Sequence[T],
    get_date: Callable[[T], date | None],
    with_date: Callable[[T, date], T],
    existing_due_dates: Iterable[date] = (),
    today: date | None = None,
) -> list[T]:
    """Give every undated item a date after the latest one scheduled so far.

    Items are walked in order. Dated items keep their date and move the
    horizon forward; undated items are placed ``months_after(n)`` months after
    the horizon, where ``n`` is the number of milestones already scheduled.
    With no existing dates the horizon starts at ``today``.
    """
    existing = sorted(existing_due_dates)
    latest = existing[-1] if existing else (today or date.today())
    scheduled = len(existing)

    result: list[T] = []
    for item in items:
        due = get_date(item)
        if due is None:
            due = add_months(latest, months_after(scheduled))
            item = with_date(item, due)
        latest = max(latest, due)
        scheduled += 1
        result.append(item)
    return result
