"""Reporting-week arithmetic.

A reporting week runs Monday to Saturday. ``week_of`` is the only place
that encodes this; everything else asks it for the bucket of a date.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

WORKING_DAYS_AFTER_MONDAY = 5


@dataclass(slots=True, frozen=True)
class WeekBucket:
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def week_of(day: date) -> WeekBucket:
    """Return the Monday-to-Saturday bucket ``day`` belongs to.

    Sunday maps to the Monday six days earlier, which places it outside
    the inclusive window of its own bucket.
    """
    start = day - timedelta(days=day.weekday())
    return WeekBucket(start, start + timedelta(days=WORKING_DAYS_AFTER_MONDAY))


def week_of_month(day: date) -> int:
    return math.ceil(day.day / 7)


def period_label(day: date, locale: str) -> str:
    n = week_of_month(day)
    if locale == "zh":
        return f"{day.year}年{day.month}月 - 第{n}週"
    return f"{MONTH_NAMES[day.month - 1]} {day.year} - Week {n}"


def report_number(week_start: date) -> str:
    return f"WR-{week_start:%Y%m%d}"


__all__ = ["WeekBucket", "week_of", "week_of_month", "period_label", "report_number", "MONTH_NAMES"]
