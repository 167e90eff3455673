from __future__ import annotations

from datetime import date, timedelta

import pytest

from modules.safety_inspections.weekly.weeks import period_label, report_number, week_of


@pytest.mark.parametrize("offset", range(6))
def test_monday_to_saturday_share_a_bucket(offset):
    day = date(2024, 5, 13) + timedelta(days=offset)
    bucket = week_of(day)
    assert bucket.start == date(2024, 5, 13)
    assert bucket.end == date(2024, 5, 18)
    assert bucket.contains(day)


def test_sunday_maps_to_previous_monday_outside_window():
    sunday = date(2024, 5, 19)
    bucket = week_of(sunday)
    assert bucket.start == date(2024, 5, 13)
    assert not bucket.contains(sunday)


def test_week_can_span_month_and_year():
    bucket = week_of(date(2025, 1, 2))
    assert bucket.start == date(2024, 12, 30)
    assert bucket.end == date(2025, 1, 4)


def test_period_labels():
    assert period_label(date(2024, 5, 13), "en") == "May 2024 - Week 2"
    assert period_label(date(2024, 5, 13), "zh") == "2024年5月 - 第2週"
    assert period_label(date(2024, 4, 29), "en") == "April 2024 - Week 5"
    assert period_label(date(2024, 7, 1), "en") == "July 2024 - Week 1"


def test_report_number_uses_week_start():
    assert report_number(date(2023, 10, 23)) == "WR-20231023"
