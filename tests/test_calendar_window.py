import pytest

from retail_agents.sales_plan.calendar_window import add_days, build_calendar, is_elapsed
from retail_agents.sales_plan.errors import InvalidInput


def test_build_calendar_is_inclusive_and_labels_weekdays():
    calendar = build_calendar("2024-12-30", "2025-01-02")
    assert calendar.dates == ("2024-12-30", "2024-12-31", "2025-01-01", "2025-01-02")
    assert calendar.weekdays == ("Mo", "Tu", "We", "Th")
    assert len(calendar) == 4


def test_weekend_detection():
    calendar = build_calendar("2025-01-04", "2025-01-06")
    assert [calendar.is_weekend(i) for i in range(3)] == [True, True, False]
    assert calendar.weekdays[1] == "Su"


def test_end_before_start_rejected():
    with pytest.raises(InvalidInput):
        build_calendar("2025-01-02", "2025-01-01")


def test_bad_date_rejected():
    with pytest.raises(InvalidInput):
        build_calendar("2025-13-01", "2025-12-31")


def test_index_of_and_out_of_window():
    calendar = build_calendar("2025-01-01", "2025-01-10")
    assert calendar.index_of("2025-01-05") == 4
    with pytest.raises(InvalidInput):
        calendar.index_of("2025-02-01")


def test_today_is_not_elapsed():
    assert is_elapsed("2025-01-07", "2025-01-08")
    assert not is_elapsed("2025-01-08", "2025-01-08")
    assert not is_elapsed("2025-01-09", "2025-01-08")


def test_add_days_crosses_month_and_year():
    assert add_days("2024-12-30", 3) == "2025-01-02"
    assert add_days("2025-03-01", -1) == "2025-02-28"
