from datetime import date, datetime

import pytest
from fastapi import HTTPException

from dashboard.shared.validators import (
    DateWindow,
    matches_search,
    month_bounds,
    optional_window,
    paginate,
    parse_date_param,
    resolve_window,
)
from tests.fakes import at


def test_parse_date_param():
    assert parse_date_param("2026-01-09", "from") == date(2026, 1, 9)
    assert parse_date_param("2026-01-09T18:30:00Z", "from") == date(2026, 1, 9)
    assert parse_date_param(None, "from") is None
    assert parse_date_param("  ", "from") is None


def test_parse_date_param_rejects_malformed():
    with pytest.raises(HTTPException) as exc:
        parse_date_param("09/01/2026", "to")
    assert exc.value.status_code == 400
    assert "'to'" in exc.value.detail


def test_window_bounds_are_local_days(tz):
    window = DateWindow.for_dates(date(2026, 1, 1), date(2026, 1, 1), tz)
    # 00:30 and 23:59 on 1 January in India, expressed in UTC
    assert window.contains(at(2025, 12, 31, hour=19))
    assert window.contains(datetime(2026, 1, 1, 18, 29, tzinfo=at(2026, 1, 1).tzinfo))
    assert not window.contains(at(2026, 1, 1, hour=19))
    assert not window.contains(None)
    # Naive timestamps are read as local time
    assert window.contains(datetime(2026, 1, 1, 23, 59, 59))
    assert window.days == 1


def test_resolve_window_defaults_and_order(tz):
    window = resolve_window(None, "2026-01-31", tz, date(2026, 1, 1), date(2026, 1, 15))
    assert (window.start_date, window.end_date) == (date(2026, 1, 1), date(2026, 1, 31))
    with pytest.raises(HTTPException) as exc:
        resolve_window("2026-02-01", "2026-01-01", tz, date(2026, 1, 1), date(2026, 1, 31))
    assert exc.value.status_code == 400


def test_optional_window_needs_both_ends(tz):
    assert optional_window("2026-01-01", None, tz) is None
    assert optional_window(None, None, tz) is None
    assert optional_window("2026-01-01", "2026-01-02", tz).days == 2


def test_month_bounds():
    assert month_bounds(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(date(2025, 12, 31)) == (date(2025, 12, 1), date(2025, 12, 31))


def test_paginate():
    result = paginate(list(range(25)), 3, 10)
    assert result["items"] == [20, 21, 22, 23, 24]
    assert result["total_pages"] == 3
    assert result["has_next"] is False
    assert result["has_prev"] is True


def test_paginate_edges():
    empty = paginate([], 1, 10)
    assert empty["items"] == []
    assert empty["total_pages"] == 0
    assert empty["has_next"] is False
    assert paginate([1, 2, 3], 0, 2)["page"] == 1
    assert paginate([1, 2, 3], 5, 2)["items"] == []


def test_matches_search():
    assert matches_search("", "anything")
    assert matches_search(None, None)
    assert matches_search("RAVI", "Ravi Kumar", None)
    assert matches_search("9876", "Asha", 9876500001)
    assert not matches_search("neha", "Ravi", None)
