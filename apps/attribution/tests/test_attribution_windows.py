import uuid
from datetime import date, datetime, timezone

import pytest

from attribution_service.services.attribution.windows import (
    AttributionWindow,
    link_covers,
    parse_organization_id,
    validate_days_back,
)
from attribution_service.services.exceptions import InvalidArgumentError


def test_window_is_inclusive_calendar_range():
    window = AttributionWindow.ending_on(date(2026, 3, 10), 7)
    assert window.start == date(2026, 3, 3)
    assert window.end == date(2026, 3, 10)
    assert window.start_at == datetime(2026, 3, 3, tzinfo=timezone.utc)
    assert window.end_before == datetime(2026, 3, 11, tzinfo=timezone.utc)


def test_zero_day_window_covers_one_day():
    window = AttributionWindow.ending_on(date(2026, 1, 1), 0)
    assert window.start == window.end == date(2026, 1, 1)


def test_window_crosses_month_boundary():
    window = AttributionWindow.ending_on(date(2026, 3, 2), 3)
    assert window.start == date(2026, 2, 27)


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (None, None, True),
        (date(2026, 3, 10), None, True),
        (date(2026, 3, 11), None, False),
        (None, date(2026, 3, 10), True),
        (None, date(2026, 3, 9), False),
        (date(2026, 3, 1), date(2026, 3, 31), True),
    ],
)
def test_link_covers(start, end, expected):
    assert link_covers(start, end, date(2026, 3, 10)) is expected


def test_days_back_defaults_when_missing():
    assert validate_days_back(None, default=7) == 7


@pytest.mark.parametrize("value, expected", [(0, 0), (30, 30), (14.0, 14)])
def test_days_back_accepts_non_negative_integers(value, expected):
    assert validate_days_back(value, default=7) == expected


@pytest.mark.parametrize("value", [-1, 2.5, False, "7", [7]])
def test_days_back_rejects_invalid_values(value):
    with pytest.raises(InvalidArgumentError):
        validate_days_back(value, default=7)


def test_organization_id_parsing():
    org = uuid.uuid4()
    assert parse_organization_id(org) is org
    assert parse_organization_id(str(org)) == org

    with pytest.raises(InvalidArgumentError, match="required"):
        parse_organization_id(None)
    with pytest.raises(InvalidArgumentError, match="valid UUID"):
        parse_organization_id("not-a-uuid")


def test_invalid_argument_is_a_value_error():
    with pytest.raises(ValueError):
        parse_organization_id("")


@pytest.mark.parametrize("days_back", [10**6, 10**10, 10**30])
def test_window_before_earliest_date_is_invalid(days_back):
    with pytest.raises(InvalidArgumentError, match="days_back"):
        AttributionWindow.ending_on(date(2026, 3, 10), days_back)
