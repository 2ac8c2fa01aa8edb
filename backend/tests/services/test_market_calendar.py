"""Tests for papertrade/services/market_calendar.py"""

from datetime import datetime, time, timedelta, timezone

import pytest

from papertrade.services.market_calendar import MarketCalendar


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def calendar():
    return MarketCalendar()


class TestIsMarketOpen:
    """Tests for MarketCalendar.is_market_open()"""

    @pytest.mark.parametrize("now, expected", [
        (utc(2024, 1, 8, 14, 29, 59), False),  # 09:29:59 EST
        (utc(2024, 1, 8, 14, 30), True),       # 09:30 EST, open is inclusive
        (utc(2024, 1, 8, 18, 0), True),
        (utc(2024, 1, 8, 20, 59, 59), True),
        (utc(2024, 1, 8, 21, 0), False),       # 16:00 EST, close is exclusive
    ])
    def test_winter_session_bounds(self, calendar, now, expected):
        assert calendar.is_market_open(now) is expected

    @pytest.mark.parametrize("now, expected", [
        (utc(2024, 7, 8, 13, 29), False),  # 09:29 EDT
        (utc(2024, 7, 8, 13, 30), True),   # 09:30 EDT
        (utc(2024, 7, 8, 14, 30), True),
        (utc(2024, 7, 8, 20, 0), False),   # 16:00 EDT
        (utc(2024, 7, 8, 20, 30), False),  # would be 15:30 if DST were ignored
    ])
    def test_summer_session_uses_daylight_offset(self, calendar, now, expected):
        """Edge case: the UTC window shifts by an hour under daylight saving."""
        assert calendar.is_market_open(now) is expected

    def test_weekend_closed(self, calendar):
        assert calendar.is_market_open(utc(2024, 1, 6, 16, 0)) is False  # Saturday
        assert calendar.is_market_open(utc(2024, 1, 7, 16, 0)) is False  # Sunday

    def test_local_date_decides_weekday(self, calendar):
        """Edge case: Saturday 01:00 UTC is still Friday evening in New York."""
        assert calendar.is_market_open(utc(2024, 1, 13, 1, 0)) is False
        assert calendar.to_exchange_time(utc(2024, 1, 13, 1, 0)).weekday() == 4

    def test_naive_datetime_is_utc(self, calendar):
        assert calendar.is_market_open(datetime(2024, 1, 8, 15, 0)) is True
        assert calendar.is_market_open(datetime(2024, 1, 8, 22, 0)) is False

    def test_other_exchange_timezone(self):
        lse = MarketCalendar("Europe/London", time(8, 0), time(16, 30))
        assert lse.is_market_open(utc(2024, 1, 8, 8, 0)) is True
        assert lse.is_market_open(utc(2024, 1, 8, 16, 30)) is False


class TestNextMarketOpen:
    """Tests for MarketCalendar.next_market_open()"""

    def test_before_open_same_day(self, calendar):
        nxt = calendar.next_market_open(utc(2024, 1, 8, 13, 0))  # Monday 08:00 EST
        assert nxt == utc(2024, 1, 8, 14, 30)

    def test_during_session_is_next_day(self, calendar):
        nxt = calendar.next_market_open(utc(2024, 1, 8, 15, 0))
        assert nxt == utc(2024, 1, 9, 14, 30)

    def test_friday_evening_skips_weekend(self, calendar):
        nxt = calendar.next_market_open(utc(2024, 1, 12, 22, 0))
        assert nxt == utc(2024, 1, 15, 14, 30)
        assert nxt.weekday() == 0

    def test_saturday_to_monday(self, calendar):
        assert calendar.next_market_open(utc(2024, 1, 6, 12, 0)) == utc(2024, 1, 8, 14, 30)

    def test_across_dst_change(self, calendar):
        """Edge case: clocks spring forward on Sunday 2024-03-10."""
        nxt = calendar.next_market_open(utc(2024, 3, 8, 22, 0))
        assert nxt == utc(2024, 3, 11, 13, 30)
        assert nxt.utcoffset() == timedelta(hours=-4)
