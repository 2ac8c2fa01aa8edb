"""
Market Calendar

Regular-session check for US equities: Monday-Friday, 9:30 (inclusive)
to 16:00 (exclusive) exchange-local time. Conversion to exchange time
goes through the tz database, so daylight saving is handled there.
Exchange holidays are not modelled.
"""

from datetime import datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo


class MarketCalendar:
    """Pure wall-clock market-hours rules for one exchange timezone"""

    def __init__(
        self,
        tz_name: str = "America/New_York",
        open_time: time = time(9, 30),
        close_time: time = time(16, 0),
    ):
        self.tz = ZoneInfo(tz_name)
        self.open_time = open_time
        self.close_time = close_time

    def to_exchange_time(self, now: Optional[datetime] = None) -> datetime:
        """Convert now to exchange-local time; naive datetimes are taken as UTC"""
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.astimezone(self.tz)

    def _session_open(self, local: datetime) -> datetime:
        return local.replace(hour=self.open_time.hour, minute=self.open_time.minute, second=0, microsecond=0)

    def is_market_open(self, now: Optional[datetime] = None) -> bool:
        local = self.to_exchange_time(now)
        if local.weekday() >= 5:  # Saturday / Sunday
            return False
        return self.open_time <= local.time() < self.close_time

    def next_market_open(self, now: Optional[datetime] = None) -> datetime:
        """Next session open (exchange-local), skipping weekends"""
        local = self.to_exchange_time(now)
        today_open = self._session_open(local)
        if local < today_open and local.weekday() < 5:
            return today_open

        candidate = local + timedelta(days=1)
        while candidate.weekday() >= 5:
            candidate += timedelta(days=1)
        # Rebuild from the calendar date so the UTC offset matches that day
        return datetime(
            candidate.year, candidate.month, candidate.day,
            self.open_time.hour, self.open_time.minute, tzinfo=self.tz,
        )
