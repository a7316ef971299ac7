from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional


MARKER_FORMAT = "%m/%d/%Y %H:%M:%S"
TIME_OF_DAY_FORMAT = "%H:%M:%S"

ONE_DAY = timedelta(days=1)


def parse_time_of_day(time_text: str):
    """Parse "H:MM:SS" / "HH:MM:SS". Raises ValueError."""
    return datetime.strptime(time_text, TIME_OF_DAY_FORMAT).time()


def parse_marker_timestamp(date_text: str, time_text: str, tz: tzinfo) -> datetime:
    """
    Combine a marker line's "M/D/YYYY" date with its time of day.

    Raises ValueError when either part is out of range.
    """
    naive = datetime.strptime(f"{date_text} {time_text}", MARKER_FORMAT)
    return naive.replace(tzinfo=tz)


class TimestampAnchor:
    """
    Most recently resolved full date-time of a tailing session.

    Event lines only carry a time of day; they are resolved against
    the anchor's date. Only marker lines (STARTED / TIMESTAMP) reset
    the anchor, unmatched prefixed lines refresh its time of day, and
    event lines never move it.
    """

    def __init__(self, tz: tzinfo = timezone.utc):
        self.tz = tz
        self._current: Optional[datetime] = None

    @property
    def current(self) -> Optional[datetime]:
        return self._current

    @property
    def is_set(self) -> bool:
        return self._current is not None

    def reset(self, when: datetime) -> None:
        self._current = when

    def _on_anchor_date(self, time_text: str) -> datetime:
        if self._current is None:
            raise ValueError("no anchor: no STARTED or TIMESTAMP line seen yet")
        tod = parse_time_of_day(time_text)
        return datetime.combine(self._current.date(), tod, tzinfo=self.tz)

    def refresh_time_of_day(self, time_text: str) -> datetime:
        """
        Keep the anchor's date, take the line's time of day.

        Raises ValueError if the time is invalid or there is no anchor;
        the anchor is left untouched in that case.
        """
        refreshed = self._on_anchor_date(time_text)
        self._current = refreshed
        return refreshed

    def resolve(self, time_text: str) -> datetime:
        """
        Full timestamp for an event line.

        A time of day whose hour is earlier than the anchor's is taken
        to be past local midnight, so it moves to the next calendar day
        at the same wall-clock time. Only one day of drift is corrected.
        """
        candidate = self._on_anchor_date(time_text)
        if candidate.hour < self._current.hour:
            candidate = datetime.combine(
                candidate.date() + ONE_DAY, candidate.time(), tzinfo=self.tz
            )
        return candidate
