import logging
from typing import Dict, Iterable, Iterator, List, Optional

from .anchor import TimestampAnchor, parse_marker_timestamp
from .grammar import LineMatch, LineShape, classify_line
from .options import LogOptions
from .types import (
    DIRECTION_KEYWORDS,
    UNMATCHED_LINE,
    Direction,
    ErrorKind,
    Event,
    EventError,
)


logger = logging.getLogger(__name__)


# ---------- Metrics ----------

class EngineStats:
    def __init__(self):
        self.lines = 0
        self.emitted = 0
        self.dropped = 0
        self.unmatched = 0
        self.parse_failures = 0
        self.failures_by_reason: Dict[str, int] = {}

    def record_emitted(self):
        self.emitted += 1

    def record_dropped(self, reason: str):
        self.dropped += 1
        self.failures_by_reason[reason] = (
            self.failures_by_reason.get(reason, 0) + 1
        )

    def as_dict(self) -> Dict[str, int]:
        return {
            "lines": self.lines,
            "emitted": self.emitted,
            "dropped": self.dropped,
            "unmatched": self.unmatched,
            "parse_failures": self.parse_failures,
        }


# ---------- Engine ----------

class LogEventEngine:
    """
    Turns raw license-server log lines into Events.

    One engine per tailing session: the timestamp anchor lives here
    and is never shared. Per-line problems never raise, they are
    either reported as error Events or dropped, depending on options.
    """

    def __init__(self, options: Optional[LogOptions] = None):
        self.options = options or LogOptions()
        self.anchor = TimestampAnchor(self.options.timezone)
        self.stats = EngineStats()

    def run(self, lines: Iterable[str]) -> Iterator[Event]:
        for line in lines:
            yield from self.process_line(line)

    def process_line(self, line: str) -> List[Event]:
        """Classify one line. Returns zero or one events."""
        self.stats.lines += 1
        match = classify_line(line)

        if match.shape in (LineShape.STARTED, LineShape.TIMESTAMP):
            event = self._marker(line, match)
        elif match.shape == LineShape.IN_OUT_DENIED:
            event = self._in_out_denied(line, match)
        else:
            event = self._unmatched(line, match)

        if event is None:
            return []
        self.stats.record_emitted()
        return [event]

    # ---------- Line shapes ----------

    def _marker(self, line: str, match: LineMatch) -> Optional[Event]:
        try:
            when = parse_marker_timestamp(
                match.date_text, match.time_text, self.options.timezone
            )
        except ValueError as e:
            return self._parse_failure(
                line,
                f"bad {match.shape.name} timestamp "
                f"{match.date_text} {match.time_text}: {e}",
                service=match.service,
            )

        self.anchor.reset(when)
        logger.debug("anchor set to %s by %s line", when, match.shape.name)
        return None

    def _in_out_denied(self, line: str, match: LineMatch) -> Optional[Event]:
        direction = DIRECTION_KEYWORDS.get(match.keyword)
        if direction is None:
            # Unreachable while the grammar and DIRECTION_KEYWORDS agree.
            logger.error("direction keyword %r matched but is unknown", match.keyword)
            return Event(
                when=None,
                direction=Direction.UNMATCHED,
                raw_line=line,
                service=match.service,
                error=EventError(
                    ErrorKind.INCONSISTENT,
                    f"direction [{match.keyword}] invalid",
                ),
            )

        fields = dict(
            direction=direction,
            service=match.service,
            license_name=match.license_name,
            username=match.username,
            machine=match.machine,
        )

        try:
            when = self.anchor.resolve(match.time_text)
        except ValueError as e:
            return self._parse_failure(line, f"cannot resolve {match.time_text}: {e}", **fields)

        error = None
        if match.note is not None:
            error = EventError(ErrorKind.SERVER_NOTE, match.note)

        return Event(when=when, raw_line=line, error=error, **fields)

    def _unmatched(self, line: str, match: LineMatch) -> Optional[Event]:
        self.stats.unmatched += 1
        when = None

        # Before the first marker line there is no date to refresh.
        if match.shape == LineShape.PREFIX_ONLY and self.anchor.is_set:
            try:
                when = self.anchor.refresh_time_of_day(match.time_text)
            except ValueError as e:
                if self.options.report_parsing_errors:
                    return self._parse_failure(
                        line, f"cannot resolve {match.time_text}: {e}", service=match.service
                    )
                self.stats.parse_failures += 1

        if not self.options.report_unmatched_log_lines:
            self.stats.record_dropped("unmatched")
            return None

        return Event(
            when=when,
            direction=Direction.UNMATCHED,
            raw_line=line,
            service=match.service,
            error=UNMATCHED_LINE,
        )

    # ---------- Reporting ----------

    def _parse_failure(self, line: str, message: str, **fields) -> Optional[Event]:
        self.stats.parse_failures += 1
        if not self.options.report_parsing_errors:
            logger.debug("dropping line: %s", message)
            self.stats.record_dropped("parse_error")
            return None

        fields.setdefault("direction", Direction.UNMATCHED)
        return Event(
            when=None,
            raw_line=line,
            error=EventError(ErrorKind.PARSE, message),
            **fields,
        )
