from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, Optional


class Direction(str, Enum):
    """
    What a classified line says happened to a license.

    UNMATCHED covers everything that is not a check-out,
    check-in or denial, including lines that failed to parse.
    """
    UNMATCHED = "unmatched"
    DENIED = "denied"
    CHECK_IN = "in"
    CHECK_OUT = "out"


# Keyword as written by the license server -> direction.
# Must stay in sync with the IN|OUT|DENIED alternation in grammar.py.
DIRECTION_KEYWORDS: Dict[str, Direction] = {
    "IN": Direction.CHECK_IN,
    "OUT": Direction.CHECK_OUT,
    "DENIED": Direction.DENIED,
}


class ErrorKind(Enum):
    PARSE = auto()
    UNMATCHED = auto()
    INCONSISTENT = auto()
    SERVER_NOTE = auto()


@dataclass(frozen=True)
class EventError:
    """
    Per-line problem attached to an Event.

    These are values, not exceptions: a bad line never stops the stream.
    """
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


UNMATCHED_LINE = EventError(ErrorKind.UNMATCHED, "unmatched log line")


@dataclass(frozen=True)
class Event:
    """
    One classified log line.

    `when` is None when the line carried no usable timestamp
    (no prefix, bad time of day, or no anchor established yet).
    """
    when: Optional[datetime]
    direction: Direction
    raw_line: str
    service: Optional[str] = None
    license_name: Optional[str] = None
    username: Optional[str] = None
    machine: Optional[str] = None
    error: Optional[EventError] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "when": self.when.isoformat() if self.when else None,
            "direction": self.direction.value,
            "service": self.service,
            "license_name": self.license_name,
            "username": self.username,
            "machine": self.machine,
            "error": self.error.message if self.error else None,
            "error_kind": self.error.kind.name if self.error else None,
            "raw_line": self.raw_line,
        }
