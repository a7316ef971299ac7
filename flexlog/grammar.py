import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Tuple


class LineShape(Enum):
    """
    Shapes of an lmgrd / vendor daemon log line.

    This is about structure, not meaning.
    """
    STARTED = auto()
    TIMESTAMP = auto()
    IN_OUT_DENIED = auto()
    PREFIX_ONLY = auto()
    NONE = auto()


KNOWN_SERVICES: Tuple[str, ...] = ("adskflex", "lmgrd")


# -----------------------------
# SHARED PREFIX
# -----------------------------
# example: "  9:16:02 (adskflex) "

PREFIX = (
    r"^\s*"
    r"(?P<time>[0-9]{1,2}:[0-9]{2}:[0-9]{2})"
    r"\s+"
    r"\((?P<service>" + "|".join(KNOWN_SERVICES) + r")\)"
    r"\s+"
)

DATE = r"(?P<date>[0-9]{1,2}/[0-9]{1,2}/[0-9]{4})"

PREFIX_RE = re.compile(PREFIX)


# -----------------------------
# LINE SHAPES
# -----------------------------
# Order matters: shapes are tried top to bottom, first match wins.

SHAPE_TABLE: List[Tuple[LineShape, re.Pattern]] = [
    # 09:15:00 (lmgrd) FlexNet Licensing (v11.16.2.0 build 242433 x64_n6) started on srv01 (3/1/2024)
    (
        LineShape.STARTED,
        re.compile(PREFIX + r"FlexNet\s+Licensing\s+.*\(" + DATE + r"\)\s*$"),
    ),

    # 0:00:01 (adskflex) TIMESTAMP 3/2/2024
    (
        LineShape.TIMESTAMP,
        re.compile(PREFIX + r"TIMESTAMP\s+" + DATE),
    ),

    # 09:16:02 (adskflex) OUT: "maya2024" alice@workstation1
    # 09:16:09 (adskflex) DENIED: "maya2024" bob@ws2  (Licensed number of users already reached. (-4,342))
    (
        LineShape.IN_OUT_DENIED,
        re.compile(
            PREFIX
            + r"(?P<keyword>IN|OUT|DENIED):\s+"
            r'"(?P<license>[^"]+)"\s+'
            r"(?P<user>\S+)@(?P<machine>\S+)"
            r"(\s+\((?P<note>.*)\))?"
            r"\s*$"
        ),
    ),
]


@dataclass(frozen=True)
class LineMatch:
    """
    Raw captures for one line. Nothing here is validated beyond the regex.
    """
    shape: LineShape
    time_text: Optional[str] = None
    service: Optional[str] = None
    date_text: Optional[str] = None
    keyword: Optional[str] = None
    license_name: Optional[str] = None
    username: Optional[str] = None
    machine: Optional[str] = None
    note: Optional[str] = None


NO_MATCH = LineMatch(shape=LineShape.NONE)


def classify_line(line: str) -> LineMatch:
    """
    Classify one raw log line.

    It should NEVER throw: anything unrecognised comes back as
    PREFIX_ONLY (if the shared prefix is there) or NONE.
    """
    if not line:
        return NO_MATCH

    for shape, pattern in SHAPE_TABLE:
        m = pattern.match(line)
        if not m:
            continue

        groups = m.groupdict()
        return LineMatch(
            shape=shape,
            time_text=groups["time"],
            service=groups["service"],
            date_text=groups.get("date"),
            keyword=groups.get("keyword"),
            license_name=groups.get("license"),
            username=groups.get("user"),
            machine=groups.get("machine"),
            note=groups.get("note"),
        )

    m = PREFIX_RE.match(line)
    if m:
        return LineMatch(
            shape=LineShape.PREFIX_ONLY,
            time_text=m.group("time"),
            service=m.group("service"),
        )

    return NO_MATCH
