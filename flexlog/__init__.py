"""Structured events from FlexNet (lmgrd / adskflex) license-server logs."""
from .engine import EngineStats, LogEventEngine
from .errors import ConfigError, FlexlogError, LineSourceError
from .options import LogOptions
from .stream import EventStream, parse_lines, stream_lines, tail_log
from .types import Direction, ErrorKind, Event, EventError

__all__ = [
    "ConfigError",
    "Direction",
    "EngineStats",
    "ErrorKind",
    "Event",
    "EventError",
    "EventStream",
    "FlexlogError",
    "LineSourceError",
    "LogEventEngine",
    "LogOptions",
    "parse_lines",
    "stream_lines",
    "tail_log",
]
