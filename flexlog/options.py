import os
import threading
from dataclasses import dataclass
from datetime import timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from .errors import ConfigError


UTC = timezone.utc
DEFAULT_POLL_INTERVAL = 0.25

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """
    "UTC" (or nothing) -> timezone.utc, anything else must be an IANA name.
    """
    if not name or name.upper() in ("UTC", "Z"):
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"unknown time zone: {name!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


@dataclass
class LogOptions:
    timezone: tzinfo = UTC
    report_parsing_errors: bool = False
    report_unmatched_log_lines: bool = False
    cancellation_signal: Optional[threading.Event] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **overrides) -> "LogOptions":
        """
        Build options from FLEXLOG_* environment variables (and a .env file).

        Keyword overrides that are not None win over the environment.
        """
        load_dotenv(dotenv_path)

        opts = cls(
            timezone=resolve_timezone(os.getenv("FLEXLOG_TIMEZONE")),
            report_parsing_errors=_env_bool("FLEXLOG_REPORT_PARSING_ERRORS", False),
            report_unmatched_log_lines=_env_bool("FLEXLOG_REPORT_UNMATCHED", False),
            poll_interval=_env_float("FLEXLOG_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
        )

        for key, value in overrides.items():
            if value is None:
                continue
            if not hasattr(opts, key):
                raise ConfigError(f"unknown option: {key}")
            if key == "timezone" and isinstance(value, str):
                value = resolve_timezone(value)
            setattr(opts, key, value)

        return opts
