from datetime import timezone
from zoneinfo import ZoneInfo

import pytest

from flexlog.errors import ConfigError
from flexlog.options import LogOptions, resolve_timezone


ENV_VARS = [
    "FLEXLOG_TIMEZONE",
    "FLEXLOG_REPORT_PARSING_ERRORS",
    "FLEXLOG_REPORT_UNMATCHED",
    "FLEXLOG_POLL_INTERVAL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv first so teardown also removes values load_dotenv adds.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # Keep load_dotenv away from any .env in the working tree.
    monkeypatch.chdir(tmp_path)


def test_defaults():
    opts = LogOptions()
    assert opts.timezone is timezone.utc
    assert opts.report_parsing_errors is False
    assert opts.report_unmatched_log_lines is False
    assert opts.cancellation_signal is None


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("FLEXLOG_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("FLEXLOG_REPORT_PARSING_ERRORS", "yes")
    monkeypatch.setenv("FLEXLOG_REPORT_UNMATCHED", "0")
    monkeypatch.setenv("FLEXLOG_POLL_INTERVAL", "1.5")

    opts = LogOptions.from_env(dotenv_path=str(tmp_path / "missing.env"))

    assert opts.timezone == ZoneInfo("Europe/Berlin")
    assert opts.report_parsing_errors is True
    assert opts.report_unmatched_log_lines is False
    assert opts.poll_interval == 1.5


def test_dotenv_file_is_loaded(monkeypatch, tmp_path):
    env_file = tmp_path / "flexlog.env"
    env_file.write_text("FLEXLOG_REPORT_UNMATCHED=true\n")

    opts = LogOptions.from_env(dotenv_path=str(env_file))
    assert opts.report_unmatched_log_lines is True


def test_overrides_win_and_none_is_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv("FLEXLOG_REPORT_PARSING_ERRORS", "true")

    opts = LogOptions.from_env(
        dotenv_path=str(tmp_path / "missing.env"),
        report_parsing_errors=None,
        report_unmatched_log_lines=True,
        timezone="America/Chicago",
    )

    assert opts.report_parsing_errors is True
    assert opts.report_unmatched_log_lines is True
    assert opts.timezone == ZoneInfo("America/Chicago")


@pytest.mark.parametrize("name", [None, "", "UTC", "utc"])
def test_utc_names(name):
    assert resolve_timezone(name) is timezone.utc


def test_unknown_timezone():
    with pytest.raises(ConfigError):
        resolve_timezone("Mars/Olympus_Mons")


def test_bad_boolean(monkeypatch, tmp_path):
    monkeypatch.setenv("FLEXLOG_REPORT_UNMATCHED", "sometimes")
    with pytest.raises(ConfigError):
        LogOptions.from_env(dotenv_path=str(tmp_path / "missing.env"))


def test_unknown_override(tmp_path):
    with pytest.raises(ConfigError):
        LogOptions.from_env(dotenv_path=str(tmp_path / "missing.env"), colour="blue")
