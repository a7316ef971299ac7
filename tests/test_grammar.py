import pytest

from flexlog.grammar import LineShape, classify_line


def test_started_line_captures_trailing_date():
    m = classify_line(
        "09:15:00 (lmgrd) FlexNet Licensing (v11.16.2.0 build 242433 x64_n6) "
        "started on srv01 (linux) (3/1/2024)"
    )
    assert m.shape == LineShape.STARTED
    assert m.time_text == "09:15:00"
    assert m.service == "lmgrd"
    assert m.date_text == "3/1/2024"


def test_timestamp_line():
    m = classify_line(" 0:00:01 (adskflex) TIMESTAMP 3/2/2024")
    assert m.shape == LineShape.TIMESTAMP
    assert m.time_text == "0:00:01"
    assert m.date_text == "3/2/2024"


@pytest.mark.parametrize("keyword", ["IN", "OUT", "DENIED"])
def test_in_out_denied(keyword):
    m = classify_line(f'09:16:02 (adskflex) {keyword}: "maya2024" alice@workstation1')
    assert m.shape == LineShape.IN_OUT_DENIED
    assert m.keyword == keyword
    assert m.license_name == "maya2024"
    assert m.username == "alice"
    assert m.machine == "workstation1"
    assert m.note is None


def test_denied_note_keeps_nested_parentheses():
    m = classify_line(
        '10:01:00 (adskflex) DENIED: "maya2024" bob@ws2  '
        "(Licensed number of users already reached. (-4,342))"
    )
    assert m.shape == LineShape.IN_OUT_DENIED
    assert m.note == "Licensed number of users already reached. (-4,342)"


def test_unknown_service_is_not_prefixed():
    m = classify_line('09:16:02 (MLM) OUT: "MATLAB" alice@ws1')
    assert m.shape == LineShape.NONE


def test_other_text_with_prefix():
    m = classify_line("10:00:00 (lmgrd) lmgrd tcp-port 27000")
    assert m.shape == LineShape.PREFIX_ONLY
    assert m.time_text == "10:00:00"
    assert m.service == "lmgrd"


@pytest.mark.parametrize("line", ["", "   ", "garbage", "(lmgrd) no time here"])
def test_lines_without_prefix(line):
    assert classify_line(line).shape == LineShape.NONE


def test_timestamp_keyword_takes_priority_over_prefix_only():
    # TIMESTAMP with trailing text still matches the marker shape.
    m = classify_line("11:00:00 (lmgrd) TIMESTAMP 3/2/2024 extra")
    assert m.shape == LineShape.TIMESTAMP
