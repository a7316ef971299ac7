import os
import threading

import pytest

from flexlog.errors import LineSourceError
from flexlog.source import FileLineSource, IterableLineSource


def follow(path, **kwargs):
    kwargs.setdefault("poll_interval", 0.01)
    return FileLineSource(str(path), **kwargs)


def test_missing_file_raises_immediately(tmp_path):
    with pytest.raises(LineSourceError):
        FileLineSource(str(tmp_path / "nope.log"))


def test_batch_read_strips_newlines_and_keeps_last_partial_line(tmp_path):
    path = tmp_path / "a.log"
    path.write_text("one\r\ntwo\nthree")

    source = follow(path, follow=False)
    assert list(source) == ["one", "two", "three"]
    assert source.closed


def test_follow_waits_for_complete_lines(tmp_path):
    path = tmp_path / "a.log"
    path.write_text("first\nhalf")

    source = follow(path)
    lines = iter(source)
    assert next(lines) == "first"

    with open(path, "a") as f:
        f.write(" done\n")
    assert next(lines) == "half done"

    source.stop()
    assert list(lines) == []
    assert source.closed


def test_truncation_rewinds(tmp_path):
    path = tmp_path / "a.log"
    path.write_text("old line 1\nold line 2\n")

    source = follow(path)
    lines = iter(source)
    assert [next(lines), next(lines)] == ["old line 1", "old line 2"]

    with open(path, "w") as f:
        f.write("new\n")
    assert next(lines) == "new"
    source.stop()


def test_overlong_line_is_discarded_up_to_its_newline(tmp_path):
    path = tmp_path / "a.log"
    path.write_text("short\n" + "x" * 25 + "\nafter\n" + "y" * 10 + "\n")

    source = follow(path, follow=False, max_pending_chars=10)
    assert list(source) == ["short", "after"]
    assert source.discarded == 2


def test_overlong_partial_line_does_not_grow_while_following(tmp_path):
    path = tmp_path / "a.log"
    path.write_text("z" * 40)

    source = follow(path, max_pending_chars=10)
    lines = iter(source)
    with open(path, "a") as f:
        f.write("z" * 40 + "\nnext\n")

    assert next(lines) == "next"
    assert source.discarded == 1
    lines.close()
    assert source.closed


def test_rotation_reopens(tmp_path):
    path = tmp_path / "a.log"
    path.write_text("before rotation\n")

    source = follow(path)
    lines = iter(source)
    assert next(lines) == "before rotation"

    os.rename(path, tmp_path / "a.log.1")
    path.write_text("after rotation\n")

    assert next(lines) == "after rotation"
    source.stop()


def test_stop_from_another_thread_ends_iteration(tmp_path):
    path = tmp_path / "a.log"
    path.write_text("")
    source = follow(path)

    timer = threading.Timer(0.05, source.stop)
    timer.start()
    assert list(source) == []
    timer.join()


def test_iterable_source_honours_stop_signal():
    signal = threading.Event()
    source = IterableLineSource(["a\n", "b\n", "c\n"], stop_signal=signal)

    seen = []
    for line in source:
        seen.append(line)
        signal.set()

    assert seen == ["a"]
