"""
Line sources feeding the engine.

A line source yields raw lines (without the trailing newline) in file
order and stops when its stop signal is set. FileLineSource follows a
growing file the way `tail -F` does: it survives truncation and
rotation by rewinding or reopening.
"""
import logging
import os
import threading
from typing import IO, Iterable, Iterator, Optional, Protocol

from .errors import LineSourceError
from .options import DEFAULT_POLL_INTERVAL


MAX_PENDING_CHARS = 1_000_000

logger = logging.getLogger(__name__)


class LineSource(Protocol):
    def __iter__(self) -> Iterator[str]:
        ...

    def stop(self) -> None:
        ...


class IterableLineSource:
    """In-memory source, mostly for tests and batch input."""

    def __init__(self, lines: Iterable[str], stop_signal: Optional[threading.Event] = None):
        self._lines = lines
        self.stop_signal = stop_signal or threading.Event()

    def stop(self) -> None:
        self.stop_signal.set()

    def __iter__(self) -> Iterator[str]:
        for line in self._lines:
            if self.stop_signal.is_set():
                return
            yield line.rstrip("\r\n")


class FileLineSource:
    """
    Follow a log file from its first line.

    The file must exist when the source is created; otherwise
    LineSourceError is raised right away. Once iteration starts,
    a missing path is treated as a rotation in progress.
    """

    def __init__(
        self,
        path: str,
        stop_signal: Optional[threading.Event] = None,
        follow: bool = True,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_pending_chars: int = MAX_PENDING_CHARS,
    ):
        self.path = path
        self.stop_signal = stop_signal or threading.Event()
        self.follow = follow
        self.poll_interval = poll_interval
        self.max_pending_chars = max_pending_chars
        self.discarded = 0
        self._handle: Optional[IO[str]] = self._open()

    def _open(self) -> IO[str]:
        try:
            return open(self.path, "r", encoding="utf-8", errors="replace")
        except OSError as e:
            raise LineSourceError(f"cannot open {self.path}: {e}") from e

    def stop(self) -> None:
        self.stop_signal.set()

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    @property
    def closed(self) -> bool:
        return self._handle is None

    def __iter__(self) -> Iterator[str]:
        if self._handle is None:
            raise LineSourceError(f"{self.path} is already closed")

        pending = ""
        skipping = False
        try:
            while not self.stop_signal.is_set():
                chunk = self._handle.readline(self.max_pending_chars)
                if chunk:
                    pending += chunk
                    if pending.endswith("\n"):
                        if not skipping:
                            yield pending.rstrip("\r\n")
                        pending = ""
                        skipping = False
                    elif len(pending) >= self.max_pending_chars:
                        # No newline in sight: drop the line up to its next newline.
                        if not skipping:
                            logger.warning("%s: discarding over-long line", self.path)
                            self.discarded += 1
                        skipping = True
                        pending = ""
                    continue

                if not self.follow:
                    break

                if self._check_rotation():
                    pending = ""
                    skipping = False
                    continue

                self.stop_signal.wait(self.poll_interval)

            if pending and not skipping and not self.follow:
                yield pending.rstrip("\r\n")
        finally:
            self.close()

    def _check_rotation(self) -> bool:
        """
        Reopen or rewind if the file at `path` is no longer what we read.

        Returns True when reading should restart.
        """
        try:
            on_disk = os.stat(self.path)
        except FileNotFoundError:
            # Rotated away and not recreated yet.
            return False

        current = os.fstat(self._handle.fileno())
        if (on_disk.st_dev, on_disk.st_ino) != (current.st_dev, current.st_ino):
            logger.info("%s was rotated, reopening", self.path)
            try:
                handle = open(self.path, "r", encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning("reopening %s failed: %s", self.path, e)
                return False
            self._handle.close()
            self._handle = handle
            return True

        if on_disk.st_size < self._handle.tell():
            logger.info("%s was truncated, reading from the start", self.path)
            self._handle.seek(0)
            return True

        return False
