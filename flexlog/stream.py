import logging
import queue
import threading
from dataclasses import replace
from typing import Iterable, Iterator, Optional

from .engine import LogEventEngine
from .options import LogOptions
from .source import FileLineSource, IterableLineSource, LineSource
from .types import Event


logger = logging.getLogger(__name__)

WATCH_INTERVAL = 0.1


class _End:
    """Marks the end of the stream on the hand-off queue."""

    def __init__(self, error: Optional[BaseException] = None):
        self.error = error


class EventStream:
    """
    Cancellable, backpressured stream of Events.

    A single producer thread reads lines from the source, classifies
    them and hands events over one at a time: it waits until the
    consumer has taken an event before reading the next line, so a
    slow consumer slows the producer down and nothing is dropped.

    Usage:
        with tail_log("license.log") as events:
            for event in events:
                ...
    """

    def __init__(
        self,
        engine: LogEventEngine,
        source: LineSource,
        cancellation_signal: Optional[threading.Event] = None,
    ):
        self.engine = engine
        self.source = source
        self.cancellation_signal = (
            cancellation_signal
            or engine.options.cancellation_signal
            or getattr(source, "stop_signal", None)
            or threading.Event()
        )
        self._handoff: "queue.Queue[object]" = queue.Queue(maxsize=1)
        self._finished = False
        self._produced = threading.Event()
        self._thread = threading.Thread(
            target=self._produce, name="flexlog-producer", daemon=True
        )
        self._thread.start()

        # A source blocked in its poll loop only wakes on its own signal.
        if getattr(source, "stop_signal", None) is not self.cancellation_signal:
            threading.Thread(
                target=self._watch_cancellation, name="flexlog-cancel", daemon=True
            ).start()

    def _watch_cancellation(self) -> None:
        while not self._produced.is_set():
            if self.cancellation_signal.wait(WATCH_INTERVAL):
                self.source.stop()
                return

    # ---------- Producer ----------

    def _produce(self) -> None:
        lines = None
        error = None
        try:
            lines = iter(self.source)
            for line in lines:
                if self.cancelled:
                    break
                for event in self.engine.process_line(line):
                    self._handoff.put(event)
                    # Rendezvous: wait until the consumer took it.
                    self._handoff.join()
                if self.cancelled:
                    break
        except Exception as e:
            logger.error("event stream failed: %s", e)
            error = e
        finally:
            close = getattr(lines, "close", None)
            if close is not None:
                close()
            self._produced.set()
            self._handoff.put(_End(error))

    # ---------- Consumer ----------

    def __iter__(self) -> Iterator[Event]:
        return self

    def __next__(self) -> Event:
        if self._finished:
            raise StopIteration

        item = self._handoff.get()
        self._handoff.task_done()

        if isinstance(item, _End):
            self._finished = True
            self._thread.join()
            if item.error is not None:
                raise item.error
            raise StopIteration
        return item

    def __enter__(self) -> "EventStream":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---------- Cancellation ----------

    @property
    def cancelled(self) -> bool:
        return self.cancellation_signal.is_set()

    def cancel(self) -> None:
        """
        Ask the stream to stop. The event already in flight is still
        delivered, then iteration ends.
        """
        self.cancellation_signal.set()
        self.source.stop()

    def close(self, timeout: Optional[float] = 5.0) -> None:
        """Cancel and discard whatever is left, for consumers walking away."""
        self.cancel()
        while not self._finished:
            try:
                item = self._handoff.get(timeout=0.1)
            except queue.Empty:
                if not self._thread.is_alive():
                    break
                continue
            self._handoff.task_done()
            if isinstance(item, _End):
                self._finished = True
        self._thread.join(timeout)


def tail_log(filename: str, options: Optional[LogOptions] = None, follow: bool = True) -> EventStream:
    """
    Follow `filename` and stream its Events.

    Raises LineSourceError right away if the file cannot be opened.
    """
    options = options or LogOptions()
    if options.cancellation_signal is None:
        options = replace(options, cancellation_signal=threading.Event())

    source = FileLineSource(
        filename,
        stop_signal=options.cancellation_signal,
        follow=follow,
        poll_interval=options.poll_interval,
    )
    return EventStream(LogEventEngine(options), source, options.cancellation_signal)


def stream_lines(lines: Iterable[str], options: Optional[LogOptions] = None) -> EventStream:
    """Threaded stream over in-memory lines."""
    options = options or LogOptions()
    source = IterableLineSource(lines, stop_signal=options.cancellation_signal)
    return EventStream(LogEventEngine(options), source, source.stop_signal)


def parse_lines(lines: Iterable[str], options: Optional[LogOptions] = None) -> Iterator[Event]:
    """Synchronous batch parsing, no threads involved."""
    return LogEventEngine(options).run(lines)
