# src/build_assembler/workers.py
"""Phase fan-out and the containers workers share while a phase runs."""

import threading
import time
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TypeVar

from .logs import AppLogger, get_logger


T = TypeVar("T")


class ConcurrentPathSet:
    """A set of output-relative paths that many workers may add to at once."""

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._items: set[str] = set(items)
        self._lock = threading.Lock()

    def add(self, item: str) -> None:
        with self._lock:
            self._items.add(item)

    def update(self, items: Iterable[str]) -> None:
        with self._lock:
            self._items.update(items)

    def snapshot(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._items)

    def __contains__(self, item: object) -> bool:
        with self._lock:
            return item in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __repr__(self) -> str:
        return f"{type(self).__name__}({sorted(self.snapshot())!r})"


class AtomicCounter:
    def __init__(self, start: int = 0) -> None:
        self._value = start
        self._lock = threading.Lock()

    def increment(self, step: int = 1) -> int:
        """Add ``step`` and return the new value."""
        with self._lock:
            self._value += step
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


def run_parallel(
    items: Iterable[T],
    task: Callable[[T], None],
    *,
    max_workers: int | None = None,
    description: str = "item",
    logger: AppLogger | None = None,
) -> None:
    """Run ``task`` over every item on a thread pool and wait for all of them.

    Tasks are expected to log their own failures. Anything that still escapes
    a task is logged here and never re-raised, so one bad item cannot stop
    its siblings or the caller's next phase.
    """
    logger = logger or get_logger()
    work = list(items)
    if not work:
        return

    with ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="assembler"
    ) as executor:
        futures = {executor.submit(task, item): item for item in work}
        for future in as_completed(futures):
            exc = future.exception()
            if exc is not None:
                logger.error(
                    "Unexpected failure while processing %s %r: %s",
                    description,
                    futures[future],
                    exc,
                )


class Stopwatch:
    """Millisecond timer for phase log lines."""

    def __init__(self) -> None:
        self._start = time.monotonic()

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self._start) * 1000)
