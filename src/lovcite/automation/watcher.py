"""Drop-folder watcher for Retsinformation XML exports.

watchdog delivers events on its observer thread. Each export path is held back
until no further event for it has arrived within the debounce window, then
handed to the event loop through an :class:`asyncio.Queue` and processed by a
single consumer task, one file at a time.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from pathlib import Path
import threading
from typing import Awaitable, Callable

from watchdog.events import PatternMatchingEventHandler
from watchdog.observers import Observer


LOGGER = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 2.0
OBSERVER_JOIN_TIMEOUT_SECONDS = 5.0

EXPORT_PATTERNS = ("*.xml",)
PARTIAL_PATTERNS = ("*.tmp", "*.part", ".*", "*~")

StatuteCallback = Callable[[Path], Awaitable[None]]


def is_statute_export(path: Path) -> bool:
    return path.suffix.lower() == ".xml" and not path.name.startswith(".")


def existing_exports(watch_dir: Path) -> list[Path]:
    """Exports already sitting in *watch_dir*, oldest first."""

    candidates = [path for path in watch_dir.iterdir() if path.is_file() and is_statute_export(path)]
    return sorted(candidates, key=lambda path: (path.stat().st_mtime, path.name))


class DebouncedStatuteHandler(PatternMatchingEventHandler):
    """Queue each export path once it has been quiet for *debounce_seconds*."""

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        queue: asyncio.Queue[Path],
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        super().__init__(
            patterns=list(EXPORT_PATTERNS),
            ignore_patterns=list(PARTIAL_PATTERNS),
            ignore_directories=True,
            case_sensitive=False,
        )
        self._loop = loop
        self._queue = queue
        self._debounce_seconds = debounce_seconds
        self._pending: dict[Path, tuple[int, threading.Timer]] = {}
        self._tickets = itertools.count()
        self._lock = threading.Lock()

    @property
    def pending_paths(self) -> list[Path]:
        with self._lock:
            return list(self._pending)

    def _arm(self, path: Path) -> None:
        ticket = next(self._tickets)
        timer = threading.Timer(self._debounce_seconds, self._fire, args=(path, ticket))
        timer.daemon = True
        with self._lock:
            previous = self._pending.get(path)
            self._pending[path] = (ticket, timer)
        if previous is not None:
            previous[1].cancel()
        timer.start()

    def _fire(self, path: Path, ticket: int) -> None:
        with self._lock:
            current = self._pending.get(path)
            # A re-armed path carries a newer ticket; the stale timer loses.
            if current is None or current[0] != ticket:
                return
            del self._pending[path]
        LOGGER.debug("Export settled: %s", path)
        self._loop.call_soon_threadsafe(self._queue.put_nowait, path)

    def on_created(self, event) -> None:  # type: ignore[override]
        self._arm(Path(str(event.src_path)))

    def on_modified(self, event) -> None:  # type: ignore[override]
        path = Path(str(event.src_path))
        # Modifications of files we never saw created are edits, not arrivals.
        with self._lock:
            known = path in self._pending
        if known:
            self._arm(path)

    def on_moved(self, event) -> None:  # type: ignore[override]
        # "lov.xml.part" -> "lov.xml": only the destination names an export.
        destination = Path(str(event.dest_path))
        if is_statute_export(destination):
            self._arm(destination)

    def close(self) -> None:
        with self._lock:
            timers = [timer for _, timer in self._pending.values()]
            self._pending.clear()
        for timer in timers:
            timer.cancel()


class StatuteFolderWatcher:
    """Run *callback* for every export that settles in *watch_dir*.

    With ``include_existing`` the exports already present when the watcher
    starts are queued first, so a restart picks up files dropped while it was
    down.
    """

    def __init__(
        self,
        watch_dir: str | Path,
        callback: StatuteCallback,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        *,
        include_existing: bool = False,
    ) -> None:
        self._watch_dir = Path(watch_dir)
        self._callback = callback
        self._debounce_seconds = debounce_seconds
        self._include_existing = include_existing
        self._handler: DebouncedStatuteHandler | None = None
        self._observer: Observer | None = None
        self._consumer_task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    async def start(self) -> None:
        if self._observer is not None:
            return
        if not self._watch_dir.is_dir():
            raise ValueError(f"Watch directory does not exist or is not a directory: {self._watch_dir}")

        queue: asyncio.Queue[Path] = asyncio.Queue()
        handler = DebouncedStatuteHandler(
            loop=asyncio.get_running_loop(),
            queue=queue,
            debounce_seconds=self._debounce_seconds,
        )
        observer = Observer()
        observer.schedule(handler, str(self._watch_dir), recursive=False)
        observer.start()

        if self._include_existing:
            backlog = existing_exports(self._watch_dir)
            LOGGER.info("Queueing %d existing export(s) from %s", len(backlog), self._watch_dir)
            for path in backlog:
                queue.put_nowait(path)

        self._handler = handler
        self._observer = observer
        self._consumer_task = asyncio.create_task(self._drain(queue))

    async def _drain(self, queue: asyncio.Queue[Path]) -> None:
        while True:
            path = await queue.get()
            try:
                await self._callback(path)
            except Exception:  # pragma: no cover
                LOGGER.exception("Statute callback failed for %s", path)
            finally:
                queue.task_done()

    def stop(self) -> None:
        observer, handler, task = self._observer, self._handler, self._consumer_task
        self._observer = None
        self._handler = None
        self._consumer_task = None

        if observer is not None:
            observer.stop()
            observer.join(timeout=OBSERVER_JOIN_TIMEOUT_SECONDS)
        if handler is not None:
            handler.close()
        if task is not None:
            task.cancel()
