"""
DotWatch File Watcher.

Cross-platform file system monitoring using watchdog.
Requires Python 3.11+.
"""

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from watchdog.events import (
    EVENT_TYPE_CLOSED_NO_WRITE,
    EVENT_TYPE_OPENED,
    DirModifiedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from utils.logger import LoggerMixin
from watcher.errors import MainLoopError, WatcherRuntimeError
from watcher.signals import FilesChanged, LoopSignal, WatcherError

# Reads do not change anything, and the deploy itself reads every source file
IGNORED_EVENT_TYPES = frozenset({EVENT_TYPE_OPENED, EVENT_TYPE_CLOSED_NO_WRITE})


class ChangeEventHandler(FileSystemEventHandler, LoggerMixin):
    """
    Turns raw watchdog events into loop signals.

    Every event becomes one FilesChanged batch. A move reports both its
    source and destination paths.
    """

    def __init__(self, sink: Callable[[LoopSignal], None]) -> None:
        """
        Initialize the handler.

        Args:
            sink: Receives one signal per accepted event
        """
        super().__init__()
        self._sink = sink

    def _to_signal(self, event: FileSystemEvent) -> LoopSignal | None:
        if event.event_type in IGNORED_EVENT_TYPES:
            return None
        # Directory mtime updates always accompany a change inside it
        if isinstance(event, DirModifiedEvent):
            return None

        paths = [os.fsdecode(event.src_path)]
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            paths.append(os.fsdecode(dest_path))

        self.log.debug("file_event", event_type=event.event_type, paths=paths)
        return FilesChanged(paths=tuple(paths))

    def on_any_event(self, event: FileSystemEvent) -> None:
        """Handle every file/directory event."""
        try:
            signal = self._to_signal(event)
        except Exception as e:
            error = WatcherRuntimeError(f"failed to handle {event.event_type} event: {e}")
            error.__cause__ = e
            signal = WatcherError(error=error)

        if signal is not None:
            self._sink(signal)


class FileWatcher(LoggerMixin):
    """
    Owns the watchdog observer subscribed to the watch root.
    """

    def __init__(
        self,
        root_path: Path,
        sink: Callable[[LoopSignal], None],
        recursive: bool = True,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        """
        Initialize the file watcher.

        Args:
            root_path: Root directory to watch
            sink: Receives the signals produced from file events
            recursive: Whether to watch subdirectories
            observer_factory: Builds the watchdog observer
        """
        self._root_path = root_path
        self._recursive = recursive
        self._observer_factory = observer_factory
        self._handler = ChangeEventHandler(sink)
        self._observer: Any | None = None

    def start(self) -> None:
        """
        Start watching for file changes.

        Raises:
            MainLoopError: If the subscription cannot be established
        """
        if self._observer is not None:
            return

        if not self._root_path.is_dir():
            raise MainLoopError(f"watch root is not a directory: {self._root_path}")

        observer = self._observer_factory()
        try:
            observer.schedule(
                self._handler,
                str(self._root_path),
                recursive=self._recursive,
            )
            observer.start()
        except OSError as e:
            raise MainLoopError(f"cannot watch {self._root_path}: {e}") from e

        self._observer = observer
        self.log.info(
            "file_watcher_started",
            path=str(self._root_path),
            recursive=self._recursive,
        )

    def stop(self) -> None:
        """Stop watching for file changes."""
        if self._observer is None:
            return

        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._observer = None
        self.log.info("file_watcher_stopped")

    @property
    def handler(self) -> ChangeEventHandler:
        return self._handler

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._observer is not None

    @property
    def is_alive(self) -> bool:
        """Check if the observer thread is still delivering events."""
        return self._observer is not None and self._observer.is_alive()

    def __enter__(self) -> "FileWatcher":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.stop()
