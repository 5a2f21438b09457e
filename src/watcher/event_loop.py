"""
DotWatch Event Loop.

Sequences filtering, debouncing and dispatching for every batch of file
changes, and stops on a termination signal.
Requires Python 3.11+.
"""

import asyncio
import signal
import time
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

from watchdog.observers import Observer

from utils.config import Settings
from utils.logger import LoggerMixin
from watcher.debouncer import Debouncer
from watcher.dispatcher import ActionDispatcher
from watcher.errors import MainLoopError
from watcher.exclusion import ExclusionFilter
from watcher.file_watcher import FileWatcher
from watcher.signals import FilesChanged, LoopSignal, Terminate, WatcherError

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class LoopState(str, Enum):
    """States of the event loop."""

    WATCHING = "watching"
    DRAINING = "draining"
    TERMINATED = "terminated"


class EventLoop(LoggerMixin):
    """
    Watches the root directory and deploys on relevant changes.

    Signals are processed one at a time, in arrival order. A deploy runs
    synchronously on the loop, so a change made during a deploy is seen
    after it returns. Termination takes effect before any batch that is
    still queued.
    """

    def __init__(
        self,
        settings: Settings,
        exclusion_filter: ExclusionFilter,
        debouncer: Debouncer,
        dispatcher: ActionDispatcher,
        observer_factory: Callable[[], Any] = Observer,
        clock: Callable[[], float] = time.monotonic,
        install_signal_handlers: bool = True,
    ) -> None:
        """
        Initialize the event loop.

        Args:
            settings: Resolved settings, also passed to every deploy
            exclusion_filter: Decides which batches are relevant
            debouncer: Limits deploys to one per window
            dispatcher: Runs the deploy
            observer_factory: Builds the watchdog observer
            clock: Monotonic time source in seconds
            install_signal_handlers: Stop on SIGINT/SIGTERM
        """
        self._settings = settings
        self._filter = exclusion_filter
        self._debouncer = debouncer
        self._dispatcher = dispatcher
        self._clock = clock
        self._install_handlers = install_signal_handlers
        self._health_interval = settings.watcher.health_check_interval

        self._watcher = FileWatcher(
            settings.watch_root,
            sink=self.post,
            observer_factory=observer_factory,
        )
        self._queue: asyncio.Queue[LoopSignal] = asyncio.Queue()
        self._aio_loop: asyncio.AbstractEventLoop | None = None
        self._state = LoopState.WATCHING
        self._terminate_reason: str | None = None
        self._previous_handlers: dict[signal.Signals, Any] = {}
        self._loop_handlers: list[signal.Signals] = []

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def terminate_reason(self) -> str | None:
        return self._terminate_reason

    @property
    def watcher(self) -> FileWatcher:
        return self._watcher

    @property
    def pending_signals(self) -> int:
        """Number of signals queued but not yet picked up."""
        return self._queue.qsize()

    def post(self, loop_signal: LoopSignal) -> None:
        """
        Feed a signal into the loop. Safe to call from any thread.

        A Terminate is recorded before it is queued, so batches already
        waiting in the queue are not dispatched.
        """
        if isinstance(loop_signal, Terminate) and self._terminate_reason is None:
            self._terminate_reason = loop_signal.reason

        aio_loop = self._aio_loop
        if aio_loop is None:
            self._queue.put_nowait(loop_signal)
            return
        try:
            aio_loop.call_soon_threadsafe(self._queue.put_nowait, loop_signal)
        except RuntimeError:
            # Loop already closed during shutdown
            self.log.debug("signal_dropped", signal=type(loop_signal).__name__)

    async def run(self) -> None:
        """
        Watch until a termination signal arrives.

        Raises:
            MainLoopError: If the file-system subscription cannot be
                established or dies while watching
        """
        self._aio_loop = asyncio.get_running_loop()
        self._state = LoopState.WATCHING
        try:
            self._watcher.start()
            if self._install_handlers:
                self._add_signal_handlers()

            self.log.info(
                "watching",
                root=str(self._settings.watch_root),
                debounce_ms=round(self._debouncer.window * 1000),
            )

            while self._terminate_reason is None:
                loop_signal = await self._next_signal()
                match loop_signal:
                    case None:
                        continue
                    case Terminate():
                        break
                    case WatcherError(error=error):
                        self.log.error("watcher_error", error=repr(error))
                    case FilesChanged(paths=paths):
                        self._drain(paths)
        finally:
            self._state = LoopState.TERMINATED
            self._remove_signal_handlers()
            self._watcher.stop()
            self._aio_loop = None
            self.log.info("watch_stopped", reason=self._terminate_reason)

    async def _next_signal(self) -> LoopSignal | None:
        """Wait for the next signal, checking the observer on every timeout."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout=self._health_interval)
        except TimeoutError:
            if not self._watcher.is_alive:
                raise MainLoopError("file-system observer stopped unexpectedly") from None
            return None

    def _drain(self, paths: Sequence[str]) -> None:
        """Filter, debounce and dispatch one batch."""
        self._state = LoopState.DRAINING
        try:
            if not self._filter.is_relevant(paths):
                self.log.debug("changes_ignored", paths=list(paths))
                return

            self.log.debug(
                "changes_detected",
                paths=self._filter.relevant_paths(paths),
            )

            if self._terminate_reason is not None:
                return

            if not self._debouncer.try_admit(self._clock()):
                self.log.debug("deploy_skipped_debounced")
                return

            self._dispatcher.dispatch(self._settings)
        finally:
            self._state = LoopState.WATCHING

    def _add_signal_handlers(self) -> None:
        assert self._aio_loop is not None
        for sig in TERMINATION_SIGNALS:
            request = Terminate(reason=sig.name)
            try:
                self._aio_loop.add_signal_handler(sig, self.post, request)
                self._loop_handlers.append(sig)
            except NotImplementedError:
                # Windows event loops have no add_signal_handler
                self._previous_handlers[sig] = signal.signal(
                    sig, lambda signum, frame, request=request: self.post(request)
                )

    def _remove_signal_handlers(self) -> None:
        while self._loop_handlers:
            self._aio_loop.remove_signal_handler(self._loop_handlers.pop())
        for sig, previous in self._previous_handlers.items():
            signal.signal(sig, previous)
        self._previous_handlers.clear()
