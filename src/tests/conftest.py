"""
DotWatch Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import asyncio
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import pytest

from utils.config import DeploySettings, LoggingSettings, Settings, WatcherSettings
from utils.logger import configure_logging
from watcher.debouncer import Debouncer
from watcher.dispatcher import ActionDispatcher
from watcher.event_loop import EventLoop
from watcher.exclusion import ExclusionFilter

# Debug level exercises every log call; output goes to stderr
configure_logging(Settings(logging=LoggingSettings(level="DEBUG")))


class FakeObserver:
    """Stands in for a watchdog Observer without touching the file system."""

    def __init__(self, start_error: Exception | None = None) -> None:
        self.start_error = start_error
        self.scheduled: list[tuple[Any, str, bool]] = []
        self.alive = False
        self.started = False
        self.stopped = False
        self.joined = False

    def schedule(self, handler: Any, path: str, recursive: bool = False) -> None:
        self.scheduled.append((handler, path, recursive))

    def start(self) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.started = True
        self.alive = True

    def stop(self) -> None:
        self.stopped = True
        self.alive = False

    def join(self, timeout: float | None = None) -> None:
        self.joined = True

    def is_alive(self) -> bool:
        return self.alive


class RecordingDeploy:
    """Deploy routine that records calls and can fail on demand."""

    def __init__(self, failures: Iterable[Exception | None] = ()) -> None:
        self.calls: list[Any] = []
        self._failures = list(failures)
        self.on_call: Callable[[], None] | None = None

    def __call__(self, options: Any) -> None:
        self.calls.append(options)
        if self.on_call is not None:
            self.on_call()
        if self._failures:
            failure = self._failures.pop(0)
            if failure is not None:
                raise failure


def make_clock(*values: float) -> Callable[[], float]:
    """Build a clock returning the given timestamps in order."""
    return iter(values).__next__


async def wait_until_idle(loop: EventLoop, settle: float = 0.05) -> None:
    """Wait until every queued signal has been picked up and handled."""
    while loop.pending_signals:
        await asyncio.sleep(0.01)
    await asyncio.sleep(settle)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Create a dotfiles repository layout."""
    root = tmp_path / "dotfiles"
    (root / ".dotter" / "cache").mkdir(parents=True)
    (root / ".git").mkdir()
    (root / "zsh").mkdir()
    (root / "zsh" / "zshrc").write_text("export EDITOR=vim\n")
    return root


@pytest.fixture
def settings(project_root: Path) -> Settings:
    """Settings pointing at the temporary repository."""
    return Settings(
        watcher=WatcherSettings(root=project_root, health_check_interval=0.05),
        deploy=DeploySettings(command=["dotter", "deploy"]),
    )


@pytest.fixture
def exclusion_filter(settings: Settings) -> ExclusionFilter:
    """The standard exclusion filter for the repository."""
    return ExclusionFilter.build(
        settings.watcher.cache_directory,
        settings.watcher.cache_file,
        root=settings.watch_root,
    )


@pytest.fixture
def observer() -> FakeObserver:
    return FakeObserver()


@pytest.fixture
def deploy() -> RecordingDeploy:
    return RecordingDeploy()


@pytest.fixture
def displayed() -> list[BaseException]:
    """Errors passed to the display collaborator."""
    return []


@pytest.fixture
def make_loop(
    settings: Settings,
    exclusion_filter: ExclusionFilter,
    observer: FakeObserver,
    deploy: RecordingDeploy,
    displayed: list[BaseException],
) -> Callable[..., EventLoop]:
    """Factory for event loops wired to fakes."""

    def factory(clock: Callable[[], float] | None = None, window_ms: int = 500) -> EventLoop:
        return EventLoop(
            settings,
            exclusion_filter=exclusion_filter,
            debouncer=Debouncer(window_ms=window_ms),
            dispatcher=ActionDispatcher(deploy=deploy, display_error=displayed.append),
            observer_factory=lambda: observer,
            clock=clock or make_clock(*(float(i) for i in range(100))),
            install_signal_handlers=False,
        )

    return factory
