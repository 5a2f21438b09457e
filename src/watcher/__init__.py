"""
DotWatch Watcher Package.

Watch-filter-debounce-dispatch loop for redeploying on file changes.
Requires Python 3.11+.
"""

from watcher.debouncer import DebounceState, Debouncer
from watcher.dispatcher import ActionDispatcher
from watcher.errors import (
    DeployError,
    DotWatchError,
    FilterConstructionError,
    MainLoopError,
    PatternError,
    WatcherRuntimeError,
)
from watcher.event_loop import EventLoop, LoopState
from watcher.exclusion import ExclusionFilter, ExclusionRule
from watcher.file_watcher import ChangeEventHandler, FileWatcher
from watcher.patterns import PathPattern, matches, normalize_path
from watcher.signals import FilesChanged, LoopSignal, Terminate, WatcherError

__all__ = [
    "ActionDispatcher",
    "ChangeEventHandler",
    "DebounceState",
    "Debouncer",
    "DeployError",
    "DotWatchError",
    "EventLoop",
    "ExclusionFilter",
    "ExclusionRule",
    "FileWatcher",
    "FilesChanged",
    "FilterConstructionError",
    "LoopSignal",
    "LoopState",
    "MainLoopError",
    "PathPattern",
    "PatternError",
    "Terminate",
    "WatcherError",
    "WatcherRuntimeError",
    "matches",
    "normalize_path",
]
