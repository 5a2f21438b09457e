"""
DotWatch Loop Signals.

The unified input of the event loop. File-system batches, termination
requests and watcher failures all arrive through one channel.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FilesChanged:
    """Paths reported together by one file-system event."""

    paths: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Terminate:
    """Request to stop watching."""

    reason: str


@dataclass(frozen=True, slots=True)
class WatcherError:
    """A failure reported by the file-system subscription."""

    error: BaseException


LoopSignal = FilesChanged | Terminate | WatcherError
