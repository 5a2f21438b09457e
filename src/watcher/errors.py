"""
DotWatch Error Types.

Only FilterConstructionError and MainLoopError leave the watch loop.
WatcherRuntimeError is logged and DeployError is displayed, and watching
carries on after both.
"""


class DotWatchError(Exception):
    """Base class for all DotWatch errors."""


class PatternError(DotWatchError, ValueError):
    """A path pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class FilterConstructionError(DotWatchError):
    """The exclusion filter could not be built. Fatal at startup."""


class WatcherRuntimeError(DotWatchError):
    """The file-system subscription reported a transient failure."""


class DeployError(DotWatchError):
    """A deployment failed."""


class MainLoopError(DotWatchError):
    """The event loop itself failed and cannot continue."""
