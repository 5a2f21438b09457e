"""
DotWatch Debouncer.

Admits at most one deploy per debounce window.
Requires Python 3.11+.
"""

import threading
from dataclasses import dataclass


@dataclass
class DebounceState:
    """Time of the last admitted trigger and the window length, in seconds."""

    window: float
    last_trigger: float | None = None  # None until the first admission


class Debouncer:
    """
    Debounces rapid relevant changes.

    A change is admitted when at least one window has passed since the last
    admitted change. Rejected changes are dropped: nothing fires after the
    window closes unless another change arrives.
    """

    def __init__(self, window_ms: int = 500) -> None:
        """
        Initialize the debouncer.

        Args:
            window_ms: Minimum interval between admitted changes, in milliseconds
        """
        self._state = DebounceState(window=window_ms / 1000.0)
        self._lock = threading.Lock()

    def try_admit(self, now: float) -> bool:
        """
        Admit or reject a relevant change observed at ``now``.

        The comparison and the update of the last trigger time happen in one
        critical section, so two concurrent callers cannot both pass.

        Args:
            now: Monotonic timestamp in seconds

        Returns:
            True if the change may be dispatched
        """
        with self._lock:
            last = self._state.last_trigger
            if last is not None and now - last < self._state.window:
                return False
            self._state.last_trigger = now
            return True

    def reset(self) -> None:
        """Forget the last admitted trigger."""
        with self._lock:
            self._state.last_trigger = None

    @property
    def window(self) -> float:
        """Debounce window in seconds."""
        return self._state.window

    @property
    def last_trigger(self) -> float | None:
        """Timestamp of the last admitted change."""
        with self._lock:
            return self._state.last_trigger
