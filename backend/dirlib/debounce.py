"""
Pending value with a settle delay.

Each ``submit`` replaces the pending value and restarts the window, so only
the last value submitted within ``delay`` seconds is ever applied. The clock
is injectable; callers ``poll`` to apply a value whose window has elapsed.
"""
import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar('T')

_NOTHING = object()


class Debouncer(Generic[T]):
    def __init__(self, initial: T, delay: float = 0.3,
                 clock: Callable[[], float] = time.monotonic):
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.delay = delay
        self._clock = clock
        self._value: T = initial
        self._pending = _NOTHING
        self._deadline: Optional[float] = None

    @property
    def value(self) -> T:
        """The last settled value."""
        return self._value

    @property
    def pending(self) -> bool:
        return self._pending is not _NOTHING

    @property
    def pending_value(self) -> Optional[T]:
        return None if self._pending is _NOTHING else self._pending

    def submit(self, value: T) -> None:
        self._pending = value
        self._deadline = self._clock() + self.delay

    def cancel(self) -> None:
        self._pending = _NOTHING
        self._deadline = None

    def poll(self) -> bool:
        """Apply the pending value if its window has elapsed.

        Returns True only when the settled value actually changed.
        """
        if self._pending is _NOTHING or self._clock() < self._deadline:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Apply the pending value now, regardless of the window."""
        if self._pending is _NOTHING:
            return False
        value = self._pending
        self.cancel()
        changed = value != self._value
        self._value = value
        return changed
