"""
Cancel-and-reschedule debouncing for extraction passes.

The debouncer owns no thread. The host loop calls ``poll()`` (for example
from its idle or timer hook); a pending call fires once the input has been
quiet for ``delay`` seconds. A new ``schedule()`` before then replaces the
pending call and restarts the quiet period.
"""

import logging
import time
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


class Debouncer:
    """Runs at most one pending callback after a quiet period."""

    def __init__(
        self,
        callback: Callable[..., Any],
        delay: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.callback = callback
        self.delay = delay
        self.clock = clock
        self._due: Optional[float] = None
        self._args: Tuple[Any, ...] = ()

    @property
    def pending(self) -> bool:
        return self._due is not None

    def schedule(self, *args: Any) -> None:
        if self._due is not None:
            logger.debug("Rescheduling pending pass")
        self._args = args
        self._due = self.clock() + self.delay

    def cancel(self) -> None:
        self._due = None
        self._args = ()

    def poll(self) -> Optional[Any]:
        """Fire the pending callback if its quiet period has elapsed."""
        if self._due is None or self.clock() < self._due:
            return None
        return self.flush()

    def flush(self) -> Optional[Any]:
        """Fire the pending callback immediately."""
        if self._due is None:
            return None
        args = self._args
        self.cancel()
        return self.callback(*args)
