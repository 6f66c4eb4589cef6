"""
Monotonic timer used to share one timeout budget across a redirect chain.
"""

import time


class Timer:
    """
    Elapsed-time reader.

    The timer starts when created. An optional countdown budget, in
    seconds, can be given to ask how much of it is left.
    """

    def __init__(self, countdown: float | None = None):
        self.countdown = countdown
        self._start = time.perf_counter()

    def start(self) -> None:
        """Restart counting from now."""
        self._start = time.perf_counter()

    def elapsed_millis(self) -> float:
        return round((time.perf_counter() - self._start) * 1000, 2)

    def countdown_remaining(self) -> float | None:
        """Seconds left of the countdown budget, None when no budget was set."""
        if self.countdown is None:
            return None
        return self.countdown - self.elapsed_millis() / 1000

    def remaining(self, timeout: float) -> float:
        """Seconds left of `timeout` after the time already elapsed."""
        return timeout - self.elapsed_millis() / 1000

    def __repr__(self) -> str:
        return '<Timer [%sms]>' % (self.elapsed_millis())
