"""
Logical Clock

The ledger orders transactions with a logical time (lt) instead of wall
clock time. Like a Proof of History counter, it only moves forward: every
delivered message advances it by a fixed step, so no two transactions ever
share a timestamp and delivery order is recoverable from lt alone.
"""

LT_ALIGN = 1_000_000   # Step between consecutive deliveries


class LogicalClock:
    """
    Monotonic logical-time counter owned by one simulator instance.
    """

    def __init__(self, step: int = LT_ALIGN, start: int = 0):
        """
        Initialize the clock.

        Args:
            step: Amount added on every advance (must be positive)
            start: Initial logical time
        """
        if step <= 0:
            raise ValueError("Clock step must be positive")
        if start < 0:
            raise ValueError("Logical time cannot be negative")
        self.step = step
        self._lt = start
        self._ticks = 0

    @property
    def lt(self) -> int:
        """Current logical time, without advancing."""
        return self._lt

    @property
    def ticks(self) -> int:
        """Number of deliveries stamped so far."""
        return self._ticks

    def advance(self) -> int:
        """Move time forward by one step and return the new value."""
        self._lt += self.step
        self._ticks += 1
        return self._lt

    def __repr__(self) -> str:
        return f"LogicalClock(lt={self._lt}, step={self.step})"
