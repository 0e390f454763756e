"""Unit tests for LogicalClock."""

import pytest

from ledger_sandbox.core import LT_ALIGN, LogicalClock


class TestLogicalClock:

    def test_starts_at_zero(self):
        clock = LogicalClock()
        assert clock.lt == 0
        assert clock.ticks == 0

    def test_advance_adds_step(self):
        clock = LogicalClock()
        assert clock.advance() == LT_ALIGN
        assert clock.advance() == 2 * LT_ALIGN
        assert clock.lt == 2 * LT_ALIGN
        assert clock.ticks == 2

    def test_reading_does_not_advance(self):
        clock = LogicalClock()
        clock.advance()
        assert clock.lt == clock.lt == LT_ALIGN

    def test_values_strictly_increase(self):
        clock = LogicalClock(step=7, start=100)
        values = [clock.advance() for _ in range(50)]
        assert values == sorted(set(values))
        assert all(b - a == 7 for a, b in zip(values, values[1:]))

    @pytest.mark.parametrize("step", [0, -1])
    def test_step_must_be_positive(self, step):
        with pytest.raises(ValueError):
            LogicalClock(step=step)

    def test_start_cannot_be_negative(self):
        with pytest.raises(ValueError):
            LogicalClock(start=-1)
