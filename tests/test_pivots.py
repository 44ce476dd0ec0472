"""Deterministic tests for pivot high/low detection."""

from datetime import datetime, timedelta, timezone

from pivottrend.strategy.models import Bar
from pivottrend.strategy.pivots import detect_pivots


_T0 = datetime(2025, 1, 2, 14, 30, tzinfo=timezone.utc)


def _make_bar(i: int, high: float, low: float) -> Bar:
    close = (high + low) / 2
    return Bar(
        timestamp=_T0 + timedelta(minutes=15 * i),
        open=close, high=high, low=low, close=close, volume=1000.0,
    )


def _spike_bars(spike: float = 100.0) -> list[Bar]:
    """29 bars: 14 falling highs, a spike at index 14, 14 rising highs."""
    highs = [20.0 - i for i in range(14)] + [spike] + [6.0 + i for i in range(14)]
    return [_make_bar(i, h, h - 1.0) for i, h in enumerate(highs)]


class TestPivots:
    def test_single_spike_is_the_only_pivot(self):
        pivot_high, pivot_low = detect_pivots(_spike_bars(), length=14)
        assert pivot_high[14] is True
        assert sum(pivot_high) == 1
        assert not any(pivot_low)

    def test_tie_disqualifies(self):
        bars = _spike_bars()
        # Neighbour at index 3 equals the spike's high
        bars[3] = _make_bar(3, 100.0, 99.0)
        pivot_high, _ = detect_pivots(bars, length=14)
        assert not any(pivot_high)

    def test_pivot_low_mirrors_high(self):
        lows = [20.0 - i for i in range(14)] + [1.0] + [6.0 + i for i in range(14)]
        bars = [_make_bar(i, l + 50.0, l) for i, l in enumerate(lows)]
        pivot_high, pivot_low = detect_pivots(bars, length=14)
        assert pivot_low[14] is True
        assert sum(pivot_low) == 1
        assert not any(pivot_high)

    def test_outside_bar_can_be_both(self):
        bars = [_make_bar(i, 10.0 + (i % 3) * 0.1, 5.0 - (i % 3) * 0.1) for i in range(29)]
        bars[14] = _make_bar(14, 50.0, 0.5)
        pivot_high, pivot_low = detect_pivots(bars, length=14)
        assert pivot_high[14] and pivot_low[14]

    def test_edges_never_flagged(self):
        bars = [_make_bar(i, 10.0 + (i * 7 % 11), 5.0 - (i * 5 % 7)) for i in range(60)]
        pivot_high, pivot_low = detect_pivots(bars, length=14)
        for i in list(range(14)) + list(range(60 - 14, 60)):
            assert pivot_high[i] is False
            assert pivot_low[i] is False

    def test_flagged_pivots_strictly_exceed_window(self):
        bars = [_make_bar(i, 10.0 + (i * 7 % 11), 5.0 - (i * 5 % 7)) for i in range(90)]
        length = 5
        pivot_high, pivot_low = detect_pivots(bars, length=length)
        assert any(pivot_high)
        for i, flagged in enumerate(pivot_high):
            if flagged:
                window = bars[i - length : i] + bars[i + 1 : i + length + 1]
                assert all(bars[i].high > b.high for b in window)
        for i, flagged in enumerate(pivot_low):
            if flagged:
                window = bars[i - length : i] + bars[i + 1 : i + length + 1]
                assert all(bars[i].low < b.low for b in window)

    def test_short_series_has_no_pivots(self):
        bars = [_make_bar(i, 10.0 + i, 5.0) for i in range(20)]
        pivot_high, pivot_low = detect_pivots(bars, length=14)
        assert pivot_high == [False] * 20
        assert pivot_low == [False] * 20
