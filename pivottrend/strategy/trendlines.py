"""Adaptive support/resistance trendlines anchored to pivots — pure functions.

The upper line starts at each pivot high and slides down by a fixed slope
per bar; the lower line starts at each pivot low and slides up.  The slope
is ATR / length, frozen at the value seen on the anchoring pivot.  A close
through the previous bar's line counts as a breakout.
"""

from dataclasses import dataclass
from typing import Optional

from pivottrend.strategy.models import Bar


@dataclass(frozen=True)
class TrendlineSeries:
    """Bound lines and cumulative breakout counters, aligned to the bars."""

    upper: list[float]
    lower: list[float]
    up_count: list[int]
    down_count: list[int]


def build_trendlines(
    bars: list[Bar],
    pivot_high: list[bool],
    pivot_low: list[bool],
    atr: list[Optional[float]],
    length: int = 14,
) -> TrendlineSeries:
    """Build the upper/lower bounds and breakout counters.

    Args:
        bars: Price bars, oldest-first.
        pivot_high: Pivot-high flags from ``detect_pivots``.
        pivot_low: Pivot-low flags from ``detect_pivots``.
        atr: ATR series; ``None`` entries give a zero slope.
        length: Divisor turning ATR into a per-bar slope.

    Returns:
        ``TrendlineSeries``.  Counters never decrease; only the bars where
        they step up carry meaning.
    """
    n = len(bars)
    if n == 0:
        return TrendlineSeries(upper=[], lower=[], up_count=[], down_count=[])

    slope = [a / length if a is not None else 0.0 for a in atr]

    upper = [bars[0].high] + [0.0] * (n - 1)
    lower = [bars[0].low] + [0.0] * (n - 1)
    up_count = [0] * n
    down_count = [0] * n

    slope_ph = slope[0]
    slope_pl = slope[0]

    for i in range(1, n):
        bar = bars[i]

        if pivot_high[i]:
            slope_ph = slope[i]
            upper[i] = bar.high
        else:
            upper[i] = upper[i - 1] - slope_ph

        if pivot_low[i]:
            slope_pl = slope[i]
            lower[i] = bar.low
        else:
            lower[i] = lower[i - 1] + slope_pl

        # Breakouts are measured against the previous bar's line
        broke_up = not pivot_high[i] and bar.close > upper[i - 1]
        broke_down = not pivot_low[i] and bar.close < lower[i - 1]
        up_count[i] = up_count[i - 1] + 1 if broke_up else up_count[i - 1]
        down_count[i] = down_count[i - 1] + 1 if broke_down else down_count[i - 1]

    return TrendlineSeries(
        upper=upper, lower=lower, up_count=up_count, down_count=down_count,
    )
