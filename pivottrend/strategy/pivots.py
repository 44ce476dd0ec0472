"""Pivot (swing) high/low detection — pure functions."""

from pivottrend.strategy.models import Bar


def _is_pivot_high(bars: list[Bar], i: int, length: int) -> bool:
    high = bars[i].high
    for j in range(1, length + 1):
        if bars[i - j].high >= high or bars[i + j].high >= high:
            return False
    return True


def _is_pivot_low(bars: list[Bar], i: int, length: int) -> bool:
    low = bars[i].low
    for j in range(1, length + 1):
        if bars[i - j].low <= low or bars[i + j].low <= low:
            return False
    return True


def detect_pivots(bars: list[Bar], length: int = 14) -> tuple[list[bool], list[bool]]:
    """Flag bars that are local extremes over a symmetric look-around window.

    A pivot high is a bar whose high is strictly greater than the highs of
    the *length* bars on each side; ties disqualify.  Pivot lows mirror
    this with strictly lower lows.  The two scans are independent, so one
    bar can be both.

    Bars within *length* of either end lack a full window and are never
    flagged.

    Returns:
        ``(pivot_high, pivot_low)``: boolean lists aligned to *bars*.
    """
    n = len(bars)
    pivot_high = [False] * n
    pivot_low = [False] * n

    for i in range(length, n - length):
        pivot_high[i] = _is_pivot_high(bars, i, length)
        pivot_low[i] = _is_pivot_low(bars, i, length)

    return pivot_high, pivot_low
