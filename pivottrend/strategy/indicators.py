"""Technical indicators — RSI, ATR, adaptive moving average. Pure functions, no I/O."""

from typing import Optional

import numpy as np


# ── RSI ──────────────────────────────────────────────────────────────────


def _rsi_from_avgs(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def calculate_rsi(closes: list[float], period: int = 14) -> list[Optional[float]]:
    """Calculate Wilder's Relative Strength Index.

    Algorithm (Wilder-smoothed):
        1. delta = close[i] - close[i-1]
        2. Separate gains (positive) and losses (|negative|).
        3. Seed average gain/loss = SMA of the first *period* deltas.
        4. Subsequent: avg = (prev_avg × (period-1) + current) / period
        5. RSI = 100 - 100 / (1 + avg_gain / avg_loss), or 100 when
           avg_loss is zero.

    Returns a list the same length as *closes*.  Entries before index
    *period* are ``None``; every entry is ``None`` when fewer than
    ``period + 1`` closes are supplied.
    """
    rsi: list[Optional[float]] = [None] * len(closes)
    if len(closes) < period + 1:
        return rsi

    gains: list[float] = []
    losses: list[float] = []
    for i in range(1, period + 1):
        delta = closes[i] - closes[i - 1]
        gains.append(max(delta, 0.0))
        losses.append(abs(min(delta, 0.0)))

    avg_gain = sum(gains) / period
    avg_loss = sum(losses) / period
    rsi[period] = _rsi_from_avgs(avg_gain, avg_loss)

    for i in range(period + 1, len(closes)):
        delta = closes[i] - closes[i - 1]
        avg_gain = (avg_gain * (period - 1) + max(delta, 0.0)) / period
        avg_loss = (avg_loss * (period - 1) + abs(min(delta, 0.0))) / period
        rsi[i] = _rsi_from_avgs(avg_gain, avg_loss)

    return rsi


# ── ATR ──────────────────────────────────────────────────────────────────


def true_range(highs: list[float], lows: list[float], closes: list[float]) -> list[float]:
    """Per-bar true range.

    The first bar has no previous close, so its range is ``high - low``.
    Afterwards:
        TR = max(high - low, |high - prev_close|, |low - prev_close|)
    """
    ranges: list[float] = []
    for i in range(len(highs)):
        if i == 0:
            ranges.append(highs[0] - lows[0])
            continue
        prev_close = closes[i - 1]
        ranges.append(
            max(
                highs[i] - lows[i],
                abs(highs[i] - prev_close),
                abs(lows[i] - prev_close),
            )
        )
    return ranges


def calculate_atr(
    highs: list[float],
    lows: list[float],
    closes: list[float],
    period: int = 14,
) -> list[Optional[float]]:
    """Calculate the Wilder-smoothed Average True Range series.

    ``atr[period-1]`` is the simple average of the first *period* true
    ranges; each later value is ``(prev × (period-1) + TR) / period``.
    Earlier entries (and all entries when fewer than *period* bars are
    given) are ``None``.
    """
    n = len(highs)
    atr: list[Optional[float]] = [None] * n
    if n < period:
        return atr

    ranges = true_range(highs, lows, closes)
    prev = sum(ranges[:period]) / period
    atr[period - 1] = prev
    for i in range(period, n):
        prev = (prev * (period - 1) + ranges[i]) / period
        atr[i] = prev

    return atr


# ── Adaptive moving average ─────────────────────────────────────────────


def _ema(values: list[float], multiplier: float) -> list[float]:
    """EMA seeded with the first value, recurred over the whole series."""
    out = [values[0]]
    for value in values[1:]:
        out.append(value * multiplier + out[-1] * (1 - multiplier))
    return out


def rolling_volatility(closes: list[float], window: int) -> list[float]:
    """Population standard deviation of percent changes over *window* bars.

    ``pct[0]`` is taken as 0.  Entries before ``window - 1`` are 0.
    """
    pct = np.zeros(len(closes))
    if len(closes) > 1:
        prices = np.asarray(closes, dtype=float)
        pct[1:] = (prices[1:] - prices[:-1]) / prices[:-1]

    vol = [0.0] * len(closes)
    for i in range(window - 1, len(closes)):
        vol[i] = float(np.std(pct[i - window + 1 : i + 1]))
    return vol


def calculate_ama(
    closes: list[float],
    window: int = 14,
    fast_factor: float = 2.0,
    slow_factor: float = 30.0,
) -> list[Optional[float]]:
    """Calculate an adaptive moving average.

    A fast EMA (span ``fast_factor × window``) is nudged by the gap between
    price and a slow EMA (span ``slow_factor × window``), scaled by the
    rolling volatility of returns:

        raw[i] = fast[i] + vol[i] × (close[i] - slow[i])
        ama[i] = raw[i] × k + ama[i-1] × (1 - k),  k = 2 / (window + 1)

    Volatility is 0 until the rolling window is full, so early values are a
    plain smoothed fast EMA.  Every entry is ``None`` when fewer than
    *window* closes are supplied.
    """
    ama: list[Optional[float]] = [None] * len(closes)
    if len(closes) < window:
        return ama

    vol = rolling_volatility(closes, window)
    fast = _ema(closes, 2.0 / (fast_factor * window + 1))
    slow = _ema(closes, 2.0 / (slow_factor * window + 1))

    k = 2.0 / (window + 1)
    prev = fast[0] + vol[0] * (closes[0] - slow[0])
    for i in range(len(closes)):
        raw = fast[i] + vol[i] * (closes[i] - slow[i])
        prev = raw * k + prev * (1 - k)
        ama[i] = prev

    return ama
