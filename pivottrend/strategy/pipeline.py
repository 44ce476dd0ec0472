"""Indicator-and-signal pipeline — bars in, enriched bars and a summary out.

Runs every indicator over the full series on each call.  Nothing is cached
between calls, so the same bars always produce the same result.
"""

import logging
from dataclasses import asdict, dataclass

from pivottrend.strategy.indicators import calculate_ama, calculate_atr, calculate_rsi
from pivottrend.strategy.models import HOLD, Bar, EnrichedBar, SignalSummary
from pivottrend.strategy.pivots import detect_pivots
from pivottrend.strategy.signals import apply_rsi_filter, derive_signals, latest_signal
from pivottrend.strategy.trendlines import build_trendlines

logger = logging.getLogger("pivottrend")

# Below this many bars every output is left blank and every signal is Hold.
MIN_BARS = 30

RSI_PERIOD = 14
ATR_PERIOD = 14
AMA_WINDOW = 14
AMA_FAST_FACTOR = 2.0
AMA_SLOW_FACTOR = 30.0
PIVOT_LENGTH = 14


@dataclass(frozen=True)
class AnalysisResult:
    """Enriched bars plus the signal summary derived from them."""

    bars: list[EnrichedBar]
    summary: SignalSummary


def _blank(bar: Bar) -> EnrichedBar:
    return EnrichedBar(
        timestamp=bar.timestamp,
        open=bar.open,
        high=bar.high,
        low=bar.low,
        close=bar.close,
        volume=bar.volume,
        signal=HOLD,
    )


def calculate_pivot_data(bars: list[Bar]) -> list[EnrichedBar]:
    """Compute indicators, pivots, trendlines, and signals for *bars*.

    Args:
        bars: Price bars ordered oldest-first.

    Returns:
        One ``EnrichedBar`` per input bar, index-aligned.  With fewer than
        ``MIN_BARS`` bars the result carries no indicator values, no pivots,
        and only Hold signals.
    """
    if len(bars) < MIN_BARS:
        logger.debug(
            "Only %d bars (need %d); returning blank analysis", len(bars), MIN_BARS,
        )
        return [_blank(b) for b in bars]

    closes = [b.close for b in bars]
    highs = [b.high for b in bars]
    lows = [b.low for b in bars]

    rsi = calculate_rsi(closes, RSI_PERIOD)
    atr = calculate_atr(highs, lows, closes, ATR_PERIOD)
    ama = calculate_ama(closes, AMA_WINDOW, AMA_FAST_FACTOR, AMA_SLOW_FACTOR)
    pivot_high, pivot_low = detect_pivots(bars, PIVOT_LENGTH)

    lines = build_trendlines(bars, pivot_high, pivot_low, atr, PIVOT_LENGTH)
    signals = apply_rsi_filter(derive_signals(lines.up_count, lines.down_count), rsi)

    logger.debug(
        "Analysed %d bars: %d pivot highs, %d pivot lows, %d signals",
        len(bars),
        sum(pivot_high),
        sum(pivot_low),
        sum(1 for s in signals if s != HOLD),
    )

    return [
        EnrichedBar(
            timestamp=bar.timestamp,
            open=bar.open,
            high=bar.high,
            low=bar.low,
            close=bar.close,
            volume=bar.volume,
            rsi=rsi[i],
            atr=atr[i],
            ama=ama[i],
            upper_bound=lines.upper[i],
            lower_bound=lines.lower[i],
            is_pivot_high=pivot_high[i],
            is_pivot_low=pivot_low[i],
            signal=signals[i],
            up_count=lines.up_count[i],
            down_count=lines.down_count[i],
        )
        for i, bar in enumerate(bars)
    ]


def analyze(bars: list[Bar]) -> AnalysisResult:
    """Run the pipeline and summarise its signals."""
    enriched = calculate_pivot_data(bars)
    return AnalysisResult(bars=enriched, summary=latest_signal(enriched))


def enriched_to_dict(bar: EnrichedBar) -> dict:
    """JSON-friendly representation of an enriched bar (ISO timestamp)."""
    data = asdict(bar)
    data["timestamp"] = bar.timestamp.isoformat()
    return data


def summary_to_dict(summary: SignalSummary) -> dict:
    """JSON-friendly representation of a signal summary."""
    ts = summary.last_non_hold_timestamp
    return {
        "current_signal": summary.current_signal,
        "last_non_hold_signal": summary.last_non_hold_signal,
        "last_non_hold_timestamp": ts.isoformat() if ts else None,
        "last_non_hold_price": summary.last_non_hold_price,
    }
