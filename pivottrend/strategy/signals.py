"""Buy/Sell/Hold signal derivation — pure functions, no I/O.

Signals fire on the bar where a breakout counter steps up.  An RSI filter
then suppresses buys into overbought conditions and sells into oversold
ones.
"""

from typing import Optional

from pivottrend.strategy.models import BUY, HOLD, SELL, EnrichedBar, Signal, SignalSummary


RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0


def derive_signals(up_count: list[int], down_count: list[int]) -> list[Signal]:
    """Translate counter edges into raw signals.

    A buy edge takes priority when both counters step on the same bar.
    The first bar is always Hold.
    """
    signals: list[Signal] = [HOLD] * len(up_count)
    for i in range(1, len(up_count)):
        if up_count[i] > up_count[i - 1]:
            signals[i] = BUY
        elif down_count[i] > down_count[i - 1]:
            signals[i] = SELL
    return signals


def apply_rsi_filter(
    signals: list[Signal],
    rsi: list[Optional[float]],
    overbought: float = RSI_OVERBOUGHT,
    oversold: float = RSI_OVERSOLD,
) -> list[Signal]:
    """Veto momentum-exhausted signals.

    * Buy with RSI above *overbought* → Hold.
    * Sell with RSI below *oversold* → Hold.

    Bars without an RSI value pass through.  The filter only ever turns a
    signal into Hold.  Returns a new list.
    """
    filtered = list(signals)
    for i, signal in enumerate(filtered):
        value = rsi[i]
        if value is None:
            continue
        if signal == BUY and value > overbought:
            filtered[i] = HOLD
        elif signal == SELL and value < oversold:
            filtered[i] = HOLD
    return filtered


def latest_signal(enriched: list[EnrichedBar]) -> SignalSummary:
    """Summarise the newest signal and the most recent non-Hold signal.

    Bars are ordered newest-first by timestamp before scanning, so the
    input order does not matter.
    """
    if not enriched:
        return SignalSummary(
            current_signal=HOLD,
            last_non_hold_signal=HOLD,
            last_non_hold_timestamp=None,
            last_non_hold_price=None,
        )

    newest_first = sorted(enriched, key=lambda b: b.timestamp, reverse=True)
    last = next((b for b in newest_first if b.signal != HOLD), None)

    return SignalSummary(
        current_signal=newest_first[0].signal,
        last_non_hold_signal=last.signal if last else HOLD,
        last_non_hold_timestamp=last.timestamp if last else None,
        last_non_hold_price=last.close if last else None,
    )
