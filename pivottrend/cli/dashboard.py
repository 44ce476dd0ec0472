"""CLI dashboard — prints analysis results to the console."""

import csv
from typing import Optional

from pivottrend.strategy.models import EnrichedBar, SignalSummary
from pivottrend.strategy.pipeline import enriched_to_dict


def _fmt(value: Optional[float], spec: str = ",.4f") -> str:
    return format(value, spec) if value is not None else "N/A"


def print_analysis(ticker: str, bars: list[EnrichedBar], summary: SignalSummary) -> str:
    """Format and print the latest indicator values and signal summary.

    Returns:
        The formatted string (also printed to stdout).
    """
    last = bars[-1] if bars else None
    last_time = summary.last_non_hold_timestamp
    pivots_high = sum(1 for b in bars if b.is_pivot_high)
    pivots_low = sum(1 for b in bars if b.is_pivot_low)

    lines = [
        f"──────────────── PivotTrend: {ticker} ────────────────",
        f"  Bars:            {len(bars)}",
        f"  Last close:      {_fmt(last.close if last else None)}",
        f"  RSI:             {_fmt(last.rsi if last else None, '.2f')}",
        f"  ATR:             {_fmt(last.atr if last else None)}",
        f"  AMA:             {_fmt(last.ama if last else None)}",
        f"  Upper bound:     {_fmt(last.upper_bound if last else None)}",
        f"  Lower bound:     {_fmt(last.lower_bound if last else None)}",
        f"  Pivots (H/L):    {pivots_high}/{pivots_low}",
        f"  Signal:          {summary.current_signal}",
        f"  Last signal:     {summary.last_non_hold_signal}"
        + (f" @ {_fmt(summary.last_non_hold_price)} ({last_time.isoformat()})"
           if last_time else ""),
        "──────────────────────────────────────────────────",
    ]
    output = "\n".join(lines)
    print(output)
    return output


def write_csv(path: str, bars: list[EnrichedBar]) -> int:
    """Write the enriched table to *path* as CSV and return the row count."""
    rows = [enriched_to_dict(b) for b in bars]
    with open(path, "w", newline="", encoding="utf-8") as f:
        if rows:
            writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            writer.writerows(rows)
    return len(rows)
