"""Strategy data models — typed representations for pipeline inputs and outputs."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional


Signal = Literal["Buy", "Sell", "Hold"]

BUY: Signal = "Buy"
SELL: Signal = "Sell"
HOLD: Signal = "Hold"


@dataclass(frozen=True)
class Bar:
    """A single OHLCV price bar."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class EnrichedBar:
    """A bar plus every indicator, trendline, and signal derived for it.

    Indicator fields are ``None`` while their warm-up period is running.
    """

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float
    rsi: Optional[float] = None
    atr: Optional[float] = None
    ama: Optional[float] = None
    upper_bound: Optional[float] = None
    lower_bound: Optional[float] = None
    is_pivot_high: bool = False
    is_pivot_low: bool = False
    signal: Signal = HOLD
    up_count: int = 0
    down_count: int = 0


@dataclass(frozen=True)
class SignalSummary:
    """Most recent signal plus the last actionable (non-Hold) one."""

    current_signal: Signal
    last_non_hold_signal: Signal
    last_non_hold_timestamp: Optional[datetime]
    last_non_hold_price: Optional[float]
