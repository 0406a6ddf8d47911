"""
Plain-text technical context for downstream advisory requests.

The advisory service receives a one-line snapshot of the market, e.g.
``Price: 64123.5, RSI(14): 57.30. Latest trend: Up``, optionally
followed by one line per indicator.
"""
from __future__ import annotations

from typing import Optional, Sequence

from .candles import Candle
from .config import IndicatorSettings
from .engine import IndicatorBundle

TREND_LOOKBACK = 50


def _fmt_price(value: float) -> str:
    return f"{value:.8f}".rstrip("0").rstrip(".")


def _fmt(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value:.2f}"


def trend(candles: Sequence[Candle], lookback: int = TREND_LOOKBACK) -> str:
    """'Up' if the last close is above the close ``lookback`` bars back (or the first close)."""
    if not candles:
        raise ValueError("trend: no candles")
    ref = candles[-lookback] if len(candles) >= lookback else candles[0]
    return "Up" if candles[-1].close > ref.close else "Down"


def technical_summary(
    candles: Sequence[Candle], bundle: IndicatorBundle, rsi_period: int = 14
) -> str:
    latest = bundle.latest()
    return (
        f"Price: {_fmt_price(candles[-1].close)}, "
        f"RSI({rsi_period}): {_fmt(latest['rsi'])}. "
        f"Latest trend: {trend(candles)}"
    )


def describe_bundle(
    candles: Sequence[Candle],
    bundle: IndicatorBundle,
    settings: Optional[IndicatorSettings] = None,
) -> str:
    settings = settings or IndicatorSettings()
    latest = bundle.latest()
    p = bundle.pivot_points
    lines = [
        technical_summary(candles, bundle, settings.rsi_period),
        f"MACD({settings.macd_fast},{settings.macd_slow},{settings.macd_signal}): "
        f"{_fmt(latest['macd'])} / signal {_fmt(latest['signal'])}",
        f"Bollinger({settings.bb_period}): upper {_fmt(latest['upper_band'])} "
        f"lower {_fmt(latest['lower_band'])}",
        f"ATR({settings.atr_period}): {_fmt(latest['atr'])}",
        f"Pivot: P {_fmt(p.pivot)} R1 {_fmt(p.r1)} R2 {_fmt(p.r2)} "
        f"S1 {_fmt(p.s1)} S2 {_fmt(p.s2)}",
    ]
    return "\n".join(lines)
