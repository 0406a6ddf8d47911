"""Core utilities for the indicator engine.

This package turns OHLCV candles into technical indicators (RSI,
Bollinger Bands, MACD, ATR, pivot points) and a short textual summary
for downstream consumers.  All functions are side‑effect free and
deterministic when given the same inputs.
"""

from .candles import Candle, candles_from_klines, candles_to_frame, candles_from_frame
from .config import IndicatorSettings
from .errors import (
    IndicatorInputError,
    EmptyInputError,
    InsufficientDataError,
    NonFiniteInputError,
)
from .indicators import (
    PivotPoints,
    compute_ema,
    compute_rsi,
    compute_macd,
    compute_bollinger,
    compute_true_range,
    compute_atr,
    compute_pivot_points,
)
from .engine import IndicatorBundle, compute_indicators, validate_candles
from .summary import technical_summary, describe_bundle

__all__ = [
    "Candle",
    "candles_from_klines",
    "candles_to_frame",
    "candles_from_frame",
    "IndicatorSettings",
    "IndicatorInputError",
    "EmptyInputError",
    "InsufficientDataError",
    "NonFiniteInputError",
    "PivotPoints",
    "compute_ema",
    "compute_rsi",
    "compute_macd",
    "compute_bollinger",
    "compute_true_range",
    "compute_atr",
    "compute_pivot_points",
    "IndicatorBundle",
    "compute_indicators",
    "validate_candles",
    "technical_summary",
    "describe_bundle",
]
