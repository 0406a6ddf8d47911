"""
Indicator bundle assembly.

``compute_indicators`` validates a candle sequence and returns one
immutable ``IndicatorBundle`` holding RSI, Bollinger Bands, MACD, ATR
and next-period pivot points.  The function keeps no state between
calls; the same input always yields bit-identical output.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .candles import OHLCV_COLUMNS, Candle, candles_to_frame
from .config import IndicatorSettings
from .errors import (
    EmptyInputError,
    IndicatorInputError,
    InsufficientDataError,
    NonFiniteInputError,
)
from .indicators import (
    PivotPoints,
    compute_atr,
    compute_bollinger,
    compute_macd,
    compute_pivot_points,
    compute_rsi,
)
from .log import get_logger

logger = get_logger("indicator_engine")


def _frozen(values) -> np.ndarray:
    arr = np.array(values, dtype=np.float64)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class IndicatorBundle:
    """
    Indicator series aligned to the input candles.

    ``upper_band``, ``lower_band``, ``macd_line`` and ``signal_line``
    have one value per candle.  ``rsi`` and ``atr`` have one value per
    consecutive candle pair: ``rsi[j]`` and ``atr[j]`` belong to candle
    ``j + 1``.  ``pivot_points`` is derived from the last candle only.
    """

    rsi: np.ndarray
    upper_band: np.ndarray
    lower_band: np.ndarray
    macd_line: np.ndarray
    signal_line: np.ndarray
    atr: np.ndarray
    pivot_points: PivotPoints

    def __post_init__(self):
        for name in ("rsi", "upper_band", "lower_band", "macd_line", "signal_line", "atr"):
            object.__setattr__(self, name, _frozen(getattr(self, name)))
        n = len(self.upper_band)
        if n < 1:
            raise ValueError("bundle needs at least one bar")
        for name in ("lower_band", "macd_line", "signal_line"):
            if len(getattr(self, name)) != n:
                raise ValueError(f"{name} has {len(getattr(self, name))} values, expected {n}")
        for name in ("rsi", "atr"):
            if len(getattr(self, name)) != n - 1:
                raise ValueError(f"{name} has {len(getattr(self, name))} values, expected {n - 1}")

    def __len__(self) -> int:
        return len(self.upper_band)

    def latest(self) -> Dict[str, Optional[float]]:
        """Last value of every series; None where a series is empty."""
        def last(arr: np.ndarray) -> Optional[float]:
            return float(arr[-1]) if len(arr) else None

        return {
            "rsi": last(self.rsi),
            "upper_band": last(self.upper_band),
            "lower_band": last(self.lower_band),
            "macd": last(self.macd_line),
            "signal": last(self.signal_line),
            "atr": last(self.atr),
        }

    def to_dict(self) -> dict:
        return {
            "rsi": self.rsi.tolist(),
            "upperBand": self.upper_band.tolist(),
            "lowerBand": self.lower_band.tolist(),
            "macd": self.macd_line.tolist(),
            "signal": self.signal_line.tolist(),
            "atr": self.atr.tolist(),
            "pivotPoints": self.pivot_points.to_dict(),
        }

    def to_frame(self, candles: Sequence[Candle]) -> pd.DataFrame:
        """
        Merge candles and series into one chart-ready frame.  The first
        row has NaN for rsi and atr, which start at the second bar.
        """
        if len(candles) != len(self):
            raise ValueError(f"bundle covers {len(self)} bars, got {len(candles)} candles")
        df = candles_to_frame(candles)
        df["bb_upper"] = self.upper_band
        df["bb_lower"] = self.lower_band
        df["macd"] = self.macd_line
        df["macd_signal"] = self.signal_line
        df["rsi"] = np.concatenate(([np.nan], self.rsi))
        df["atr"] = np.concatenate(([np.nan], self.atr))
        return df


def _minimums(settings: IndicatorSettings) -> List[tuple]:
    return [
        ("rsi", settings.rsi_period + 1),
        ("bollinger", settings.bb_period),
        ("macd", settings.macd_slow),
        ("atr", settings.atr_period + 1),
    ]


def validate_candles(candles: Sequence[Candle], settings: IndicatorSettings) -> np.ndarray:
    """
    Check preconditions and return the OHLCV values as an (N, 5) array.

    Raises EmptyInputError, NonFiniteInputError or, in strict mode,
    InsufficientDataError for the first indicator without enough bars.
    """
    if len(candles) == 0:
        raise EmptyInputError("engine")
    values = np.array(
        [(c.open, c.high, c.low, c.close, c.volume) for c in candles], dtype=np.float64
    )
    bad = np.argwhere(~np.isfinite(values))
    if len(bad):
        row, col = bad[0]
        raise NonFiniteInputError(OHLCV_COLUMNS[col], int(row), float(values[row, col]))
    if settings.strict:
        for indicator, minimum in _minimums(settings):
            if len(candles) < minimum:
                raise InsufficientDataError(indicator, minimum, len(candles))
    return values


def compute_indicators(
    candles: Sequence[Candle],
    settings: Optional[IndicatorSettings] = None,
    strict: Optional[bool] = None,
) -> IndicatorBundle:
    """
    Compute the full indicator bundle for ``candles`` (ascending time).

    ``strict`` overrides ``settings.strict``.  In the default lenient
    mode a single candle is enough; early values are placeholders.
    """
    settings = settings or IndicatorSettings()
    if strict is not None and strict != settings.strict:
        settings = replace(settings, strict=strict)
    settings.validate()

    logger.debug("computing indicators for %d candles (strict=%s)", len(candles), settings.strict)
    try:
        values = validate_candles(candles, settings)
    except IndicatorInputError as exc:
        logger.warning("rejected candle input: %s", exc)
        raise

    df = pd.DataFrame(values, columns=OHLCV_COLUMNS)
    rsi = compute_rsi(df["close"], settings.rsi_period)
    bands = compute_bollinger(df["close"], settings.bb_period, settings.bb_width)
    macd = compute_macd(df["close"], settings.macd_fast, settings.macd_slow, settings.macd_signal)
    atr = compute_atr(df["high"], df["low"], df["close"], settings.atr_period)
    last = candles[-1]
    pivots = compute_pivot_points(float(last.high), float(last.low), float(last.close))

    return IndicatorBundle(
        rsi=rsi.to_numpy(),
        upper_band=bands["bb_upper"].to_numpy(),
        lower_band=bands["bb_lower"].to_numpy(),
        macd_line=macd["macd"].to_numpy(),
        signal_line=macd["macd_signal"].to_numpy(),
        atr=atr.to_numpy(),
        pivot_points=pivots,
    )
