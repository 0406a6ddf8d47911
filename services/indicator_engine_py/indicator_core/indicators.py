"""Technical indicators on pandas Series, computed with pandas and numpy.

EMA, RSI, MACD, Bollinger Bands, True Range, ATR and classic pivot
points, written without external TA libraries.  Every function accepts
a short series and still returns a fully populated result: values the
indicator cannot define yet are replaced by documented placeholders
instead of NaN, so charts and downstream consumers never see holes.

Index alignment: RSI, True Range and ATR need a previous close and
therefore start at the *second* bar; they are returned indexed by
``close.index[1:]`` (one value fewer than the input).  Everything else
is indexed like the input.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .errors import EmptyInputError

# RSI value emitted before the averaging window has been seeded.
RSI_FILLER = 50.0


def _check_window(window: int, name: str) -> None:
    if window < 1:
        raise ValueError(f"{name}: window must be >= 1, got {window}")


def _check_not_empty(series: pd.Series, name: str) -> None:
    if len(series) == 0:
        raise EmptyInputError(name)


def compute_ema(close: pd.Series, window: int) -> pd.Series:
    """
    Compute the exponential moving average (EMA) using pandas’ ewm.
    ``adjust=False`` gives the recursive form with k = 2 / (window + 1);
    the average is seeded with the first value, not with an SMA, so
    ``ema[0] == close[0]`` and no leading NaN is produced.
    """
    _check_window(window, "ema")
    _check_not_empty(close, "ema")
    return close.astype(float).ewm(span=window, adjust=False).mean()


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        # flat window carries no strength either way
        return RSI_FILLER if avg_gain == 0 else 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def compute_rsi(close: pd.Series, window: int = 14) -> pd.Series:
    """
    Compute the Relative Strength Index (RSI) using Wilder’s method.

    Gains and losses of the first ``window`` changes are summed and
    averaged to seed the smoothing; afterwards each average is updated
    as ``(avg * (window - 1) + x) / window``.  Bars before the seed
    get ``RSI_FILLER``.  The result has ``len(close) - 1`` values.
    """
    _check_window(window, "rsi")
    _check_not_empty(close, "rsi")
    values = close.to_numpy(dtype=float)
    out = np.empty(len(values) - 1, dtype=float)
    sum_gain = sum_loss = 0.0
    avg_gain = avg_loss = 0.0
    for i in range(1, len(values)):
        change = values[i] - values[i - 1]
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        if i <= window:
            sum_gain += gain
            sum_loss += loss
            if i < window:
                out[i - 1] = RSI_FILLER
                continue
            avg_gain = sum_gain / window
            avg_loss = sum_loss / window
        else:
            avg_gain = (avg_gain * (window - 1) + gain) / window
            avg_loss = (avg_loss * (window - 1) + loss) / window
        out[i - 1] = _rsi_from_averages(avg_gain, avg_loss)
    return pd.Series(out, index=close.index[1:], name="rsi")


def compute_macd(
    close: pd.Series, fast: int = 12, slow: int = 26, signal: int = 9
) -> pd.DataFrame:
    """
    Compute the Moving Average Convergence Divergence (MACD).
    Returns a DataFrame with columns macd, macd_signal and macd_diff.
    """
    ema_fast = compute_ema(close, fast)
    ema_slow = compute_ema(close, slow)
    macd_line = ema_fast - ema_slow
    signal_line = compute_ema(macd_line, signal)
    macd_diff = macd_line - signal_line
    return pd.DataFrame(
        {"macd": macd_line, "macd_signal": signal_line, "macd_diff": macd_diff}
    )


def compute_bollinger(
    close: pd.Series, window: int = 20, n_std: float = 2.0
) -> pd.DataFrame:
    """
    Compute Bollinger Bands (lower, mid, upper) from a rolling mean and
    a rolling *population* standard deviation (ddof=0).

    Until ``window`` closes are available all three bands equal the
    close itself, so the bands hug price instead of being undefined.
    """
    _check_window(window, "bollinger")
    _check_not_empty(close, "bollinger")
    if n_std < 0:
        raise ValueError(f"bollinger: n_std must be >= 0, got {n_std}")
    close = close.astype(float)
    mid = close.rolling(window=window, min_periods=window).mean()
    std = close.rolling(window=window, min_periods=window).std(ddof=0)
    upper = mid + n_std * std
    lower = mid - n_std * std
    warmup = np.arange(len(close)) < window - 1
    values = close.to_numpy()
    bands = {
        name: np.where(warmup, values, band.to_numpy())
        for name, band in (("bb_lower", lower), ("bb_mid", mid), ("bb_upper", upper))
    }
    return pd.DataFrame(bands, index=close.index)


def compute_true_range(high: pd.Series, low: pd.Series, close: pd.Series) -> pd.Series:
    """
    True range of every bar against the previous close:
    ``max(high - low, |high - prev_close|, |low - prev_close|)``.
    The first bar has no previous close and is dropped.
    """
    _check_not_empty(close, "true_range")
    prev_close = close.shift(1)
    ranges = pd.concat(
        [high - low, (high - prev_close).abs(), (low - prev_close).abs()], axis=1
    )
    return ranges.max(axis=1).iloc[1:].astype(float).rename("true_range")


def compute_atr(
    high: pd.Series, low: pd.Series, close: pd.Series, window: int = 14
) -> pd.Series:
    """
    Average True Range with Wilder smoothing.

    The first ``window`` values are the running mean of the true ranges
    seen so far; the value at position ``window - 1`` is therefore the
    plain average of the first ``window`` true ranges and seeds
    ``atr = (atr_prev * (window - 1) + tr) / window``.
    """
    _check_window(window, "atr")
    tr = compute_true_range(high, low, close)
    values = tr.to_numpy()
    out = np.empty(len(values), dtype=float)
    running = 0.0
    for j, value in enumerate(values):
        if j < window:
            running += value
            out[j] = running / (j + 1)
        else:
            out[j] = (out[j - 1] * (window - 1) + value) / window
    return pd.Series(out, index=tr.index, name="atr")


@dataclass(frozen=True)
class PivotPoints:
    pivot: float
    r1: float
    r2: float
    s1: float
    s2: float

    def to_dict(self) -> dict:
        return {"pivot": self.pivot, "r1": self.r1, "r2": self.r2, "s1": self.s1, "s2": self.s2}


def compute_pivot_points(high: float, low: float, close: float) -> PivotPoints:
    """Classic floor pivots projected for the next period from one bar."""
    pivot = (high + low + close) / 3
    span = high - low
    return PivotPoints(
        pivot=pivot,
        r1=2 * pivot - low,
        r2=pivot + span,
        s1=2 * pivot - high,
        s2=pivot - span,
    )
