"""
OHLCV candle record and conversions.

Candles arrive from the data-acquisition side either as raw exchange
kline rows or as pandas frames indexed by UTC open time.  Both are
converted into immutable ``Candle`` records before the engine sees them.

All timestamps are epoch milliseconds; frames use ``datetime64[ns, UTC]``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

import pandas as pd

OHLCV_COLUMNS = ["open", "high", "low", "close", "volume"]

KLINE_COLUMNS = [
    "open_time", "open", "high", "low", "close", "volume",
    "close_time", "quote_asset_volume", "number_of_trades",
    "taker_buy_base_asset_volume", "taker_buy_quote_asset_volume", "ignore",
]


@dataclass(frozen=True)
class Candle:
    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float

    @classmethod
    def from_kline(cls, row: Sequence) -> "Candle":
        """
        Build a candle from one kline row
        ``[open_time, open, high, low, close, volume, ...]``.  Exchanges
        send prices as strings; trailing fields are ignored.
        """
        if len(row) < 6:
            raise ValueError(f"kline row needs at least 6 fields, got {len(row)}")
        return cls(
            timestamp=int(row[0]),
            open=float(row[1]),
            high=float(row[2]),
            low=float(row[3]),
            close=float(row[4]),
            volume=float(row[5]),
        )


def candles_from_klines(rows: Iterable[Sequence]) -> List[Candle]:
    return [Candle.from_kline(row) for row in rows]


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    """Return an OHLCV frame indexed by UTC open time (index name ``date``)."""
    df = pd.DataFrame(
        [(c.timestamp, c.open, c.high, c.low, c.close, c.volume) for c in candles],
        columns=["open_time"] + OHLCV_COLUMNS,
    )
    df["date"] = pd.to_datetime(df["open_time"], unit="ms", utc=True)
    df = df.set_index("date")
    return df[OHLCV_COLUMNS].astype(float)


def candles_from_frame(df: pd.DataFrame) -> List[Candle]:
    """
    Convert an OHLCV frame back into candles.  A ``DatetimeIndex`` is
    turned into epoch milliseconds; any other index is used as-is.
    """
    missing = [c for c in OHLCV_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"frame is missing columns: {', '.join(missing)}")
    if isinstance(df.index, pd.DatetimeIndex):
        idx = df.index.tz_localize("UTC") if df.index.tz is None else df.index.tz_convert("UTC")
        timestamps = [int(ts.value // 1_000_000) for ts in idx]
    else:
        timestamps = [int(ts) for ts in df.index]
    values = df[OHLCV_COLUMNS].astype(float).itertuples(index=False, name=None)
    return [
        Candle(ts, o, h, l, c, v)
        for ts, (o, h, l, c, v) in zip(timestamps, values)
    ]
