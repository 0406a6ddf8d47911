import pytest

from indicator_core import Candle

BASE_TS = 1_700_000_000_000
HOUR_MS = 3_600_000


def build_candles(closes, spread=1.0, volume=10.0):
    """Candles with the given closes, open at the previous close, high/low ±spread."""
    candles = []
    prev = closes[0]
    for i, close in enumerate(closes):
        open_ = prev
        high = max(open_, close) + spread
        low = min(open_, close) - spread
        candles.append(Candle(BASE_TS + i * HOUR_MS, float(open_), float(high), float(low), float(close), volume))
        prev = close
    return candles


@pytest.fixture
def make_candles():
    return build_candles
