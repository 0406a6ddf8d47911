"""
FastAPI application exposing the indicator engine.  Callers post the
candles they already hold and get the indicator bundle (or a short
technical summary) back.  The API is stateless and can be deployed
independently of other services.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from indicator_core import (
    Candle,
    IndicatorBundle,
    IndicatorInputError,
    IndicatorSettings,
    candles_from_klines,
    compute_indicators,
    describe_bundle,
    technical_summary,
)
from indicator_core.config import MAX_CANDLES
from indicator_core.log import get_logger

logger = get_logger("indicator_api")
settings = IndicatorSettings.from_env()
app = FastAPI(title="Indicator Engine API")


# ----------------------------------------------------------------------
# Models
# ----------------------------------------------------------------------
class CandleModel(BaseModel):
    timestamp: int = Field(..., description="Open time, epoch milliseconds")
    open: float
    high: float
    low: float
    close: float
    volume: float

    def to_candle(self) -> Candle:
        return Candle(self.timestamp, self.open, self.high, self.low, self.close, self.volume)


class IndicatorRequest(BaseModel):
    symbol: Optional[str] = Field(None, description="Trading pair symbol, e.g. BTCUSDT")
    candles: List[CandleModel] = Field(..., description="Candles in ascending time order")
    strict: Optional[bool] = Field(
        None, description="Require enough candles to seed every indicator"
    )


class KlinesRequest(BaseModel):
    """
    Raw exchange klines, ``[open_time, open, high, low, close, volume, ...]``
    per row, with prices as strings or numbers.
    """
    symbol: Optional[str] = Field(None, description="Trading pair symbol, e.g. BTCUSDT")
    klines: List[List[Any]]
    strict: Optional[bool] = None


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------
def _check_size(count: int) -> None:
    if count > MAX_CANDLES:
        raise HTTPException(
            status_code=413,
            detail=f"Too many candles: {count} > {MAX_CANDLES}",
        )


def _compute(candles: Sequence[Candle], strict: Optional[bool]) -> IndicatorBundle:
    try:
        return compute_indicators(candles, settings, strict=strict)
    except IndicatorInputError as e:
        raise HTTPException(status_code=422, detail=e.to_detail())
    except Exception:
        logger.exception("Unhandled error while computing indicators")
        raise HTTPException(status_code=500, detail="Internal server error")


def _bundle_response(symbol: Optional[str], candles: Sequence[Candle], bundle: IndicatorBundle) -> Dict[str, Any]:
    return {"symbol": symbol, "count": len(candles), **bundle.to_dict()}


# ----------------------------------------------------------------------
# Endpoints
# ----------------------------------------------------------------------
@app.post("/indicators/compute")
def post_compute(req: IndicatorRequest):
    """Return RSI, Bollinger Bands, MACD, ATR and pivot points for the candles."""
    _check_size(len(req.candles))
    candles = [c.to_candle() for c in req.candles]
    bundle = _compute(candles, req.strict)
    logger.info("computed indicators for %s (%d candles)", req.symbol or "-", len(candles))
    return _bundle_response(req.symbol, candles, bundle)


@app.post("/indicators/klines")
def post_klines(req: KlinesRequest):
    _check_size(len(req.klines))
    try:
        candles = candles_from_klines(req.klines)
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"Malformed kline row: {e}")
    bundle = _compute(candles, req.strict)
    return _bundle_response(req.symbol, candles, bundle)


@app.post("/indicators/summary")
def post_summary(req: IndicatorRequest):
    """
    Return the technical context line handed to the advisory service,
    the per-indicator breakdown and the latest value of every series.
    """
    _check_size(len(req.candles))
    candles = [c.to_candle() for c in req.candles]
    bundle = _compute(candles, req.strict)
    return {
        "symbol": req.symbol,
        "summary": technical_summary(candles, bundle, settings.rsi_period),
        "details": describe_bundle(candles, bundle, settings),
        "latest": bundle.latest(),
        "pivotPoints": bundle.pivot_points.to_dict(),
    }
