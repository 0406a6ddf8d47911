"""
Engine settings.

Indicator periods default to the classic values (RSI 14, Bollinger
20/2σ, MACD 12/26/9, ATR 14).  Every value can be overridden through
``INDICATOR_*`` environment variables so a deployment can retune the
service without code changes.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


# ──────────────────────────────────────────────────────────────────────────────
# Env helpers (strip quotes/whitespace so .env "KEY=value " doesn’t break things)
# ──────────────────────────────────────────────────────────────────────────────

def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip()
    if (v.startswith('"') and v.endswith('"')) or (v.startswith("'") and v.endswith("'")):
        v = v[1:-1].strip()
    return v or default


def _env_int(name: str, default: int) -> int:
    return int(_env(name, str(default)) or default)


def _env_float(name: str, default: float) -> float:
    return float(_env(name, str(default)) or default)


def _env_bool(name: str, default: bool = False) -> bool:
    v = _env(name)
    if v is None:
        return default
    return v.lower() in {"1", "true", "yes", "on"}


MAX_CANDLES = _env_int("INDICATOR_MAX_CANDLES", 5000)


@dataclass(frozen=True)
class IndicatorSettings:
    rsi_period: int = 14
    bb_period: int = 20
    bb_width: float = 2.0
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    atr_period: int = 14
    strict: bool = False

    @classmethod
    def from_env(cls) -> "IndicatorSettings":
        settings = cls(
            rsi_period=_env_int("INDICATOR_RSI_PERIOD", cls.rsi_period),
            bb_period=_env_int("INDICATOR_BB_PERIOD", cls.bb_period),
            bb_width=_env_float("INDICATOR_BB_WIDTH", cls.bb_width),
            macd_fast=_env_int("INDICATOR_MACD_FAST", cls.macd_fast),
            macd_slow=_env_int("INDICATOR_MACD_SLOW", cls.macd_slow),
            macd_signal=_env_int("INDICATOR_MACD_SIGNAL", cls.macd_signal),
            atr_period=_env_int("INDICATOR_ATR_PERIOD", cls.atr_period),
            strict=_env_bool("INDICATOR_STRICT", cls.strict),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Raise ValueError if any period or width is unusable."""
        for name in ("rsi_period", "bb_period", "macd_fast", "macd_slow", "macd_signal", "atr_period"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.macd_fast >= self.macd_slow:
            raise ValueError(
                f"macd_fast ({self.macd_fast}) must be smaller than macd_slow ({self.macd_slow})"
            )
        if self.bb_width < 0:
            raise ValueError(f"bb_width must be >= 0, got {self.bb_width}")
