"""Precondition errors raised by the indicator engine."""
from __future__ import annotations

from typing import Optional


class IndicatorInputError(ValueError):
    """Base class for input the engine refuses to compute on."""

    indicator: Optional[str] = None
    minimum: Optional[int] = None

    def to_detail(self) -> dict:
        return {
            "error": type(self).__name__,
            "message": str(self),
            "indicator": self.indicator,
            "minimum": self.minimum,
        }


class EmptyInputError(IndicatorInputError):
    def __init__(self, indicator: str = "engine"):
        self.indicator = indicator
        self.minimum = 1
        super().__init__(f"{indicator}: input is empty, at least 1 value is required")


class InsufficientDataError(IndicatorInputError):
    def __init__(self, indicator: str, minimum: int, actual: int):
        self.indicator = indicator
        self.minimum = minimum
        self.actual = actual
        super().__init__(f"{indicator}: needs at least {minimum} candles, got {actual}")


class NonFiniteInputError(IndicatorInputError):
    def __init__(self, field: str, index: int, value: float):
        self.indicator = "engine"
        self.field = field
        self.index = index
        self.value = value
        super().__init__(f"non-finite {field} at index {index}: {value!r}")
