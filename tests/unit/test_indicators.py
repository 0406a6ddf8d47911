import numpy as np
import pandas as pd
import pytest

from indicator_core.errors import EmptyInputError
from indicator_core.indicators import (
    RSI_FILLER,
    compute_atr,
    compute_bollinger,
    compute_ema,
    compute_macd,
    compute_pivot_points,
    compute_rsi,
    compute_true_range,
)


def _random_walk(n, seed=7, start=100.0):
    rng = np.random.default_rng(seed)
    return pd.Series(start + np.cumsum(rng.normal(0, 1.5, n)))


def _reference_rsi(closes, period):
    out = []
    avg_gain = avg_loss = 0.0
    for i in range(1, len(closes)):
        change = closes[i] - closes[i - 1]
        gain, loss = max(change, 0.0), max(-change, 0.0)
        if i <= period:
            avg_gain += gain
            avg_loss += loss
            if i < period:
                out.append(50.0)
                continue
            avg_gain /= period
            avg_loss /= period
        else:
            avg_gain = (avg_gain * (period - 1) + gain) / period
            avg_loss = (avg_loss * (period - 1) + loss) / period
        out.append(100.0 if avg_loss == 0 else 100 - 100 / (1 + avg_gain / avg_loss))
    return out


def test_compute_ema_seeded_with_first_value():
    series = pd.Series([3.5, 7.0, 1.0, 4.0, 9.0])
    for window in (1, 3, 12, 26):
        ema = compute_ema(series, window)
        assert ema.iloc[0] == series.iloc[0]
        assert not ema.isna().any()


def test_compute_ema_recurrence():
    series = _random_walk(40)
    k = 2 / (12 + 1)
    expected = [series.iloc[0]]
    for value in series.iloc[1:]:
        expected.append(value * k + expected[-1] * (1 - k))
    np.testing.assert_allclose(compute_ema(series, 12).to_numpy(), expected, rtol=1e-12)


def test_compute_rsi_length_and_index():
    series = _random_walk(50)
    rsi = compute_rsi(series, 14)
    assert len(rsi) == len(series) - 1
    assert list(rsi.index) == list(series.index[1:])


def test_compute_rsi_matches_wilder_reference():
    series = _random_walk(200, seed=11)
    rsi = compute_rsi(series, 14)
    np.testing.assert_allclose(rsi.to_numpy(), _reference_rsi(series.tolist(), 14), rtol=1e-12)


def test_compute_rsi_filler_before_seed():
    rsi = compute_rsi(_random_walk(30), 14)
    assert (rsi.iloc[:13] == RSI_FILLER).all()


def test_compute_rsi_bounds():
    for seed in range(5):
        rsi = compute_rsi(_random_walk(300, seed=seed), 14)
        assert ((rsi >= 0) & (rsi <= 100)).all()


def test_compute_rsi_only_gains_is_100():
    rsi = compute_rsi(pd.Series(np.arange(100.0, 121.0)), 14)
    assert (rsi.iloc[13:] == 100.0).all()


def test_compute_rsi_only_losses_is_0():
    rsi = compute_rsi(pd.Series(np.arange(120.0, 99.0, -1)), 14)
    assert (rsi.iloc[13:] == 0.0).all()


def test_compute_rsi_constant_series_is_neutral():
    # constant series has RSI=50
    rsi = compute_rsi(pd.Series([1.0] * 20), 14)
    assert (rsi == 50.0).all()


def test_compute_rsi_single_value_is_empty():
    assert compute_rsi(pd.Series([42.0]), 14).empty


def test_compute_rsi_rejects_empty_and_bad_window():
    with pytest.raises(EmptyInputError):
        compute_rsi(pd.Series([], dtype=float))
    with pytest.raises(ValueError):
        compute_rsi(pd.Series([1.0, 2.0]), 0)


def test_compute_bollinger_warmup_hugs_price():
    series = _random_walk(30)
    bb = compute_bollinger(series, 20)
    head = series.iloc[:19].to_numpy()
    np.testing.assert_array_equal(bb["bb_upper"].iloc[:19].to_numpy(), head)
    np.testing.assert_array_equal(bb["bb_lower"].iloc[:19].to_numpy(), head)


def test_compute_bollinger_matches_direct_window():
    series = _random_walk(300, seed=3)
    bb = compute_bollinger(series, 20, 2.0)
    values = series.to_numpy()
    for i in range(19, len(values)):
        window = values[i - 19 : i + 1]
        mean, std = window.mean(), window.std()
        assert bb["bb_upper"].iloc[i] == pytest.approx(mean + 2 * std, rel=1e-9, abs=1e-9)
        assert bb["bb_lower"].iloc[i] == pytest.approx(mean - 2 * std, rel=1e-9, abs=1e-9)


def test_compute_bollinger_upper_never_below_lower():
    bb = compute_bollinger(_random_walk(500, seed=5), 20)
    assert (bb["bb_upper"] >= bb["bb_lower"]).all()


def test_compute_bollinger_constant_window_collapses():
    bb = compute_bollinger(pd.Series([100.0] * 25), 20)
    assert (bb["bb_upper"] == bb["bb_lower"]).all()
    assert (bb["bb_mid"] == 100.0).all()


def test_compute_macd_columns_and_histogram():
    series = _random_walk(60)
    macd = compute_macd(series)
    assert list(macd.columns) == ["macd", "macd_signal", "macd_diff"]
    np.testing.assert_allclose(macd["macd_diff"], macd["macd"] - macd["macd_signal"])
    assert macd["macd"].iloc[0] == 0.0
    assert macd["macd_signal"].iloc[0] == 0.0


def test_compute_true_range_uses_previous_close():
    high = pd.Series([10.0, 12.0, 11.0])
    low = pd.Series([8.0, 11.0, 6.0])
    close = pd.Series([9.0, 11.0, 7.0])
    tr = compute_true_range(high, low, close)
    # bar 1: gap up from 9 -> high 12; bar 2: range 11 - 6
    assert tr.tolist() == [3.0, 5.0]
    assert list(tr.index) == [1, 2]


def test_compute_atr_constant_range():
    n = 40
    close = pd.Series([100.0] * n)
    atr = compute_atr(close + 1, close - 1, close, 14)
    assert len(atr) == n - 1
    assert (atr == 2.0).all()


def test_compute_atr_seed_and_wilder_smoothing():
    close = _random_walk(60, seed=2)
    high = close + 1.5
    low = close - 0.5
    tr = compute_true_range(high, low, close).to_numpy()
    atr = compute_atr(high, low, close, 14).to_numpy()
    assert atr[0] == pytest.approx(tr[0])
    assert atr[5] == pytest.approx(tr[:6].mean())
    assert atr[13] == pytest.approx(tr[:14].mean())
    expected = atr[13]
    for j in range(14, len(tr)):
        expected = (expected * 13 + tr[j]) / 14
        assert atr[j] == pytest.approx(expected)
    assert (atr >= 0).all()


def test_compute_pivot_points_classic():
    p = compute_pivot_points(110.0, 90.0, 100.0)
    assert (p.pivot, p.r1, p.s1, p.r2, p.s2) == (100.0, 110.0, 90.0, 120.0, 80.0)


def test_compute_pivot_points_symmetry():
    p = compute_pivot_points(131.7, 118.2, 121.9)
    assert p.r2 - p.pivot == pytest.approx(p.pivot - p.s2)
    assert p.r1 - p.s1 == pytest.approx(131.7 - 118.2)
    # r1/s1 are symmetric around the pivot when the close sits mid-range
    mid = compute_pivot_points(120.0, 100.0, 110.0)
    assert mid.r1 - mid.pivot == pytest.approx(mid.pivot - mid.s1)
