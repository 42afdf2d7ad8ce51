import math
import random

import pytest

from xcor.correlate import MAX_LAG_WINDOW_MS, correlate_traces, crosscorrelate, max_lag_for
from xcor.errors import DegenerateStatisticsError, EmptyInputError
from xcor.statistics import statistics


def _by_lag(curve):
    return {point.lag: point.correlation for point in curve}


def test_max_lag_is_one_minute_of_bins():
    assert MAX_LAG_WINDOW_MS == 60000
    assert max_lag_for(100) == 600
    assert max_lag_for(1) == 60000
    assert max_lag_for(7) == 8571
    assert max_lag_for(60001) == 0


def test_curve_is_ordered_and_centered():
    curve = crosscorrelate([1, 2, 1], [1, 2, 0, 1], 5)
    assert [point.lag for point in curve] == list(range(-5, 6))
    assert curve[5].lag == 0


def test_known_correlation_values():
    curve = _by_lag(crosscorrelate([1, 2, 1], [1, 2, 0, 1], 5))
    assert curve[0] == pytest.approx(1 / math.sqrt(2))
    assert curve[1] == pytest.approx(-1 / math.sqrt(2))
    assert curve[-1] == pytest.approx(-1 / (2 * math.sqrt(2)))
    assert curve[2] == pytest.approx(1 / (2 * math.sqrt(2)))
    assert curve[3] == pytest.approx(0.0)
    assert curve[-2] == pytest.approx(0.0)


def test_lags_without_overlap_are_nan():
    curve = _by_lag(crosscorrelate([1, 2, 1], [1, 2, 0, 1], 5))
    for lag in (-5, -4, -3, 4, 5):
        assert math.isnan(curve[lag])


def test_window_edge_with_overlap():
    curve = _by_lag(crosscorrelate([1, 2, 1], [1, 2, 0, 1], 3))
    assert not math.isnan(curve[3])
    assert math.isnan(curve[-3])


def test_zero_max_lag():
    curve = crosscorrelate([1, 2, 1], [1, 2, 0, 1], 0)
    assert len(curve) == 1
    assert curve[0].lag == 0


def test_autocorrelation_at_zero_lag():
    # Covariance averages over the n overlapping bins while the variance
    # divides by n - 1, so lag 0 gives (n - 1) / n.
    rng = random.Random(11)
    for length in (2, 5, 50, 300):
        series = [rng.randrange(0, 20) for _ in range(length)]
        if len(set(series)) == 1:
            series[0] += 1
        curve = crosscorrelate(series, series, 10)
        assert curve[10].lag == 0
        assert curve[10].correlation == pytest.approx((length - 1) / length, abs=1e-9)


def test_autocorrelation_is_symmetric():
    series = [3, 0, 4, 1, 5, 9, 2, 6]
    curve = _by_lag(crosscorrelate(series, series, 4))
    for lag in range(1, 5):
        assert curve[lag] == pytest.approx(curve[-lag])


def test_swapping_series_mirrors_lags():
    rng = random.Random(3)
    a = [rng.randrange(0, 10) for _ in range(40)]
    b = [rng.randrange(0, 10) for _ in range(25)]
    forward = _by_lag(crosscorrelate(a, b, 60))
    backward = _by_lag(crosscorrelate(b, a, 60))
    for lag in range(-60, 61):
        assert forward[lag] == pytest.approx(backward[-lag], nan_ok=True)


def test_shifted_copy_peaks_at_shift():
    base = [0, 5, 1, 0, 7, 2, 0, 0, 3, 9, 1, 0, 4, 0, 6, 2]
    delayed = [0, 0, 0] + base
    curve = _by_lag(crosscorrelate(base, delayed, 6))
    best = max((lag for lag in curve if not math.isnan(curve[lag])), key=lambda lag: curve[lag])
    assert best == 3


def test_constant_series_gives_nan():
    curve = crosscorrelate([2, 2, 2, 2], [1, 3, 0, 2], 2)
    assert all(math.isnan(point.correlation) for point in curve)


def test_single_bin_series_is_degenerate():
    with pytest.raises(DegenerateStatisticsError):
        crosscorrelate([4], [1, 2, 3], 1)


def test_empty_series():
    with pytest.raises(EmptyInputError):
        crosscorrelate([], [1, 2, 3], 1)


def test_correlate_traces_end_to_end(sample_result):
    assert sample_result.bin_duration == 100
    assert sample_result.max_lag == 600
    assert (sample_result.packets1, sample_result.packets2) == (4, 4)
    assert (sample_result.bins1, sample_result.bins2) == (3, 4)
    assert sample_result.stats1.mean == pytest.approx(4 / 3)
    assert sample_result.stats2 == pytest.approx((1.0, 2 / 3))
    assert len(sample_result.curve) == 1201

    zero = sample_result.curve[600]
    assert zero.lag == 0
    assert zero.correlation == pytest.approx(1 / math.sqrt(2))
    assert sample_result.lag_ms(sample_result.curve[0]) == -60000


def test_correlate_traces_empty_trace():
    with pytest.raises(EmptyInputError):
        correlate_traces([0, 10], [], 10)


def _scan_every_index(series1, series2, max_lag):
    # Visits every index of series1 and skips pairs outside series2
    mean1, variance1 = statistics(series1)
    mean2, variance2 = statistics(series2)
    normalization = math.sqrt(variance1) * math.sqrt(variance2)
    values = {}
    for lag in range(-max_lag, max_lag + 1):
        total = 0.0
        count = 0
        for index1 in range(len(series1)):
            index2 = index1 + lag
            if 0 <= index2 < len(series2):
                total += (series1[index1] - mean1) * (series2[index2] - mean2)
                count += 1
        if count:
            values[lag] = (total / count) / normalization
    return values


def test_overlap_loop_matches_full_scan_exactly():
    rng = random.Random(5)
    a = [rng.randrange(0, 30) for _ in range(57)]
    b = [rng.randrange(0, 30) for _ in range(23)]
    for first, second in ((a, b), (b, a)):
        curve = _by_lag(crosscorrelate(first, second, 70))
        expected = _scan_every_index(first, second, 70)
        for lag, correlation in curve.items():
            if lag in expected:
                assert correlation == expected[lag]
            else:
                assert math.isnan(correlation)
