"""Cross-correlation of binned packet traces."""

from typing import List, Sequence

from .binning import aggregate
from .models import CorrelationPoint, CorrelationResult, SeriesStatistics
from .statistics import statistics
from .utils import ieee_divide, ieee_sqrt

# Width of the lag window on each side of zero
MAX_LAG_WINDOW_MS = 60000


def max_lag_for(bin_duration: int) -> int:
    """Number of bins spanning one minute of lag (rounded down)."""
    return MAX_LAG_WINDOW_MS // bin_duration


def crosscorrelate(series1: Sequence[int], series2: Sequence[int], max_lag: int) -> List[CorrelationPoint]:
    """Cross-correlate two throughput series at every lag in [-max_lag, max_lag].

    At lag k, series1[i] is paired with series2[i + k] wherever both exist.
    Lags without any overlap and series with zero variance produce nan or
    inf instead of an error.

    Returns:
        One point per lag in ascending order, lag 0 at index max_lag
    """
    return _correlate_with(series1, series2, max_lag, statistics(series1), statistics(series2))


def _correlate_with(series1: Sequence[int], series2: Sequence[int], max_lag: int,
                    stats1: SeriesStatistics, stats2: SeriesStatistics) -> List[CorrelationPoint]:
    mean1, variance1 = stats1
    mean2, variance2 = stats2

    normalization = ieee_sqrt(variance1) * ieee_sqrt(variance2)
    len1 = len(series1)
    len2 = len(series2)

    curve = []
    for lag in range(-max_lag, max_lag + 1):
        total = 0.0
        count = 0
        # only indices where series2[index1 + lag] exists
        for index1 in range(max(0, -lag), min(len1, len2 - lag)):
            total += (series1[index1] - mean1) * (series2[index1 + lag] - mean2)
            count += 1

        covariance = ieee_divide(total, count)
        curve.append(CorrelationPoint(lag, ieee_divide(covariance, normalization)))

    return curve


def correlate_traces(events1: Sequence[int], events2: Sequence[int], bin_duration: int) -> CorrelationResult:
    """Bin two traces of arrival times and cross-correlate their throughput."""
    counts1 = aggregate(events1, bin_duration)
    counts2 = aggregate(events2, bin_duration)
    max_lag = max_lag_for(bin_duration)
    stats1 = statistics(counts1)
    stats2 = statistics(counts2)

    return CorrelationResult(
        bin_duration=bin_duration,
        max_lag=max_lag,
        packets1=len(events1),
        packets2=len(events2),
        bins1=len(counts1),
        bins2=len(counts2),
        stats1=stats1,
        stats2=stats2,
        curve=_correlate_with(counts1, counts2, max_lag, stats1, stats2),
    )
