"""Sample statistics for throughput series."""

from typing import Sequence

from .errors import DegenerateStatisticsError, EmptyInputError
from .models import SeriesStatistics


def statistics(values: Sequence[int]) -> SeriesStatistics:
    """Calculate mean and unbiased sample variance of a sequence of integers.

    The variance subtracts the squared sum of deviations, which is zero in
    exact arithmetic and absorbs the rounding error of the mean otherwise.
    """
    if not values:
        raise EmptyInputError("can't calculate statistics on empty vector")

    count = len(values)
    if count < 2:
        raise DegenerateStatisticsError(
            f"can't calculate variance of {count} sample(s), need at least 2"
        )

    mean = float(sum(values)) / count

    total_difference = 0.0
    total_variance = 0.0
    for value in values:
        diff = value - mean
        total_difference += diff
        total_variance += diff * diff

    variance = (total_variance - total_difference * total_difference / count) / (count - 1)

    return SeriesStatistics(mean, variance)
