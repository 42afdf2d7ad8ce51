"""Data models for binned traces and their cross-correlation."""

from dataclasses import dataclass, field
from typing import List, NamedTuple


class SeriesStatistics(NamedTuple):
    """Sample mean and unbiased sample variance of a throughput series."""
    mean: float
    variance: float


class CorrelationPoint(NamedTuple):
    """Correlation at a single lag. The lag is counted in bins."""
    lag: int
    correlation: float


@dataclass
class CorrelationResult:
    """Outcome of correlating two packet traces."""
    bin_duration: int  # milliseconds per bin
    max_lag: int  # bins on each side of lag 0
    packets1: int
    packets2: int
    bins1: int
    bins2: int
    stats1: SeriesStatistics
    stats2: SeriesStatistics
    curve: List[CorrelationPoint] = field(default_factory=list)

    def lag_ms(self, point: CorrelationPoint) -> int:
        """Convert the lag of a curve point from bins to milliseconds."""
        return point.lag * self.bin_duration
