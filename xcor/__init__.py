"""Cross-correlation of packet arrival traces."""

from .binning import aggregate
from .correlate import correlate_traces, crosscorrelate, max_lag_for
from .errors import (
    DegenerateStatisticsError,
    EmptyInputError,
    FileOpenError,
    InvalidIntegerError,
    XcorError,
)
from .models import CorrelationPoint, CorrelationResult, SeriesStatistics
from .parser import TraceParser
from .statistics import statistics
from .exporter import PrometheusMetricsExporter

__all__ = [
    'aggregate',
    'correlate_traces',
    'crosscorrelate',
    'max_lag_for',
    'statistics',
    'CorrelationPoint',
    'CorrelationResult',
    'SeriesStatistics',
    'TraceParser',
    'PrometheusMetricsExporter',
    'XcorError',
    'InvalidIntegerError',
    'FileOpenError',
    'EmptyInputError',
    'DegenerateStatisticsError',
]
