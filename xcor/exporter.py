"""Export a correlation result as Prometheus metrics."""

from typing import Optional

from prometheus_client import CollectorRegistry, Gauge, write_to_textfile

from .models import CorrelationResult


class PrometheusMetricsExporter:
    """Export a correlation result as Prometheus metrics."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up Prometheus metric definitions."""
        # Correlation curve
        self.correlation = Gauge(
            'xcor_correlation',
            'Normalized cross-correlation of the two throughput series at a lag',
            ['lag_ms'],
            registry=self.registry
        )

        # Per-trace metrics
        self.trace_packets = Gauge(
            'xcor_trace_packets',
            'Number of packet arrivals read from the trace',
            ['trace'],
            registry=self.registry
        )
        self.throughput_bins = Gauge(
            'xcor_throughput_bins',
            'Number of throughput bins covering the trace',
            ['trace'],
            registry=self.registry
        )
        self.throughput_mean = Gauge(
            'xcor_throughput_mean',
            'Mean packets per bin',
            ['trace'],
            registry=self.registry
        )
        self.throughput_variance = Gauge(
            'xcor_throughput_variance',
            'Sample variance of packets per bin',
            ['trace'],
            registry=self.registry
        )

        # Run parameters
        self.bin_duration = Gauge(
            'xcor_bin_duration_ms',
            'Width of each throughput bin in milliseconds',
            [],
            registry=self.registry
        )
        self.max_lag = Gauge(
            'xcor_max_lag_bins',
            'Largest lag evaluated on each side of zero, in bins',
            [],
            registry=self.registry
        )

    def export_result(self, result: CorrelationResult):
        """Export metrics for a correlation result."""
        self.bin_duration.set(result.bin_duration)
        self.max_lag.set(result.max_lag)

        traces = (
            ('1', result.packets1, result.bins1, result.stats1),
            ('2', result.packets2, result.bins2, result.stats2),
        )
        for trace, packets, bins, stats in traces:
            self.trace_packets.labels(trace=trace).set(packets)
            self.throughput_bins.labels(trace=trace).set(bins)
            self.throughput_mean.labels(trace=trace).set(stats.mean)
            self.throughput_variance.labels(trace=trace).set(stats.variance)

        for point in result.curve:
            self.correlation.labels(lag_ms=str(result.lag_ms(point))).set(point.correlation)

    def write_textfile(self, path: str):
        """Write all metrics in the Prometheus text exposition format."""
        write_to_textfile(path, self.registry)
