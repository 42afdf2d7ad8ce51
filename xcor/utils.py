"""Utility functions for correlation arithmetic and output formatting."""

import math
import sys
from typing import Dict, List, Optional

from .models import CorrelationResult


# NaN produced by an invalid operation on x86-64 (sign bit set)
DEFAULT_NAN = math.copysign(math.nan, -1.0)


def ieee_divide(numerator: float, denominator: float) -> float:
    """Divide with IEEE-754 results instead of raising ZeroDivisionError.

    A nan operand is passed through unchanged (numerator first), 0/0 gives
    DEFAULT_NAN and x/0 gives an infinity signed by both operands.
    """
    if math.isnan(numerator):
        return numerator
    if math.isnan(denominator):
        return denominator
    if denominator != 0.0:
        return numerator / denominator
    if numerator == 0.0:
        return DEFAULT_NAN
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def ieee_sqrt(value: float) -> float:
    """Square root that yields DEFAULT_NAN for negative input rather than raising."""
    if value < 0.0:
        return DEFAULT_NAN
    return math.sqrt(value)


def format_correlation(value: float) -> str:
    """Format a correlation like a default C++ output stream (6 significant digits).

    nan keeps its sign, so the default nan prints as "-nan" like glibc.
    """
    if math.isnan(value):
        return '-nan' if math.copysign(1.0, value) < 0 else 'nan'
    return f"{value:g}"


def format_curve(result: CorrelationResult) -> List[str]:
    """Render the correlation curve as "<lag in ms>: <correlation>" lines."""
    return [
        f"{result.lag_ms(point)}: {format_correlation(point.correlation)}"
        for point in result.curve
    ]


def prepare_headers(remote_write_headers: Optional[List[str]]) -> Dict[str, str]:
    """Prepare headers dictionary from command-line arguments."""
    headers = {}
    if remote_write_headers:
        for header in remote_write_headers:
            if '=' in header:
                key, value = header.split('=', 1)
                headers[key] = value
            else:
                print(f"Warning: Ignoring malformed header '{header}' (expected Key=Value)", file=sys.stderr)
    return headers


def send_metrics_remote_write(remote_write_url: str, headers: Dict[str, str],
                              result: CorrelationResult, instance_label: str,
                              verbose: bool = False, dry_run: bool = False, debug_file: Optional[str] = None,
                              run_labels: Optional[Dict[str, str]] = None) -> None:
    """Send the correlation curve via remote write endpoint.

    Args:
        remote_write_url: URL of the Prometheus remote write endpoint
        headers: HTTP headers to include in the request
        result: Correlation result to send
        instance_label: Value for the instance label added to all metrics
        verbose: Print each metric sample to stderr
        dry_run: If True, build the payload but skip sending to endpoint
        debug_file: Optional path to save uncompressed payload data before compression
        run_labels: Optional labels describing the run, sent as the xcor_info metric
    """
    # Import here to avoid circular dependency
    from .remote_write import RemoteWriteClient

    if dry_run:
        print(f"Dry-run mode: Processing metrics (not sending to {remote_write_url})...", file=sys.stderr)
    else:
        print(f"Sending metrics to {remote_write_url}...", file=sys.stderr)

    client = RemoteWriteClient(remote_write_url, headers, instance_label, verbose)

    if client.send_correlation(result, dry_run=dry_run, debug_file=debug_file, run_labels=run_labels):
        if dry_run:
            print(f"Dry-run completed: Processed {len(result.curve)} lag(s)", file=sys.stderr)
        else:
            print(f"Successfully sent {len(result.curve)} lag(s)", file=sys.stderr)
    else:
        print("Failed to process/send metrics", file=sys.stderr)
        sys.exit(1)
