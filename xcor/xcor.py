#!/usr/bin/env python3
"""
Calculate the cross-correlation between two mahimahi packet traces.

Each trace records packet arrival times in milliseconds, one per line. Both
traces are binned into throughput (packets per BIN_DURATION milliseconds) and
cross-correlated at lags from -1 minute to +1 minute. The result is printed
as "<lag in ms>: <correlation>" lines. Pass the same file twice to get the
autocorrelation.
"""

import argparse
import sys

from .correlate import correlate_traces
from .errors import XcorError
from .exporter import PrometheusMetricsExporter
from .parser import TraceParser, parse_bin_duration
from .utils import format_curve, prepare_headers, send_metrics_remote_write


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog='xcor',
        description='Cross-correlate the throughput of two packet arrival traces'
    )
    parser.add_argument(
        'bin_duration',
        metavar='BIN_DURATION',
        help='Width of each throughput bin in milliseconds'
    )
    parser.add_argument(
        'trace1',
        help='Path to the first trace file'
    )
    parser.add_argument(
        'trace2',
        help='Path to the second trace file (same as trace1 for autocorrelation)'
    )
    parser.add_argument(
        '--metrics-file',
        help='Also write the result as Prometheus text exposition to this file'
    )
    parser.add_argument(
        '--remote-write-url',
        help='Also send the result to this Prometheus remote write endpoint'
    )
    parser.add_argument(
        '--remote-write-header',
        action='append',
        help='Additional header for remote write (format: Key=Value)'
    )
    parser.add_argument(
        '--instance-label',
        default='xcor',
        help='Value for the instance label added to all metrics (default: xcor)'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Build the remote write payload without sending it'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Print progress and every metric sample sent to stderr'
    )
    parser.add_argument(
        '--debug-file',
        help='Save the uncompressed remote write payload as JSON to the specified file'
    )
    return parser


def run(args: argparse.Namespace) -> None:
    bin_duration = parse_bin_duration(args.bin_duration)

    trace1 = TraceParser(args.trace1)
    trace2 = TraceParser(args.trace2)
    # both files must open before either is read
    with trace1.open(), trace2.open():
        events1 = trace1.parse()
        events2 = trace2.parse()

    if args.verbose:
        print(f"Read {trace1.packet_count} arrival(s) from {args.trace1}", file=sys.stderr)
        print(f"Read {trace2.packet_count} arrival(s) from {args.trace2}", file=sys.stderr)

    result = correlate_traces(events1, events2, bin_duration)

    if args.verbose:
        print(f"Bin duration: {bin_duration} ms, max lag: +/-{result.max_lag} bin(s)", file=sys.stderr)
        print(f"  Trace 1: {result.bins1} bin(s), mean={result.stats1.mean:.6f}, variance={result.stats1.variance:.6f}", file=sys.stderr)
        print(f"  Trace 2: {result.bins2} bin(s), mean={result.stats2.mean:.6f}, variance={result.stats2.variance:.6f}", file=sys.stderr)

    for line in format_curve(result):
        print(line)
    sys.stdout.flush()

    if args.metrics_file:
        exporter = PrometheusMetricsExporter()
        exporter.export_result(result)
        exporter.write_textfile(args.metrics_file)
        if args.verbose:
            print(f"Wrote metrics to {args.metrics_file}", file=sys.stderr)

    if args.remote_write_url:
        headers = prepare_headers(args.remote_write_header)
        run_labels = {
            'trace1': args.trace1,
            'trace2': args.trace2,
            'bin_duration_ms': str(bin_duration),
        }
        send_metrics_remote_write(
            args.remote_write_url, headers, result, args.instance_label, args.verbose, args.dry_run, args.debug_file,
            run_labels=run_labels
        )


def main(argv=None):
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        run(args)
    except (XcorError, IndexError, MemoryError, OSError) as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
