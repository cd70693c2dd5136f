"""
File I/O Benchmark Tool
Write / rewrite / read / reread throughput with concurrent threads
"""
import os
import sys
import logging
import argparse
from pathlib import Path

from .benchmark import Benchmark
from .visualize import generate_all_plots
from .workloads import WorkloadConfig

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return number


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return number


def existing_dir(value: str) -> str:
    if not Path(value).is_dir():
        raise argparse.ArgumentTypeError(f"not a directory: {value}")
    return value


def default_threads() -> int:
    env = os.getenv("FILEIO_BENCH_THREADS")
    if env:
        try:
            return positive_int(env)
        except (ValueError, argparse.ArgumentTypeError):
            logger.warning("Ignoring invalid FILEIO_BENCH_THREADS=%r", env)
    return WorkloadConfig.DEFAULT_WORKER_COUNT


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='File I/O Benchmark Tool',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Two threads, 4 MB per file
  fileio-bench -d /tmp/bench -b run -s 4 -t 2

  # With a per-thread log and saved results
  fileio-bench -d /tmp/bench -b run -s 64 -t 8 -l run.log \\
      --output-dir benchmark_results
        """
    )

    parser.add_argument('-d', '--target-dir', required=True, type=existing_dir,
                        help='benchmark target directory')
    parser.add_argument('-s', '--size', required=True, type=non_negative_int,
                        help='file size (MB) used during benchmarking')
    parser.add_argument('-b', '--benchmark-name', required=True,
                        help='benchmark name, used as the file name prefix')
    parser.add_argument('-t', '--threads', type=positive_int,
                        default=default_threads(),
                        help='number of concurrent I/O threads (default: 1)')
    parser.add_argument('-l', '--log-file', default=None,
                        help='per-thread result log file')
    parser.add_argument('--block-size', type=positive_int,
                        default=WorkloadConfig.BLOCK_SIZE // 1024,
                        help='block size (KB) per I/O call (default: 1024)')
    parser.add_argument('--output-dir', default=None,
                        help='save raw JSON, a text report and charts here')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log progress')

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    log_stream = None
    if args.log_file:
        try:
            log_stream = open(args.log_file, 'w', encoding='utf-8')
        except OSError as e:
            print(f"Cannot open log file {args.log_file}: {e}", file=sys.stderr)
            return 1

    print("=" * 80)
    print("FILE I/O BENCHMARK")
    print("=" * 80)
    print(f"Directory:    {args.target_dir}")
    print(f"Name:         {args.benchmark_name}")
    print(f"File size:    {args.size} MB")
    print(f"Threads:      {args.threads}")
    print(f"Block size:   {args.block_size} KB")
    print("=" * 80)
    print()

    try:
        benchmark = Benchmark(
            target_dir=args.target_dir,
            benchmark_name=args.benchmark_name,
            file_size=args.size * WorkloadConfig.MB,
            worker_count=args.threads,
            block_size=args.block_size * 1024,
            log_stream=log_stream,
        )
        collector = benchmark.start()
    finally:
        if log_stream is not None:
            log_stream.close()

    if args.output_dir:
        output_dir = Path(args.output_dir)
        raw_file = collector.save_raw_data(output_dir)
        report_file = collector.generate_report(output_dir)
        plots = generate_all_plots(collector.reports, output_dir)
        print(f"\nResults saved to: {output_dir.absolute()}")
        for path in [raw_file, report_file] + plots:
            print(f"  • {path.name}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
