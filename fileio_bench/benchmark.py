"""Multi-threaded file I/O benchmark: one file and one job per thread per phase"""

import logging
import os
import sys
import time
from concurrent.futures import CancelledError, ThreadPoolExecutor, wait
from datetime import datetime
from typing import List, Optional, TextIO

from .data import data_source_for
from .job import Job, JobResult, JobStatus, format_result
from .metrics import MetricsCollector, PhaseReport, aggregate_phase
from .workloads import OperationKind, PHASE_ORDER, WorkloadConfig

logger = logging.getLogger(__name__)


def build_file_paths(target_dir: str, benchmark_name: str, count: int) -> List[str]:
    """``<target_dir>/<benchmark_name><i>.dat`` for every worker index"""
    prefix = os.path.join(target_dir, benchmark_name)
    return [f"{prefix}{i}.dat" for i in range(count)]


class Benchmark:
    """
    Runs the write/rewrite/read/reread phases against per-thread files.

    Every phase submits one job per worker to a fixed-size thread pool and
    waits for all of them before the next phase starts. Failed workers are
    reported in the thread status line and left out of the statistics.
    """

    def __init__(self, target_dir: str, benchmark_name: str, file_size: int,
                 worker_count: int = WorkloadConfig.DEFAULT_WORKER_COUNT,
                 block_size: int = WorkloadConfig.BLOCK_SIZE,
                 log_stream: Optional[TextIO] = None,
                 out: Optional[TextIO] = None):
        if worker_count < 1:
            raise ValueError(f"worker_count must be >= 1, got {worker_count}")
        if file_size < 0:
            raise ValueError(f"file_size must be >= 0, got {file_size}")
        if block_size <= 0:
            raise ValueError(f"block_size must be positive, got {block_size}")

        self.target_dir = target_dir
        self.benchmark_name = benchmark_name
        self.file_size = file_size
        self.worker_count = worker_count
        self.block_size = block_size
        self.log_stream = log_stream
        self.out = out if out is not None else sys.stdout

        self.file_paths: Optional[List[str]] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._closed = False
        self.collector = MetricsCollector(benchmark_name)

    def __enter__(self):
        self.prepare()
        return self

    def __exit__(self, *exc):
        self.cleanup()

    def _print(self, line: str = ""):
        print(line, file=self.out)

    def _log(self, line: str = ""):
        if self.log_stream is not None:
            self.log_stream.write(line + "\n")

    def prepare(self):
        """Compute file paths and start the worker pool (once)."""
        if self._closed:
            raise RuntimeError("benchmark has already been cleaned up")
        if self.file_paths is None:
            self.file_paths = build_file_paths(
                self.target_dir, self.benchmark_name, self.worker_count
            )
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.worker_count,
                thread_name_prefix=f"{self.benchmark_name}-worker",
            )
            logger.info("Started %d worker thread(s) for %s",
                        self.worker_count, self.benchmark_name)

    def create_job(self, kind: OperationKind, path: str) -> Job:
        return Job(path, kind, self.file_size,
                   data_source_for(kind, self.block_size))

    def run_phase(self, kind: OperationKind) -> PhaseReport:
        """Run one job per worker and block until every one has finished."""
        if self._closed:
            raise RuntimeError("benchmark has already been cleaned up")
        self.prepare()

        jobs = [self.create_job(kind, path) for path in self.file_paths]
        self._print(f"Benchmark {kind.label} started at {_now()}")
        logger.info("Phase %s: submitting %d job(s)", kind.label, len(jobs))

        interrupted = False
        unfinished = set()
        start = time.perf_counter_ns()
        futures = [self._executor.submit(job) for job in jobs]
        try:
            wait(futures)
        except KeyboardInterrupt:
            interrupted = True
            unfinished = {f for f in futures if not f.done()}
            logger.error("Phase %s interrupted while waiting for %d worker(s)",
                         kind.label, len(unfinished))
        elapsed = time.perf_counter_ns() - start

        if unfinished:
            for future in unfinished:
                future.cancel()
            # Jobs already running still hold their files
            wait(unfinished)

        self._print(f"Benchmark {kind.label} completed at {_now()}")
        results = [_collect(job, future, future in unfinished)
                   for job, future in zip(jobs, futures)]

        report = aggregate_phase(kind, results, self.worker_count, elapsed,
                                 interrupted=interrupted)
        self._display(report)
        self.collector.add_report(report)
        return report

    def _display(self, report: PhaseReport):
        if self.log_stream is not None:
            self._log(f"{report.kind.label} Per Thread Result:")
            for result in report.results:
                self._log(f"  Path:        {result.path}")
                for line in format_result(result.kind, result.status,
                                          result.byte_count, result.exec_time_ns):
                    self._log(line)
                if result.error:
                    self._log(f"  Error:       {result.error}")
                self._log()
            self.log_stream.flush()

        for line in report.summary_lines():
            self._print(line)

    def cleanup(self):
        """Shut the pool down; no phase can run afterwards."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._closed = True

    def start(self) -> MetricsCollector:
        """Prepare, run all four phases in order, clean up."""
        self.prepare()
        try:
            for kind in PHASE_ORDER:
                self.run_phase(kind)
        finally:
            self.cleanup()
        return self.collector


def _now() -> str:
    return datetime.now().strftime(WorkloadConfig.TIME_FORMAT)


def _collect(job: Job, future, abandoned: bool = False) -> JobResult:
    """Turn a finished (or abandoned) future into a result."""
    if abandoned or not future.done():
        error = "worker did not finish"
    else:
        try:
            return future.result()
        except CancelledError:
            error = "worker was cancelled"
        except Exception as e:
            logger.exception("Worker for %s raised", job.path)
            error = f"{type(e).__name__}: {e}"
    logger.warning("%s: %s (%s)", job.kind.label, error, job.path)
    return JobResult(kind=job.kind, status=JobStatus.FAILED, byte_count=0,
                     exec_time_ns=0, path=job.path, error=error)
