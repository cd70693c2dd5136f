"""One I/O job per worker per phase, and its result"""

import logging
import os
import time
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Iterable, List, Optional

from .data import DataSource
from .workloads import OperationKind, WorkloadConfig

logger = logging.getLogger(__name__)


class JobStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    OK = "ok"
    FAILED = "failed"


def _no_truncate_opener(path, flags):
    # Rewrite overwrites in place; the file keeps its allocated blocks
    return os.open(path, flags & ~os.O_TRUNC, 0o666)


@dataclass(frozen=True)
class JobResult:
    """Outcome of a single job"""
    kind: OperationKind
    status: JobStatus
    byte_count: int
    exec_time_ns: int
    path: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is JobStatus.OK

    @property
    def exec_time_sec(self) -> float:
        return self.exec_time_ns / 1e9

    @property
    def throughput_mbps(self) -> float:
        return throughput_mbps(self.byte_count, self.exec_time_ns)

    def merge(self, other: "JobResult") -> "JobResult":
        """Sum bytes and per-worker times of two Ok results of the same kind."""
        if other.kind is not self.kind:
            raise ValueError(f"cannot merge {other.kind} into {self.kind}")
        if not (self.ok and other.ok):
            raise ValueError("only Ok results can be merged")
        return JobResult(
            kind=self.kind,
            status=JobStatus.OK,
            byte_count=self.byte_count + other.byte_count,
            exec_time_ns=self.exec_time_ns + other.exec_time_ns,
        )

    @staticmethod
    def merge_all(results: Iterable["JobResult"]) -> Optional["JobResult"]:
        merged = None
        for result in results:
            merged = result if merged is None else merged.merge(result)
        return merged

    def to_dict(self):
        data = asdict(self)
        data["kind"] = self.kind.value
        data["status"] = self.status.value
        return data


def throughput_mbps(byte_count: float, elapsed_ns: float) -> float:
    """MB/s, 0.0 when nothing was timed"""
    if elapsed_ns <= 0:
        return 0.0
    return (byte_count / WorkloadConfig.MB) / (elapsed_ns / 1e9)


def format_result(kind: OperationKind, status: JobStatus, byte_count: float,
                  exec_time_ns: float, average: bool = False,
                  count: int = 1) -> List[str]:
    """Human-readable lines for a (possibly averaged) result"""
    if average and count > 0:
        byte_count = byte_count / count
        exec_time_ns = exec_time_ns / count
    lines = [
        f"  Operation:   {kind.label}",
        f"  Status:      {status.name}",
        f"  Bytes:       {byte_count:.0f}",
        f"  Time:        {exec_time_ns / 1e6:.2f} ms",
        f"  Throughput:  {throughput_mbps(byte_count, exec_time_ns):.2f} MB/s",
    ]
    if average:
        lines.insert(0, f"  Threads:     {count}")
    return lines


class Job:
    """
    Moves ``total_bytes`` between ``path`` and a data source, one block at
    a time. Jobs never raise I/O errors; they end in a Failed result instead.
    """

    def __init__(self, path: str, kind: OperationKind, total_bytes: int,
                 data_source: DataSource):
        if total_bytes < 0:
            raise ValueError(f"total_bytes must be >= 0, got {total_bytes}")
        self.path = path
        self.kind = kind
        self.total_bytes = total_bytes
        self.data_source = data_source
        self.block_size = data_source.block_size
        self.status = JobStatus.PENDING
        self._moved = 0

    def __call__(self) -> JobResult:
        return self.run()

    def __repr__(self):
        return f"Job({self.kind.label}, {self.path!r}, {self.status.name})"

    def _open(self):
        if self.kind is OperationKind.FIRST_WRITE:
            return open(self.path, "wb", buffering=0)
        if self.kind is OperationKind.REWRITE:
            return open(self.path, "wb", buffering=0, opener=_no_truncate_opener)
        return open(self.path, "rb", buffering=0)

    def _transfer(self, f):
        """Block loop; stops at the target or at the first short transfer."""
        done = 0
        while done < self.total_bytes:
            size = min(self.block_size, self.total_bytes - done)
            block = self.data_source.next_block(size)
            if self.kind.is_write:
                moved = f.write(block)
            else:
                moved = f.readinto(block)
            moved = moved or 0
            done += moved
            self._moved = done
            if moved < size:
                break

    def run(self) -> JobResult:
        if self.status is not JobStatus.PENDING:
            raise RuntimeError(f"{self!r} has already been run")
        self.status = JobStatus.RUNNING
        self._moved = 0
        elapsed = 0
        error = None

        try:
            f = self._open()
        except OSError as e:
            logger.warning("%s: cannot open %s: %s", self.kind.label, self.path, e)
            self.status = JobStatus.FAILED
            return self._result(0, error=str(e))

        try:
            start = time.perf_counter_ns()
            try:
                self._transfer(f)
            finally:
                elapsed = time.perf_counter_ns() - start
            if self.kind is OperationKind.REWRITE:
                f.truncate(self._moved)
        except OSError as e:
            logger.warning("%s: I/O error on %s after %d bytes: %s",
                           self.kind.label, self.path, self._moved, e)
            error = str(e)
        finally:
            try:
                f.close()
            except OSError as e:
                logger.warning("%s: close failed for %s: %s",
                               self.kind.label, self.path, e)

        self.status = JobStatus.FAILED if error is not None else JobStatus.OK
        return self._result(elapsed, error=error)

    def _result(self, elapsed_ns: int, error: Optional[str] = None) -> JobResult:
        return JobResult(
            kind=self.kind,
            status=self.status,
            byte_count=self._moved,
            exec_time_ns=elapsed_ns,
            path=self.path,
            error=error,
        )
