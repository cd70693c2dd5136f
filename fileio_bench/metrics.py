"""Phase aggregation and result collection"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import numpy as np

from .job import JobResult, JobStatus, format_result, throughput_mbps
from .workloads import OperationKind, PHASE_ORDER


@dataclass
class PhaseReport:
    """Everything known about one finished phase"""
    kind: OperationKind
    worker_count: int
    elapsed_ns: int
    results: List[JobResult] = field(default_factory=list)
    aggregate: Optional[JobResult] = None
    ok_count: int = 0
    interrupted: bool = False

    @property
    def total_bytes(self) -> int:
        return self.aggregate.byte_count if self.aggregate else 0

    @property
    def average_throughput_mbps(self) -> float:
        """Summed bytes over summed per-worker time: typical single-stream rate."""
        if self.aggregate is None:
            return 0.0
        return throughput_mbps(self.aggregate.byte_count, self.aggregate.exec_time_ns)

    @property
    def aggregate_throughput_mbps(self) -> float:
        """Summed bytes over phase wall-clock time: combined rate."""
        if self.aggregate is None:
            return 0.0
        return throughput_mbps(self.aggregate.byte_count, self.elapsed_ns)

    def worker_throughputs(self) -> np.ndarray:
        return np.array([r.throughput_mbps for r in self.results if r.ok])

    def worker_spread(self):
        """min / max / mean per-worker throughput of the Ok workers"""
        values = self.worker_throughputs()
        if values.size == 0:
            return {'min_mbps': 0.0, 'max_mbps': 0.0, 'mean_mbps': 0.0}
        return {
            'min_mbps': float(np.min(values)),
            'max_mbps': float(np.max(values)),
            'mean_mbps': float(np.mean(values)),
        }

    def status_line(self) -> str:
        return (f"Thread status: {self.ok_count} out of {self.worker_count} "
                f"completed normally.")

    def summary_lines(self) -> List[str]:
        lines = [self.status_line()]
        if self.aggregate is None:
            return lines
        agg = self.aggregate
        lines.append("Average Result:")
        lines.extend(format_result(agg.kind, JobStatus.OK, agg.byte_count,
                                   agg.exec_time_ns, average=True,
                                   count=self.ok_count))
        lines.append("")
        lines.append("Aggregate Result:")
        lines.extend(format_result(agg.kind, JobStatus.OK, agg.byte_count,
                                   self.elapsed_ns))
        lines.append("")
        return lines

    def to_dict(self):
        return {
            'kind': self.kind.value,
            'worker_count': self.worker_count,
            'ok_count': self.ok_count,
            'elapsed_ns': self.elapsed_ns,
            'total_bytes': self.total_bytes,
            'average_throughput_mbps': self.average_throughput_mbps,
            'aggregate_throughput_mbps': self.aggregate_throughput_mbps,
            'interrupted': self.interrupted,
            'worker_spread': self.worker_spread(),
            'results': [r.to_dict() for r in self.results],
        }


def aggregate_phase(kind: OperationKind, results: List[JobResult],
                    worker_count: int, elapsed_ns: int,
                    interrupted: bool = False) -> PhaseReport:
    """Merge the Ok results of one phase; failed workers only lower the count."""
    ok_results = [r for r in results if r.ok]
    return PhaseReport(
        kind=kind,
        worker_count=worker_count,
        elapsed_ns=elapsed_ns,
        results=list(results),
        aggregate=JobResult.merge_all(ok_results),
        ok_count=len(ok_results),
        interrupted=interrupted,
    )


class MetricsCollector:
    """Collects the phase reports of a run"""

    def __init__(self, benchmark_name: str = "benchmark"):
        self.benchmark_name = benchmark_name
        self.reports: List[PhaseReport] = []
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    def add_report(self, report: PhaseReport):
        self.reports.append(report)

    def get_report(self, kind: OperationKind) -> Optional[PhaseReport]:
        for report in self.reports:
            if report.kind is kind:
                return report
        return None

    def save_raw_data(self, output_dir: Path) -> Path:
        """Save raw data as JSON"""
        output_dir.mkdir(parents=True, exist_ok=True)

        data = {
            'benchmark': self.benchmark_name,
            'timestamp': self.timestamp,
            'phases': [r.to_dict() for r in self.reports]
        }

        output_file = output_dir / f"benchmark_raw_{self.timestamp}.json"
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        return output_file

    def generate_report(self, output_dir: Path) -> Path:
        """Text report, one section per phase in run order"""
        output_dir.mkdir(parents=True, exist_ok=True)

        lines = ["=" * 80,
                 f"FILE I/O BENCHMARK REPORT: {self.benchmark_name}",
                 "=" * 80,
                 f"Timestamp: {self.timestamp}"]

        order = {kind: i for i, kind in enumerate(PHASE_ORDER)}
        for report in sorted(self.reports, key=lambda r: order[r.kind]):
            lines.append("")
            lines.append(f"PHASE: {report.kind.label}")
            lines.append("-" * 80)
            lines.extend(report.summary_lines())
            if report.ok_count:
                spread = report.worker_spread()
                lines.append(f"  Per-thread throughput: min {spread['min_mbps']:.2f}, "
                             f"max {spread['max_mbps']:.2f}, "
                             f"mean {spread['mean_mbps']:.2f} MB/s")
            if report.interrupted:
                lines.append("  (interrupted while waiting for workers)")

        lines.append("=" * 80)
        report_file = output_dir / f"benchmark_report_{self.timestamp}.txt"
        with open(report_file, 'w', encoding='utf-8') as f:
            f.write("\n".join(lines) + "\n")
        return report_file
