import json

import pytest

from fileio_bench.job import JobResult, JobStatus
from fileio_bench.metrics import MetricsCollector, aggregate_phase
from fileio_bench.workloads import OperationKind, WorkloadConfig

MB = WorkloadConfig.MB
FR = OperationKind.FIRST_READ


def result(nbytes, seconds, status=JobStatus.OK, kind=FR):
    return JobResult(kind, status, nbytes, int(seconds * 1e9), path="p")


def test_aggregate_skips_failures():
    results = [result(MB, 1), result(5, 1, JobStatus.FAILED), result(MB, 3)]
    report = aggregate_phase(FR, results, 3, int(4e9))
    assert report.ok_count == 2
    assert report.total_bytes == 2 * MB
    assert report.aggregate.exec_time_ns == int(4e9)
    assert len(report.results) == 3
    assert report.status_line() == "Thread status: 2 out of 3 completed normally."


def test_average_uses_summed_time():
    # 1 MB in 1 s and 1 MB in 3 s: summed ratio is 0.5, mean of rates is 0.667
    report = aggregate_phase(FR, [result(MB, 1), result(MB, 3)], 2, int(3e9))
    assert report.average_throughput_mbps == pytest.approx(0.5)
    assert report.worker_spread()['mean_mbps'] == pytest.approx(2 / 3)
    assert report.worker_spread()['min_mbps'] == pytest.approx(1 / 3)
    assert report.worker_spread()['max_mbps'] == pytest.approx(1.0)


def test_aggregate_uses_wall_clock():
    report = aggregate_phase(FR, [result(MB, 2), result(MB, 2)], 2, int(2e9))
    assert report.aggregate_throughput_mbps == pytest.approx(1.0)
    assert report.average_throughput_mbps == pytest.approx(0.5)


def test_no_successes_reports_only_status():
    report = aggregate_phase(FR, [result(0, 0, JobStatus.FAILED)], 1, 10)
    assert report.aggregate is None
    assert report.average_throughput_mbps == 0.0
    assert report.aggregate_throughput_mbps == 0.0
    assert report.summary_lines() == [
        "Thread status: 0 out of 1 completed normally."
    ]
    assert report.worker_spread()['max_mbps'] == 0.0


def test_summary_sections():
    report = aggregate_phase(FR, [result(MB, 1), result(MB, 1)], 2, int(1e9))
    lines = report.summary_lines()
    assert lines[0] == "Thread status: 2 out of 2 completed normally."
    assert "Average Result:" in lines
    assert "Aggregate Result:" in lines
    aggregate_part = lines[lines.index("Aggregate Result:"):]
    assert "  Throughput:  2.00 MB/s" in aggregate_part


def test_collector_files(tmp_path):
    collector = MetricsCollector("run")
    collector.add_report(aggregate_phase(
        OperationKind.REREAD, [result(MB, 1, kind=OperationKind.REREAD)], 1, int(1e9)))
    collector.add_report(aggregate_phase(
        OperationKind.FIRST_WRITE,
        [result(MB, 1, kind=OperationKind.FIRST_WRITE)], 1, int(1e9)))

    raw = collector.save_raw_data(tmp_path / "out")
    data = json.loads(raw.read_text())
    assert data['benchmark'] == "run"
    assert [p['kind'] for p in data['phases']] == ["reread", "first_write"]
    assert data['phases'][0]['results'][0]['status'] == "ok"

    text = collector.generate_report(tmp_path / "out").read_text()
    # report follows run order regardless of insertion order
    assert text.index("PHASE: FIRST_WRITE") < text.index("PHASE: REREAD")
    assert "Per-thread throughput" in text

    assert collector.get_report(OperationKind.REREAD).ok_count == 1
    assert collector.get_report(OperationKind.REWRITE) is None
