import io

import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

from fileio_bench import Benchmark  # noqa: E402

# Small blocks so multi-block loops are exercised with tiny files
BLOCK = 4096


@pytest.fixture
def target_dir(tmp_path):
    path = tmp_path / "bench"
    path.mkdir()
    return path


@pytest.fixture
def make_benchmark(target_dir):
    """Factory for benchmarks writing into ``target_dir`` with captured output"""
    created = []

    def _make(file_size=3 * BLOCK + 100, worker_count=2, name="run", **kwargs):
        kwargs.setdefault("block_size", BLOCK)
        kwargs.setdefault("out", io.StringIO())
        bench = Benchmark(str(target_dir), name, file_size, worker_count, **kwargs)
        created.append(bench)
        return bench

    yield _make

    for bench in created:
        bench.cleanup()
