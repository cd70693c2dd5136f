"""Multi-threaded file I/O benchmark"""

from .benchmark import Benchmark, build_file_paths
from .data import DataSource, EmptyData, RandomData
from .job import Job, JobResult, JobStatus
from .metrics import MetricsCollector, PhaseReport, aggregate_phase
from .visualize import generate_all_plots
from .workloads import OperationKind, PHASE_ORDER, WorkloadConfig

__all__ = [
    'Benchmark',
    'build_file_paths',
    'DataSource',
    'EmptyData',
    'RandomData',
    'Job',
    'JobResult',
    'JobStatus',
    'MetricsCollector',
    'PhaseReport',
    'aggregate_phase',
    'generate_all_plots',
    'OperationKind',
    'PHASE_ORDER',
    'WorkloadConfig',
]
