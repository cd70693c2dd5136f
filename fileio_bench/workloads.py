"""Operation kinds and workload configuration"""

from enum import Enum


class WorkloadConfig:
    """Workload configuration"""

    MB = 1024 * 1024

    # Bytes moved per I/O call
    BLOCK_SIZE = 1 * MB

    DEFAULT_WORKER_COUNT = 1

    # Phase timestamps
    TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class OperationKind(Enum):
    """The four benchmark phases"""
    FIRST_WRITE = "first_write"
    REWRITE = "rewrite"
    FIRST_READ = "first_read"
    REREAD = "reread"

    @property
    def is_write(self) -> bool:
        return self in (OperationKind.FIRST_WRITE, OperationKind.REWRITE)

    @property
    def label(self) -> str:
        return self.name

    def __str__(self):
        return self.name


# Later phases depend on the files produced by earlier ones
PHASE_ORDER = (
    OperationKind.FIRST_WRITE,
    OperationKind.REWRITE,
    OperationKind.FIRST_READ,
    OperationKind.REREAD,
)
