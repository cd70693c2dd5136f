"""Reusable data blocks for jobs"""

import os
from abc import ABC, abstractmethod

from .workloads import OperationKind


class DataSource(ABC):
    """A fixed-size buffer handed out one block at a time"""

    def __init__(self, block_size: int):
        if block_size <= 0:
            raise ValueError(f"block size must be positive, got {block_size}")
        self.block_size = block_size
        self._view = memoryview(self._allocate(block_size))

    @abstractmethod
    def _allocate(self, block_size: int):
        """Build the backing buffer"""
        pass

    def next_block(self, size: int) -> memoryview:
        """Return a view of exactly ``size`` bytes of the buffer."""
        if size < 0 or size > self.block_size:
            raise ValueError(
                f"requested {size} bytes from a {self.block_size}-byte block"
            )
        return self._view[:size]


class RandomData(DataSource):
    """Pseudorandom content, generated once and reused for every block"""

    def _allocate(self, block_size: int):
        return os.urandom(block_size)


class EmptyData(DataSource):
    """Zero-filled writable buffer, used as a read destination"""

    def _allocate(self, block_size: int):
        return bytearray(block_size)


def data_source_for(kind: OperationKind, block_size: int) -> DataSource:
    """New data source instance suited to ``kind``"""
    if kind.is_write:
        return RandomData(block_size)
    return EmptyData(block_size)
