"""Bump allocation over one fixed-capacity linear memory buffer.

Regions are handed out front to back and never reclaimed; ``reset`` rewinds
the whole arena when a new session starts.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import DTypeLike, NDArray

from snowplow.errors import AllocationExhausted

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, eq=False)
class Region:
    """A typed, non-overlapping slice of the linear memory buffer."""

    offset: int
    length: int
    view: NDArray[Any]

    @property
    def end(self) -> int:
        return self.offset + self.length

    def overlaps(self, other: "Region") -> bool:
        return self.offset < other.end and other.offset < self.end


class BumpAllocator:
    """Carves disjoint regions out of ``buffer`` starting at ``base_offset``.

    Not safe for concurrent use.
    """

    def __init__(self, buffer: Any, base_offset: int = 0) -> None:
        self.buffer = buffer
        self.capacity = memoryview(buffer).nbytes
        if base_offset < 0 or base_offset > self.capacity:
            raise ValueError(f"Base offset {base_offset} outside buffer of {self.capacity} bytes")
        self.base_offset = base_offset
        self._top = base_offset

    @property
    def top(self) -> int:
        return self._top

    @property
    def remaining(self) -> int:
        return self.capacity - self._top

    def allocate(self, nbytes: int) -> int:
        if nbytes < 0:
            raise ValueError(f"Cannot allocate a negative size: {nbytes}")
        ptr = self._top
        if ptr + nbytes > self.capacity:
            raise AllocationExhausted(ptr, nbytes, self.capacity)
        self._top = ptr + nbytes
        logger.debug("Allocated %d bytes at offset %d", nbytes, ptr)
        return ptr

    def allocate_region(self, count: int, dtype: DTypeLike) -> Region:
        if count < 0:
            raise ValueError(f"Cannot allocate a negative element count: {count}")
        item = np.dtype(dtype)
        nbytes = count * item.itemsize
        ptr = self.allocate(nbytes)
        if count == 0:
            view = np.empty(0, dtype=item)
        else:
            view = np.frombuffer(self.buffer, dtype=item, count=count, offset=ptr)
        return Region(offset=ptr, length=nbytes, view=view)

    def allocate_uint32(self, count: int) -> Region:
        return self.allocate_region(count, np.dtype("<u4"))

    def reset(self) -> None:
        self._top = self.base_offset
