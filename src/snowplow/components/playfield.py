from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from snowplow.memory.allocator import Region


@dataclass(slots=True)
class Playfield:
    """The simulated grid: W*H uint32 cells living inside the linear memory."""

    width: int
    height: int
    region: Region
    dirty: bool = False

    @property
    def cells(self) -> NDArray[np.uint32]:
        return self.region.view

    def index(self, x: int, y: int) -> int:
        return y * self.width + x

    def cell(self, x: int, y: int) -> int:
        return int(self.cells[self.index(x, y)])

    def set_cell(self, x: int, y: int, color: int) -> None:
        self.cells[self.index(x, y)] = color
