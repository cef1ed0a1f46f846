"""Byte reinterpretation between playfield cells and RGBA pixel rows."""
from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

CELL_DTYPE = np.dtype("<u4")


def grid_to_rgba(cells: NDArray[np.uint32], width: int, height: int) -> NDArray[np.uint8]:
    """Return an ``(height, width, 4)`` RGBA copy of the little-endian cells."""
    flat = np.ascontiguousarray(cells, dtype=CELL_DTYPE).reshape(-1)
    if flat.size != width * height:
        raise ValueError(f"Expected {width * height} cells, got {flat.size}")
    return flat.view(np.uint8).reshape(height, width, 4).copy()


def rgba_to_grid(pixels: NDArray[np.uint8]) -> NDArray[np.uint32]:
    """Inverse of ``grid_to_rgba``; returns a flat row-major cell array."""
    data = np.ascontiguousarray(pixels, dtype=np.uint8)
    if data.ndim != 3 or data.shape[2] != 4:
        raise ValueError(f"Expected (height, width, 4) pixels, got shape {data.shape}")
    return data.reshape(-1).view(CELL_DTYPE).copy()
