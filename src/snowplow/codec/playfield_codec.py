"""Compact persisted form of the playfield.

Blob layout (one mode byte followed by a payload):

* mode ``0`` - raw: ``W*H`` cells as little-endian uint32, row-major.
* mode ``N`` (1..255) - palette: ``N`` little-endian uint32 palette entries,
  then ``W*H`` index bytes, one per cell, row-major.

Palette mode is used whenever the grid has few enough distinct colors. Slot 0
of every palette written here holds the value 0 (empty cell).
"""
from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from snowplow.errors import DecodeCorruption

CELL_DTYPE = np.dtype("<u4")
INDEX_DTYPE = np.dtype(np.uint8)
CELL_BYTES = CELL_DTYPE.itemsize

MODE_RAW = 0
MAX_PALETTE = 255
# Padding entry for single-color palettes; never equal to the only real color 0.
PALETTE_SENTINEL = 0xFFFFFFFF


@dataclass(frozen=True, slots=True)
class BlobInfo:
    mode: int
    palette_size: int
    payload_length: int

    @property
    def is_raw(self) -> bool:
        return self.mode == MODE_RAW


def order_palette(values: Iterable[int]) -> list[int] | None:
    """Return the palette for ``values`` or ``None`` when raw mode is needed.

    Colors are taken in ascending order. A grid without any empty cell still
    gets 0 in slot 0 as long as there is room for it; a single-entry palette
    is padded with ``PALETTE_SENTINEL`` so the table always has two slots.
    """
    palette = sorted(int(v) for v in values)
    if 0 not in palette:
        if len(palette) >= MAX_PALETTE:
            return None
        palette.insert(0, 0)
    if len(palette) > MAX_PALETTE:
        return None
    if len(palette) == 1:
        palette.append(PALETTE_SENTINEL)
    zero_slot = palette.index(0)
    palette[0], palette[zero_slot] = palette[zero_slot], palette[0]
    return palette


def _index_cells(cells: NDArray[np.uint32], palette: Sequence[int]) -> NDArray[np.uint8]:
    table = np.asarray(palette, dtype=CELL_DTYPE)
    order = np.argsort(table, kind="stable")
    positions = np.searchsorted(table[order], cells)
    return order[positions].astype(INDEX_DTYPE)


class PlayfieldCodec:
    """Encoder/decoder bound to one playfield size."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Playfield size must be positive, got {width}x{height}")
        self.width = width
        self.height = height

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    def _cells(self, grid: ArrayLike) -> NDArray[np.uint32]:
        cells = np.asarray(grid).astype(CELL_DTYPE, copy=False).reshape(-1)
        if cells.size != self.cell_count:
            raise ValueError(
                f"Grid has {cells.size} cells, expected {self.width}x{self.height}={self.cell_count}"
            )
        return cells

    def encode(self, grid: ArrayLike) -> bytes:
        cells = self._cells(grid)
        palette = order_palette(np.unique(cells))
        if palette is None:
            return bytes([MODE_RAW]) + cells.tobytes()
        table = np.asarray(palette, dtype=CELL_DTYPE)
        indices = _index_cells(cells, palette)
        return bytes([len(palette)]) + table.tobytes() + indices.tobytes()

    def describe(self, blob: bytes) -> BlobInfo:
        """Validate the blob length against its mode byte without decoding cells."""
        if len(blob) == 0:
            raise DecodeCorruption("Empty playfield blob")
        mode = blob[0]
        if mode == MODE_RAW:
            expected = 1 + CELL_BYTES * self.cell_count
            palette_size = 0
        else:
            palette_size = mode
            expected = 1 + CELL_BYTES * mode + self.cell_count
        if len(blob) != expected:
            raise DecodeCorruption(
                f"Playfield blob for mode {mode} must be {expected} bytes, got {len(blob)}"
            )
        return BlobInfo(mode=mode, palette_size=palette_size, payload_length=len(blob) - 1)

    def decode(self, blob: bytes) -> NDArray[np.uint32]:
        blob = bytes(blob)
        info = self.describe(blob)
        if info.is_raw:
            return np.frombuffer(blob, dtype=CELL_DTYPE, count=self.cell_count, offset=1).copy()
        palette = np.frombuffer(blob, dtype=CELL_DTYPE, count=info.palette_size, offset=1)
        indices = np.frombuffer(
            blob,
            dtype=INDEX_DTYPE,
            count=self.cell_count,
            offset=1 + CELL_BYTES * info.palette_size,
        )
        bad = np.flatnonzero(indices >= info.palette_size)
        if bad.size:
            first = int(bad[0])
            raise DecodeCorruption(
                f"Palette index {int(indices[first])} at cell {first} "
                f"exceeds palette of {info.palette_size} entries"
            )
        return palette[indices]

    def decode_into(self, blob: bytes, out: NDArray[np.uint32]) -> BlobInfo:
        """Decode ``blob`` and overwrite ``out`` only once decoding has succeeded."""
        grid = self.decode(blob)
        np.copyto(out.reshape(-1), grid)
        return self.describe(blob)


def encode_playfield(grid: ArrayLike, width: int, height: int) -> bytes:
    return PlayfieldCodec(width, height).encode(grid)


def decode_playfield(blob: bytes, width: int, height: int) -> NDArray[np.uint32]:
    return PlayfieldCodec(width, height).decode(blob)


def blob_to_text(blob: bytes) -> str:
    return base64.b64encode(blob).decode("ascii")


def text_to_blob(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeCorruption(f"Stored playfield is not valid base64: {exc}") from exc
