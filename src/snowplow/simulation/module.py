"""Narrow wrapper around the external simulation routine.

The routine mutates playfield cells in place inside a linear memory buffer it
shares with us. Callers only ever hand over ``Region`` objects; translating a
region into whatever the backend needs (a numpy view, a raw pointer) happens
here and nowhere else.
"""
from __future__ import annotations

import ctypes
from typing import Any, Callable, Optional

from snowplow.memory.allocator import Region

StepFn = Callable[..., Any]
InitFn = Callable[..., Any]


class SimulationModule:
    """Linear memory plus the step routine that operates on it."""

    def __init__(self, name: str, memory: Any, heap_base: int) -> None:
        self.name = name
        self.memory = memory
        self.heap_base = heap_base

    @property
    def capacity(self) -> int:
        return memoryview(self.memory).nbytes

    @property
    def has_initializer(self) -> bool:
        return False

    def initialize(self, seed: int, aux_region: Region | None, width: int, height: int) -> None:
        """Optional one-time setup of the auxiliary region."""

    def step(
        self,
        generation: int,
        grid_region: Region,
        width: int,
        height: int,
        aux_region: Region | None = None,
    ) -> None:
        raise NotImplementedError


class CallableSimulationModule(SimulationModule):
    """Python step routine; receives numpy views over its granted regions."""

    def __init__(
        self,
        name: str,
        step_fn: StepFn,
        memory: Any,
        heap_base: int,
        *,
        init_fn: Optional[InitFn] = None,
    ) -> None:
        super().__init__(name, memory, heap_base)
        self._step_fn = step_fn
        self._init_fn = init_fn

    @property
    def has_initializer(self) -> bool:
        return self._init_fn is not None

    def initialize(self, seed: int, aux_region: Region | None, width: int, height: int) -> None:
        if self._init_fn is None:
            return
        aux_view = aux_region.view if aux_region is not None else None
        self._init_fn(seed, aux_view, width, height)

    def step(self, generation, grid_region, width, height, aux_region=None):
        aux_view = aux_region.view if aux_region is not None else None
        return self._step_fn(generation, grid_region.view, width, height, aux_view)


class SharedLibrarySimulationModule(SimulationModule):
    """Compiled step routine (``stepFrame``) called through ctypes."""

    def __init__(
        self,
        name: str,
        library: Any,
        memory: Any,
        heap_base: int,
        *,
        step_symbol: str = "stepFrame",
        init_symbol: str = "initPermutations",
    ) -> None:
        super().__init__(name, memory, heap_base)
        self._library = library
        self._step = getattr(library, step_symbol)
        self._step.argtypes = [
            ctypes.c_uint32,
            ctypes.c_void_p,
            ctypes.c_uint32,
            ctypes.c_uint32,
            ctypes.c_void_p,
        ]
        self._step.restype = None
        self._init = getattr(library, init_symbol, None)
        if self._init is not None:
            self._init.argtypes = [ctypes.c_uint32, ctypes.c_void_p, ctypes.c_uint32, ctypes.c_uint32]
            self._init.restype = None
        self._base_address = ctypes.addressof(memory)

    @property
    def has_initializer(self) -> bool:
        return self._init is not None

    def _address(self, region: Region | None) -> int | None:
        if region is None:
            return None
        return self._base_address + region.offset

    def initialize(self, seed: int, aux_region: Region | None, width: int, height: int) -> None:
        if self._init is None or aux_region is None:
            return
        self._init(seed & 0xFFFFFFFF, self._address(aux_region), width, height)

    def step(self, generation, grid_region, width, height, aux_region=None):
        self._step(
            generation & 0xFFFFFFFF,
            self._address(grid_region),
            width,
            height,
            self._address(aux_region),
        )
