"""Locating and loading the simulation module, then carving its memory."""
from __future__ import annotations

import asyncio
import ctypes
import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Union

from snowplow.constants import HEAP_BASE, MEMORY_BYTES
from snowplow.errors import ModuleLoadFailure
from snowplow.memory.allocator import BumpAllocator, Region
from snowplow.simulation.module import (
    CallableSimulationModule,
    SharedLibrarySimulationModule,
    SimulationModule,
)

logger = logging.getLogger(__name__)

SHARED_LIBRARY_SUFFIXES = {".so", ".dylib", ".dll"}

ModuleTarget = Union[str, Path, Callable[..., Any]]


@dataclass(slots=True)
class MemoryLayout:
    allocator: BumpAllocator
    grid: Region
    aux: Region


def _load_shared_library(path: Path, memory_bytes: int, heap_base: int) -> SimulationModule:
    if not path.is_file():
        raise ModuleLoadFailure(f"Simulation library not found: {path}")
    try:
        library = ctypes.CDLL(str(path))
    except OSError as exc:
        raise ModuleLoadFailure(f"Could not load simulation library {path}: {exc}") from exc
    memory = (ctypes.c_uint8 * memory_bytes)()
    try:
        return SharedLibrarySimulationModule(path.name, library, memory, heap_base)
    except AttributeError as exc:
        raise ModuleLoadFailure(f"{path} does not export stepFrame: {exc}") from exc


def _load_python_callable(target: str, memory_bytes: int, heap_base: int) -> SimulationModule:
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ModuleLoadFailure(f"Expected 'package.module:function', got {target!r}")
    try:
        module = importlib.import_module(module_name)
    except Exception as exc:
        raise ModuleLoadFailure(f"Could not import simulation module {module_name!r}: {exc}") from exc
    step_fn = getattr(module, attr, None)
    if not callable(step_fn):
        raise ModuleLoadFailure(f"{module_name}.{attr} is not a callable step routine")
    init_fn = getattr(module, "initialize", None)
    if init_fn is not None and not callable(init_fn):
        init_fn = None
    return CallableSimulationModule(
        target, step_fn, bytearray(memory_bytes), heap_base, init_fn=init_fn
    )


def load_simulation_module(
    target: ModuleTarget,
    *,
    memory_bytes: int = MEMORY_BYTES,
    heap_base: int = HEAP_BASE,
) -> SimulationModule:
    """Resolve ``target`` into a ``SimulationModule`` with fresh linear memory.

    ``target`` is a shared library path, a ``package.module:function`` string,
    or a step callable.
    """
    if heap_base < 0 or heap_base > memory_bytes:
        raise ModuleLoadFailure(f"Heap base {heap_base} outside memory of {memory_bytes} bytes")
    if callable(target):
        name = getattr(target, "__name__", repr(target))
        module = CallableSimulationModule(name, target, bytearray(memory_bytes), heap_base)
    elif isinstance(target, Path) or Path(str(target)).suffix in SHARED_LIBRARY_SUFFIXES:
        module = _load_shared_library(Path(target), memory_bytes, heap_base)
    else:
        module = _load_python_callable(str(target), memory_bytes, heap_base)
    logger.info(
        "Loaded simulation module %s (memory=%d bytes, heap_base=%d)",
        module.name,
        module.capacity,
        module.heap_base,
    )
    return module


async def load_simulation_module_async(target: ModuleTarget, **kwargs: Any) -> SimulationModule:
    return await asyncio.to_thread(load_simulation_module, target, **kwargs)


def prepare_regions(module: SimulationModule, width: int, height: int, *, seed: int = 0) -> MemoryLayout:
    """Carve the playfield and auxiliary regions out of the module's memory."""
    allocator = BumpAllocator(module.memory, module.heap_base)
    grid = allocator.allocate_uint32(width * height)
    aux = allocator.allocate_uint32(width * height)
    logger.info(
        "Memory layout: heap_base=%d playfield=%d+%d aux=%d+%d capacity=%d",
        module.heap_base,
        grid.offset,
        grid.length,
        aux.offset,
        aux.length,
        allocator.capacity,
    )
    try:
        module.initialize(seed, aux, width, height)
    except Exception as exc:
        raise ModuleLoadFailure(f"Simulation module {module.name} failed to initialize: {exc}") from exc
    return MemoryLayout(allocator=allocator, grid=grid, aux=aux)
