from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from esper import World

from snowplow.events.bus import EventBus
from snowplow.simulation.loader import MemoryLayout, load_simulation_module, prepare_regions
from snowplow.simulation.module import SimulationModule
from snowplow.world import create_world

TEST_MEMORY_BYTES = 64 * 1024
TEST_HEAP_BASE = 256


def noop_step(generation, grid, width, height, aux):
    return None


@dataclass
class Session:
    world: World
    bus: EventBus
    module: SimulationModule
    layout: MemoryLayout


def make_session(
    width: int = 6,
    height: int = 8,
    *,
    step: Callable | None = None,
    skip_frames: int = 1,
    display_size: tuple[int, int] | None = None,
) -> Session:
    """Build a world backed by a Python step routine and a small linear memory."""

    module = load_simulation_module(
        step or noop_step,
        memory_bytes=TEST_MEMORY_BYTES,
        heap_base=TEST_HEAP_BASE,
    )
    layout = prepare_regions(module, width, height)
    world = create_world(
        layout.grid,
        width=width,
        height=height,
        module=module,
        aux_region=layout.aux,
        skip_frames=skip_frames,
        display_size=display_size or (width * 10, height * 10),
    )
    return Session(world=world, bus=EventBus(), module=module, layout=layout)
