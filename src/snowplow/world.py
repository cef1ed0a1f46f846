from __future__ import annotations

from esper import World

from snowplow.components.brush import Brush
from snowplow.components.display_state import DisplayState
from snowplow.components.frame_clock import FrameClock
from snowplow.components.playfield import Playfield
from snowplow.components.simulation_handle import SimulationHandle
from snowplow.constants import DISPLAY_SCALE, PLAYFIELD_HEIGHT, PLAYFIELD_WIDTH, SKIP_FRAMES
from snowplow.memory.allocator import Region
from snowplow.simulation.module import SimulationModule


def create_world(
    grid_region: Region,
    *,
    width: int = PLAYFIELD_WIDTH,
    height: int = PLAYFIELD_HEIGHT,
    module: SimulationModule | None = None,
    aux_region: Region | None = None,
    skip_frames: int = SKIP_FRAMES,
    display_size: tuple[int, int] | None = None,
) -> World:
    if grid_region.view.size != width * height:
        raise ValueError(
            f"Playfield region holds {grid_region.view.size} cells, expected {width}x{height}"
        )
    if skip_frames < 1:
        raise ValueError(f"skip_frames must be at least 1, got {skip_frames}")
    world = World()

    # Single state entity shared by every system.
    if display_size is None:
        display_size = (width * DISPLAY_SCALE, height * DISPLAY_SCALE)
    display_width, display_height = display_size
    state_entity = world.create_entity(
        Playfield(width=width, height=height, region=grid_region),
        FrameClock(skip_frames=skip_frames),
        Brush(),
        DisplayState(
            width=display_width,
            height=display_height,
            rotated=display_width > display_height,
        ),
    )
    if module is not None:
        world.add_component(state_entity, SimulationHandle(module=module, aux_region=aux_region))
    return world
