from __future__ import annotations

from typing import Type, TypeVar

from esper import World

from snowplow.components.brush import Brush
from snowplow.components.display_state import DisplayState
from snowplow.components.frame_clock import FrameClock
from snowplow.components.playfield import Playfield
from snowplow.components.simulation_handle import SimulationHandle

C = TypeVar("C")


def _single(world: World, component_type: Type[C]) -> C:
    for _, component in world.get_component(component_type):
        return component
    raise RuntimeError(f"{component_type.__name__} not found")


def get_playfield(world: World) -> Playfield:
    return _single(world, Playfield)


def get_frame_clock(world: World) -> FrameClock:
    return _single(world, FrameClock)


def get_brush(world: World) -> Brush:
    return _single(world, Brush)


def get_display_state(world: World) -> DisplayState:
    return _single(world, DisplayState)


def get_simulation_handle(world: World) -> SimulationHandle:
    return _single(world, SimulationHandle)
