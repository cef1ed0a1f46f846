from __future__ import annotations

import logging
from typing import Any

from esper import World

from snowplow.components.frame_clock import DriverState
from snowplow.errors import SimulationStepFailure
from snowplow.events.bus import (
    EVENT_FRAME_STEPPED,
    EVENT_SIMULATION_HALTED,
    EVENT_TICK,
    EventBus,
)
from snowplow.rendering.pixels import grid_to_rgba
from snowplow.systems.playfield_ops import (
    get_frame_clock,
    get_playfield,
    get_simulation_handle,
)

logger = logging.getLogger(__name__)


class FrameDriver:
    """Steps the simulation once per (unskipped) tick and prepares the frame.

    A failing step is fatal for the session: the driver halts, reports the
    failure and re-raises it to whoever emitted the tick.
    """

    def __init__(self, world: World, event_bus: EventBus) -> None:
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)

    @property
    def state(self) -> DriverState:
        return get_frame_clock(self.world).state

    @property
    def generation(self) -> int:
        return get_frame_clock(self.world).generation

    def on_tick(self, sender: Any, **payload: Any) -> None:
        clock = get_frame_clock(self.world)
        if clock.state == DriverState.HALTED:
            return
        callback = clock.callbacks
        clock.callbacks += 1
        if callback % clock.skip_frames != 0:
            return
        self.step()

    def step(self) -> None:
        clock = get_frame_clock(self.world)
        if clock.state == DriverState.HALTED:
            return
        playfield = get_playfield(self.world)
        handle = get_simulation_handle(self.world)
        generation = clock.generation
        try:
            handle.module.step(
                generation,
                playfield.region,
                playfield.width,
                playfield.height,
                handle.aux_region,
            )
        except Exception as exc:
            failure = SimulationStepFailure(generation, exc)
            clock.state = DriverState.HALTED
            logger.error("%s; halting frame driver", failure, exc_info=True, extra={"generation": generation})
            self.event_bus.emit(EVENT_SIMULATION_HALTED, generation=generation, error=failure)
            raise failure from exc
        clock.state = DriverState.RUNNING
        clock.generation = generation + 1
        playfield.dirty = True
        pixels = grid_to_rgba(playfield.cells, playfield.width, playfield.height)
        self.event_bus.emit(EVENT_FRAME_STEPPED, generation=generation, pixels=pixels)

    def stop(self) -> None:
        clock = get_frame_clock(self.world)
        if clock.state == DriverState.HALTED:
            return
        clock.state = DriverState.HALTED
        logger.info("Frame driver stopped at generation %d", clock.generation)
        self.event_bus.emit(EVENT_SIMULATION_HALTED, generation=clock.generation, error=None)
