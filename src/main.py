"""Entry point for the snowplower toy.

Loads the simulation module, carves its memory, sets up the ECS world, event
bus, systems, and the Arcade window.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from arcade import Window, color, key, run, set_background_color

from snowplow.constants import (
    DISPLAY_SCALE,
    PLAYFIELD_HEIGHT,
    PLAYFIELD_WIDTH,
    SKIP_FRAMES,
    UPDATE_RATE,
)
from snowplow.errors import AllocationExhausted, ModuleLoadFailure, SimulationStepFailure
from snowplow.events.bus import (
    EVENT_DISPLAY_RESIZED,
    EVENT_FULLSCREEN_CHANGED,
    EVENT_PAGE_HIDE,
    EVENT_POINTER_MOVE,
    EVENT_TICK,
    EVENT_VISIBILITY_CHANGED,
    EventBus,
)
from snowplow.observability import setup_logging
from snowplow.rendering.playfield_renderer import PlayfieldRenderer
from snowplow.simulation.loader import MemoryLayout, load_simulation_module_async, prepare_regions
from snowplow.simulation.module import SimulationModule
from snowplow.storage.session_storage import SessionStorage
from snowplow.systems.frame_driver import FrameDriver
from snowplow.systems.orientation_system import OrientationSystem
from snowplow.systems.paint_system import PaintSystem
from snowplow.systems.persistence_gateway import PersistenceGateway
from snowplow.world import create_world

logger = logging.getLogger("snowplower")


class SnowplowerWindow(Window):
    def __init__(
        self,
        module: SimulationModule,
        layout: MemoryLayout,
        storage: SessionStorage,
        *,
        scale: int = DISPLAY_SCALE,
        skip_frames: int = SKIP_FRAMES,
    ):
        super().__init__(
            PLAYFIELD_WIDTH * scale,
            PLAYFIELD_HEIGHT * scale,
            "Snowplower",
            resizable=True,
        )
        self.set_update_rate(UPDATE_RATE)
        self.event_bus = EventBus()
        self.world = create_world(
            layout.grid,
            width=PLAYFIELD_WIDTH,
            height=PLAYFIELD_HEIGHT,
            module=module,
            aux_region=layout.aux,
            skip_frames=skip_frames,
            display_size=(self.width, self.height),
        )
        self.orientation_system = OrientationSystem(self.world, self.event_bus)
        self.paint_system = PaintSystem(self.world, self.event_bus)
        self.persistence_gateway = PersistenceGateway(self.world, self.event_bus, storage)
        self.frame_driver = FrameDriver(self.world, self.event_bus)
        self.renderer = PlayfieldRenderer(self.world, self.event_bus, self)
        self._buttons_held = 0
        set_background_color(color.BLACK)

        self.persistence_gateway.load()

    def on_resize(self, width: int, height: int):
        self.event_bus.emit(EVENT_DISPLAY_RESIZED, width=width, height=height)
        return super().on_resize(width, height)

    def on_draw(self):
        self.clear()
        self.renderer.process()

    def on_update(self, delta_time: float):
        try:
            self.event_bus.emit(EVENT_TICK, dt=delta_time)
        except SimulationStepFailure:
            # Already logged by the driver; the last frame stays on screen.
            pass

    def _emit_pointer(self, x: float, y: float, pressure: float):
        # Arcade's origin is bottom-left; the input mapping expects top-left.
        self.event_bus.emit(EVENT_POINTER_MOVE, x=x, y=self.height - 1 - y, pressure=pressure)

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int):
        self._buttons_held |= button
        self._emit_pointer(x, y, 1.0)

    def on_mouse_release(self, x: float, y: float, button: int, modifiers: int):
        self._buttons_held &= ~button

    def on_mouse_motion(self, x: float, y: float, dx: float, dy: float):
        self._emit_pointer(x, y, 1.0 if self._buttons_held else 0.0)

    def on_mouse_drag(self, x: float, y: float, dx: float, dy: float, buttons: int, modifiers: int):
        self._emit_pointer(x, y, 1.0)

    def on_key_press(self, symbol: int, modifiers: int):
        if symbol == key.F:
            self.set_fullscreen(not self.fullscreen)
            self.event_bus.emit(EVENT_FULLSCREEN_CHANGED, fullscreen=self.fullscreen)

    def on_hide(self):
        self.event_bus.emit(EVENT_VISIBILITY_CHANGED, visible=False)

    def on_show(self):
        self.event_bus.emit(EVENT_VISIBILITY_CHANGED, visible=True)

    def on_close(self):
        self.event_bus.emit(EVENT_PAGE_HIDE)
        super().on_close()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Paint snow and watch it settle.")
    parser.add_argument(
        "--module",
        default="snowfall.so",
        help="simulation module: shared library path or 'package.module:function'",
    )
    parser.add_argument("--skip-frames", type=int, default=SKIP_FRAMES,
                        help="display callbacks per simulation step")
    parser.add_argument("--scale", type=int, default=DISPLAY_SCALE,
                        help="screen pixels per playfield cell")
    parser.add_argument("--storage", type=Path, default=None,
                        help="mirror session storage to this JSON file")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-format", choices=("text", "json"), default="text")
    args = parser.parse_args(argv)
    if args.skip_frames < 1:
        parser.error("--skip-frames must be at least 1")
    if args.scale < 1:
        parser.error("--scale must be at least 1")
    return args


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_format)
    try:
        module = asyncio.run(load_simulation_module_async(args.module))
        layout = prepare_regions(module, PLAYFIELD_WIDTH, PLAYFIELD_HEIGHT)
    except (ModuleLoadFailure, AllocationExhausted) as exc:
        logger.error("Startup aborted: %s", exc)
        return 1
    window = SnowplowerWindow(
        module,
        layout,
        SessionStorage(args.storage),
        scale=args.scale,
        skip_frames=args.skip_frames,
    )
    run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
