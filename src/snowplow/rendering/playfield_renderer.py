from __future__ import annotations

from typing import Any

import numpy as np
from esper import World
from numpy.typing import NDArray

from snowplow.events.bus import (
    EVENT_FRAME_STEPPED,
    EVENT_PLAYFIELD_LOADED,
    EVENT_PLAYFIELD_PAINTED,
    EventBus,
)
from snowplow.rendering.pixels import grid_to_rgba
from snowplow.systems.playfield_ops import get_display_state, get_playfield


class PlayfieldRenderer:
    """Uploads the latest frame into one texture and draws it upscaled, pixelated."""

    def __init__(self, world: World, event_bus: EventBus, window) -> None:
        self.world = world
        self.event_bus = event_bus
        self.window = window
        self._pixels: NDArray[np.uint8] | None = None
        self._texture: Any | None = None
        self._stale = True
        self.event_bus.subscribe(EVENT_FRAME_STEPPED, self._on_frame_stepped)
        # Paints and loads still reach the screen once the driver has halted.
        self.event_bus.subscribe(EVENT_PLAYFIELD_PAINTED, self._on_playfield_changed)
        self.event_bus.subscribe(EVENT_PLAYFIELD_LOADED, self._on_playfield_changed)

    def _on_frame_stepped(self, sender, **payload) -> None:
        pixels = payload.get("pixels")
        if pixels is not None:
            self._pixels = pixels
            self._stale = True

    def _on_playfield_changed(self, sender, **payload) -> None:
        self._pixels = None
        self._stale = True

    def latest_pixels(self) -> NDArray[np.uint8]:
        if self._pixels is None:
            playfield = get_playfield(self.world)
            self._pixels = grid_to_rgba(playfield.cells, playfield.width, playfield.height)
        return self._pixels

    def _upload(self, arcade_module):
        from PIL import Image

        pixels = self.latest_pixels()
        height, width = pixels.shape[:2]
        if self._texture is None:
            image = Image.frombuffer("RGBA", (width, height), pixels.tobytes(), "raw", "RGBA", 0, 1)
            self._texture = arcade_module.Texture(image.copy(), hash="snowplow-playfield")
        elif self._stale:
            self._texture.image.frombytes(pixels.tobytes())
            self.window.ctx.default_atlas.update_texture_image(self._texture)
        self._stale = False
        return self._texture

    def process(self) -> None:
        import arcade

        texture = self._upload(arcade)
        playfield = get_playfield(self.world)
        display = get_display_state(self.world)
        if display.rotated:
            cell = display.height / playfield.width
            draw_w, draw_h = playfield.width * cell, playfield.height * cell
            # Rotated quad occupies height x width on screen, anchored top-left.
            center_x = draw_h / 2
            center_y = self.window.height - draw_w / 2
            angle = 90
        else:
            cell = display.width / playfield.width
            draw_w, draw_h = playfield.width * cell, playfield.height * cell
            center_x = draw_w / 2
            center_y = self.window.height - draw_h / 2
            angle = 0
        arcade.draw_texture_rect(
            texture,
            arcade.XYWH(center_x, center_y, draw_w, draw_h),
            angle=angle,
            pixelated=True,
        )
