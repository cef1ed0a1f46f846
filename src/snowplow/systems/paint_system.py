from __future__ import annotations

from typing import Any

from esper import World

from snowplow.events.bus import EVENT_PLAYFIELD_PAINTED, EVENT_POINTER_MOVE, EventBus
from snowplow.systems.playfield_ops import get_brush, get_display_state, get_playfield
from snowplow.utils.color import brush_color


class PaintSystem:
    """Drops brush-colored flakes where the pointer moves with enough pressure."""

    def __init__(self, world: World, event_bus: EventBus) -> None:
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_POINTER_MOVE, self.on_pointer_move)

    def to_playfield(self, x: float, y: float) -> tuple[int, int] | None:
        """Map display coordinates (origin top-left) to a paintable cell, if any."""
        display = get_display_state(self.world)
        playfield = get_playfield(self.world)
        if display.width <= 0:
            return None
        if display.rotated:
            # Landscape shows the playfield turned 90 degrees, so the display
            # width runs along playfield rows.
            x, y = y, display.width - 1 - x
            page_to_playfield = playfield.width / display.height
        else:
            page_to_playfield = playfield.width / display.width
        col = int(x * page_to_playfield)
        row = int(y * page_to_playfield)
        # The two wall columns are never paintable; nothing is clamped.
        if 1 <= col < playfield.width - 1 and 0 <= row < playfield.height:
            return col, row
        return None

    def on_pointer_move(self, sender: Any, **payload: Any) -> None:
        x = payload.get("x")
        y = payload.get("y")
        if x is None or y is None:
            return
        try:
            xf = float(x)
            yf = float(y)
            pressure = float(payload.get("pressure", 0.0))
        except (TypeError, ValueError):
            return
        brush = get_brush(self.world)
        if pressure <= brush.pressure_threshold:
            return
        cell = self.to_playfield(xf, yf)
        if cell is None:
            return
        col, row = cell
        color = brush_color(brush.angle)
        brush.angle += 1
        brush.last_color = color
        playfield = get_playfield(self.world)
        playfield.set_cell(col, row, color)
        playfield.dirty = True
        self.event_bus.emit(EVENT_PLAYFIELD_PAINTED, x=col, y=row, color=color)
