from __future__ import annotations

from typing import Any

from esper import World

from snowplow.events.bus import EVENT_DISPLAY_RESIZED, EVENT_FULLSCREEN_CHANGED, EventBus
from snowplow.systems.playfield_ops import get_display_state


class OrientationSystem:
    """Tracks display size; landscape displays show the playfield rotated 90 degrees."""

    def __init__(self, world: World, event_bus: EventBus) -> None:
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_DISPLAY_RESIZED, self._on_resized)
        self.event_bus.subscribe(EVENT_FULLSCREEN_CHANGED, self._on_fullscreen_changed)

    def _on_resized(self, sender: Any, **payload: Any) -> None:
        width = payload.get("width")
        height = payload.get("height")
        if width is None or height is None:
            return
        display = get_display_state(self.world)
        display.width = int(width)
        display.height = int(height)
        display.rotated = display.width > display.height

    def _on_fullscreen_changed(self, sender: Any, **payload: Any) -> None:
        display = get_display_state(self.world)
        display.fullscreen = bool(payload.get("fullscreen", False))
