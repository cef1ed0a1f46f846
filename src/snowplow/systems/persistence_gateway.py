from __future__ import annotations

import logging
from typing import Any

from esper import World

from snowplow.codec.playfield_codec import PlayfieldCodec, blob_to_text, text_to_blob
from snowplow.constants import STORAGE_KEY
from snowplow.errors import DecodeCorruption
from snowplow.events.bus import (
    EVENT_PAGE_HIDE,
    EVENT_PLAYFIELD_LOAD_FAILED,
    EVENT_PLAYFIELD_LOADED,
    EVENT_PLAYFIELD_SAVED,
    EVENT_VISIBILITY_CHANGED,
    EventBus,
)
from snowplow.storage.session_storage import SessionStorage
from snowplow.systems.playfield_ops import get_playfield

logger = logging.getLogger(__name__)


class PersistenceGateway:
    """Saves the playfield when the window hides and restores it when shown.

    Stored state is best-effort: a corrupt slot is reported and ignored
    unless the caller asks for strict loading.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        storage: SessionStorage,
        *,
        key: str = STORAGE_KEY,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.storage = storage
        self.key = key
        playfield = get_playfield(world)
        self.codec = PlayfieldCodec(playfield.width, playfield.height)

        self.event_bus.subscribe(EVENT_VISIBILITY_CHANGED, self._on_visibility_changed)
        self.event_bus.subscribe(EVENT_PAGE_HIDE, self._on_page_hide)

    def save(self) -> bool:
        playfield = get_playfield(self.world)
        if not playfield.dirty:
            return False
        blob = self.codec.encode(playfield.cells)
        self.storage.set_item(self.key, blob_to_text(blob))
        playfield.dirty = False
        logger.debug("Saved playfield under %r (%d bytes, mode %d)", self.key, len(blob), blob[0])
        self.event_bus.emit(EVENT_PLAYFIELD_SAVED, key=self.key, size=len(blob))
        return True

    def load(self, *, strict: bool = False) -> bool:
        text = self.storage.get_item(self.key)
        if text is None:
            return False
        playfield = get_playfield(self.world)
        try:
            info = self.codec.decode_into(text_to_blob(text), playfield.cells)
        except DecodeCorruption as exc:
            if strict:
                raise
            logger.warning(
                "Discarding stored playfield %r: %s", self.key, exc, extra={"storage_key": self.key}
            )
            self.event_bus.emit(EVENT_PLAYFIELD_LOAD_FAILED, key=self.key, error=exc)
            return False
        logger.info("Initialized playfield from %s...", text[:32])
        self.event_bus.emit(EVENT_PLAYFIELD_LOADED, key=self.key, mode=info.mode)
        return True

    # Event handlers -----------------------------------------------------

    def _on_visibility_changed(self, sender, **payload) -> None:
        if payload.get("visible"):
            self.load()
        else:
            self.save()

    def _on_page_hide(self, sender, **payload) -> None:
        self.save()
