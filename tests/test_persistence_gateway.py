import json

import numpy as np
import pytest

from snowplow.codec.playfield_codec import PlayfieldCodec, blob_to_text
from snowplow.constants import STORAGE_KEY
from snowplow.errors import DecodeCorruption
from snowplow.events.bus import (
    EVENT_PAGE_HIDE,
    EVENT_PLAYFIELD_LOAD_FAILED,
    EVENT_PLAYFIELD_LOADED,
    EVENT_VISIBILITY_CHANGED,
)
from snowplow.storage.session_storage import SessionStorage
from snowplow.systems.persistence_gateway import PersistenceGateway
from snowplow.systems.playfield_ops import get_playfield
from tests.helpers import make_session


def _gateway(storage=None):
    session = make_session(width=4, height=3)
    storage = storage if storage is not None else SessionStorage()
    gateway = PersistenceGateway(session.world, session.bus, storage)
    return session, gateway, storage


def test_save_is_noop_when_clean():
    session, gateway, storage = _gateway()

    assert gateway.save() is False
    assert STORAGE_KEY not in storage


def test_save_stores_base64_blob_and_clears_dirty():
    session, gateway, storage = _gateway()
    playfield = get_playfield(session.world)
    playfield.set_cell(1, 2, 0xFFAA5500)
    playfield.dirty = True

    assert gateway.save() is True

    assert playfield.dirty is False
    expected = PlayfieldCodec(4, 3).encode(playfield.cells)
    assert storage.get_item(STORAGE_KEY) == blob_to_text(expected)


def test_load_restores_saved_playfield_in_place():
    session, gateway, storage = _gateway()
    playfield = get_playfield(session.world)
    cells_before = playfield.cells
    playfield.set_cell(2, 1, 0x12345678)
    playfield.dirty = True
    gateway.save()

    playfield.cells[:] = 0
    assert gateway.load() is True

    assert playfield.cell(2, 1) == 0x12345678
    assert playfield.cells is cells_before


def test_load_without_stored_state_returns_false():
    session, gateway, storage = _gateway()
    assert gateway.load() is False


@pytest.mark.parametrize(
    "stored",
    [
        "!!!",
        blob_to_text(bytes([2]) + bytes(8)),
        blob_to_text(bytes([2, 0, 0, 0, 0, 1, 0, 0, 0]) + bytes([0] * 11 + [5])),
    ],
)
def test_corrupt_state_is_reported_and_ignored(stored):
    session, gateway, storage = _gateway()
    playfield = get_playfield(session.world)
    playfield.cells[:] = np.arange(12, dtype=np.uint32)
    storage.set_item(STORAGE_KEY, stored)
    failures = []
    session.bus.subscribe(EVENT_PLAYFIELD_LOAD_FAILED, lambda sender, **p: failures.append(p))

    assert gateway.load() is False

    assert playfield.cells.tolist() == list(range(12))
    assert len(failures) == 1
    assert isinstance(failures[0]["error"], DecodeCorruption)


def test_strict_load_raises_on_corruption():
    session, gateway, storage = _gateway()
    storage.set_item(STORAGE_KEY, blob_to_text(b"\x07"))
    with pytest.raises(DecodeCorruption):
        gateway.load(strict=True)


def test_visibility_hidden_saves_and_visible_loads():
    session, gateway, storage = _gateway()
    playfield = get_playfield(session.world)
    playfield.set_cell(1, 0, 0xFF0000FF)
    playfield.dirty = True
    loaded = []
    session.bus.subscribe(EVENT_PLAYFIELD_LOADED, lambda sender, **p: loaded.append(p))

    session.bus.emit(EVENT_VISIBILITY_CHANGED, visible=False)
    assert STORAGE_KEY in storage

    playfield.set_cell(1, 0, 0)
    session.bus.emit(EVENT_VISIBILITY_CHANGED, visible=True)
    assert playfield.cell(1, 0) == 0xFF0000FF
    assert loaded == [{"key": STORAGE_KEY, "mode": 2}]


def test_page_hide_saves():
    session, gateway, storage = _gateway()
    get_playfield(session.world).dirty = True
    session.bus.emit(EVENT_PAGE_HIDE)
    assert STORAGE_KEY in storage


def test_storage_mirror_survives_new_session(tmp_path):
    path = tmp_path / "session.json"
    session, gateway, _ = _gateway(SessionStorage(path))
    playfield = get_playfield(session.world)
    playfield.set_cell(3, 2, 0xFFFFFFFF)
    playfield.dirty = True
    gateway.save()

    with path.open("r", encoding="utf-8") as handle:
        assert STORAGE_KEY in json.load(handle)

    other, other_gateway, _ = _gateway(SessionStorage(path))
    assert other_gateway.load() is True
    assert get_playfield(other.world).cell(3, 2) == 0xFFFFFFFF
