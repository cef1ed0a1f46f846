from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class SessionStorage:
    """String-keyed slots that live for the session, optionally mirrored to JSON."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._items: dict[str, str] = {}
        if self._path is not None:
            self._read_mirror()

    @property
    def path(self) -> Path | None:
        return self._path

    def _read_mirror(self) -> None:
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring unreadable session storage %s: %s", self._path, exc)
            return
        if not isinstance(payload, dict):
            logger.warning("Ignoring session storage %s: expected an object", self._path)
            return
        self._items = {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def _write_mirror(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as handle:
            json.dump(self._items, handle, indent=2)

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._write_mirror()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._write_mirror()

    def clear(self) -> None:
        self._items.clear()
        self._write_mirror()

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
