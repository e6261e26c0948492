"""Sprite sheet index parsing.

A sprite sheet index is a JSON object keyed by icon name, for example::

    "aerialway_11": {"height": 15, "pixelRatio": 1, "width": 15, "x": 314, "y": 0}

Only the four rectangle fields are interpreted. Everything else is carried
through untouched.
"""

from __future__ import annotations

from copy import deepcopy
from logging import getLogger
from typing import Any, BinaryIO, Iterator
import json
import math

from .decoder import IconRect
from .errors import FieldError, IndexParseError

logger = getLogger("atlas_core.sprites.index")

ICON_X = "x"
ICON_Y = "y"
ICON_WIDTH = "width"
ICON_HEIGHT = "height"


class AtlasIndex:
    """Immutable mapping from icon name to its metadata object."""

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = document

    def lookup(self, name: str) -> dict[str, Any] | None:
        entry = self._document.get(name)
        if isinstance(entry, dict):
            return entry
        return None

    def names(self) -> list[str]:
        return [name for name, entry in self._document.items() if isinstance(entry, dict)]

    def to_json(self) -> str:
        return json.dumps(self._document, separators=(",", ":"), ensure_ascii=False)

    def copy_of(self, name: str) -> dict[str, Any] | None:
        entry = self.lookup(name)
        return deepcopy(entry) if entry is not None else None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self.names())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AtlasIndex):
            return NotImplemented
        return self._document == other._document

    def __repr__(self) -> str:
        return f"AtlasIndex(icons={len(self)})"


def _parse_document(data: bytes) -> dict[str, Any]:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise IndexParseError(f"Sprite sheet is not valid UTF-8: {exc}") from exc
    try:
        root = json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise IndexParseError(f"Sprite sheet is not valid JSON: {exc}") from exc
    if not isinstance(root, dict):
        raise IndexParseError(f"Sprite sheet top level must be an object, got {type(root).__name__}")
    return root


def parse_index(data: bytes) -> AtlasIndex | None:
    """Parse a sprite sheet document; returns None when it is unusable."""

    try:
        document = _parse_document(data)
    except IndexParseError as exc:
        logger.warning("[INDEX] Discarding sprite sheet index: %s", exc)
        return None
    logger.debug("[INDEX] Parsed sprite sheet index with %d entries", len(document))
    return AtlasIndex(document)


def read_index(stream: BinaryIO) -> AtlasIndex | None:
    try:
        data = stream.read()
    except OSError as exc:
        logger.warning("[INDEX] Unable to read sprite sheet stream: %s", exc)
        return None
    return parse_index(data)


def require_int(field: str, metadata: dict[str, Any], *, icon_name: str | None = None) -> int:
    value = metadata.get(field)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FieldError(f"No int for {field} found", field=field, icon_name=icon_name)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise FieldError(f"Non-finite value for {field}", field=field, icon_name=icon_name)
        return int(value)
    return value


def icon_rect(metadata: dict[str, Any], *, icon_name: str | None = None) -> IconRect:
    return IconRect(
        x=require_int(ICON_X, metadata, icon_name=icon_name),
        y=require_int(ICON_Y, metadata, icon_name=icon_name),
        width=require_int(ICON_WIDTH, metadata, icon_name=icon_name),
        height=require_int(ICON_HEIGHT, metadata, icon_name=icon_name),
    )
