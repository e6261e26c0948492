"""Sprite atlas lookup, decoding and persistence."""

from .atlas import SpriteAtlas
from .decoder import IconRect, SourceImage
from .errors import (
    AtlasError,
    FieldError,
    ImageOpenError,
    IndexParseError,
    RegionDecodeError,
    SnapshotError,
    StoreError,
)
from .index import ICON_HEIGHT, ICON_WIDTH, ICON_X, ICON_Y, AtlasIndex, parse_index, read_index, require_int
from .persistent import AtlasSnapshot, PersistentSpriteAtlas
from .store import FileSpriteStore, SpriteStore, default_store

__all__ = [
    "SpriteAtlas",
    "PersistentSpriteAtlas",
    "AtlasSnapshot",
    "AtlasIndex",
    "parse_index",
    "read_index",
    "require_int",
    "ICON_X",
    "ICON_Y",
    "ICON_WIDTH",
    "ICON_HEIGHT",
    "IconRect",
    "SourceImage",
    "SpriteStore",
    "FileSpriteStore",
    "default_store",
    "AtlasError",
    "IndexParseError",
    "FieldError",
    "RegionDecodeError",
    "ImageOpenError",
    "StoreError",
    "SnapshotError",
]
