"""Sprite atlas that keeps its own copy of the sheet image and can be saved.

The image stream is spilled to a file in the sprite cache directory at
construction. Serialization records that file's path together with the
index JSON so another process can restore the atlas without the original
streams. Decoded bitmaps are never persisted; they are rebuilt on demand.
"""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import BinaryIO, Optional
import os

from pydantic import BaseModel, Field, ValidationError

from .atlas import STATE_EVICTED, SpriteAtlas
from .decoder import SourceImage
from .errors import ImageOpenError, SnapshotError, StoreError
from .index import AtlasIndex, parse_index, read_index
from .store import SpriteStore, default_store

logger = getLogger("atlas_core.sprites.persistent")

SNAPSHOT_FORMAT = "atlas-sprites-v1"
SNAPSHOT_VERSION = 3


class AtlasSnapshot(BaseModel):
    format: str = SNAPSHOT_FORMAT
    snapshot_version: int = SNAPSHOT_VERSION
    retina: bool = False
    cache_path: Optional[str] = Field(default=None, description="Spilled sprite image file")
    index_json: Optional[str] = Field(default=None, description="Sprite sheet index as JSON text")


class PersistentSpriteAtlas(SpriteAtlas):
    def __init__(self, json_in: BinaryIO, image_in: BinaryIO, *, store: SpriteStore | None = None) -> None:
        self._store = store or default_store()
        self._cache_path: Path | None = None
        index = read_index(json_in)
        image: SourceImage | None = None
        try:
            self._cache_path = self._store.spill(image_in)
        except StoreError as exc:
            logger.error("[STORE] %s", exc)
        if self._cache_path is not None:
            image = self._open_cached_image(self._cache_path)
        self._setup(index, image)

    @classmethod
    def from_paths(
        cls, json_path: Path, image_path: Path, *, store: SpriteStore | None = None
    ) -> "PersistentSpriteAtlas":
        with json_path.open("rb") as json_in, image_path.open("rb") as image_in:
            return cls(json_in, image_in, store=store)

    @staticmethod
    def _open_cached_image(path: Path) -> SourceImage | None:
        try:
            return SourceImage.open_path(path)
        except ImageOpenError as exc:
            logger.error("[SPRITES] %s", exc)
            return None

    @property
    def cache_path(self) -> Path | None:
        return self._cache_path

    def snapshot(self) -> AtlasSnapshot:
        if self.state == STATE_EVICTED:
            logger.warning("[SNAPSHOT] Serializing an evicted atlas; it will restore without an image")
        return AtlasSnapshot(
            retina=self._retina,
            cache_path=str(self._cache_path) if self._cache_path is not None else None,
            index_json=self._index.to_json() if self._index is not None else None,
        )

    def serialize(self) -> bytes:
        return self.snapshot().model_dump_json().encode("utf-8")

    @classmethod
    def deserialize(cls, data: bytes, *, store: SpriteStore | None = None) -> "PersistentSpriteAtlas":
        try:
            snapshot = AtlasSnapshot.model_validate_json(data)
        except ValidationError as exc:
            raise SnapshotError(f"Invalid sprite atlas snapshot: {exc}") from exc
        if snapshot.format != SNAPSHOT_FORMAT:
            raise SnapshotError(f"Unsupported sprite atlas snapshot format {snapshot.format!r}")
        if snapshot.snapshot_version != SNAPSHOT_VERSION:
            raise SnapshotError(
                f"Unsupported sprite atlas snapshot version {snapshot.snapshot_version}, "
                f"expected {SNAPSHOT_VERSION}"
            )
        return cls._restore(snapshot, store=store or default_store())

    @classmethod
    def _restore(cls, snapshot: AtlasSnapshot, *, store: SpriteStore) -> "PersistentSpriteAtlas":
        atlas = cls.__new__(cls)
        atlas._store = store
        atlas._cache_path = None

        index: AtlasIndex | None = None
        if snapshot.index_json is not None:
            index = parse_index(snapshot.index_json.encode("utf-8"))

        image: SourceImage | None = None
        if snapshot.cache_path is None:
            logger.error("[SNAPSHOT] No saved input image file")
        else:
            path = Path(snapshot.cache_path)
            if store.exists(path):
                atlas._cache_path = path
                image = cls._open_cached_image(path)
            else:
                logger.error("[SNAPSHOT] Saved sprite image file %s no longer exists", path)

        atlas._setup(index, image, retina=snapshot.retina)
        logger.debug("[SNAPSHOT] Restored sprite atlas: state=%s, cache_path=%s", atlas.state, atlas._cache_path)
        return atlas

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_bytes(self.serialize())
        os.replace(tmp_path, path)
        logger.info("[SNAPSHOT] Saved sprite atlas snapshot to '%s'", path)
        return path

    @classmethod
    def load(cls, path: Path, *, store: SpriteStore | None = None) -> "PersistentSpriteAtlas":
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise SnapshotError(f"Unable to read sprite atlas snapshot {path}: {exc}") from exc
        return cls.deserialize(data, store=store)

    def evict(self) -> None:
        """Delete the spilled image; only already decoded icons stay available."""

        self._release_image()
        if self._cache_path is not None:
            self._store.delete(self._cache_path)
            logger.info("[STORE] Evicted sprite cache file '%s'", self._cache_path)
            self._cache_path = None
        self._closed = True

    def close(self) -> None:
        self.evict()
