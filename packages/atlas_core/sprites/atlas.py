"""On-demand icon extraction from a sprite sheet."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import Any, BinaryIO

from PIL import Image

from .decoder import SourceImage
from .errors import FieldError, ImageOpenError, RegionDecodeError
from .index import AtlasIndex, icon_rect, read_index

logger = getLogger("atlas_core.sprites.atlas")

STATE_READY = "ready"
STATE_DEGRADED_NO_IMAGE = "degraded_no_image"
STATE_DEGRADED_NO_INDEX = "degraded_no_index"
STATE_EVICTED = "evicted"


class SpriteAtlas:
    """Resolve icon names to RGBA bitmaps cut from a single sprite sheet.

    Every name is decoded at most once. Failed lookups are remembered as
    ``None`` so they are not retried.
    """

    def __init__(self, json_in: BinaryIO, image_in: BinaryIO) -> None:
        index = read_index(json_in)
        image: SourceImage | None = None
        try:
            image = SourceImage.open_stream(image_in)
        except ImageOpenError as exc:
            logger.error("[SPRITES] %s", exc)
        self._setup(index, image)

    @classmethod
    def from_paths(cls, json_path: Path, image_path: Path) -> "SpriteAtlas":
        with json_path.open("rb") as json_in, image_path.open("rb") as image_in:
            return cls(json_in, image_in)

    def _setup(self, index: AtlasIndex | None, image: SourceImage | None, *, retina: bool = False) -> None:
        self._index = index
        self._image = image
        self._retina = retina
        self._cache: dict[str, Image.Image | None] = {}
        self._closed = False

    @property
    def retina(self) -> bool:
        return self._retina

    @retina.setter
    def retina(self, value: bool) -> None:
        self._retina = bool(value)

    @property
    def state(self) -> str:
        if self._closed:
            return STATE_EVICTED
        if self._index is None:
            return STATE_DEGRADED_NO_INDEX
        if self._image is None:
            return STATE_DEGRADED_NO_IMAGE
        return STATE_READY

    def get(self, name: str) -> Image.Image | None:
        if name in self._cache:
            return self._cache[name]
        result = self._decode(name)
        self._cache[name] = result
        return result

    def _decode(self, name: str) -> Image.Image | None:
        if self._index is None or self._image is None:
            logger.debug("[SPRITES] Setup error (%s), icon unavailable: %s", self.state, name)
            return None

        meta = self._index.lookup(name)
        if meta is None:
            logger.warning("[SPRITES] Icon not found %s", name)
            return None

        try:
            rect = icon_rect(meta, icon_name=name)
            return self._image.decode_region(rect, icon_name=name)
        except (FieldError, RegionDecodeError) as exc:
            logger.error("[SPRITES] Error in sprite sheet for %s %s", name, exc)
            return None

    def cached(self, name: str) -> bool:
        return name in self._cache

    def metadata(self, name: str) -> dict[str, Any] | None:
        if self._index is None:
            return None
        return self._index.copy_of(name)

    def names(self) -> list[str]:
        if self._index is None:
            return []
        return self._index.names()

    def _release_image(self) -> None:
        if self._image is not None:
            self._image.close()
            self._image = None

    def close(self) -> None:
        self._release_image()
        self._closed = True

    def __enter__(self) -> "SpriteAtlas":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
