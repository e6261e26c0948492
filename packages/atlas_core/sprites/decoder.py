"""Region decoding over a sprite sheet image."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from logging import getLogger
from pathlib import Path
from typing import BinaryIO

from PIL import Image, UnidentifiedImageError

from .errors import ImageOpenError, RegionDecodeError

logger = getLogger("atlas_core.sprites.decoder")

# 32-bit RGBA with straight alpha.
BITMAP_MODE = "RGBA"


@dataclass(frozen=True)
class IconRect:
    """Icon rectangle in source image pixel space."""

    x: int
    y: int
    width: int
    height: int

    @property
    def box(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def fits(self, size: tuple[int, int]) -> bool:
        img_w, img_h = size
        if self.x < 0 or self.y < 0 or self.width <= 0 or self.height <= 0:
            return False
        return self.x + self.width <= img_w and self.y + self.height <= img_h


class SourceImage:
    """An opened sprite sheet that can decode rectangular regions."""

    def __init__(self, image: Image.Image, *, source: str) -> None:
        self._image = image
        self.source = source

    @classmethod
    def open_stream(cls, stream: BinaryIO, *, source: str = "<stream>") -> "SourceImage":
        try:
            data = stream.read()
        except OSError as exc:
            raise ImageOpenError(f"Unable to read sprite image from {source}: {exc}") from exc
        return cls._open(BytesIO(data), source=source)

    @classmethod
    def open_path(cls, path: Path) -> "SourceImage":
        return cls._open(path, source=str(path))

    @classmethod
    def _open(cls, fp: BytesIO | Path, *, source: str) -> "SourceImage":
        try:
            image = Image.open(fp)
            # Force the decode now so a truncated sheet fails here, once.
            image.load()
        except (
            UnidentifiedImageError,
            OSError,
            SyntaxError,
            EOFError,
            ValueError,
            Image.DecompressionBombError,
        ) as exc:
            raise ImageOpenError(f"Error decoding sprite image {source}: {exc}") from exc
        logger.debug("[DECODER] Opened sprite image %s: size=%s, mode=%s", source, image.size, image.mode)
        return cls(image, source=source)

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    def decode_region(self, rect: IconRect, *, icon_name: str | None = None) -> Image.Image:
        if not rect.fits(self._image.size):
            raise RegionDecodeError(
                f"rectangle {rect.box} outside image bounds {self._image.size}", icon_name=icon_name
            )
        try:
            return self._image.crop(rect.box).convert(BITMAP_MODE)
        except (OSError, SyntaxError, ValueError) as exc:
            raise RegionDecodeError(
                f"region {rect.box} could not be decoded: {exc}", icon_name=icon_name
            ) from exc

    def close(self) -> None:
        self._image.close()
