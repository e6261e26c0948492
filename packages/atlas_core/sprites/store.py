"""Durable byte store for spilled sprite sheet images."""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import lru_cache
from logging import getLogger
from pathlib import Path
from typing import BinaryIO
import os
import shutil
import tempfile
import uuid

from .errors import StoreError

logger = getLogger("atlas_core.sprites.store")

SPRITE_CACHE = "sprites"
_COPY_CHUNK_SIZE = 64 * 1024


class SpriteStore(ABC):
    @abstractmethod
    def spill(self, stream: BinaryIO) -> Path:
        raise NotImplementedError

    @abstractmethod
    def exists(self, path: Path) -> bool:
        raise NotImplementedError

    @abstractmethod
    def delete(self, path: Path) -> bool:
        raise NotImplementedError

    @abstractmethod
    def clear_all(self) -> None:
        raise NotImplementedError


class FileSpriteStore(SpriteStore):
    def __init__(self, *, root_dir: str | Path | None = None) -> None:
        self._explicit_root_dir = root_dir

    @property
    def root_dir(self) -> Path:
        if self._explicit_root_dir:
            return Path(self._explicit_root_dir)
        configured = str(os.environ.get("ATLAS_SPRITE_CACHE_DIR") or "").strip()
        if configured:
            return Path(configured)
        return Path(tempfile.gettempdir()) / SPRITE_CACHE

    def spill(self, stream: BinaryIO) -> Path:
        root = self.root_dir
        path = root / uuid.uuid4().hex
        completed = False
        try:
            root.mkdir(parents=True, exist_ok=True)
            with path.open("wb") as out:
                shutil.copyfileobj(stream, out, _COPY_CHUNK_SIZE)
            completed = True
        except (OSError, ValueError) as exc:
            raise StoreError(f"Unable to create temp cache file {path}: {exc}") from exc
        finally:
            if not completed:
                self.delete(path)
        logger.debug("[STORE] Spilled sprite image to '%s' (%d bytes)", path, path.stat().st_size)
        return path.resolve()

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def delete(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("[STORE] Could not remove cache file '%s': %s", path, exc)
            return False
        logger.debug("[STORE] Removed cache file '%s'", path)
        return True

    def clear_all(self) -> None:
        root = self.root_dir
        if not root.exists() or not root.is_dir():
            return
        for path in root.iterdir():
            if path.is_file():
                self.delete(path)


@lru_cache(maxsize=1)
def default_store() -> SpriteStore:
    return FileSpriteStore()


def reset_store_cache_for_tests() -> None:
    default_store.cache_clear()
