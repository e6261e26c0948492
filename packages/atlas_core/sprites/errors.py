"""Failure kinds raised inside the sprite atlas engine."""

from __future__ import annotations


class AtlasError(RuntimeError):
    def __init__(self, message: str, *, error_code: str, icon_name: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.icon_name = icon_name


class IndexParseError(AtlasError):
    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="index_parse")


class FieldError(AtlasError, ValueError):
    """A required numeric field is missing or not a number."""

    def __init__(self, message: str, *, field: str, icon_name: str | None = None) -> None:
        super().__init__(message, error_code="field", icon_name=icon_name)
        self.field = field


class RegionDecodeError(AtlasError, ValueError):
    """The requested rectangle could not be decoded from the sheet."""

    def __init__(self, message: str, *, icon_name: str | None = None) -> None:
        super().__init__(message, error_code="region_decode", icon_name=icon_name)


class ImageOpenError(AtlasError):
    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="image_open")


class StoreError(AtlasError):
    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="store")


class SnapshotError(AtlasError, ValueError):
    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="snapshot")
