"""Exception hierarchy for the harvest pipeline."""

from typing import Optional


class CacherError(Exception):
    """Base class for all cacher errors."""


class CatalogError(CacherError):
    """A catalog page could not be obtained."""


class CatalogTransientError(CatalogError):
    """Network failure or non-success status; the same page can be requested again."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CatalogParseError(CatalogError):
    """The catalog answered, but the body could not be decoded into map entries."""


class MapEncodeError(CacherError, ValueError):
    """An eligible map is missing a required field or holds an out-of-range value."""

    def __init__(self, map_id: str, field: str, reason: str) -> None:
        super().__init__(f"{map_id}: {field} {reason}")
        self.map_id = map_id
        self.field = field
        self.reason = reason


class HarvestAbortedError(CacherError):
    """The harvest loop gave up before the catalog was exhausted."""


class SnapshotError(CacherError):
    """A snapshot could not be serialized or decoded."""
