"""Exception types raised by apkcatalog."""

from pathlib import Path


class ApkCatalogError(Exception):
    """Base class for apkcatalog errors."""


class FetchError(ApkCatalogError):
    """An index archive could not be downloaded or unpacked."""

    def __init__(self, url: str, reason: str, *, status_code: int | None = None):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {reason}")


class ConfigError(ApkCatalogError):
    """The catalog configuration could not be loaded."""


class CatalogWriteError(ApkCatalogError):
    """The catalog document could not be serialized or written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write catalog to {path}: {reason}")
