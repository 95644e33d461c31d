"""Error taxonomy for the favicon build pipeline."""

from __future__ import annotations


class FaviconBuildError(Exception):
    """Base class for every error raised by favicon_build."""


class ConfigurationError(FaviconBuildError, ValueError):
    """Raised for missing or invalid options before any work starts."""


class CacheReadError(FaviconBuildError):
    """Raised when a cache entry is corrupt, partial, or stale.

    Never escapes the cache store; lookups downgrade it to a miss.
    """


class CacheWriteError(FaviconBuildError):
    """Raised when a cache entry cannot be persisted."""


class GenerationError(FaviconBuildError):
    """Raised when the icon generator fails to produce an artifact set."""


class EmissionError(FaviconBuildError):
    """Raised when an artifact cannot be registered in the build output."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot emit {path}: {reason}")
        self.path = path
