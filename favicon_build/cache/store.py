"""Fingerprint-keyed persistence of generated artifact sets."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path, PurePosixPath
from typing import Dict, Protocol, runtime_checkable

from ..errors import CacheReadError, CacheWriteError
from ..io.models import ArtifactManifest, CacheEntry

logger = logging.getLogger(__name__)

RECORD_NAME = ".cache"


@runtime_checkable
class CacheBackend(Protocol):
    """
    Key-value medium for cache entries.
    Keys are relative POSIX paths such as ``<fingerprint>/favicon.ico``.
    """

    def read_bytes(self, key: str) -> bytes | None:
        """Return the stored bytes for *key*, or None when absent."""
        ...

    def write_bytes(self, key: str, data: bytes) -> None:
        """Durably store *data* under *key*, replacing any previous value."""
        ...

    def exists(self, key: str) -> bool:
        """Return True when *key* holds a value."""
        ...


class MemoryBackend:
    """Dictionary backed cache medium, mostly useful in tests."""

    def __init__(self) -> None:
        self.entries: Dict[str, bytes] = {}

    def read_bytes(self, key: str) -> bytes | None:
        return self.entries.get(key)

    def write_bytes(self, key: str, data: bytes) -> None:
        self.entries[key] = bytes(data)

    def exists(self, key: str) -> bool:
        return key in self.entries


class FileSystemBackend:
    """Cache medium rooted at a directory on disk.

    Writes go to a temporary sibling and are moved into place with
    :func:`os.replace`, so readers only ever see complete files.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        relative = PurePosixPath(key)
        if relative.is_absolute() or ".." in relative.parts:
            raise ValueError(f"Cache key escapes the cache root: {key}")
        return self.root.joinpath(*relative.parts)

    def read_bytes(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def write_bytes(self, key: str, data: bytes) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()


class CacheStore:
    """Reads and writes cache entries for one generator version."""

    def __init__(self, backend: CacheBackend, version: str) -> None:
        self.backend = backend
        self.version = version

    @classmethod
    def on_disk(cls, root: str | Path, version: str) -> "CacheStore":
        return cls(FileSystemBackend(root), version)

    def lookup(self, fingerprint: str) -> CacheEntry | None:
        """Return the valid entry for *fingerprint*, or None on any kind of miss."""
        try:
            return self._read(fingerprint)
        except CacheReadError as exc:
            logger.debug("Ignoring cache entry %s: %s", fingerprint, exc)
        except (OSError, ValueError) as exc:
            logger.debug("Unreadable cache entry %s: %s", fingerprint, exc)
        return None

    def _read(self, fingerprint: str) -> CacheEntry | None:
        raw = self.backend.read_bytes(_key(fingerprint, RECORD_NAME))
        if raw is None:
            return None
        try:
            record = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CacheReadError(f"record is not valid JSON ({exc})") from exc
        if not isinstance(record, dict):
            raise CacheReadError("record is not a JSON object")

        version = record.get("version")
        if version != self.version:
            raise CacheReadError(f"version {version!r} does not match {self.version!r}")
        if record.get("fingerprint") != fingerprint:
            raise CacheReadError("record belongs to a different fingerprint")
        payload = record.get("manifest")
        if not isinstance(payload, dict):
            raise CacheReadError("record has no manifest")

        skeleton = ArtifactManifest.from_dict(payload)
        contents: Dict[str, bytes] = {}
        for artifact in skeleton.artifacts:
            data = self.backend.read_bytes(_key(fingerprint, artifact.name))
            if data is None:
                raise CacheReadError(f"artifact {artifact.name} is missing")
            if hashlib.sha256(data).hexdigest() != artifact.digest:
                raise CacheReadError(f"artifact {artifact.name} does not match its digest")
            contents[artifact.name] = data

        manifest = ArtifactManifest.from_dict(payload, contents)
        manifest.fingerprint = fingerprint
        return CacheEntry(fingerprint=fingerprint, version=version, manifest=manifest)

    def store(self, fingerprint: str, version: str, manifest: ArtifactManifest) -> None:
        """Persist *manifest* under *fingerprint*; the record is written last."""
        record = {
            "version": version,
            "fingerprint": fingerprint,
            "manifest": manifest.to_dict(),
        }
        try:
            for artifact in manifest.artifacts:
                self.backend.write_bytes(_key(fingerprint, artifact.name), artifact.data)
            self.backend.write_bytes(
                _key(fingerprint, RECORD_NAME),
                json.dumps(record, indent=2).encode("utf-8"),
            )
        except (OSError, ValueError) as exc:
            raise CacheWriteError(f"Failed to persist cache entry {fingerprint}: {exc}") from exc
        logger.debug("Stored cache entry %s (%d artifacts)", fingerprint, len(manifest.artifacts))

    def contains(self, fingerprint: str) -> bool:
        return self.backend.exists(_key(fingerprint, RECORD_NAME))


def _key(fingerprint: str, name: str) -> str:
    return f"{fingerprint}/{name}"
