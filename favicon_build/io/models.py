"""Data models shared across the favicon build pipeline."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping


@dataclass(frozen=True, slots=True)
class SourceImage:
    """Raw bytes of the logo the icon set is rendered from."""

    identifier: str
    data: bytes = field(repr=False)
    mime: str | None = None


@dataclass(frozen=True, slots=True)
class Artifact:
    """One generated output file, addressed relative to the output prefix."""

    name: str
    role: str
    mime: str
    data: bytes = field(repr=False)
    width: int | None = None
    height: int | None = None
    digest: str = ""

    def __post_init__(self) -> None:
        if not self.digest:
            object.__setattr__(self, "digest", hashlib.sha256(self.data).hexdigest())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "role": self.role,
            "mime": self.mime,
            "width": self.width,
            "height": self.height,
            "digest": self.digest,
        }


@dataclass(frozen=True, slots=True)
class TagTemplate:
    """Path-independent description of one tag derived from the artifact set.

    ``asset_attr`` names the attribute whose value is an artifact name that
    must be qualified with the public path and prefix at emission time.
    """

    tag: str
    attrs: Mapping[str, str]
    asset_attr: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        return {"tag": self.tag, "attrs": dict(self.attrs), "asset_attr": self.asset_attr}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TagTemplate":
        if not isinstance(payload, Mapping):
            raise ValueError("tag entries must be mappings")
        attrs = payload.get("attrs")
        if not isinstance(payload.get("tag"), str) or not isinstance(attrs, Mapping):
            raise ValueError("tag entries require a 'tag' string and an 'attrs' mapping")
        asset_attr = payload.get("asset_attr")
        return cls(
            tag=payload["tag"],
            attrs={str(key): str(value) for key, value in attrs.items()},
            asset_attr=str(asset_attr) if asset_attr else None,
        )


@dataclass(slots=True)
class ArtifactManifest:
    """Ordered set of generated files plus the tags that reference them."""

    fingerprint: str
    generator_version: str
    artifacts: List[Artifact] = field(default_factory=list)
    tags: List[TagTemplate] = field(default_factory=list)

    def names(self) -> list[str]:
        return [artifact.name for artifact in self.artifacts]

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready projection; artifact bytes are never embedded."""
        return {
            "fingerprint": self.fingerprint,
            "generatorVersion": self.generator_version,
            "artifacts": [artifact.to_dict() for artifact in self.artifacts],
            "tags": [tag.to_dict() for tag in self.tags],
        }

    @classmethod
    def from_dict(
        cls,
        payload: Mapping[str, Any],
        contents: Mapping[str, bytes] | None = None,
    ) -> "ArtifactManifest":
        """Rebuild a manifest from :meth:`to_dict` output.

        *contents* maps artifact names to their bytes. When omitted the
        artifacts carry empty payloads but keep their recorded digests.
        Unknown keys (for example those added to stats files) are ignored.
        """
        rows = payload.get("artifacts")
        tags = payload.get("tags", [])
        if not isinstance(rows, list) or not isinstance(tags, list):
            raise ValueError("manifest requires 'artifacts' and 'tags' lists")

        artifacts: list[Artifact] = []
        for row in rows:
            if not isinstance(row, Mapping) or not isinstance(row.get("name"), str):
                raise ValueError("artifact entries require a 'name' string")
            name = row["name"]
            data = contents.get(name, b"") if contents is not None else b""
            artifacts.append(
                Artifact(
                    name=name,
                    role=str(row.get("role", "")),
                    mime=str(row.get("mime", "application/octet-stream")),
                    data=data,
                    width=row.get("width"),
                    height=row.get("height"),
                    digest=str(row.get("digest") or ""),
                )
            )
        return cls(
            fingerprint=str(payload.get("fingerprint", "")),
            generator_version=str(payload.get("generatorVersion", "")),
            artifacts=artifacts,
            tags=[TagTemplate.from_dict(tag) for tag in tags],
        )


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Persisted record of a previous successful generation."""

    fingerprint: str
    version: str
    manifest: ArtifactManifest


@dataclass(frozen=True, slots=True)
class TagDescriptor:
    """A tag ready to be injected into an HTML page."""

    tag: str
    attrs: Mapping[str, str]
