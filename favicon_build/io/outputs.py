"""Serialization helpers for icon stats files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Sequence

from .models import ArtifactManifest


def stats_payload(
    manifest: ArtifactManifest,
    prefix: str,
    html: Sequence[str],
    files: Sequence[str],
) -> bytes:
    """Return the JSON stats document for an emitted manifest."""
    payload: Dict[str, Any] = manifest.to_dict()
    payload.update(
        {
            "outputFilePrefix": prefix,
            "html": list(html),
            "files": list(files),
        }
    )
    return (json.dumps(payload, indent=2) + "\n").encode("utf-8")


def read_stats(path: Path) -> ArtifactManifest:
    """Parse a stats file written by the emitter back into a manifest.

    Artifact payloads are not part of stats files, so the returned artifacts
    carry their digests but no bytes.
    """
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return ArtifactManifest.from_dict(payload)
