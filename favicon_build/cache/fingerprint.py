"""Deterministic identities for icon generation requests."""

from __future__ import annotations

import hashlib
import json
from typing import Any, Mapping

from ..config import OptionSet


def sha256_json(obj: Mapping[str, Any]) -> str:
    payload = json.dumps(obj, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def compute(source_bytes: bytes, options: OptionSet, generator_version: str) -> str:
    """Return the fingerprint for rendering *source_bytes* with *options*.

    Only :meth:`OptionSet.render_options` participates, so output paths and
    emission flags never change the result.
    """
    return sha256_json(
        {
            "generator": generator_version,
            "image": hashlib.sha256(source_bytes).hexdigest(),
            "options": options.render_options(),
        }
    )
