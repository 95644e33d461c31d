"""Projection of an artifact manifest into build output files and page tags."""

from __future__ import annotations

import logging
import re
from typing import List, Protocol

from ..config import OptionSet
from ..io.models import ArtifactManifest, TagDescriptor
from ..io.outputs import stats_payload
from .html import render_tag

logger = logging.getLogger(__name__)

_HASH_PLACEHOLDER = re.compile(r"\[hash(?::(\d+))?\]")
DEFAULT_HASH_LENGTH = 32


class BuildOutput(Protocol):
    """Destination that schedules files for the final build output."""

    def emit_asset(self, path: str, data: bytes) -> None:
        """Register *data* under *path*; raises EmissionError on collision."""
        ...


def interpolate_hash(template: str, fingerprint: str) -> str:
    """Replace ``[hash]`` and ``[hash:N]`` in *template* with fingerprint prefixes."""

    def _substitute(match: re.Match[str]) -> str:
        length = int(match.group(1)) if match.group(1) else DEFAULT_HASH_LENGTH
        return fingerprint[:length]

    return _HASH_PLACEHOLDER.sub(_substitute, template)


def resolve_tags(manifest: ArtifactManifest, options: OptionSet) -> List[TagDescriptor]:
    """Return page tags with artifact references qualified by the current paths."""
    base = options.public_path + interpolate_hash(options.prefix, manifest.fingerprint)
    descriptors: List[TagDescriptor] = []
    for template in manifest.tags:
        attrs = dict(template.attrs)
        if template.asset_attr and template.asset_attr in attrs:
            attrs[template.asset_attr] = base + attrs[template.asset_attr]
        descriptors.append(TagDescriptor(tag=template.tag, attrs=attrs))
    return descriptors


def emit(manifest: ArtifactManifest, output: BuildOutput, options: OptionSet) -> List[TagDescriptor]:
    """Write every artifact (and optionally a stats file) to *output*.

    Paths are resolved from *options* on every call, cached manifests
    included, so a changed prefix takes effect without regeneration.
    """
    prefix = interpolate_hash(options.prefix, manifest.fingerprint)
    files: List[str] = []
    for artifact in manifest.artifacts:
        path = prefix + artifact.name
        output.emit_asset(path, artifact.data)
        files.append(path)

    tags = resolve_tags(manifest, options)

    if options.emit_stats:
        stats_path = interpolate_hash(options.stats_filename, manifest.fingerprint)
        html = [render_tag(tag) for tag in tags]
        output.emit_asset(stats_path, stats_payload(manifest, prefix, html, files))
        logger.debug("Emitted icon stats to %s", stats_path)

    logger.debug("Emitted %d icon files under %s", len(files), prefix or "./")
    return tags
