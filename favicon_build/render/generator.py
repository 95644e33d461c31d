"""Icon generator adapters that render the artifact set from a source logo."""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from io import BytesIO
from typing import Callable, Dict, List, Protocol, runtime_checkable

from PIL import Image
from tqdm import tqdm

from ..config import OptionSet
from ..io.models import Artifact, ArtifactManifest, SourceImage, TagTemplate
from .normalize import fit_on_canvas, square_canvas, to_png_rgba, TRANSPARENT
from .platforms import PLATFORMS, IconVariant, Platform

logger = logging.getLogger(__name__)

# Bump whenever rendering output changes; cached artifact sets from other
# versions are discarded.
GENERATOR_VERSION = "pillow-v1"


@runtime_checkable
class GeneratorAdapter(Protocol):
    """Renders a full icon artifact set from a source image."""

    version: str

    def generate(self, source: SourceImage, options: OptionSet) -> ArtifactManifest:
        """Return the artifacts and tag templates for *options*."""
        ...


class PillowIconGenerator:
    """Default generator that rasterizes every enabled platform with Pillow."""

    version = GENERATOR_VERSION

    def __init__(self, progress: bool = True) -> None:
        self.progress = progress

    def generate(self, source: SourceImage, options: OptionSet) -> ArtifactManifest:
        platforms = [PLATFORMS[name] for name in options.enabled_platforms()]
        background = options.background_rgba()
        artifacts: List[Artifact] = []
        tags: List[TagTemplate] = []

        with to_png_rgba(source.data, source.mime) as decoded:
            logo = square_canvas(decoded)
        total = sum(len(platform.variants) for platform in platforms)
        try:
            with tqdm(
                total=total,
                desc="Rendering icons",
                unit="icon",
                leave=False,
                disable=not self.progress,
            ) as progress:
                for platform in platforms:
                    for variant in platform.variants:
                        artifacts.append(_render_variant(logo, variant, platform.name, background))
                        if variant.tag is not None:
                            tags.append(variant.tag)
                        progress.update(1)
                    tags.extend(_fill_tag(tag, options) for tag in platform.tags)
                    if platform.document:
                        artifacts.append(_render_document(platform, platform.document, options))
        finally:
            logo.close()

        logger.debug("Rendered %d artifacts for %s", len(artifacts), source.identifier)
        return ArtifactManifest(
            fingerprint="",
            generator_version=self.version,
            artifacts=artifacts,
            tags=tags,
        )


def _render_variant(
    logo: Image.Image,
    variant: IconVariant,
    role: str,
    background: tuple[int, int, int, int],
) -> Artifact:
    fill = background if variant.opaque else TRANSPARENT
    image = fit_on_canvas(logo, variant.width, variant.height, fill)
    buffer = BytesIO()
    try:
        if variant.ico_sizes:
            image.save(buffer, format="ICO", sizes=[(size, size) for size in variant.ico_sizes])
            mime = "image/x-icon"
        else:
            if variant.opaque:
                image = _flatten(image)
            image.save(buffer, format="PNG", optimize=True)
            mime = "image/png"
    finally:
        image.close()
    return Artifact(
        name=variant.name,
        role=role,
        mime=mime,
        data=buffer.getvalue(),
        width=variant.width,
        height=variant.height,
    )


def _flatten(image: Image.Image) -> Image.Image:
    rgb = image.convert("RGB")
    image.close()
    return rgb


def _fill_tag(tag: TagTemplate, options: OptionSet) -> TagTemplate:
    attrs = {
        key: value.replace("{title}", options.title).replace("{background}", options.background)
        for key, value in tag.attrs.items()
    }
    return TagTemplate(tag.tag, attrs, tag.asset_attr)


def _size_label(variant: IconVariant) -> str:
    return f"{variant.width}x{variant.height}"


def _android_manifest(platform: Platform, options: OptionSet) -> bytes:
    payload = {
        "name": options.title,
        "short_name": options.title,
        "icons": [
            {"src": variant.name, "sizes": _size_label(variant), "type": "image/png"}
            for variant in platform.variants
        ],
        "display": "standalone",
        "background_color": options.background,
        "theme_color": options.background,
    }
    return (json.dumps(payload, indent=2) + "\n").encode("utf-8")


def _firefox_manifest(platform: Platform, options: OptionSet) -> bytes:
    payload = {
        "version": "1.0",
        "name": options.title,
        "icons": {str(variant.width): variant.name for variant in platform.variants},
        "developer": {"name": None, "url": None},
    }
    return (json.dumps(payload, indent=2) + "\n").encode("utf-8")


def _browserconfig(platform: Platform, options: OptionSet) -> bytes:
    root = ET.Element("browserconfig")
    tile = ET.SubElement(ET.SubElement(root, "msapplication"), "tile")
    for variant in platform.variants:
        shape = "square" if variant.width == variant.height else "wide"
        ET.SubElement(tile, f"{shape}{_size_label(variant)}logo", src=variant.name)
    ET.SubElement(tile, "TileColor").text = options.background
    return ET.tostring(root, encoding="utf-8", xml_declaration=True) + b"\n"


def _yandex_manifest(platform: Platform, options: OptionSet) -> bytes:
    payload = {
        "version": "1.0",
        "api_version": 1,
        "layout": {"logo": platform.variants[0].name, "color": options.background},
    }
    return (json.dumps(payload, indent=2) + "\n").encode("utf-8")


_DOCUMENTS: Dict[str, tuple[str, Callable[[Platform, OptionSet], bytes]]] = {
    "manifest.json": ("application/manifest+json", _android_manifest),
    "manifest.webapp": ("application/x-web-app-manifest+json", _firefox_manifest),
    "browserconfig.xml": ("application/xml", _browserconfig),
    "yandex-browser-manifest.json": ("application/json", _yandex_manifest),
}


def _render_document(platform: Platform, document: str, options: OptionSet) -> Artifact:
    mime, builder = _DOCUMENTS[document]
    return Artifact(
        name=document,
        role=platform.name,
        mime=mime,
        data=builder(platform, options),
    )
