"""Icon variants and page tags produced for each supported platform."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from ..io.models import TagTemplate


@dataclass(frozen=True)
class IconVariant:
    """A single raster file rendered from the source logo."""

    name: str
    width: int
    height: int
    opaque: bool = False
    ico_sizes: Tuple[int, ...] = ()
    tag: TagTemplate | None = None


@dataclass(frozen=True)
class Platform:
    """Variants, extra tags and an optional manifest document for one platform.

    Attribute values in ``tags`` may contain ``{title}`` and ``{background}``
    placeholders; they are filled in by the generator.
    """

    name: str
    variants: Tuple[IconVariant, ...]
    tags: Tuple[TagTemplate, ...] = ()
    document: str | None = None


def _png_link(rel: str, size: int, name: str) -> TagTemplate:
    return TagTemplate(
        "link",
        {"rel": rel, "type": "image/png", "sizes": f"{size}x{size}", "href": name},
        asset_attr="href",
    )


def _meta(name: str, content: str, asset: bool = False) -> TagTemplate:
    return TagTemplate(
        "meta",
        {"name": name, "content": content},
        asset_attr="content" if asset else None,
    )


def _square(prefix: str, size: int, opaque: bool = False, rel: str | None = None) -> IconVariant:
    name = f"{prefix}-{size}x{size}.png"
    tag = _png_link(rel, size, name) if rel else None
    return IconVariant(name, size, size, opaque=opaque, tag=tag)


def _startup(width: int, height: int, media: str) -> IconVariant:
    name = f"apple-touch-startup-image-{width}x{height}.png"
    tag = TagTemplate(
        "link",
        {"rel": "apple-touch-startup-image", "media": media, "href": name},
        asset_attr="href",
    )
    return IconVariant(name, width, height, opaque=True, tag=tag)


_ANDROID = Platform(
    name="android",
    variants=tuple(_square("android-chrome", size) for size in (36, 48, 72, 96, 144, 192)),
    tags=(
        TagTemplate("link", {"rel": "manifest", "href": "manifest.json"}, asset_attr="href"),
        _meta("mobile-web-app-capable", "yes"),
        _meta("theme-color", "{background}"),
        _meta("application-name", "{title}"),
    ),
    document="manifest.json",
)

_APPLE_ICON = Platform(
    name="appleIcon",
    variants=tuple(
        _square("apple-touch-icon", size, opaque=True, rel="apple-touch-icon")
        for size in (57, 60, 72, 76, 114, 120, 144, 152, 180)
    )
    + (
        IconVariant("apple-touch-icon.png", 180, 180, opaque=True),
        IconVariant("apple-touch-icon-precomposed.png", 180, 180, opaque=True),
    ),
    tags=(
        _meta("apple-mobile-web-app-capable", "yes"),
        _meta("apple-mobile-web-app-status-bar-style", "black-translucent"),
        _meta("apple-mobile-web-app-title", "{title}"),
    ),
)

_APPLE_STARTUP = Platform(
    name="appleStartup",
    variants=(
        _startup(
            320, 460, "(device-width: 320px) and (device-height: 480px) and (-webkit-device-pixel-ratio: 1)"
        ),
        _startup(
            640, 920, "(device-width: 320px) and (device-height: 480px) and (-webkit-device-pixel-ratio: 2)"
        ),
        _startup(
            640, 1096, "(device-width: 320px) and (device-height: 568px) and (-webkit-device-pixel-ratio: 2)"
        ),
        _startup(
            750, 1294, "(device-width: 375px) and (device-height: 667px) and (-webkit-device-pixel-ratio: 2)"
        ),
    ),
)

_COAST = Platform(
    name="coast",
    variants=(_square("coast", 228, opaque=True, rel="icon"),),
)

_FAVICONS = Platform(
    name="favicons",
    variants=(
        _square("favicon", 32, rel="icon"),
        _square("favicon", 16, rel="icon"),
        IconVariant(
            "favicon.ico",
            48,
            48,
            ico_sizes=(16, 32, 48),
            tag=TagTemplate("link", {"rel": "shortcut icon", "href": "favicon.ico"}, asset_attr="href"),
        ),
    ),
)

_FIREFOX = Platform(
    name="firefox",
    variants=tuple(_square("firefox_app", size) for size in (60, 128, 512)),
    document="manifest.webapp",
)

_WINDOWS = Platform(
    name="windows",
    variants=(
        _square("mstile", 70, opaque=True),
        _square("mstile", 144, opaque=True),
        _square("mstile", 150, opaque=True),
        IconVariant("mstile-310x150.png", 310, 150, opaque=True),
        _square("mstile", 310, opaque=True),
    ),
    tags=(
        _meta("msapplication-TileColor", "{background}"),
        _meta("msapplication-TileImage", "mstile-144x144.png", asset=True),
        _meta("msapplication-config", "browserconfig.xml", asset=True),
    ),
    document="browserconfig.xml",
)

_YANDEX = Platform(
    name="yandex",
    variants=(_square("yandex-browser", 50),),
    tags=(
        TagTemplate(
            "link",
            {"rel": "yandex-tableau-widget", "href": "yandex-browser-manifest.json"},
            asset_attr="href",
        ),
    ),
    document="yandex-browser-manifest.json",
)

PLATFORMS: Dict[str, Platform] = {
    platform.name: platform
    for platform in (
        _ANDROID,
        _APPLE_ICON,
        _APPLE_STARTUP,
        _COAST,
        _FAVICONS,
        _FIREFOX,
        _WINDOWS,
        _YANDEX,
    )
}
PLATFORM_NAMES: Tuple[str, ...] = tuple(PLATFORMS)
