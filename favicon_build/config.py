"""Configuration objects and option normalization for favicon builds."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping

from PIL import ImageColor

from .errors import ConfigurationError
from .render.platforms import PLATFORM_NAMES

DEFAULT_PREFIX = "icons-[hash]/"
DEFAULT_STATS_FILENAME = "iconstats-[hash].json"
DEFAULT_CACHE_DIRECTORY = ".favicon-cache"
DEFAULT_BACKGROUND = "#fff"
DEFAULT_TITLE = "Favicons"
DEFAULT_ICONS: Dict[str, bool] = {
    "android": True,
    "appleIcon": True,
    "appleStartup": True,
    "coast": False,
    "favicons": True,
    "firefox": True,
    "windows": True,
    "yandex": False,
}

_ALIASES = {
    "logo": "source_image",
    "sourceImage": "source_image",
    "emitStats": "emit_stats",
    "statsFilename": "stats_filename",
    "persistentCache": "persistent_cache",
    "cacheDirectory": "cache_directory",
    "publicPath": "public_path",
}


@dataclass(frozen=True)
class OptionSet:
    """Fully resolved settings for one icon generation request."""

    source_image: str | bytes
    prefix: str = DEFAULT_PREFIX
    emit_stats: bool = False
    stats_filename: str = DEFAULT_STATS_FILENAME
    persistent_cache: bool = True
    cache_directory: str = DEFAULT_CACHE_DIRECTORY
    inject: bool = True
    public_path: str = ""
    background: str = DEFAULT_BACKGROUND
    title: str = DEFAULT_TITLE
    icons: Mapping[str, bool] = field(default_factory=lambda: dict(DEFAULT_ICONS), hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.icons, MappingProxyType):
            object.__setattr__(self, "icons", MappingProxyType(dict(self.icons)))

    def enabled_platforms(self) -> tuple[str, ...]:
        """Return enabled platform names in table order."""
        return tuple(name for name in PLATFORM_NAMES if self.icons.get(name))

    def background_rgba(self) -> tuple[int, int, int, int]:
        rgb = ImageColor.getrgb(self.background)
        if len(rgb) == 4:
            return rgb  # type: ignore[return-value]
        return (rgb[0], rgb[1], rgb[2], 255)

    def render_options(self) -> Dict[str, Any]:
        """Return the options that change generated bytes.

        Emission settings (prefix, stats, cache and injection flags) are left
        out so renaming outputs reuses the cached artifact set.
        """
        return {
            "platforms": list(self.enabled_platforms()),
            "background": self.background,
            "title": self.title,
        }


def resolve_options(options: Any) -> OptionSet:
    """Normalize a path, raw bytes, or an options mapping into an :class:`OptionSet`."""
    if options is None:
        raise ConfigurationError("favicon options are required")
    if isinstance(options, OptionSet):
        return options
    if isinstance(options, (str, bytes, os.PathLike)):
        options = {"source_image": options}
    if not isinstance(options, Mapping):
        raise ConfigurationError(
            f"favicon options must be a path, bytes, or a mapping, not {type(options).__name__}"
        )

    known = {item.name for item in fields(OptionSet)}
    values: Dict[str, Any] = {}
    for key, value in options.items():
        name = _ALIASES.get(key, key)
        if name not in known:
            raise ConfigurationError(f"Unknown favicon option: {key!r}")
        values[name] = value

    if values.get("source_image") is None:
        raise ConfigurationError("favicon options require a source image")
    values["source_image"] = _coerce_source(values["source_image"])
    if "cache_directory" in values:
        values["cache_directory"] = _coerce_path("cache_directory", values["cache_directory"])
    for name in ("emit_stats", "persistent_cache", "inject"):
        if name in values and not isinstance(values[name], bool):
            raise ConfigurationError(f"Option {name!r} must be a boolean")
    for name in ("prefix", "stats_filename", "public_path", "background", "title"):
        if name in values and not isinstance(values[name], str):
            raise ConfigurationError(f"Option {name!r} must be a string")
    values["icons"] = _merge_icons(values.get("icons"))

    resolved = OptionSet(**values)
    if resolved.emit_stats and not resolved.stats_filename.strip():
        raise ConfigurationError("Option 'stats_filename' must not be empty when emit_stats is set")
    try:
        resolved.background_rgba()
    except ValueError as exc:
        raise ConfigurationError(f"Invalid background color: {resolved.background!r}") from exc
    if not resolved.enabled_platforms():
        raise ConfigurationError("At least one icon platform must be enabled")
    return resolved


def _coerce_source(value: Any) -> str | bytes:
    if isinstance(value, (bytes, bytearray)):
        if not value:
            raise ConfigurationError("Source image bytes must not be empty")
        return bytes(value)
    if isinstance(value, os.PathLike):
        value = os.fspath(value)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError("Source image must be a non-empty path, URL, or bytes")
    return value


def _coerce_path(name: str, value: Any) -> str:
    if isinstance(value, os.PathLike):
        return os.fspath(value)
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"Option {name!r} must be a path")
    return value


def _merge_icons(value: Any) -> Dict[str, bool]:
    icons = dict(DEFAULT_ICONS)
    if value is None:
        return icons
    if not isinstance(value, Mapping):
        raise ConfigurationError("Option 'icons' must map platform names to booleans")
    for name, enabled in value.items():
        if name not in PLATFORM_NAMES:
            raise ConfigurationError(
                f"Unknown icon platform {name!r}; expected one of {sorted(PLATFORM_NAMES)}"
            )
        if not isinstance(enabled, bool):
            raise ConfigurationError(f"Icon platform {name!r} must be enabled with a boolean")
        icons[name] = enabled
    return icons
