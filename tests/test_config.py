from dataclasses import replace
from pathlib import Path

import pytest

from favicon_build.cache.fingerprint import compute
from favicon_build.config import DEFAULT_ICONS, OptionSet, resolve_options
from favicon_build.errors import ConfigurationError
from favicon_build.plugin import FaviconsPlugin


def test_plugin_requires_options() -> None:
    plugin = None
    with pytest.raises(ConfigurationError, match="favicon options are required"):
        plugin = FaviconsPlugin()
    assert plugin is None


def test_plugin_accepts_a_path_string(logo_path: Path) -> None:
    plugin = FaviconsPlugin(str(logo_path))
    assert plugin.options.source_image == str(logo_path)


@pytest.mark.parametrize("key", ["source_image", "sourceImage", "logo"])
def test_plugin_accepts_a_mapping_with_only_the_source(logo_path: Path, key: str) -> None:
    plugin = FaviconsPlugin({key: str(logo_path)})
    assert plugin.options.source_image == str(logo_path)


def test_path_objects_are_converted_to_strings(logo_path: Path) -> None:
    assert resolve_options(logo_path).source_image == str(logo_path)


def test_raw_bytes_are_kept(logo_bytes: bytes) -> None:
    assert resolve_options(logo_bytes).source_image == logo_bytes


def test_defaults(logo_path: Path) -> None:
    options = resolve_options(str(logo_path))
    assert options.emit_stats is False
    assert options.persistent_cache is True
    assert options.inject is True
    assert options.prefix == "icons-[hash]/"
    assert dict(options.icons) == DEFAULT_ICONS
    assert "coast" not in options.enabled_platforms()


def test_camel_case_aliases(logo_path: Path, tmp_path: Path) -> None:
    options = resolve_options(
        {
            "logo": str(logo_path),
            "emitStats": True,
            "statsFilename": "iconstats.json",
            "persistentCache": False,
            "cacheDirectory": tmp_path,
            "publicPath": "/static/",
        }
    )
    assert options.emit_stats is True
    assert options.stats_filename == "iconstats.json"
    assert options.persistent_cache is False
    assert options.cache_directory == str(tmp_path)
    assert options.public_path == "/static/"


def test_icon_overrides_merge_with_defaults(logo_path: Path) -> None:
    options = resolve_options({"logo": str(logo_path), "icons": {"coast": True, "android": False}})
    assert options.icons["coast"] is True
    assert options.icons["android"] is False
    assert options.icons["favicons"] is True


def test_resolved_icons_are_read_only(logo_path: Path, logo_bytes: bytes) -> None:
    options = resolve_options(str(logo_path))
    before = compute(logo_bytes, options, "v1")

    with pytest.raises(TypeError):
        options.icons["coast"] = True  # type: ignore[index]

    assert compute(logo_bytes, options, "v1") == before
    assert hash(options) == hash(resolve_options(str(logo_path)))
    assert replace(options, icons={"favicons": True}).icons.get("coast") is None


def test_existing_option_set_is_returned_unchanged(logo_path: Path) -> None:
    options = OptionSet(source_image=str(logo_path))
    assert resolve_options(options) is options


def test_construction_does_not_touch_the_filesystem() -> None:
    options = resolve_options("/definitely/not/here.png")
    assert options.source_image == "/definitely/not/here.png"


@pytest.mark.parametrize(
    "options, message",
    [
        ({"emitStats": True}, "source image"),
        ({"logo": ""}, "non-empty"),
        ({"logo": b""}, "must not be empty"),
        ({"logo": "logo.png", "colour": "red"}, "Unknown favicon option"),
        ({"logo": "logo.png", "icons": {"amiga": True}}, "Unknown icon platform"),
        ({"logo": "logo.png", "icons": {"favicons": "yes"}}, "boolean"),
        ({"logo": "logo.png", "icons": {name: False for name in DEFAULT_ICONS}}, "At least one"),
        ({"logo": "logo.png", "emitStats": "true"}, "boolean"),
        ({"logo": "logo.png", "emitStats": True, "statsFilename": " "}, "stats_filename"),
        ({"logo": "logo.png", "background": "not-a-colour"}, "background"),
        (42, "path, bytes, or a mapping"),
    ],
)
def test_invalid_options_raise_configuration_errors(options, message: str) -> None:
    with pytest.raises(ConfigurationError, match=message):
        resolve_options(options)


def test_configuration_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        resolve_options(None)


def test_render_options_exclude_emission_settings(logo_path: Path) -> None:
    options = resolve_options({"logo": str(logo_path), "prefix": "x/", "emitStats": True})
    assert set(options.render_options()) == {"platforms", "background", "title"}
