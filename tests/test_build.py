import json
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from conftest import CountingGenerator, read_tree

from favicon_build.build import Build
from favicon_build.emit.html import HtmlPagePlugin
from favicon_build.errors import ConfigurationError, EmissionError, FaviconBuildError
from favicon_build.io.models import ArtifactManifest
from favicon_build.plugin import FaviconsPlugin


def _run(out: Path, options: dict, generator=None, html: bool = False):
    favicons = FaviconsPlugin(options, generator=generator or CountingGenerator())
    plugins = [favicons, HtmlPagePlugin()] if html else [favicons]
    return favicons, Build(out, plugins=plugins).run()


def test_default_build_writes_icon_files(fast_options, tmp_path: Path) -> None:
    favicons, stats = _run(tmp_path / "dist", fast_options)

    assert not stats.has_errors()
    prefix = f"icons-{favicons.last_result.fingerprint[:32]}/"
    files = read_tree(tmp_path / "dist")
    assert sorted(files) == sorted(prefix + name for name in ("favicon-16x16.png", "favicon-32x32.png", "favicon.ico"))
    assert "iconstats.json" not in files


def test_configured_stats_file(fast_options, tmp_path: Path) -> None:
    options = {**fast_options, "emitStats": True, "persistentCache": False, "statsFilename": "iconstats.json"}
    _, stats = _run(tmp_path / "dist", options)

    assert not stats.has_errors()
    payload = json.loads((tmp_path / "dist" / "iconstats.json").read_text(encoding="utf-8"))
    manifest = ArtifactManifest.from_dict(payload)
    assert manifest.names() == ["favicon-32x32.png", "favicon-16x16.png", "favicon.ico"]
    assert payload["files"] == [payload["outputFilePrefix"] + name for name in manifest.names()]
    assert not (tmp_path / "cache").exists()


def test_tags_are_injected_into_the_html_page(fast_options, tmp_path: Path) -> None:
    options = {**fast_options, "emitStats": True, "statsFilename": "iconstats.json", "persistentCache": False}
    favicons, stats = _run(tmp_path / "dist", options, html=True)

    assert not stats.has_errors()
    soup = BeautifulSoup((tmp_path / "dist" / "index.html").read_text(encoding="utf-8"), "html.parser")
    hrefs = [link["href"] for link in soup.head.find_all("link")]
    assert hrefs == [tag.attrs["href"] for tag in favicons.tags]
    assert any(href.endswith("/favicon.ico") for href in hrefs)
    for href in hrefs:
        assert (tmp_path / "dist" / href).is_file()

    payload = json.loads((tmp_path / "dist" / "iconstats.json").read_text(encoding="utf-8"))
    assert len(payload["html"]) == len(hrefs)


def test_injection_can_be_disabled(fast_options, tmp_path: Path) -> None:
    favicons, stats = _run(tmp_path / "dist", {**fast_options, "inject": False}, html=True)

    assert not stats.has_errors()
    assert favicons.tags
    soup = BeautifulSoup((tmp_path / "dist" / "index.html").read_text(encoding="utf-8"), "html.parser")
    assert soup.head.find_all("link") == []


def test_build_is_not_regenerated_when_a_cache_entry_exists(fast_options, tmp_path: Path) -> None:
    first_generator = CountingGenerator()
    _, first = _run(tmp_path / "first", fast_options, generator=first_generator, html=True)

    second_generator = CountingGenerator()
    favicons, second = _run(tmp_path / "second", fast_options, generator=second_generator, html=True)

    assert not first.has_errors() and not second.has_errors()
    assert first_generator.calls == 1
    assert second_generator.calls == 0
    assert favicons.last_result.from_cache is True
    assert read_tree(tmp_path / "first") == read_tree(tmp_path / "second")


def test_full_platform_set_is_reproducible(logo_path: Path, tmp_path: Path) -> None:
    options = {"logo": str(logo_path), "cacheDirectory": str(tmp_path / "cache"), "emitStats": True}
    _, first = _run(tmp_path / "first", options, html=True)
    _, second = _run(tmp_path / "second", options, html=True)

    assert not first.has_errors() and not second.has_errors()
    first_files = read_tree(tmp_path / "first")
    assert any(name.endswith("manifest.json") for name in first_files)
    assert any(name.endswith("browserconfig.xml") for name in first_files)
    assert first_files == read_tree(tmp_path / "second")


def test_configuration_errors_surface_through_build_stats(fast_options, tmp_path: Path) -> None:
    options = {**fast_options, "source_image": str(tmp_path / "missing.png")}
    _, stats = _run(tmp_path / "dist", options, html=True)

    assert stats.has_errors()
    assert isinstance(stats.errors[0], ConfigurationError)
    assert not (tmp_path / "dist").exists()


def test_collision_with_another_plugin_fails_the_build(fast_options, tmp_path: Path) -> None:
    class Squatter:
        def apply(self, build: Build) -> None:
            build.hooks.tap("make", lambda b: b.emit_asset("icons/favicon.ico", b"mine"))

    favicons = FaviconsPlugin({**fast_options, "prefix": "icons/"}, generator=CountingGenerator())
    stats = Build(tmp_path / "dist", plugins=[Squatter(), favicons]).run()

    assert stats.has_errors()
    assert isinstance(stats.errors[0], EmissionError)
    assert not (tmp_path / "dist").exists()


def test_child_pass_assets_merge_into_parent(tmp_path: Path) -> None:
    build = Build(tmp_path)
    child = build.add_child("nested")
    child.emit_asset("a/b.txt", b"b")
    assert child.name == "main/nested"
    assert not build.has_asset("a/b.txt")

    build.finish_child(child)
    assert build.assets == {"a/b.txt": b"b"}


@pytest.mark.parametrize("path", ["/etc/passwd", "../outside.txt", "a/../../b", ""])
def test_asset_paths_must_stay_inside_the_output(tmp_path: Path, path: str) -> None:
    with pytest.raises(EmissionError):
        Build(tmp_path).emit_asset(path, b"x")


def test_asset_paths_are_normalized(tmp_path: Path) -> None:
    build = Build(tmp_path)
    build.emit_asset("./icons//favicon.ico", b"x")
    with pytest.raises(EmissionError):
        build.emit_asset("icons/favicon.ico", b"y")


def test_done_hook_receives_stats(tmp_path: Path) -> None:
    received = []
    build = Build(tmp_path)
    build.hooks.tap("make", lambda b: b.emit_asset("hello.txt", b"hi"))
    build.hooks.tap("done", received.append)

    stats = build.run()

    assert received == [stats]
    assert (tmp_path / "hello.txt").read_bytes() == b"hi"


def test_a_build_runs_only_once(tmp_path: Path) -> None:
    build = Build(tmp_path)
    build.hooks.tap("make", lambda b: b.emit_asset("hello.txt", b"hi"))
    assert not build.run().has_errors()

    with pytest.raises(FaviconBuildError, match="already run"):
        build.run()
    assert (tmp_path / "hello.txt").read_bytes() == b"hi"
