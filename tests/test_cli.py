from pathlib import Path

import pytest

from favicon_build import cli


def _args(logo_path: Path, tmp_path: Path, *extra: str) -> list[str]:
    return [
        str(logo_path),
        "--out",
        str(tmp_path / "dist"),
        "--cache-dir",
        str(tmp_path / "cache"),
        "--platform",
        "favicons",
        *extra,
    ]


def test_parse_args_defaults(logo_path: Path) -> None:
    args = cli.parse_args([str(logo_path), "--out", "dist"])
    options = cli.build_options(args)
    assert options["source_image"] == str(logo_path)
    assert options["persistent_cache"] is True
    assert options["emit_stats"] is False
    assert options["inject"] is False
    assert "icons" not in options


def test_platform_flags_select_icons(logo_path: Path) -> None:
    args = cli.parse_args([str(logo_path), "--out", "dist", "--platform", "favicons", "--platform", "coast"])
    icons = cli.build_options(args)["icons"]
    assert {name for name, enabled in icons.items() if enabled} == {"favicons", "coast"}


def test_unknown_platform_is_a_usage_error(logo_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_args([str(logo_path), "--out", "dist", "--platform", "amiga"])
    assert excinfo.value.code == 2


def test_main_builds_and_then_reuses_the_cache(logo_path: Path, tmp_path: Path, capsys) -> None:
    assert cli.main(_args(logo_path, tmp_path, "--html", "index.html", "--emit-stats")) == 0
    first = capsys.readouterr().out
    assert "[cache] miss" in first
    assert (tmp_path / "dist" / "index.html").is_file()
    assert any((tmp_path / "dist").glob("iconstats-*.json"))

    assert cli.main(_args(logo_path, tmp_path)) == 0
    assert "[cache] hit" in capsys.readouterr().out


def test_main_without_cache(logo_path: Path, tmp_path: Path, capsys) -> None:
    assert cli.main(_args(logo_path, tmp_path, "--no-persistent-cache")) == 0
    assert "[cache] miss" in capsys.readouterr().out
    assert not (tmp_path / "cache").exists()


def test_main_reports_missing_logo(tmp_path: Path, capsys) -> None:
    assert cli.main(_args(tmp_path / "missing.png", tmp_path)) == 1
    assert "[error] Source image does not exist" in capsys.readouterr().out


def test_main_reports_invalid_options(logo_path: Path, tmp_path: Path, capsys) -> None:
    assert cli.main(_args(logo_path, tmp_path, "--background", "nope")) == 1
    assert "[error] Invalid background color" in capsys.readouterr().out
