"""Command-line interface for the favicon_build project."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Iterable

from .build import Build, BuildStats
from .config import DEFAULT_CACHE_DIRECTORY, DEFAULT_PREFIX, DEFAULT_STATS_FILENAME
from .emit.html import HtmlPagePlugin
from .errors import ConfigurationError
from .plugin import FaviconsPlugin
from .render.platforms import PLATFORM_NAMES


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for a favicon build."""
    parser = argparse.ArgumentParser(
        description="Render a favicon set from a logo, reusing cached results when possible."
    )
    parser.add_argument("logo", help="Path or http(s) URL of the source logo.")
    parser.add_argument(
        "--out",
        required=True,
        help="Directory where the build output will be written.",
    )
    parser.add_argument(
        "--prefix",
        default=DEFAULT_PREFIX,
        help="Output subdirectory template for icon files; [hash] is replaced by the fingerprint.",
    )
    parser.add_argument(
        "--emit-stats",
        action="store_true",
        help="Also write a JSON stats file describing the emitted icons.",
    )
    parser.add_argument(
        "--stats-filename",
        default=DEFAULT_STATS_FILENAME,
        help="File name of the stats file (used with --emit-stats).",
    )
    parser.add_argument(
        "--no-persistent-cache",
        action="store_true",
        help="Always regenerate icons and leave the cache untouched.",
    )
    parser.add_argument(
        "--cache-dir",
        default=DEFAULT_CACHE_DIRECTORY,
        help="Directory holding cached icon sets.",
    )
    parser.add_argument(
        "--html",
        default=None,
        metavar="FILE",
        help="Emit an HTML page with the icon tags injected into its head.",
    )
    parser.add_argument("--title", default=None, help="Application name used in manifests.")
    parser.add_argument("--background", default=None, help="Background color for opaque icons.")
    parser.add_argument("--public-path", default="", help="URL prefix for icon links.")
    parser.add_argument(
        "--platform",
        action="append",
        choices=PLATFORM_NAMES,
        metavar="NAME",
        help=f"Render only these platforms (repeatable). Choices: {', '.join(PLATFORM_NAMES)}.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def build_options(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate parsed arguments into a favicon options mapping."""
    options: Dict[str, Any] = {
        "source_image": args.logo,
        "prefix": args.prefix,
        "emit_stats": args.emit_stats,
        "stats_filename": args.stats_filename,
        "persistent_cache": not args.no_persistent_cache,
        "cache_directory": args.cache_dir,
        "public_path": args.public_path,
        "inject": args.html is not None,
    }
    if args.title is not None:
        options["title"] = args.title
    if args.background is not None:
        options["background"] = args.background
    if args.platform:
        options["icons"] = {name: name in args.platform for name in PLATFORM_NAMES}
    return options


def _report(stats: BuildStats, plugin: FaviconsPlugin) -> None:
    result = plugin.last_result
    if result is not None:
        state = "hit" if result.from_cache else "miss"
        print(f"[cache] {state} {result.fingerprint[:12]}")
    for path in sorted(stats.assets):
        print(f"[saved] {stats.output_dir / path}")


def main(argv: Iterable[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        favicons = FaviconsPlugin(build_options(args))
    except ConfigurationError as exc:
        print(f"[error] {exc}")
        return 1

    plugins: list[Any] = [favicons]
    if args.html is not None:
        plugins.append(HtmlPagePlugin(filename=args.html, title=favicons.options.title))

    stats = Build(Path(args.out), plugins=plugins).run()
    if stats.has_errors():
        for error in stats.errors:
            print(f"[error] {error}")
        return 1
    _report(stats, favicons)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
