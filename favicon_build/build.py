"""A small event-driven build context that plugins hook into."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, List, Protocol, Sequence

from .errors import EmissionError, FaviconBuildError

logger = logging.getLogger(__name__)

Hook = Callable[..., Any]


class Plugin(Protocol):
    def apply(self, build: "Build") -> None:
        ...


class HookRegistry:
    """Named lists of callbacks invoked in registration order."""

    def __init__(self) -> None:
        self._hooks: Dict[str, List[Hook]] = defaultdict(list)

    def tap(self, name: str, callback: Hook) -> None:
        self._hooks[name].append(callback)

    def call(self, name: str, *args: Any) -> None:
        for callback in list(self._hooks.get(name, ())):
            callback(*args)


@dataclass(slots=True)
class BuildStats:
    """Summary of a finished build."""

    name: str
    output_dir: Path
    assets: Dict[str, bytes] = field(default_factory=dict)
    errors: List[BaseException] = field(default_factory=list)

    def has_errors(self) -> bool:
        return bool(self.errors)


class Build:
    """One build invocation writing into its own output directory.

    Hooks: ``make`` (produce assets), ``emit`` (last chance to add assets
    before the output is sealed), ``html_before_processing`` and ``done``.
    A Build runs once.
    """

    def __init__(
        self,
        output_dir: str | Path,
        plugins: Sequence[Plugin] = (),
        name: str = "main",
        parent: "Build | None" = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.plugins = list(plugins)
        self.name = name
        self.parent = parent
        self.hooks = HookRegistry()
        self.assets: Dict[str, bytes] = {}
        self._started = False

    def emit_asset(self, path: str, data: bytes) -> None:
        key = _normalize_asset_path(path)
        if key in self.assets or (self.parent is not None and self.parent.has_asset(key)):
            raise EmissionError(key, "another file is already scheduled at this path")
        self.assets[key] = bytes(data)

    def has_asset(self, path: str) -> bool:
        key = _normalize_asset_path(path)
        if key in self.assets:
            return True
        return self.parent is not None and self.parent.has_asset(key)

    def add_child(self, name: str) -> "Build":
        """Create a nested pass whose assets are merged into this build."""
        return Build(self.output_dir, name=f"{self.name}/{name}", parent=self)

    def finish_child(self, child: "Build") -> None:
        for path, data in child.assets.items():
            self.emit_asset(path, data)

    def run(self) -> BuildStats:
        """Run all hooks and write the resulting assets to the output directory.

        Errors raised by plugins are collected in the returned stats and
        nothing is written.
        """
        if self._started:
            raise FaviconBuildError(f"Build {self.name} has already run; create a new Build instead")
        self._started = True
        stats = BuildStats(name=self.name, output_dir=self.output_dir)
        try:
            for plugin in self.plugins:
                plugin.apply(self)
            self.hooks.call("make", self)
            self.hooks.call("emit", self)
            self._write_assets()
        except Exception as exc:  # noqa: BLE001 - reported through BuildStats
            logger.error("Build %s failed: %s", self.name, exc)
            stats.errors.append(exc)
            return stats
        stats.assets = dict(self.assets)
        self.hooks.call("done", stats)
        return stats

    def _write_assets(self) -> None:
        for key, data in sorted(self.assets.items()):
            destination = self.output_dir.joinpath(*PurePosixPath(key).parts)
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(data)
            except OSError as exc:
                raise EmissionError(key, str(exc)) from exc


def _normalize_asset_path(path: str) -> str:
    relative = PurePosixPath(path.replace("\\", "/"))
    parts = [part for part in relative.parts if part not in ("", ".")]
    if relative.is_absolute() or ".." in parts or not parts:
        raise EmissionError(path, "asset paths must be relative and stay inside the output directory")
    return "/".join(parts)
