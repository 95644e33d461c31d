"""Build plugin that renders favicons and injects them into HTML pages."""

from __future__ import annotations

import logging
from typing import Any, List

from .build import Build
from .cache.store import CacheBackend
from .config import OptionSet, resolve_options
from .emit.emitter import emit
from .emit.html import HtmlPage, inject_tags
from .io.models import TagDescriptor
from .pipeline import CacheGatedPipeline, PipelineResult
from .render.generator import GeneratorAdapter

logger = logging.getLogger(__name__)


class FaviconsPlugin:
    """Generates the icon set for a build, reusing cached results when possible.

    *options* may be a path to the logo, its raw bytes, or a mapping of
    options; it is validated immediately so misconfiguration fails before the
    build starts.
    """

    def __init__(
        self,
        options: Any = None,
        generator: GeneratorAdapter | None = None,
        backend: CacheBackend | None = None,
    ) -> None:
        self.options: OptionSet = resolve_options(options)
        self.generator = generator
        self.backend = backend
        self.tags: List[TagDescriptor] = []
        self.last_result: PipelineResult | None = None

    def apply(self, build: Build) -> None:
        build.hooks.tap("make", self._on_make)
        if self.options.inject:
            build.hooks.tap("html_before_processing", self._on_html)

    def _on_make(self, build: Build) -> None:
        child = build.add_child("favicons")
        pipeline = CacheGatedPipeline(self.options, generator=self.generator, backend=self.backend)
        result = pipeline.run()
        self.tags = emit(result.manifest, child, self.options)
        build.finish_child(child)
        self.last_result = result
        source = "cache" if result.from_cache else "generator"
        logger.info("Emitted %d icon files from %s", len(result.manifest.artifacts), source)

    def _on_html(self, page: HtmlPage) -> None:
        page.html = inject_tags(page.html, self.tags)
