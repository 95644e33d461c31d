"""Cache-gated icon generation: fingerprint, look up, then generate or rehydrate."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .cache.fingerprint import compute
from .cache.store import CacheBackend, CacheStore
from .config import OptionSet
from .errors import CacheWriteError, ConfigurationError, GenerationError
from .io.models import ArtifactManifest, SourceImage
from .render.generator import GeneratorAdapter, PillowIconGenerator
from .source import load_source_image

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    START = "start"
    VALIDATING = "validating"
    FINGERPRINTING = "fingerprinting"
    CACHE_LOOKUP = "cache_lookup"
    CACHE_HIT = "cache_hit"
    REHYDRATE = "rehydrate"
    CACHE_MISS = "cache_miss"
    GENERATE = "generate"
    PERSIST_CACHE = "persist_cache"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Outcome of one pipeline invocation."""

    manifest: ArtifactManifest
    fingerprint: str
    from_cache: bool


class CacheGatedPipeline:
    """Produces an artifact manifest, skipping the generator on a cache hit.

    The cache only ever affects speed: with ``persistent_cache`` disabled, or
    with a corrupt or stale entry, the pipeline generates as on a first run.
    """

    def __init__(
        self,
        options: OptionSet,
        generator: GeneratorAdapter | None = None,
        backend: CacheBackend | None = None,
    ) -> None:
        self.options = options
        self.generator = generator if generator is not None else PillowIconGenerator()
        self.cache: CacheStore | None = None
        if options.persistent_cache:
            if backend is None:
                self.cache = CacheStore.on_disk(options.cache_directory, self.generator.version)
            else:
                self.cache = CacheStore(backend, self.generator.version)
        self.state = PipelineState.START

    def _enter(self, state: PipelineState) -> None:
        logger.debug("Pipeline %s -> %s", self.state.value, state.value)
        self.state = state

    def _validate(self) -> SourceImage:
        source = load_source_image(self.options.source_image)
        if source.mime is None:
            raise ConfigurationError(f"Source image is not a recognised image: {source.identifier}")
        if not self.options.enabled_platforms():
            raise ConfigurationError("At least one icon platform must be enabled")
        return source

    def run(self) -> PipelineResult:
        self._enter(PipelineState.VALIDATING)
        try:
            source = self._validate()
        except ConfigurationError:
            self._enter(PipelineState.FAILED)
            raise

        self._enter(PipelineState.FINGERPRINTING)
        fingerprint = compute(source.data, self.options, self.generator.version)

        if self.cache is not None:
            self._enter(PipelineState.CACHE_LOOKUP)
            entry = self.cache.lookup(fingerprint)
            if entry is not None:
                self._enter(PipelineState.CACHE_HIT)
                logger.info("Reusing cached icons for %s (%s)", source.identifier, fingerprint[:12])
                self._enter(PipelineState.REHYDRATE)
                manifest = entry.manifest
                self._enter(PipelineState.DONE)
                return PipelineResult(manifest=manifest, fingerprint=fingerprint, from_cache=True)

        self._enter(PipelineState.CACHE_MISS)
        logger.info("Generating icons for %s (%s)", source.identifier, fingerprint[:12])
        self._enter(PipelineState.GENERATE)
        try:
            manifest = self.generator.generate(source, self.options)
        except GenerationError:
            self._enter(PipelineState.FAILED)
            raise
        except Exception as exc:
            self._enter(PipelineState.FAILED)
            raise GenerationError(f"Icon generation failed for {source.identifier}: {exc}") from exc
        if not manifest.artifacts:
            self._enter(PipelineState.FAILED)
            raise GenerationError(f"Icon generation produced no artifacts for {source.identifier}")
        manifest.fingerprint = fingerprint

        if self.cache is not None:
            self._enter(PipelineState.PERSIST_CACHE)
            try:
                self.cache.store(fingerprint, self.generator.version, manifest)
            except CacheWriteError as exc:
                logger.warning("%s; continuing without updating the cache", exc)

        self._enter(PipelineState.DONE)
        return PipelineResult(manifest=manifest, fingerprint=fingerprint, from_cache=False)
