from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from favicon_build.io.models import ArtifactManifest, SourceImage
from favicon_build.render.generator import PillowIconGenerator
from favicon_build.render.platforms import PLATFORM_NAMES

FAVICONS_ONLY = {name: name == "favicons" for name in PLATFORM_NAMES}


class CountingGenerator:
    """Wraps the Pillow generator and records how often it runs."""

    def __init__(self, version: str | None = None) -> None:
        self.inner = PillowIconGenerator(progress=False)
        self.version = version or self.inner.version
        self.calls = 0

    def generate(self, source: SourceImage, options) -> ArtifactManifest:
        self.calls += 1
        manifest = self.inner.generate(source, options)
        manifest.generator_version = self.version
        return manifest


def _draw_logo(color: tuple[int, int, int, int]) -> Image.Image:
    image = Image.new("RGBA", (96, 64), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    draw.ellipse((20, 4, 76, 60), fill=color)
    draw.rectangle((40, 24, 56, 40), fill=(255, 255, 255, 255))
    return image


@pytest.fixture
def logo_path(tmp_path: Path) -> Path:
    path = tmp_path / "logo.png"
    _draw_logo((200, 30, 30, 255)).save(path, format="PNG")
    return path


@pytest.fixture
def logo_bytes(logo_path: Path) -> bytes:
    return logo_path.read_bytes()


@pytest.fixture
def other_logo_path(tmp_path: Path) -> Path:
    path = tmp_path / "other-logo.png"
    _draw_logo((30, 30, 200, 255)).save(path, format="PNG")
    return path


@pytest.fixture
def counting_generator() -> CountingGenerator:
    return CountingGenerator()


@pytest.fixture
def fast_options(logo_path: Path, tmp_path: Path) -> dict:
    """Options that only render the favicon platform and cache under tmp_path."""
    return {
        "source_image": str(logo_path),
        "icons": dict(FAVICONS_ONLY),
        "cache_directory": str(tmp_path / "cache"),
    }


def read_tree(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }
