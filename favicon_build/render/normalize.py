"""Utilities for turning the source logo into square, resized icon canvases."""

from __future__ import annotations

from io import BytesIO

from PIL import Image

try:  # pragma: no cover - optional dependency
    import cairosvg  # type: ignore
except Exception:  # pragma: no cover - optional dependency
    cairosvg = None  # type: ignore[assignment]

SVG_MIME_TYPES = {"image/svg+xml", "image/svg", "text/svg"}
_SVG_RENDER_SIZE = 1024
TRANSPARENT = (0, 0, 0, 0)


def to_png_rgba(image_bytes: bytes, mime_hint: str | None) -> Image.Image:
    """Return a Pillow image in RGBA mode, rasterizing SVG input when possible."""
    if not image_bytes:
        raise ValueError("Empty image payload cannot be normalized")

    data = image_bytes
    mime = (mime_hint or "").lower()
    is_svg = mime in SVG_MIME_TYPES or looks_like_svg(image_bytes)

    if is_svg:
        if cairosvg is None:
            raise ValueError("SVG source images require the optional cairosvg package")
        data = cairosvg.svg2png(  # type: ignore[attr-defined]
            bytestring=image_bytes,
            output_width=_SVG_RENDER_SIZE,
            output_height=_SVG_RENDER_SIZE,
        )

    with Image.open(BytesIO(data)) as img:
        return img.convert("RGBA")


def square_canvas(img: Image.Image) -> Image.Image:
    """Center *img* on a transparent square canvas sized to its longest side."""
    if img.mode != "RGBA":
        img = img.convert("RGBA")

    width, height = img.size
    if width == height:
        return img.copy()

    side = max(width, height)
    canvas = Image.new("RGBA", (side, side), color=TRANSPARENT)
    canvas.paste(img, ((side - width) // 2, (side - height) // 2), mask=img)
    return canvas


def _resample_filter() -> int:
    resample_attr = getattr(Image, "Resampling", None)
    resample_filter = getattr(resample_attr, "LANCZOS", None) if resample_attr else None
    if resample_filter is None:
        resample_filter = getattr(Image, "LANCZOS", Image.BICUBIC)
    return resample_filter


def resize_logo(img: Image.Image, size: int) -> Image.Image:
    """Return a square *img* resized to size-by-size with antialiasing."""
    if size <= 0:
        raise ValueError("Size must be a positive integer")

    if img.mode != "RGBA":
        img = img.convert("RGBA")

    return img.resize((size, size), _resample_filter())


def fit_on_canvas(
    logo: Image.Image,
    width: int,
    height: int,
    background: tuple[int, int, int, int] = TRANSPARENT,
) -> Image.Image:
    """Scale the square *logo* to fit a width-by-height canvas and center it.

    Non-transparent backgrounds are flattened so the result has no alpha holes.
    """
    side = min(width, height)
    resized = resize_logo(logo, side)
    canvas = Image.new("RGBA", (width, height), color=background)
    offset = ((width - side) // 2, (height - side) // 2)
    if background[3] == 0:
        canvas.paste(resized, offset, mask=resized)
        resized.close()
        return canvas

    layer = Image.new("RGBA", (width, height), color=TRANSPARENT)
    layer.paste(resized, offset)
    flattened = Image.alpha_composite(canvas, layer)
    layer.close()
    canvas.close()
    resized.close()
    return flattened


def looks_like_svg(image_bytes: bytes) -> bool:
    snippet = image_bytes[:1024].lstrip().lower()
    return snippet.startswith(b"<svg") or (
        snippet.startswith(b"<?xml") and b"<svg" in snippet
    )
