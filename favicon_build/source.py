"""Loading of the source logo from disk, raw bytes, or an HTTP URL."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import requests
from PIL import Image, UnidentifiedImageError
from PIL.Image import DecompressionBombError
from tenacity import (  # type: ignore[import-untyped]
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .errors import ConfigurationError
from .io.models import SourceImage
from .render.normalize import looks_like_svg

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10.0
_USER_AGENT = "favicon-build/0.1"


class RetryableHTTPStatusError(Exception):
    """Raised for HTTP status codes that should trigger a retry."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Server returned status {status_code}")
        self.status_code = status_code


_retryer = Retrying(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=5),
    retry=retry_if_exception_type(
        (requests.Timeout, requests.ConnectionError, RetryableHTTPStatusError)
    ),
    before_sleep=before_sleep_log(logger, logging.DEBUG),
    reraise=True,
)


def _fetch_once(url: str, timeout: float) -> bytes:
    response = requests.get(
        url,
        headers={"User-Agent": _USER_AGENT, "Accept": "image/*,*/*;q=0.8"},
        timeout=timeout,
        allow_redirects=True,
    )
    if 500 <= response.status_code < 600:
        raise RetryableHTTPStatusError(response.status_code)
    response.raise_for_status()
    return response.content


def fetch_image_bytes(url: str, timeout: float = _DEFAULT_TIMEOUT) -> bytes:
    """Download *url*, retrying transient failures, and return its body."""
    try:
        return _retryer(lambda: _fetch_once(url, timeout))
    except (RetryableHTTPStatusError, requests.RequestException) as exc:
        raise ConfigurationError(f"Unable to fetch source image {url}: {exc}") from exc


def sniff_mime(image_bytes: bytes) -> str | None:
    """Return the MIME type of *image_bytes* if Pillow or the SVG check recognises it."""
    if looks_like_svg(image_bytes):
        return "image/svg+xml"
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            return Image.MIME.get(image.format or "")
    except (UnidentifiedImageError, DecompressionBombError, OSError):
        logger.debug("Unable to sniff image type", exc_info=True)
    return None


def load_source_image(ref: str | bytes) -> SourceImage:
    """Read the logo referenced by *ref* and return its bytes with a MIME hint."""
    if isinstance(ref, bytes):
        identifier, data = "<bytes>", ref
    elif ref.startswith(("http://", "https://")):
        identifier, data = ref, fetch_image_bytes(ref)
    else:
        path = Path(ref)
        if not path.is_file():
            raise ConfigurationError(f"Source image does not exist: {path}")
        identifier = str(path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ConfigurationError(f"Unable to read source image {path}: {exc}") from exc

    if not data:
        raise ConfigurationError(f"Source image is empty: {identifier}")
    return SourceImage(identifier=identifier, data=data, mime=sniff_mime(data))
