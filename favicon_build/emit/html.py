"""HTML page emission and favicon tag injection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from bs4 import BeautifulSoup

from ..io.models import TagDescriptor

if TYPE_CHECKING:
    from ..build import Build

logger = logging.getLogger(__name__)

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title></title>
</head>
<body>
</body>
</html>
"""


def render_tag(descriptor: TagDescriptor) -> str:
    """Return the markup for a single tag descriptor."""
    soup = BeautifulSoup("", "html.parser")
    return str(soup.new_tag(descriptor.tag, attrs=dict(descriptor.attrs)))


def inject_tags(html: str, tags: Sequence[TagDescriptor]) -> str:
    """Append *tags* to the ``<head>`` of *html*, creating one when missing."""
    soup = BeautifulSoup(html, "html.parser")
    head = soup.head
    if head is None:
        head = soup.new_tag("head")
        if soup.html is not None:
            soup.html.insert(0, head)
        else:
            soup.insert(0, head)
    for descriptor in tags:
        head.append(soup.new_tag(descriptor.tag, attrs=dict(descriptor.attrs)))
        head.append("\n")
    return str(soup)


@dataclass
class HtmlPage:
    """A page passed through ``html_before_processing`` before it is emitted."""

    filename: str
    html: str


class HtmlPagePlugin:
    """Emits a minimal HTML page that other plugins may decorate."""

    def __init__(self, filename: str = "index.html", title: str = "Favicons") -> None:
        self.filename = filename
        self.title = title

    def render(self) -> str:
        soup = BeautifulSoup(_PAGE_TEMPLATE, "html.parser")
        soup.title.string = self.title
        return str(soup)

    def apply(self, build: "Build") -> None:
        build.hooks.tap("emit", self._on_emit)

    def _on_emit(self, build: "Build") -> None:
        page = HtmlPage(filename=self.filename, html=self.render())
        build.hooks.call("html_before_processing", page)
        build.emit_asset(page.filename, page.html.encode("utf-8"))
        logger.debug("Emitted page %s", page.filename)
