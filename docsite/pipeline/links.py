"""Link validation and asset-reference passes.

Three tree processors live here, registered in this order:

* :class:`LinkValidationTreeprocessor` checks internal ``<a>`` targets
  against the slug index and records misses without touching the node.
* :class:`ImageTreeprocessor` swaps local ``<img>`` nodes for opaque
  ``<doc-image>`` references.
* :class:`AssetLinkTreeprocessor` swaps links to downloadable files for
  ``<doc-asset-link>`` references.

Examples
--------
>>> candidate_slug("./guides/setup.mdx")
'guides/setup'
>>> candidate_slug("/en/docs/v1/api/index?tab=2#auth")
'api'
>>> is_binary_asset("reports/q3.PDF")
True
"""

from __future__ import annotations

import posixpath
import re
import typing as typ
import xml.etree.ElementTree as etree
from urllib.parse import urlsplit

from markdown.treeprocessors import Treeprocessor

from docsite._constants import (
    BINARY_ASSET_EXTENSIONS,
    DOCS_ROUTE_TEMPLATE,
    EXTERNAL_IMAGE_PREFIXES,
    EXTERNAL_LINK_PREFIXES,
    MARKDOWN_SUFFIXES,
)

from .tree import parent_map, replace_element, text_content

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from .models import TransformState
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

DOCS_ROUTE_PATTERN = re.compile(r"^/[^/]+/docs/[^/]+(?:/|$)")
IMAGE_TAG = "doc-image"
ASSET_LINK_TAG = "doc-asset-link"


def is_external(target: str) -> bool:
    """Return True for absolute URLs, protocol-relative URLs, and mailto links."""
    return target.lower().startswith(EXTERNAL_LINK_PREFIXES)


def is_anchor(target: str) -> bool:
    return target.startswith("#")


def is_binary_asset(target: str) -> bool:
    """Return True when ``target`` points at a file in the binary asset set."""
    path = urlsplit(target).path
    _stem, suffix = posixpath.splitext(path)
    return suffix.lower() in BINARY_ASSET_EXTENSIONS


def docs_route_pattern(
    locale: str | None = None, version: str | None = None
) -> re.Pattern[str]:
    """Return the pattern matching the docs route prefix for a scope.

    Without a full scope any ``/<locale>/docs/<version>`` prefix matches.
    With one, only that scope's own route does, so links into another
    locale or version keep their prefix and fail the slug lookup.

    Examples
    --------
    >>> bool(docs_route_pattern("en", "v1").match("/en/docs/v1/intro"))
    True
    >>> bool(docs_route_pattern("en", "v1").match("/fr/docs/v9/intro"))
    False
    """
    if locale and version:
        route = DOCS_ROUTE_TEMPLATE.format(locale=locale, version=version)
        return re.compile(rf"^{re.escape(route)}(?:/|$)")
    return DOCS_ROUTE_PATTERN


def candidate_slug(
    target: str, locale: str | None = None, version: str | None = None
) -> str:
    """Derive the slug an internal link target refers to.

    Query strings and fragments are dropped, the ``/<locale>/docs/<version>``
    route prefix is removed, and relative markers, Markdown suffixes, and a
    trailing ``index`` segment are stripped. When ``locale`` and ``version``
    are both given, only that scope's route prefix and its
    ``<locale>/<version>/`` path prefix are removed.
    """
    path = urlsplit(target).path
    path = docs_route_pattern(locale, version).sub("", path, count=1)
    scope_prefix = f"{locale}/{version}/" if locale and version else None
    if scope_prefix and path.lstrip("/").startswith(scope_prefix):
        path = path.lstrip("/")[len(scope_prefix) :]
    if path:
        path = posixpath.normpath(path)
    while path.startswith(("./", "../")):
        path = path.split("/", 1)[1]
    path = path.strip("/")
    if path in {".", ".."}:
        return ""
    stem, suffix = posixpath.splitext(path)
    if suffix.lower() in MARKDOWN_SUFFIXES:
        path = stem
    if path == "index":
        return ""
    if path.endswith("/index"):
        return path[: -len("/index")]
    return path


class LinkValidationTreeprocessor(Treeprocessor):
    """Record internal links whose slug is missing from the index."""

    def __init__(
        self,
        md: Markdown,
        state: TransformState,
        slug_index: typ.Container[str],
        locale: str | None = None,
        version: str | None = None,
    ) -> None:
        super().__init__(md)
        self.state = state
        self.slug_index = slug_index
        self.locale = locale
        self.version = version

    def run(self, root: Element) -> None:
        for element in root.iter("a"):
            href = element.get("href")
            if not href or is_external(href) or is_anchor(href):
                continue
            if is_binary_asset(href):
                continue
            slug = candidate_slug(href, self.locale, self.version)
            if slug not in self.slug_index:
                self.state.link_errors.append(f"Broken internal link: {href}")


class ImageTreeprocessor(Treeprocessor):
    """Replace local images with ``<doc-image>`` references."""

    def run(self, root: Element) -> None:
        images = [
            image
            for image in root.iter("img")
            if not image.get("src", "").lower().startswith(EXTERNAL_IMAGE_PREFIXES)
        ]
        if not images:
            return
        parents = parent_map(root)
        for image in images:
            reference = etree.Element(IMAGE_TAG)
            reference.set("src", image.get("src", ""))
            reference.set("alt", image.get("alt", ""))
            title = image.get("title")
            if title:
                reference.set("title", title)
            replace_element(parents, image, reference)


class AssetLinkTreeprocessor(Treeprocessor):
    """Replace links to downloadable files with ``<doc-asset-link>`` references."""

    def run(self, root: Element) -> None:
        links = [
            link
            for link in root.iter("a")
            if (href := link.get("href"))
            and not is_external(href)
            and not is_anchor(href)
            and is_binary_asset(href)
        ]
        if not links:
            return
        parents = parent_map(root)
        for link in links:
            href = link.get("href", "")
            reference = etree.Element(ASSET_LINK_TAG)
            reference.set("href", href)
            reference.set("download", posixpath.basename(urlsplit(href).path))
            text = text_content(link).strip()
            if text:
                reference.set("text", text)
                reference.text = text
            title = link.get("title")
            if title:
                reference.set("title", title)
            replace_element(parents, link, reference)


__all__ = [
    "ASSET_LINK_TAG",
    "IMAGE_TAG",
    "AssetLinkTreeprocessor",
    "ImageTreeprocessor",
    "LinkValidationTreeprocessor",
    "candidate_slug",
    "docs_route_pattern",
    "is_anchor",
    "is_binary_asset",
    "is_external",
]
