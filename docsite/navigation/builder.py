"""Build navigation trees from the content directory.

The builder walks ``<content_root>/<locale>/<version>`` once. Directories
become groups ordered by their lowest child, Markdown files become pages, and
an optional sidebar config then hides, retitles, and reorders items before the
whole forest is sorted by ``(order, title)``.

Example
-------
>>> from pathlib import Path
>>> from docsite.navigation import NavigationBuilder, get_navigation_stats
>>> tree = NavigationBuilder(Path("content")).build_tree("en", "v1")  # doctest: +SKIP
>>> get_navigation_stats(tree).pages_count  # doctest: +SKIP
12
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ
from pathlib import Path

from docsite._constants import DOCS_ROUTE_TEMPLATE, SIDEBAR_CONFIG_PREFIX
from docsite.content import ContentLoader, is_markdown_file

from .models import NavigationItem, NavigationKind, NavigationStats
from .sidebar import apply_sidebar_config, load_sidebar_config

if typ.TYPE_CHECKING:
    from docsite.content import ContentDocument

    from .models import NavigationTree

logger = logging.getLogger(__name__)

NAME_SEPARATOR_PATTERN = re.compile(r"[-_\s.]+")
VERSION_TOKEN_PATTERN = re.compile(r"^v\d+$")

DIRECTORY_NAME_TERMS = {
    "api": "API",
    "ui": "UI",
    "ux": "UX",
    "faq": "FAQ",
    "sdk": "SDK",
    "cli": "CLI",
    "http": "HTTP",
    "https": "HTTPS",
    "json": "JSON",
    "xml": "XML",
    "css": "CSS",
    "html": "HTML",
    "js": "JavaScript",
    "ts": "TypeScript",
    "oauth": "OAuth",
    "jwt": "JWT",
    "rest": "REST",
    "graphql": "GraphQL",
    "websocket": "WebSocket",
    "webhook": "Webhook",
    "webhooks": "Webhooks",
}


def format_directory_name(name: str) -> str:
    """Turn a directory name into a display title.

    Examples
    --------
    >>> format_directory_name("02-rest_api")
    'REST API'
    >>> format_directory_name("v2.migration-guide")
    'V2 Migration Guide'
    """
    words: list[str] = []
    for token in NAME_SEPARATOR_PATTERN.split(name.lower()):
        if not token or token.isdigit():
            continue
        if token in DIRECTORY_NAME_TERMS:
            words.append(DIRECTORY_NAME_TERMS[token])
        elif VERSION_TOKEN_PATTERN.match(token):
            words.append(token.upper())
        else:
            words.append(token.capitalize())
    return " ".join(words)


def page_path(locale: str, version: str, slug: str) -> str:
    """Return the site route of a page, e.g. ``/en/docs/v1/guides/setup``."""
    base = DOCS_ROUTE_TEMPLATE.format(locale=locale, version=version)
    return f"{base}/{slug}" if slug else base


def sort_navigation_tree(tree: NavigationTree) -> NavigationTree:
    """Sort every level by ``(order, title)``; ties keep scan order."""
    items = [
        dc.replace(item, children=tuple(sort_navigation_tree(list(item.children))))
        if item.children
        else item
        for item in tree
    ]
    return sorted(items, key=lambda item: (item.order, item.title))


class NavigationBuilder:
    """Build navigation forests for the scopes under ``content_root``."""

    def __init__(self, content_root: Path, loader: ContentLoader | None = None) -> None:
        self.content_root = Path(content_root)
        self.loader = loader or ContentLoader(self.content_root)

    def build_tree(self, locale: str, version: str) -> NavigationTree:
        """Return the sorted navigation forest for one (locale, version).

        A missing scope directory yields an empty list.
        """
        scope = self.content_root / locale / version
        if not scope.is_dir():
            return []
        config = load_sidebar_config(scope)
        tree = self._scan(scope, "")
        if config is not None:
            tree = apply_sidebar_config(tree, config)
        return sort_navigation_tree(tree)

    def build_all_trees(self) -> dict[str, dict[str, NavigationTree]]:
        """Return ``{locale: {version: tree}}`` for every scope on disk."""
        return {
            locale: {
                version: self.build_tree(locale, version)
                for version in self.loader.available_versions(locale)
            }
            for locale in self.loader.available_locales()
        }

    def _scan(self, directory: Path, relative: str) -> NavigationTree:
        try:
            entries = sorted(directory.iterdir())
        except OSError as exc:
            logger.warning("Failed to read directory %s: %s", directory, exc)
            return []
        items: NavigationTree = []
        for entry in entries:
            if entry.name.startswith((".", SIDEBAR_CONFIG_PREFIX)):
                continue
            original_path = f"{relative}/{entry.name}" if relative else entry.name
            if entry.is_dir():
                item = self._directory_item(entry, original_path)
            elif entry.is_file() and is_markdown_file(entry.name):
                item = self._page_item(entry, original_path)
            else:
                item = None
            if item is not None:
                items.append(item)
        return items

    def _directory_item(self, directory: Path, original_path: str) -> NavigationItem | None:
        children = self._scan(directory, original_path)
        if not children:
            return None
        return NavigationItem(
            kind=NavigationKind.DIRECTORY,
            title=format_directory_name(directory.name),
            order=min(child.order for child in children),
            original_path=original_path,
            children=tuple(children),
        )

    def _page_item(self, path: Path, original_path: str) -> NavigationItem | None:
        document = self.loader.load_document(path)
        if document is None:
            return None
        return _page_from_document(document, original_path)


def _page_from_document(document: ContentDocument, original_path: str) -> NavigationItem:
    frontmatter = document.frontmatter
    return NavigationItem(
        kind=NavigationKind.PAGE,
        title=frontmatter.nav_title,
        path=page_path(document.locale, document.version, document.slug),
        order=frontmatter.nav_order,
        original_path=original_path,
        custom_label=frontmatter.sidebar_label is not None,
        badge="deprecated" if frontmatter.deprecated else None,
    )


def _walk(
    tree: NavigationTree, trail: tuple[NavigationItem, ...] = ()
) -> typ.Iterator[tuple[NavigationItem, tuple[NavigationItem, ...]]]:
    """Yield every item depth-first with the items leading to it."""
    for item in tree:
        current = (*trail, item)
        yield item, current
        yield from _walk(list(item.children), current)


def find_navigation_item(tree: NavigationTree, path: str) -> NavigationItem | None:
    """Return the first item whose route equals ``path``."""
    return next((item for item, _trail in _walk(tree) if item.path == path), None)


def get_breadcrumbs(tree: NavigationTree, path: str) -> list[NavigationItem]:
    """Return the root-to-target items for ``path``, or an empty list."""
    return next((list(trail) for item, trail in _walk(tree) if item.path == path), [])


def get_navigation_stats(tree: NavigationTree) -> NavigationStats:
    """Count items, pages, and directories, and measure nesting depth.

    ``max_depth`` counts levels: a flat list has depth 1, an empty tree 0.
    """
    total = directories = pages = depth = 0
    for item, trail in _walk(tree):
        total += 1
        depth = max(depth, len(trail))
        if item.is_directory:
            directories += 1
        else:
            pages += 1
    return NavigationStats(
        total_items=total,
        max_depth=depth,
        directories_count=directories,
        pages_count=pages,
    )


def validate_navigation_tree(tree: NavigationTree) -> list[str]:
    """Return structural problems: missing titles and duplicate page routes."""
    problems: list[str] = []
    seen: set[str] = set()
    for item, trail in _walk(tree):
        if not item.title:
            problems.append(f"Navigation item missing title at depth {len(trail) - 1}")
        if not item.path:
            continue
        if item.path in seen:
            problems.append(f"Duplicate navigation path: {item.path}")
        else:
            seen.add(item.path)
    return problems


__all__ = [
    "DIRECTORY_NAME_TERMS",
    "NavigationBuilder",
    "find_navigation_item",
    "format_directory_name",
    "get_breadcrumbs",
    "get_navigation_stats",
    "page_path",
    "sort_navigation_tree",
    "validate_navigation_tree",
]
