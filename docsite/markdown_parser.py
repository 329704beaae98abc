r"""Heading identifiers and table-of-contents trees for Markdown documents.

This module owns the rules shared by the transform pipeline and lightweight
callers: how heading text becomes a URL-safe ``id``, how repeated headings are
disambiguated within one document, and how a flat run of headings folds into
a nested table of contents.

Example
-------
>>> from docsite.markdown_parser import extract_headings
>>> toc = extract_headings("## Intro\nBody\n\n### Details\nMore\n\n## Intro")
>>> [(item.id, [child.id for child in item.children]) for item in toc]
[('intro', ['details']), ('intro-1', [])]
"""

from __future__ import annotations

import dataclasses as dc
import html
import re
import typing as typ

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]+(.+?)[ \t]*#*[ \t]*$")
FENCE_PATTERN = re.compile(r"^[ ]{0,3}(`{3,}|~{3,})")
ESCAPED_CHAR_PATTERN = re.compile("\x02(\\d+)\x03")
STASH_PLACEHOLDER_PATTERN = re.compile("\x02wzxhzdk:(\\d+)\x03")
HTML_TAG_PATTERN = re.compile(r"<[^>]*>")

TOC_MIN_LEVEL = 2
TOC_MAX_LEVEL = 4


@dc.dataclass(slots=True)
class TOCItem:
    """One heading entry in a document's table of contents.

    Attributes
    ----------
    id : str
        Anchor identifier, unique within the document.
    title : str
        Plain-text heading content.
    level : int
        Heading depth (2, 3, or 4).
    children : list[TOCItem]
        Entries nested beneath this heading, in document order.
    """

    id: str
    title: str
    level: int
    children: list[TOCItem] = dc.field(default_factory=list)

    def to_dict(self) -> dict[str, typ.Any]:
        """Return a JSON-ready mapping of this entry and its descendants."""
        return {
            "id": self.id,
            "title": self.title,
            "level": self.level,
            "children": [child.to_dict() for child in self.children],
        }


def clean_heading_text(text: str, stash: typ.Sequence[str | Element] = ()) -> str:
    """Return plain heading text with Markdown placeholders and escapes resolved.

    Parameters
    ----------
    text : str
        Flattened heading text, possibly holding raw-HTML stash placeholders.
    stash : Sequence, optional
        The Markdown instance's ``htmlStash.rawHtmlBlocks``. Placeholders are
        replaced by the stashed markup with its tags removed, so entities
        such as ``&copy;`` become characters. Placeholders missing from the
        stash are dropped.
    """

    def restore(match: re.Match[str]) -> str:
        index = int(match.group(1))
        raw = stash[index] if index < len(stash) else ""
        if isinstance(raw, str):
            return HTML_TAG_PATTERN.sub("", raw)
        return "".join(raw.itertext())

    text = STASH_PLACEHOLDER_PATTERN.sub(restore, text)
    text = ESCAPED_CHAR_PATTERN.sub(lambda m: chr(int(m.group(1))), text)
    return html.unescape(text).replace("\\", "").strip()


def heading_id(text: str) -> str:
    """Convert heading text into a lowercase, hyphen-separated identifier."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug).strip("-")
    return slug or "section"


def unique_heading_id(text: str, seen: set[str]) -> str:
    """Return a heading id not yet in ``seen``, appending ``-1``, ``-2``, ...

    ``seen`` is updated with the returned id.
    """
    base = heading_id(text)
    candidate = base
    suffix = 1
    while candidate in seen:
        candidate = f"{base}-{suffix}"
        suffix += 1
    seen.add(candidate)
    return candidate


class TocBuilder:
    """Fold headings into a nested TOC using a stack of open entries."""

    def __init__(self) -> None:
        self.items: list[TOCItem] = []
        self._stack: list[TOCItem] = []

    def add(self, item_id: str, title: str, level: int) -> TOCItem | None:
        """Insert a heading; levels outside 2-4 are ignored and return None."""
        if not TOC_MIN_LEVEL <= level <= TOC_MAX_LEVEL:
            return None
        item = TOCItem(id=item_id, title=title, level=level)
        while self._stack and self._stack[-1].level >= level:
            self._stack.pop()
        if self._stack:
            self._stack[-1].children.append(item)
        else:
            self.items.append(item)
        self._stack.append(item)
        return item


def build_toc(entries: typ.Iterable[tuple[str, str, int]]) -> list[TOCItem]:
    """Build a TOC tree from ``(id, title, level)`` tuples in document order."""
    builder = TocBuilder()
    for item_id, title, level in entries:
        builder.add(item_id, title, level)
    return builder.items


def extract_headings(markdown_text: str) -> list[TOCItem]:
    """Return the TOC of ``markdown_text`` without rendering it.

    ATX headings inside fenced code blocks are ignored. Every heading claims
    an id (so ids match what the full pipeline assigns), but only levels 2-4
    appear in the returned tree.
    """
    seen: set[str] = set()
    entries: list[tuple[str, str, int]] = []
    fence: str | None = None
    for line in markdown_text.splitlines():
        fence_match = FENCE_PATTERN.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
            continue
        if fence is not None:
            continue
        match = HEADING_PATTERN.match(line)
        if not match:
            continue
        title = clean_heading_text(match.group(2))
        entries.append((unique_heading_id(title, seen), title, len(match.group(1))))
    return build_toc(entries)


__all__ = [
    "TOCItem",
    "TocBuilder",
    "build_toc",
    "clean_heading_text",
    "extract_headings",
    "heading_id",
    "unique_heading_id",
]
