"""Assign heading ids and collect the table of contents."""

from __future__ import annotations

import typing as typ

from markdown.treeprocessors import Treeprocessor

from docsite.markdown_parser import clean_heading_text, unique_heading_id

from .tree import text_content

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from .models import TransformState
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})


class HeadingTreeprocessor(Treeprocessor):
    """Give every heading a unique ``id`` and record levels 2-4 in the TOC.

    Entities and inline HTML in a heading are already stashed by the inline
    pass, so titles are read back through the raw-HTML stash.
    """

    def __init__(self, md: Markdown, state: TransformState) -> None:
        super().__init__(md)
        self.state = state

    def run(self, root: Element) -> None:
        for element in root.iter():
            if element.tag not in HEADING_TAGS:
                continue
            title = clean_heading_text(
                text_content(element), self.md.htmlStash.rawHtmlBlocks
            )
            item_id = unique_heading_id(title, self.state.seen_ids)
            element.set("id", item_id)
            self.state.toc.add(item_id, title, int(element.tag[1]))


__all__ = ["HEADING_TAGS", "HeadingTreeprocessor"]
