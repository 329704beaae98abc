"""Shared dataclasses used by the Markdown transform pipeline."""

from __future__ import annotations

import dataclasses as dc
import enum

from docsite.markdown_parser import TOCItem, TocBuilder


@dc.dataclass(slots=True)
class TransformResult:
    """Output of transforming one document body.

    Attributes
    ----------
    html : str
        Rendered HTML, or the untouched source when processing failed.
    toc : list[TOCItem]
        Nested table of contents for headings of level 2-4.
    link_errors : list[str]
        Non-fatal diagnostics (broken internal links, processing failures).
    """

    html: str
    toc: list[TOCItem]
    link_errors: list[str]


@dc.dataclass(slots=True, frozen=True)
class FencedBlock:
    """A fenced code block lifted out of the source before block parsing."""

    info: str
    code: str


class CodeBlockKind(enum.StrEnum):
    """How a code block is presented."""

    TYPED = "typed"
    UNTYPED = "untyped"
    EMPTY = "empty"


@dc.dataclass(slots=True, frozen=True)
class CodeBlock:
    """A classified code block ready for rendering.

    Attributes
    ----------
    kind : CodeBlockKind
        Typed (declares a real language), untyped, or empty.
    language : str
        Lowercased language token, ``"text"`` for untyped blocks.
    display_name : str
        Human-readable language label shown in the block header.
    code : str
        Raw, unescaped source of the block.
    meta : dict[str, str]
        ``key="value"`` pairs parsed from the fence info string.
    """

    kind: CodeBlockKind
    language: str
    display_name: str
    code: str
    meta: dict[str, str] = dc.field(default_factory=dict)

    @property
    def filename(self) -> str | None:
        return self.meta.get("filename") or self.meta.get("title")


@dc.dataclass(slots=True)
class TransformState:
    """Per-document state shared by the pipeline passes.

    A new instance is created for every document, so heading ids and
    diagnostics never leak from one document into another.
    """

    seen_ids: set[str] = dc.field(default_factory=set)
    toc: TocBuilder = dc.field(default_factory=TocBuilder)
    link_errors: list[str] = dc.field(default_factory=list)
    fenced_blocks: list[FencedBlock] = dc.field(default_factory=list)


__all__ = [
    "CodeBlock",
    "CodeBlockKind",
    "FencedBlock",
    "TOCItem",
    "TransformResult",
    "TransformState",
]
