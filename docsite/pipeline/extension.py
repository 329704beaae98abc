"""Python-Markdown extension wiring the docsite passes together."""

from __future__ import annotations

import typing as typ

from markdown.extensions import Extension

from .code_blocks import CodeBlockTreeprocessor, StashedFencePostprocessor
from .fences import FencedBlockProcessor, FencedCodePreprocessor
from .headings import HeadingTreeprocessor
from .links import (
    AssetLinkTreeprocessor,
    ImageTreeprocessor,
    LinkValidationTreeprocessor,
)

if typ.TYPE_CHECKING:
    from markdown import Markdown
    from pygments.formatters.html import HtmlFormatter

    from .models import TransformState
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    HtmlFormatter = typ.Any


class DocsiteExtension(Extension):
    """Register the fenced-code hooks and the five ordered tree passes.

    All passes run after Python-Markdown's inline processor (priority 20) and
    before its prettify and unescape passes. Headings and link validation
    read the tree before images, asset links, and code blocks replace nodes.
    A postprocessor after raw-HTML restoration (priority 30) renders fences
    that were written inside HTML blocks.
    """

    def __init__(
        self,
        state: TransformState,
        slug_index: typ.Container[str],
        formatter: HtmlFormatter,
        locale: str | None = None,
        version: str | None = None,
    ) -> None:
        self.state = state
        self.slug_index = slug_index
        self.formatter = formatter
        self.locale = locale
        self.version = version

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the docsite processors on the Markdown instance."""
        md.preprocessors.register(
            FencedCodePreprocessor(md, self.state), "docsite_fenced_code", 25
        )
        md.parser.blockprocessors.register(
            FencedBlockProcessor(md.parser, self.state), "docsite_fenced_block", 95
        )
        md.treeprocessors.register(
            HeadingTreeprocessor(md, self.state), "docsite_headings", 19
        )
        md.treeprocessors.register(
            LinkValidationTreeprocessor(
                md, self.state, self.slug_index, self.locale, self.version
            ),
            "docsite_link_validation",
            18,
        )
        md.treeprocessors.register(ImageTreeprocessor(md), "docsite_images", 17)
        md.treeprocessors.register(
            AssetLinkTreeprocessor(md), "docsite_asset_links", 16
        )
        md.treeprocessors.register(
            CodeBlockTreeprocessor(md, self.state, self.formatter),
            "docsite_code_blocks",
            15,
        )
        md.postprocessors.register(
            StashedFencePostprocessor(md, self.state, self.formatter),
            "docsite_stashed_fences",
            25,
        )


__all__ = ["DocsiteExtension"]
