"""Markdown transform pipeline.

Document bodies are parsed by Python-Markdown and run through five ordered
tree passes: heading ids and TOC, internal link validation, image references,
binary asset links, and code blocks. :class:`MarkdownTransformer` is the entry
point and returns a :class:`TransformResult` of HTML, TOC, and diagnostics.
"""

from .code_blocks import classify_code_block, language_display_name, parse_code_meta
from .links import candidate_slug, is_binary_asset, is_external
from .models import CodeBlock, CodeBlockKind, TOCItem, TransformResult
from .renderer import MarkdownTransformer, transform_markdown

__all__ = [
    "CodeBlock",
    "CodeBlockKind",
    "MarkdownTransformer",
    "TOCItem",
    "TransformResult",
    "candidate_slug",
    "classify_code_block",
    "is_binary_asset",
    "is_external",
    "language_display_name",
    "parse_code_meta",
    "transform_markdown",
]
