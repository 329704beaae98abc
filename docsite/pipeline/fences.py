"""Lift fenced code blocks out of the source and back in as tree nodes.

Python-Markdown's bundled ``fenced_code`` extension stores finished HTML in
the raw-HTML stash, which hides code blocks from tree processors. The
preprocessor here records each fence as a :class:`FencedBlock` and leaves a
placeholder line; the block processor turns that placeholder into a
``<pre data-fence="N"><code>`` node so later passes can see and replace it.

Fences may sit inside a blockquote or be indented under a list item. The
placeholder keeps the container prefix of the opening fence, so the block
parser nests the resulting node where the fence was written.

Examples
--------
>>> _strip_quote("> > code", 2)
'code'
>>> _strip_quote("plain", 1) is None
True
"""

from __future__ import annotations

import re
import typing as typ
import xml.etree.ElementTree as etree

from markdown.blockprocessors import BlockProcessor
from markdown.preprocessors import Preprocessor
from markdown.util import AtomicString

from docsite.errors import MarkdownParseError

from .models import FencedBlock

if typ.TYPE_CHECKING:
    from markdown import Markdown
    from markdown.blockparser import BlockParser

    from .models import TransformState
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    BlockParser = typ.Any

FENCE_OPEN_PATTERN = re.compile(
    r"^(?P<quote>(?:[ ]{0,3}>[ ]?)*)(?P<indent>[ ]*)(?P<fence>`{3,}|~{3,})(?P<info>.*)$"
)
FENCE_CLOSE_PATTERN = re.compile(r"^[ ]{0,3}(?P<fence>`{3,}|~{3,})[ \t]*$")
QUOTE_MARKER_PATTERN = re.compile(r"^[ ]{0,3}>[ ]?")
LIST_ITEM_PATTERN = re.compile(r"^[ ]*(?:[-*+]|\d+[.)])[ ]+\S")
FENCE_PLACEHOLDER = "\x02docsite-fence:{index}\x03"
FENCE_PLACEHOLDER_PATTERN = re.compile("^\x02docsite-fence:(\\d+)\x03$")
FENCE_PLACEHOLDER_SEARCH = re.compile("\x02docsite-fence:(\\d+)\x03")
FENCE_ATTRIBUTE = "data-fence"
MAX_FENCE_INDENT = 3


def _dedent(line: str, width: int) -> str:
    """Strip up to ``width`` leading spaces, mirroring the fence indentation."""
    stripped = 0
    while stripped < width and stripped < len(line) and line[stripped] == " ":
        stripped += 1
    return line[stripped:]


def _strip_quote(line: str, depth: int) -> str | None:
    """Remove ``depth`` blockquote markers, or return None if any is missing."""
    for _ in range(depth):
        marker = QUOTE_MARKER_PATTERN.match(line)
        if marker is None:
            return None
        line = line[marker.end() :]
    return line


def _continues_list_item(lines: list[str], position: int, indent: int) -> bool:
    """Return True when the nearest less-indented line above is a list item."""
    for line in reversed(lines[:position]):
        if not line.strip():
            continue
        if len(line) - len(line.lstrip(" ")) >= indent:
            continue
        return LIST_ITEM_PATTERN.match(line) is not None
    return False


def _opens_fence(match: re.Match[str], lines: list[str], position: int) -> bool:
    if match.group("fence").startswith("`") and "`" in match.group("info"):
        return False
    indent = len(match.group("indent"))
    if indent <= MAX_FENCE_INDENT:
        return True
    # Deeper indents are indented code unless they continue a list item.
    return not match.group("quote") and _continues_list_item(lines, position, indent)


class FencedCodePreprocessor(Preprocessor):
    """Replace fenced code blocks with placeholders and record their content."""

    def __init__(self, md: Markdown, state: TransformState) -> None:
        super().__init__(md)
        self.state = state

    def run(self, lines: list[str]) -> list[str]:
        """Return ``lines`` with every fence swapped for a placeholder line.

        A fence opened inside a blockquote also ends where the blockquote
        does.

        Raises
        ------
        MarkdownParseError
            If a top-level fence is opened but never closed.
        """
        output: list[str] = []
        position = 0
        while position < len(lines):
            line = lines[position]
            match = FENCE_OPEN_PATTERN.match(line)
            if not match or not _opens_fence(match, lines, position):
                output.append(line)
                position += 1
                continue

            quote = match.group("quote")
            depth = quote.count(">")
            fence = match.group("fence")
            indent = len(match.group("indent"))
            body: list[str] = []
            cursor = position + 1
            closed = False
            while cursor < len(lines):
                content = _strip_quote(lines[cursor], depth)
                if content is None:
                    closed = True
                    break
                content = _dedent(content, indent)
                close = FENCE_CLOSE_PATTERN.match(content)
                if (
                    close
                    and close.group("fence")[0] == fence[0]
                    and len(close.group("fence")) >= len(fence)
                ):
                    closed = True
                    cursor += 1
                    break
                body.append(content)
                cursor += 1
            if not closed:
                msg = f"Unterminated code fence opened on line {position + 1}"
                raise MarkdownParseError(msg)

            index = len(self.state.fenced_blocks)
            self.state.fenced_blocks.append(
                FencedBlock(info=match.group("info").strip(), code="\n".join(body))
            )
            placeholder = FENCE_PLACEHOLDER.format(index=index)
            separator = quote.rstrip()
            output.extend(
                [separator, f"{quote}{match.group('indent')}{placeholder}", separator]
            )
            position = cursor
        return output


class FencedBlockProcessor(BlockProcessor):
    """Turn fence placeholders into ``pre``/``code`` nodes.

    Placeholders indented by a full tab are left to the list processor,
    which dedents them into the owning list item first.
    """

    def __init__(self, parser: BlockParser, state: TransformState) -> None:
        super().__init__(parser)
        self.state = state

    def test(self, parent: etree.Element, block: str) -> bool:
        indent = len(block) - len(block.lstrip(" "))
        return (
            indent < self.tab_length
            and FENCE_PLACEHOLDER_PATTERN.match(block.strip()) is not None
        )

    def run(self, parent: etree.Element, blocks: list[str]) -> None:
        block = blocks.pop(0)
        match = FENCE_PLACEHOLDER_PATTERN.match(block.strip())
        if match is None:  # pragma: no cover - guarded by test()
            return
        fenced = self.state.fenced_blocks[int(match.group(1))]
        pre = etree.SubElement(parent, "pre")
        pre.set(FENCE_ATTRIBUTE, match.group(1))
        code = etree.SubElement(pre, "code")
        code.text = AtomicString(fenced.code)


__all__ = [
    "FENCE_ATTRIBUTE",
    "FENCE_PLACEHOLDER_SEARCH",
    "FencedBlockProcessor",
    "FencedCodePreprocessor",
]
