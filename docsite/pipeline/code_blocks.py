"""Classify and render fenced and indented code blocks.

Each ``<pre><code>`` node is classified as *typed* (a real language token),
*untyped* (no token, a placeholder such as ``text``, or metadata that landed
in the language slot), or *empty* (whitespace only). Typed blocks are
highlighted with Pygments; untyped blocks are escaped verbatim. The rendered
block is stored in the raw-HTML stash and spliced back in after
serialisation. Fences written inside raw HTML blocks never reach the
tree, so :class:`StashedFencePostprocessor` renders those after the stash is
restored.

Examples
--------
>>> block = classify_code_block('python filename="app.py"', "print(1)")
>>> (block.kind.value, block.display_name, block.filename)
('typed', 'Python', 'app.py')
>>> classify_code_block('filename="config.txt"', "debug=true").kind.value
'untyped'
>>> classify_code_block("text", "   ").kind.value
'empty'
"""

from __future__ import annotations

import html
import re
import typing as typ
import xml.etree.ElementTree as etree

from markdown.postprocessors import Postprocessor
from markdown.treeprocessors import Treeprocessor
from pygments import highlight
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from docsite._constants import CODE_META_KEYWORDS, PLACEHOLDER_LANGUAGES

from .fences import FENCE_ATTRIBUTE, FENCE_PLACEHOLDER_SEARCH
from .models import CodeBlock, CodeBlockKind
from .tree import parent_map, replace_element

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
    from pygments.formatters.html import HtmlFormatter

    from .models import TransformState
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any
    HtmlFormatter = typ.Any

META_PATTERN = re.compile(r"""([A-Za-z_][\w-]*)=(?:"([^"]*)"|'([^']*)'|(\S+))""")
PLAIN_TEXT_LABEL = "Plain Text"

LANGUAGE_DISPLAY_NAMES = {
    "js": "JavaScript",
    "javascript": "JavaScript",
    "ts": "TypeScript",
    "typescript": "TypeScript",
    "jsx": "React JSX",
    "tsx": "React TSX",
    "py": "Python",
    "python": "Python",
    "html": "HTML",
    "css": "CSS",
    "scss": "SCSS",
    "sass": "Sass",
    "less": "Less",
    "json": "JSON",
    "yaml": "YAML",
    "yml": "YAML",
    "xml": "XML",
    "toml": "TOML",
    "sh": "Shell",
    "shell": "Shell",
    "bash": "Bash",
    "zsh": "Zsh",
    "fish": "Fish",
    "powershell": "PowerShell",
    "cmd": "Command Prompt",
    "c": "C",
    "cpp": "C++",
    "c++": "C++",
    "rust": "Rust",
    "rs": "Rust",
    "go": "Go",
    "golang": "Go",
    "java": "Java",
    "kotlin": "Kotlin",
    "scala": "Scala",
    "cs": "C#",
    "c#": "C#",
    "csharp": "C#",
    "php": "PHP",
    "rb": "Ruby",
    "ruby": "Ruby",
    "swift": "Swift",
    "objc": "Objective-C",
    "objective-c": "Objective-C",
    "haskell": "Haskell",
    "elm": "Elm",
    "clojure": "Clojure",
    "erlang": "Erlang",
    "elixir": "Elixir",
    "sql": "SQL",
    "mysql": "MySQL",
    "postgresql": "PostgreSQL",
    "sqlite": "SQLite",
    "md": "Markdown",
    "markdown": "Markdown",
    "mdx": "MDX",
    "ini": "INI",
    "conf": "Config",
    "config": "Config",
    "env": "Environment",
    "dockerfile": "Dockerfile",
    "docker": "Dockerfile",
    "log": "Log File",
    "diff": "Diff",
    "patch": "Patch",
}


def language_display_name(language: str) -> str:
    """Return the human-readable label for ``language``.

    Unknown tokens fall back to their uppercased form.

    >>> language_display_name("ts"), language_display_name("nix")
    ('TypeScript', 'NIX')
    """
    normalized = language.strip().lower()
    return LANGUAGE_DISPLAY_NAMES.get(normalized, normalized.upper())


def parse_code_meta(text: str) -> dict[str, str]:
    """Return the ``key="value"`` pairs found in a fence info string."""
    meta: dict[str, str] = {}
    for match in META_PATTERN.finditer(text):
        key, double, single, bare = match.groups()
        meta[key] = next(value for value in (double, single, bare) if value is not None)
    return meta


def _is_metadata_token(token: str) -> bool:
    """Return True when a language slot actually holds metadata."""
    return "=" in token or token.lower() in CODE_META_KEYWORDS


def classify_code_block(info: str, code: str) -> CodeBlock:
    """Classify a code block from its fence info string and raw source.

    Parameters
    ----------
    info : str
        Everything after the opening fence, e.g. ``'js filename="a.js"'``.
        Indented code blocks pass an empty string.
    code : str
        The unescaped block content.
    """
    token, _, rest = info.strip().partition(" ")
    language = token.split(",", 1)[0].strip().lower()
    if _is_metadata_token(token):
        meta = parse_code_meta(info)
        language = ""
    else:
        meta = parse_code_meta(rest)

    if not code.strip():
        return CodeBlock(
            kind=CodeBlockKind.EMPTY,
            language=language or "text",
            display_name=PLAIN_TEXT_LABEL,
            code=code,
            meta=meta,
        )
    if language in PLACEHOLDER_LANGUAGES:
        return CodeBlock(
            kind=CodeBlockKind.UNTYPED,
            language="text",
            display_name=PLAIN_TEXT_LABEL,
            code=code,
            meta=meta,
        )
    return CodeBlock(
        kind=CodeBlockKind.TYPED,
        language=language,
        display_name=language_display_name(language),
        code=code,
        meta=meta,
    )


def highlight_code(code: str, language: str, formatter: HtmlFormatter) -> str:
    """Return highlighted HTML for ``code``, or escaped text if no lexer fits."""
    try:
        lexer = get_lexer_by_name(language, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return html.escape(code, quote=False)
    return highlight(code, lexer, formatter)


def render_code_block(block: CodeBlock, formatter: HtmlFormatter) -> str:
    """Render a classified block into the HTML structure used by the site."""
    if block.kind is CodeBlockKind.EMPTY:
        return (
            f'<div class="code-block code-block-empty" '
            f'data-code-block-type="{block.kind.value}">'
            '<div class="code-block-header">'
            '<span class="code-block-language">Empty Code Block</span>'
            "</div>"
            '<p class="code-block-empty-message">This code block is empty</p>'
            "</div>"
        )

    language = html.escape(block.language, quote=True)
    header = [
        f'<span class="code-block-language">{html.escape(block.display_name)}</span>'
    ]
    if block.kind is CodeBlockKind.UNTYPED:
        header.append('<span class="code-block-no-highlight">No syntax highlighting</span>')
        body = html.escape(block.code, quote=False)
    else:
        body = highlight_code(block.code, block.language, formatter)
    if block.filename:
        header.append(
            f'<span class="code-block-filename">{html.escape(block.filename)}</span>'
        )
    header.append(
        '<button type="button" class="code-block-copy" '
        'aria-label="Copy code to clipboard" '
        f'data-code="{html.escape(block.code, quote=True)}">Copy</button>'
    )
    return (
        f'<div class="code-block" data-code-block-type="{block.kind.value}" '
        f'data-language="{language}">'
        f'<div class="code-block-header">{"".join(header)}</div>'
        '<pre class="code-block-body" style="white-space: pre-wrap;">'
        f'<code class="language-{language}">{body}</code></pre>'
        "</div>"
    )


class CodeBlockTreeprocessor(Treeprocessor):
    """Replace ``<pre><code>`` nodes with rendered code blocks."""

    def __init__(
        self, md: Markdown, state: TransformState, formatter: HtmlFormatter
    ) -> None:
        super().__init__(md)
        self.state = state
        self.formatter = formatter

    def run(self, root: Element) -> None:
        blocks = [pre for pre in root.iter("pre") if pre.find("code") is not None]
        if not blocks:
            return
        parents = parent_map(root)
        for pre in blocks:
            info, code = self._source(pre)
            rendered = render_code_block(classify_code_block(info, code), self.formatter)
            placeholder = etree.Element("p")
            placeholder.text = self.md.htmlStash.store(rendered)
            replace_element(parents, pre, placeholder)

    def _source(self, pre: Element) -> tuple[str, str]:
        """Return the info string and raw code of a fenced or indented block."""
        index = pre.get(FENCE_ATTRIBUTE)
        if index is not None:
            fenced = self.state.fenced_blocks[int(index)]
            return fenced.info, fenced.code.strip("\n")
        code = pre.find("code")
        text = code.text if code is not None and code.text else ""
        return "", html.unescape(text).strip("\n")


class StashedFencePostprocessor(Postprocessor):
    """Render fence placeholders restored from raw HTML blocks.

    A fence inside ``<details>`` or a similar block is stashed verbatim with
    the surrounding HTML, so its placeholder only reappears in the output
    text once the raw-HTML postprocessor has run.
    """

    def __init__(
        self, md: Markdown, state: TransformState, formatter: HtmlFormatter
    ) -> None:
        super().__init__(md)
        self.state = state
        self.formatter = formatter

    def run(self, text: str) -> str:
        return FENCE_PLACEHOLDER_SEARCH.sub(self._render, text)

    def _render(self, match: re.Match[str]) -> str:
        fenced = self.state.fenced_blocks[int(match.group(1))]
        block = classify_code_block(fenced.info, fenced.code.strip("\n"))
        return render_code_block(block, self.formatter)


__all__ = [
    "LANGUAGE_DISPLAY_NAMES",
    "CodeBlockTreeprocessor",
    "StashedFencePostprocessor",
    "classify_code_block",
    "highlight_code",
    "language_display_name",
    "parse_code_meta",
    "render_code_block",
]
