"""Tests for the Markdown transform pipeline in ``docsite.pipeline``.

The rendered HTML is parsed with BeautifulSoup so assertions target structure
(heading ids, replacement elements, code block markup) rather than exact
serialisation details.
"""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from docsite.pipeline import (
    CodeBlockKind,
    MarkdownTransformer,
    candidate_slug,
    classify_code_block,
    language_display_name,
    parse_code_meta,
    transform_markdown,
)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


@pytest.fixture
def transformer() -> MarkdownTransformer:
    return MarkdownTransformer(
        {"", "guides/setup", "api/users"}, locale="en", version="v1"
    )


def test_repeated_headings_get_distinct_ids() -> None:
    result = transform_markdown("## Setup\n\ntext\n\n## Setup\n\n## Setup\n")
    soup = _soup(result.html)
    assert [h2["id"] for h2 in soup.find_all("h2")] == ["setup", "setup-1", "setup-2"]
    assert [item.id for item in result.toc] == ["setup", "setup-1", "setup-2"]


def test_skipped_heading_level_nests_under_parent() -> None:
    result = transform_markdown("## Overview\n\n#### Details\n")
    soup = _soup(result.html)
    assert soup.find("h2")["id"] == "overview"
    assert soup.find("h4")["id"] == "details"
    assert len(result.toc) == 1
    assert [child.id for child in result.toc[0].children] == ["details"]


def test_levels_outside_toc_range_still_get_ids() -> None:
    result = transform_markdown("# Title\n\n## Intro\n\n##### Fine print\n")
    soup = _soup(result.html)
    assert soup.find("h1")["id"] == "title"
    assert soup.find("h5")["id"] == "fine-print"
    assert [item.title for item in result.toc] == ["Intro"]


def test_heading_with_inline_code_uses_plain_text() -> None:
    result = transform_markdown("## Use `<div>` tags\n")
    assert result.toc[0].id == "use-div-tags"
    assert result.toc[0].title == "Use <div> tags"


def test_heading_entities_and_inline_html_reach_the_toc() -> None:
    result = transform_markdown("## Tom &copy; Co\n\n## Press <kbd>Ctrl</kbd> twice\n")
    assert [(item.id, item.title) for item in result.toc] == [
        ("tom-co", "Tom © Co"),
        ("press-ctrl-twice", "Press Ctrl twice"),
    ]
    assert _soup(result.html).find("h2")["id"] == "tom-co"


def test_local_image_becomes_reference(transformer: MarkdownTransformer) -> None:
    result = transformer.transform(
        '![Alt](./img.png "A diagram")\n\n![Logo](https://cdn.example.com/logo.png)\n'
    )
    soup = _soup(result.html)
    reference = soup.find("doc-image")
    assert reference is not None
    assert reference["src"] == "./img.png"
    assert reference["alt"] == "Alt"
    assert reference["title"] == "A diagram"
    assert [img["src"] for img in soup.find_all("img")] == [
        "https://cdn.example.com/logo.png"
    ]


def test_image_attributes_are_escaped(transformer: MarkdownTransformer) -> None:
    result = transformer.transform('![Say "hi" & wave](pics/a.png)\n')
    assert 'alt="Say &quot;hi&quot; &amp; wave"' in result.html
    assert _soup(result.html).find("doc-image")["alt"] == 'Say "hi" & wave'


def test_broken_internal_links_are_reported(transformer: MarkdownTransformer) -> None:
    body = (
        "[ok](/en/docs/v1/guides/setup) "
        "[ok too](./guides/setup.md#install) "
        "[scoped](en/v1/api/users) "
        "[home](/en/docs/v1/) "
        "[missing](no-such-file.mdx) "
        "[external](https://example.com/docs) "
        "[mail](mailto:team@example.com) "
        "[anchor](#top)\n"
    )
    result = transformer.transform(body)
    assert result.link_errors == ["Broken internal link: no-such-file.mdx"]
    soup = _soup(result.html)
    assert soup.find("a", href="no-such-file.mdx").get_text() == "missing"


def test_links_into_other_scopes_are_reported() -> None:
    transformer = MarkdownTransformer({"", "intro"}, locale="en", version="v1")
    result = transformer.transform(
        "[a](guides/docs/missing-page)\n\n[b](/fr/docs/v9/intro)\n\n"
        "[c](/en/docs/v1/intro)\n"
    )
    assert result.link_errors == [
        "Broken internal link: guides/docs/missing-page",
        "Broken internal link: /fr/docs/v9/intro",
    ]


def test_relative_docs_segment_is_not_a_route_prefix() -> None:
    result = transform_markdown("[a](guides/docs/missing-page)\n", {"", "missing-page"})
    assert result.link_errors == ["Broken internal link: guides/docs/missing-page"]


def test_binary_asset_links_become_download_references(
    transformer: MarkdownTransformer,
) -> None:
    result = transformer.transform(
        '[Q3 report](files/report.PDF "Quarterly") and '
        "[remote](https://example.com/archive.zip)\n"
    )
    soup = _soup(result.html)
    reference = soup.find("doc-asset-link")
    assert reference["href"] == "files/report.PDF"
    assert reference["download"] == "report.PDF"
    assert reference["text"] == "Q3 report"
    assert reference["title"] == "Quarterly"
    assert soup.find("a")["href"] == "https://example.com/archive.zip"
    assert result.link_errors == []


def test_typed_code_block_structure(transformer: MarkdownTransformer) -> None:
    body = "Intro\n\n```python filename=\"app.py\"\nprint('hi')\n```\n"
    result = transformer.transform(body)
    soup = _soup(result.html)
    block = soup.select_one("div.code-block")
    assert block["data-code-block-type"] == "typed"
    assert block["data-language"] == "python"
    assert block.select_one(".code-block-language").get_text() == "Python"
    assert block.select_one(".code-block-filename").get_text() == "app.py"
    assert block.select_one(".code-block-no-highlight") is None
    button = block.select_one("button.code-block-copy")
    assert button["aria-label"] == "Copy code to clipboard"
    assert button["data-code"] == "print('hi')"
    body_pre = block.select_one("pre.code-block-body")
    assert "white-space: pre-wrap" in body_pre["style"]
    assert body_pre.select_one("code.language-python").get_text().strip() == "print('hi')"
    assert "wzxhzdk" not in result.html


def test_fence_inside_html_block_is_rendered(
    transformer: MarkdownTransformer,
) -> None:
    body = (
        "<details>\n<summary>More</summary>\n\n"
        "```python\nx = 1\n```\n\n</details>\n"
    )
    result = transformer.transform(body)
    assert "\x02" not in result.html
    soup = _soup(result.html)
    block = soup.select_one("details div.code-block")
    assert block is not None
    assert block["data-language"] == "python"
    assert block.select_one("code").get_text().strip() == "x = 1"
    assert soup.select_one("summary").get_text() == "More"


def test_untyped_code_block_is_escaped_plain_text(
    transformer: MarkdownTransformer,
) -> None:
    result = transformer.transform("```\nplain <b>text</b> & more\n```\n")
    soup = _soup(result.html)
    block = soup.select_one("div.code-block")
    assert block["data-code-block-type"] == "untyped"
    assert block.select_one(".code-block-language").get_text() == "Plain Text"
    assert (
        block.select_one(".code-block-no-highlight").get_text()
        == "No syntax highlighting"
    )
    assert block.select_one("code").get_text() == "plain <b>text</b> & more"
    assert block.find("b") is None


def test_metadata_in_language_slot_is_untyped_with_meta(
    transformer: MarkdownTransformer,
) -> None:
    result = transformer.transform('``` filename="config.txt"\ndebug=true\nport=3000\n```\n')
    block = _soup(result.html).select_one("div.code-block")
    assert block["data-code-block-type"] == "untyped"
    assert block.select_one(".code-block-filename").get_text() == "config.txt"
    assert block.select_one("button")["data-code"] == "debug=true\nport=3000"


def test_empty_code_block_placeholder(transformer: MarkdownTransformer) -> None:
    result = transformer.transform("```js\n   \n```\n")
    soup = _soup(result.html)
    block = soup.select_one("div.code-block")
    assert block["data-code-block-type"] == "empty"
    assert "Empty Code Block" in block.get_text()
    assert "This code block is empty" in block.get_text()
    assert block.select_one("button") is None


def test_indented_code_block_is_untyped(transformer: MarkdownTransformer) -> None:
    result = transformer.transform("Example:\n\n    x = 1 < 2\n    y = x\n")
    block = _soup(result.html).select_one("div.code-block")
    assert block["data-code-block-type"] == "untyped"
    assert block.select_one("button")["data-code"] == "x = 1 < 2\ny = x"


def test_unmapped_language_uses_uppercased_label(
    transformer: MarkdownTransformer,
) -> None:
    result = transformer.transform("~~~~nix\n{ pkgs }: pkgs.hello\n~~~~\n")
    block = _soup(result.html).select_one("div.code-block")
    assert block["data-code-block-type"] == "typed"
    assert block.select_one(".code-block-language").get_text() == "NIX"
    assert block.select_one("code").get_text().strip() == "{ pkgs }: pkgs.hello"


def test_fenced_code_hides_headings_and_links(transformer: MarkdownTransformer) -> None:
    body = "## Real\n\n```markdown\n## Fake\n[gone](nowhere)\n```\n"
    result = transformer.transform(body)
    assert [item.id for item in result.toc] == ["real"]
    assert result.link_errors == []


def test_unterminated_fence_falls_back_to_source(
    transformer: MarkdownTransformer,
) -> None:
    body = "## Heading\n\n```python\nprint('never closed')\n"
    result = transformer.transform(body)
    assert result.html == body
    assert result.toc == []
    assert len(result.link_errors) == 1
    assert result.link_errors[0].startswith(
        "Processing error: Unterminated code fence opened on line 3"
    )


def test_empty_body_renders_nothing(transformer: MarkdownTransformer) -> None:
    result = transformer.transform("  \n")
    assert (result.html, result.toc, result.link_errors) == ("", [], [])


def test_state_does_not_leak_between_documents(
    transformer: MarkdownTransformer,
) -> None:
    transformer.transform("## Setup\n\n[x](gone)\n")
    result = transformer.transform("## Setup\n")
    assert result.toc[0].id == "setup"
    assert result.link_errors == []


def test_stylesheet_targets_code_block_body(transformer: MarkdownTransformer) -> None:
    assert ".code-block-body" in transformer.stylesheet


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ("guides/setup", "guides/setup"),
        ("/guides/setup/", "guides/setup"),
        ("../guides/setup.mdx?tab=1", "guides/setup"),
        ("/en/docs/v1/guides/index", "guides"),
        ("./index.md", ""),
        ("guides/docs/missing-page", "guides/docs/missing-page"),
    ],
)
def test_candidate_slug(target: str, expected: str) -> None:
    assert candidate_slug(target) == expected


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ("/en/docs/v1/intro", "intro"),
        ("/en/docs/v1", ""),
        ("/fr/docs/v9/intro", "fr/docs/v9/intro"),
        ("/en/docs/v2/intro", "en/docs/v2/intro"),
        ("guides/docs/missing-page", "guides/docs/missing-page"),
        ("en/v1/api/users.md", "api/users"),
    ],
)
def test_candidate_slug_within_scope(target: str, expected: str) -> None:
    assert candidate_slug(target, "en", "v1") == expected


def test_classify_code_block_variants() -> None:
    assert classify_code_block("rust,no_run", "fn main() {}").language == "rust"
    assert classify_code_block("TEXT", "x").kind is CodeBlockKind.UNTYPED
    assert classify_code_block("title", "x").kind is CodeBlockKind.UNTYPED
    assert classify_code_block("", "").kind is CodeBlockKind.EMPTY


def test_parse_code_meta_and_display_names() -> None:
    assert parse_code_meta('filename="a b.js" highlightLines=\'1,3\' wrap=true') == {
        "filename": "a b.js",
        "highlightLines": "1,3",
        "wrap": "true",
    }
    assert language_display_name("cpp") == "C++"
    assert language_display_name("Zig") == "ZIG"


def test_language_without_lexer_is_escaped_verbatim(
    transformer: MarkdownTransformer,
) -> None:
    result = transformer.transform("```notalanguage\na < b\n```\n")
    block = _soup(result.html).select_one("div.code-block")
    assert block["data-code-block-type"] == "typed"
    assert block.select_one(".code-block-language").get_text() == "NOTALANGUAGE"
    assert block.select_one("code").get_text() == "a < b"
    assert block.select_one("code span") is None
