"""Behaviour tests for code block rendering.

These pytest-bdd scenarios drive :class:`MarkdownTransformer` with Markdown
that exercises fenced code: fences indented inside list items, a fence in a
blockquote, an empty fence, and a fence that is never closed. The rendered
HTML is parsed with BeautifulSoup so the assertions target the code block
structure.

Usage
-----
Run ``pytest tests/bdd/test_code_blocks.py -v`` after installing the test
extra (``pip install -e .[test]``).
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from pytest_bdd import given, parsers, scenarios, then, when

from docsite.pipeline import MarkdownTransformer

if typ.TYPE_CHECKING:
    from docsite.pipeline import TransformResult

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "code_blocks.feature"
scenarios(FEATURE_FILE)


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@given("markdown with a fenced rust block indented inside a list")
def given_indented_rust(scenario_state: dict[str, object]) -> None:
    """Store Markdown whose Rust fence is indented under a list item."""
    scenario_state["markdown"] = (
        "## Intro\n"
        "- **Example** demonstrates inline code\n\n"
        "  ```rust,no_run\n"
        '  fn main() { println!("hi"); }\n'
        "  ```\n"
    )


@given(
    "markdown with a fenced python block indented four spaces under a numbered step"
)
def given_list_python(scenario_state: dict[str, object]) -> None:
    """Store Markdown whose fence continues an ordered list item."""
    scenario_state["markdown"] = (
        "1. Install the package\n\n"
        "    ```python\n"
        "    x = 1\n"
        "    ```\n\n"
        "2. Run it\n"
    )


@given("markdown with a fenced python block inside a blockquote")
def given_quoted_python(scenario_state: dict[str, object]) -> None:
    scenario_state["markdown"] = "> Note:\n> ```python\n> x = 1\n> ```\n"


@given("markdown with an empty fenced block")
def given_empty_fence(scenario_state: dict[str, object]) -> None:
    scenario_state["markdown"] = "Before\n\n```python\n\n```\n\nAfter\n"


@given("markdown with an unterminated fence")
def given_unterminated_fence(scenario_state: dict[str, object]) -> None:
    scenario_state["markdown"] = "## Broken\n\n```bash\necho 'no end'\n"


@when("I transform the markdown")
def when_transform(scenario_state: dict[str, object]) -> None:
    """Render the stored Markdown with a fresh transformer."""
    markdown = typ.cast("str", scenario_state["markdown"])
    scenario_state["result"] = MarkdownTransformer().transform(markdown)


def _soup(scenario_state: dict[str, object]) -> BeautifulSoup:
    result = typ.cast("TransformResult", scenario_state["result"])
    return BeautifulSoup(result.html, "html.parser")


@then(parsers.parse('the output contains a typed code block for "{language}"'))
def then_typed_block(scenario_state: dict[str, object], language: str) -> None:
    """Verify the block is typed and declares ``language``."""
    block = _soup(scenario_state).select_one("div.code-block")
    assert block is not None, "expected a rendered code block"
    assert block.get("data-code-block-type") == "typed"
    assert block.get("data-language") == language
    assert block.select_one(f"code.language-{language}") is not None


@then(parsers.parse('the code block text contains "{snippet}"'))
def then_block_text(scenario_state: dict[str, object], snippet: str) -> None:
    code = _soup(scenario_state).select_one("div.code-block code")
    assert code is not None
    assert snippet in code.get_text()


@then(parsers.parse('the code block sits inside a "{tag}" element'))
def then_block_inside(scenario_state: dict[str, object], tag: str) -> None:
    block = _soup(scenario_state).select_one("div.code-block")
    assert block is not None
    assert block.find_parent(tag) is not None


@then(parsers.parse('the blockquote text contains "{snippet}"'))
def then_quote_text(scenario_state: dict[str, object], snippet: str) -> None:
    quotes = _soup(scenario_state).find_all("blockquote")
    assert len(quotes) == 1
    assert snippet in quotes[0].get_text()


@then("the output contains an empty code block placeholder")
def then_empty_block(scenario_state: dict[str, object]) -> None:
    """Verify the empty variant replaces the code body and copy button."""
    soup = _soup(scenario_state)
    block = soup.select_one("div.code-block")
    assert block is not None
    assert block.get("data-code-block-type") == "empty"
    message = block.select_one(".code-block-empty-message")
    assert message is not None
    assert message.get_text() == "This code block is empty"
    assert block.select_one("button.code-block-copy") is None
    assert [p.get_text() for p in soup.find_all("p", recursive=False)] == [
        "Before",
        "After",
    ]


@then("the raw source is returned with one processing error")
def then_raw_source(scenario_state: dict[str, object]) -> None:
    result = typ.cast("TransformResult", scenario_state["result"])
    assert result.html == scenario_state["markdown"]
    assert result.toc == []
    assert len(result.link_errors) == 1
    assert result.link_errors[0].startswith("Processing error:")
