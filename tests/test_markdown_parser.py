"""Tests for heading ids and TOC folding in ``docsite.markdown_parser``."""

from __future__ import annotations

import pytest

from docsite.markdown_parser import (
    TocBuilder,
    build_toc,
    clean_heading_text,
    extract_headings,
    heading_id,
    unique_heading_id,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Getting Started", "getting-started"),
        ("What's new in v2?", "whats-new-in-v2"),
        ("  Spaces   and -- dashes  ", "spaces-and-dashes"),
        ("C++ & Rust", "c-rust"),
        ("!!!", "section"),
    ],
)
def test_heading_id(text: str, expected: str) -> None:
    assert heading_id(text) == expected


def test_unique_heading_id_appends_counters() -> None:
    seen: set[str] = set()
    ids = [unique_heading_id("Setup", seen) for _ in range(3)]
    assert ids == ["setup", "setup-1", "setup-2"]
    assert seen == {"setup", "setup-1", "setup-2"}


def test_unique_heading_id_skips_taken_suffix() -> None:
    seen = {"setup-1"}
    assert unique_heading_id("Setup", seen) == "setup"
    assert unique_heading_id("Setup", seen) == "setup-2"


def test_toc_nests_skipped_levels_under_parent() -> None:
    toc = build_toc([("overview", "Overview", 2), ("details", "Details", 4)])
    assert [item.id for item in toc] == ["overview"]
    assert [child.id for child in toc[0].children] == ["details"]


def test_toc_pops_back_to_matching_level() -> None:
    toc = build_toc(
        [
            ("a", "A", 2),
            ("a1", "A1", 3),
            ("a1x", "A1x", 4),
            ("a2", "A2", 3),
            ("b", "B", 2),
        ]
    )
    assert [item.id for item in toc] == ["a", "b"]
    assert [child.id for child in toc[0].children] == ["a1", "a2"]
    assert [child.id for child in toc[0].children[0].children] == ["a1x"]


def test_toc_builder_ignores_levels_outside_range() -> None:
    builder = TocBuilder()
    assert builder.add("title", "Title", 1) is None
    assert builder.add("deep", "Deep", 5) is None
    assert builder.add("intro", "Intro", 3) is not None
    assert [item.id for item in builder.items] == ["intro"]


def test_extract_headings_ignores_fenced_code() -> None:
    text = "# Title\n\n## Usage\n\n```bash\n## not a heading\n```\n\n### Flags\n"
    toc = extract_headings(text)
    assert [item.to_dict() for item in toc] == [
        {
            "id": "usage",
            "title": "Usage",
            "level": 2,
            "children": [{"id": "flags", "title": "Flags", "level": 3, "children": []}],
        }
    ]


def test_clean_heading_text_resolves_entities_and_escapes() -> None:
    assert clean_heading_text("Use &lt;div&gt; \\*carefully\\*") == "Use <div> *carefully*"
