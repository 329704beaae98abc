"""Tests for the ``docsite`` command functions.

Commands are called directly rather than through ``app()`` so exit codes
surface as ``SystemExit`` and output is captured with ``capsys``.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docsite import cli


def _page(title: str, body: str = "Body.\n", order: int = 1) -> str:
    return (
        "---\n"
        f"title: {title}\n"
        f"description: About {title}\n"
        "version: v1\n"
        "locale: en\n"
        f"order: {order}\n"
        "---\n"
        f"{body}"
    )


def _write(root: Path, relative: str, text: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    root = tmp_path / "content"
    _write(root, "en/v1/index.md", _page("Home", "## Welcome\n\n[setup](guides/setup)\n", 0))
    _write(root, "en/v1/guides/setup.md", _page("Setup", "## Install\n\n## Configure\n"))
    return root


def test_audit_passes_for_valid_links(
    content_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.audit(locale="en", content_version="v1", content_root=content_root)

    out = capsys.readouterr().out
    assert "- Processed files: 2" in out
    assert "- Total links: 1" in out
    assert out.rstrip().endswith("All links are valid")


def test_audit_exits_non_zero_on_broken_links(
    content_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write(content_root, "en/v1/extra.md", _page("Extra", "[gone](guides/setpu)\n"))

    with pytest.raises(SystemExit) as excinfo:
        cli.audit(locale="en", content_version="v1", content_root=content_root)

    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert '   URL: "guides/setpu"' in out
    assert "   Reason: Target file does not exist" in out
    assert '   Suggested fix: "en/v1/guides/setup.md"' in out
    assert "Found 1 broken links" in out


def test_fix_dry_run_reports_without_writing(
    content_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    page = _write(content_root, "en/v1/extra.md", _page("Extra", "[gone](guides/setpu)\n"))
    before = page.read_text(encoding="utf-8")

    cli.fix(locale="en", content_version="v1", content_root=content_root, dry_run=True)

    out = capsys.readouterr().out
    assert "Would fix 1 links" in out
    assert '"guides/setpu" -> "en/v1/guides/setup.md"' in out
    assert "Would strip 0 links" in out
    assert "backup" not in out
    assert page.read_text(encoding="utf-8") == before


def test_fix_writes_backup_and_rewrites(
    content_root: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    page = _write(content_root, "en/v1/extra.md", _page("Extra", "[gone](guides/setpu)\n"))
    backups = tmp_path / "backups"

    cli.fix(
        locale="en",
        content_version="v1",
        content_root=content_root,
        backup_root=backups,
    )

    out = capsys.readouterr().out
    assert "Fixed 1 links" in out
    assert "[gone](en/v1/guides/setup.md)" in page.read_text(encoding="utf-8")
    assert len(list(backups.iterdir())) == 1


def test_fix_exits_non_zero_when_backup_fails(
    content_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write(content_root, "en/v1/extra.md", _page("Extra", "[gone](guides/setpu)\n"))

    with pytest.raises(SystemExit) as excinfo:
        cli.fix(
            locale="en",
            content_version="v1",
            content_root=content_root,
            backup_root=content_root,
        )

    assert excinfo.value.code == 1
    assert "error: Failed to create backup" in capsys.readouterr().out


def test_normalize_prints_each_link(capsys: pytest.CaptureFixture[str]) -> None:
    cli.normalize(["/guides/setup", "https://example.com"], locale="en", content_version="v1")

    assert capsys.readouterr().out.splitlines() == [
        "/guides/setup -> en/v1/guides/setup",
        "https://example.com -> https://example.com",
    ]


def test_nav_prints_tree_json(
    content_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.nav(locale="en", content_version="v1", content_root=content_root)

    payload = json.loads(capsys.readouterr().out)
    assert payload["stats"] == {
        "totalItems": 3,
        "maxDepth": 2,
        "directoriesCount": 1,
        "pagesCount": 2,
    }
    assert [item["title"] for item in payload["tree"]] == ["Home", "Guides"]
    assert payload["tree"][1]["children"][0]["path"] == "/en/docs/v1/guides/setup"


def test_validate_reports_problems(
    content_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.validate(content_root=content_root)
    assert capsys.readouterr().out.strip() == "All content is valid"

    _write(content_root, "en/v1/bad.md", "---\ntitle: Bad\n---\n")
    with pytest.raises(SystemExit) as excinfo:
        cli.validate(content_root=content_root)

    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert "description: Required field 'description' is missing" in out
    assert "Found 4 content validation errors" in out


def test_render_summarises_each_document(
    content_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.render(locale="en", content_version="v1", content_root=content_root)

    assert capsys.readouterr().out.splitlines() == [
        "(home): 1 toc entries, 0 link errors",
        "guides/setup: 2 toc entries, 0 link errors",
    ]
