"""Behaviour tests for the link audit and repair workflow.

A page links to ``no-such-file.mdx`` after the target was renamed to
``no-such-file-v2.mdx``. The scenarios check the auditor's suggestion, the
backup taken before a real fix, and that a dry run leaves the tree alone.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from docsite.link_auditor import LinkAuditor

if typ.TYPE_CHECKING:
    from docsite.link_auditor import AuditResult, FixResult

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "link_repair.feature"
scenarios(FEATURE_FILE)


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


@given(
    parsers.parse(
        'a content root where "{old_name}" was renamed to "{new_name}"'
    )
)
def given_renamed_target(
    tmp_path: Path, scenario_state: dict[str, object], old_name: str, new_name: str
) -> None:
    """Write the renamed target and a page that still links to the old name."""
    content_root = tmp_path / "content"
    scope = content_root / "en" / "v1"
    scope.mkdir(parents=True)
    (scope / new_name).write_text("# Renamed\n", encoding="utf-8")
    page = scope / "guide.md"
    page.write_text(f"Read [the details]({old_name}) first.\n", encoding="utf-8")
    scenario_state["content_root"] = content_root
    scenario_state["page"] = page
    scenario_state["auditor"] = LinkAuditor(content_root)


def _auditor(scenario_state: dict[str, object]) -> LinkAuditor:
    return typ.cast("LinkAuditor", scenario_state["auditor"])


@when("I audit the links")
def when_audit(scenario_state: dict[str, object]) -> None:
    scenario_state["audit"] = _auditor(scenario_state).audit_all_links("en", "v1")


@when("I fix the links")
def when_fix(scenario_state: dict[str, object]) -> None:
    scenario_state["fix"] = _auditor(scenario_state).fix_broken_links("en", "v1")


@when("I fix the links as a dry run")
def when_fix_dry_run(scenario_state: dict[str, object]) -> None:
    scenario_state["fix"] = _auditor(scenario_state).fix_broken_links(
        "en", "v1", dry_run=True
    )


@then(parsers.parse('the broken link suggests "{target}"'))
def then_suggests(scenario_state: dict[str, object], target: str) -> None:
    audit = typ.cast("AuditResult", scenario_state["audit"])
    assert [link.suggested_fix for link in audit.broken_links] == [target]
    assert audit.broken_links[0].reason == "Target file does not exist"


@then("a backup of the content root exists")
def then_backup_exists(scenario_state: dict[str, object]) -> None:
    """Verify the backup holds the page as it was before the fix."""
    result = typ.cast("FixResult", scenario_state["fix"])
    assert result.backup_created is True
    assert result.backup_path is not None
    backup_page = result.backup_path / "en" / "v1" / "guide.md"
    assert "(no-such-file.mdx)" in backup_page.read_text(encoding="utf-8")


@then("no backup of the content root exists")
def then_no_backup(scenario_state: dict[str, object]) -> None:
    result = typ.cast("FixResult", scenario_state["fix"])
    content_root = typ.cast("Path", scenario_state["content_root"])
    assert result.backup_created is False
    assert [path.name for path in content_root.parent.iterdir()] == ["content"]


@then(parsers.parse("{count:d} link is reported as fixable"))
def then_fixable_count(scenario_state: dict[str, object], count: int) -> None:
    result = typ.cast("FixResult", scenario_state["fix"])
    assert result.total_fixed == count


@then(parsers.parse('the page links to "{target}"'))
@then(parsers.parse('the page still links to "{target}"'))
def then_page_links(scenario_state: dict[str, object], target: str) -> None:
    page = typ.cast("Path", scenario_state["page"])
    assert page.read_text(encoding="utf-8") == f"Read [the details]({target}) first.\n"
