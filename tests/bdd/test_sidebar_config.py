"""Behaviour tests for sidebar configuration.

The scenarios build a small ``en/v1`` content tree, drop a ``_sidebar.json``
next to it, and check how :class:`NavigationBuilder` applies the hidden,
labels, and order settings, including the fallback when the config is
invalid.
"""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from docsite.navigation import NavigationBuilder, get_navigation_stats

if typ.TYPE_CHECKING:
    from docsite.navigation import NavigationTree

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "sidebar_config.feature"
)
scenarios(FEATURE_FILE)

PAGES = {
    "quickstart.md": ("Quickstart", 2),
    "guides/setup.md": ("Setup", 5),
    "guides/best-practices.mdx": ("Best Practices", 3),
    "api/users.md": ("Users", 1),
    "api/groups.md": ("Groups", 4),
}


@pytest.fixture
def scenario_state() -> dict[str, object]:
    """Return a mutable dict used to share scenario state across BDD steps."""
    return {}


def _write_config(scenario_state: dict[str, object], config: object) -> None:
    scope = typ.cast("Path", scenario_state["content_root"]) / "en" / "v1"
    (scope / "_sidebar.json").write_text(json.dumps(config), encoding="utf-8")


@given("a content tree with guides and an API section")
def given_content_tree(tmp_path: Path, scenario_state: dict[str, object]) -> None:
    """Write the pages used by every sidebar scenario."""
    for relative, (title, order) in PAGES.items():
        path = tmp_path / "en" / "v1" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            f"---\ntitle: {title}\ndescription: About {title}\nversion: v1\n"
            f"locale: en\norder: {order}\n---\nBody.\n",
            encoding="utf-8",
        )
    scenario_state["content_root"] = tmp_path


@given(parsers.parse('a sidebar config hiding "{entry}"'))
def given_hidden_config(scenario_state: dict[str, object], entry: str) -> None:
    _write_config(scenario_state, {"hidden": [entry]})


@given(
    parsers.parse(
        'a sidebar config ordering "{order}" and labelling "{key}" as "{label}"'
    )
)
def given_order_config(
    scenario_state: dict[str, object], order: str, key: str, label: str
) -> None:
    _write_config(
        scenario_state,
        {"order": [entry.strip() for entry in order.split(",")], "labels": {key: label}},
    )


@given("an invalid sidebar config")
def given_invalid_config(scenario_state: dict[str, object]) -> None:
    _write_config(scenario_state, {"order": ["guides"], "labels": {"api": 1}})


@when("I build the navigation tree")
def when_build_tree(scenario_state: dict[str, object]) -> None:
    content_root = typ.cast("Path", scenario_state["content_root"])
    scenario_state["tree"] = NavigationBuilder(content_root).build_tree("en", "v1")


def _tree(scenario_state: dict[str, object]) -> NavigationTree:
    return typ.cast("NavigationTree", scenario_state["tree"])


@then(parsers.parse('the "{section}" section lists "{title}" only'))
def then_section_lists(
    scenario_state: dict[str, object], section: str, title: str
) -> None:
    """Verify the named directory kept a single child."""
    directory = next(item for item in _tree(scenario_state) if item.title == section)
    assert [child.title for child in directory.children] == [title]


@then(parsers.parse("the tree has {count:d} pages"))
def then_page_count(scenario_state: dict[str, object], count: int) -> None:
    assert get_navigation_stats(_tree(scenario_state)).pages_count == count


@then(parsers.parse('the top level titles are "{titles}"'))
def then_top_level(scenario_state: dict[str, object], titles: str) -> None:
    expected = [title.strip() for title in titles.split(",")]
    assert [item.title for item in _tree(scenario_state)] == expected
