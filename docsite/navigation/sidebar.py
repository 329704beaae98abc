"""Sidebar configuration: loading, validation, and application.

A sidebar config lives next to the documents of one (locale, version) scope
as ``_sidebar.json``, ``_sidebar.yaml`` or ``_sidebar.yml``. It can hide
items, retitle directories through ``groups``, relabel items, and impose an
explicit order. An invalid config is rejected as a whole.

Examples
--------
>>> validate_sidebar_config({"order": ["intro.md", 3], "labels": []})
['order array must contain only strings', 'labels must be an object with string keys and values']
>>> parse_sidebar_config({"hidden": ["drafts/"]}).hidden
('drafts/',)
"""

from __future__ import annotations

import dataclasses as dc
import json
import logging
import posixpath
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from docsite._constants import SIDEBAR_CONFIG_NAMES
from docsite.errors import SidebarConfigError

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .models import NavigationItem, NavigationTree

logger = logging.getLogger(__name__)

T = typ.TypeVar("T")


@dc.dataclass(slots=True, frozen=True)
class SidebarGroup:
    """Overrides applied to one directory item."""

    title: str | None = None
    order: int | float | None = None
    collapsed: bool | None = None


@dc.dataclass(slots=True, frozen=True)
class SidebarConfig:
    """A validated sidebar configuration."""

    order: tuple[str, ...] = ()
    hidden: tuple[str, ...] = ()
    labels: dict[str, str] = dc.field(default_factory=dict)
    groups: dict[str, SidebarGroup] = dc.field(default_factory=dict)


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _validate_string_list(raw: typ.Mapping[str, typ.Any], key: str) -> list[str]:
    if key not in raw:
        return []
    value = raw[key]
    if not isinstance(value, list):
        return [f"{key} must be an array of strings"]
    if not all(isinstance(entry, str) for entry in value):
        return [f"{key} array must contain only strings"]
    return []


def _validate_labels(raw: typ.Mapping[str, typ.Any]) -> list[str]:
    if "labels" not in raw:
        return []
    labels = raw["labels"]
    if not isinstance(labels, dict):
        return ["labels must be an object with string keys and values"]
    return [
        f'labels entry "{key}" must have string key and value'
        for key, value in labels.items()
        if not isinstance(key, str) or not isinstance(value, str)
    ]


def _validate_groups(raw: typ.Mapping[str, typ.Any]) -> list[str]:
    if "groups" not in raw:
        return []
    groups = raw["groups"]
    if not isinstance(groups, dict):
        return ["groups must be an object"]
    problems: list[str] = []
    for key, group in groups.items():
        if not isinstance(key, str):
            problems.append(f'group key "{key}" must be a string')
            continue
        if not isinstance(group, dict):
            problems.append(f'group "{key}" must be an object')
            continue
        if "title" in group and not isinstance(group["title"], str):
            problems.append(f'group "{key}" title must be a string')
        if "order" in group and not _is_number(group["order"]):
            problems.append(f'group "{key}" order must be a number')
        if "collapsed" in group and not isinstance(group["collapsed"], bool):
            problems.append(f'group "{key}" collapsed must be a boolean')
    return problems


def validate_sidebar_config(raw: object) -> list[str]:
    """Return every shape problem found in ``raw``; empty when it is valid."""
    if not isinstance(raw, dict):
        return ["Configuration must be an object"]
    return [
        *_validate_string_list(raw, "order"),
        *_validate_string_list(raw, "hidden"),
        *_validate_labels(raw),
        *_validate_groups(raw),
    ]


def parse_sidebar_config(raw: object) -> SidebarConfig:
    """Validate ``raw`` and build a :class:`SidebarConfig`.

    Raises
    ------
    SidebarConfigError
        If validation reports any problem; ``problems`` lists them all.
    """
    problems = validate_sidebar_config(raw)
    if problems:
        msg = f"Invalid sidebar configuration: {'; '.join(problems)}"
        raise SidebarConfigError(msg, problems)
    data = typ.cast("dict[str, typ.Any]", raw)
    groups = {
        key: SidebarGroup(
            title=group.get("title"),
            order=group.get("order"),
            collapsed=group.get("collapsed"),
        )
        for key, group in (data.get("groups") or {}).items()
    }
    return SidebarConfig(
        order=tuple(data.get("order") or ()),
        hidden=tuple(data.get("hidden") or ()),
        labels=dict(data.get("labels") or {}),
        groups=groups,
    )


def _read_config_file(path: Path) -> object:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        return json.loads(text)
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    return loader.load(text)


def load_sidebar_config(directory: Path) -> SidebarConfig | None:
    """Load the first sidebar config file found in ``directory``.

    Returns None when no config exists, or when the first one found cannot
    be read, parsed, or validated. Failures are logged and never raised.
    """
    for name in SIDEBAR_CONFIG_NAMES:
        path = directory / name
        if not path.is_file():
            continue
        try:
            return parse_sidebar_config(_read_config_file(path))
        except SidebarConfigError as exc:
            logger.warning(
                "Invalid sidebar config at %s: %s. Falling back to filesystem "
                "navigation.",
                path,
                "; ".join(exc.problems),
            )
        except (OSError, UnicodeDecodeError, ValueError, YAMLError) as exc:
            logger.warning(
                "Failed to parse sidebar config at %s: %s. Falling back to "
                "filesystem navigation.",
                path,
                exc,
            )
        return None
    return None


def _basename(original_path: str) -> str:
    return posixpath.basename(original_path.rstrip("/"))


def _normalized(mapping: typ.Mapping[str, T]) -> dict[str, T]:
    """Key ``mapping`` by slash-stripped paths, keeping the first entry."""
    result: dict[str, T] = {}
    for key, value in mapping.items():
        result.setdefault(key.strip("/"), value)
    return result


def _match(
    item: NavigationItem, raw: typ.Mapping[str, T], normalized: typ.Mapping[str, T]
) -> T | None:
    """Find the entry for ``item``: exact path, slash-stripped path, then
    basename for directories."""
    if item.original_path in raw:
        return raw[item.original_path]
    stripped = item.original_path.strip("/")
    if stripped in normalized:
        return normalized[stripped]
    if item.is_directory:
        return normalized.get(_basename(item.original_path))
    return None


def _with_children(
    item: NavigationItem, transform: typ.Callable[[NavigationTree], NavigationTree]
) -> NavigationItem:
    if not item.children:
        return item
    return dc.replace(item, children=tuple(transform(list(item.children))))


def filter_hidden(tree: NavigationTree, hidden: typ.Collection[str]) -> NavigationTree:
    """Drop items whose path, slash-stripped path, or basename is hidden."""
    hidden_keys = {entry.strip("/") for entry in hidden}

    def is_hidden(item: NavigationItem) -> bool:
        if item.original_path in hidden:
            return True
        return (
            item.original_path.strip("/") in hidden_keys
            or _basename(item.original_path) in hidden_keys
        )

    def walk(items: NavigationTree) -> NavigationTree:
        return [_with_children(item, walk) for item in items if not is_hidden(item)]

    return walk(tree)


def apply_groups(
    tree: NavigationTree, groups: typ.Mapping[str, SidebarGroup]
) -> NavigationTree:
    """Override title, order, and collapsed state of matching directories."""

    def walk(items: NavigationTree) -> NavigationTree:
        result: NavigationTree = []
        for item in items:
            item = _with_children(item, walk)
            group = groups.get(item.original_path)
            if group is not None and item.is_directory:
                item = dc.replace(
                    item,
                    title=group.title or item.title,
                    order=item.order if group.order is None else group.order,
                    collapsed=group.collapsed,
                )
            result.append(item)
        return result

    return walk(tree)


def apply_labels(tree: NavigationTree, labels: typ.Mapping[str, str]) -> NavigationTree:
    """Retitle items named in ``labels`` and mark them as custom labelled."""
    normalized = _normalized(labels)

    def walk(items: NavigationTree) -> NavigationTree:
        result: NavigationTree = []
        for item in items:
            item = _with_children(item, walk)
            label = _match(item, labels, normalized)
            if label:
                item = dc.replace(item, title=label, custom_label=True)
            result.append(item)
        return result

    return walk(tree)


def apply_order(tree: NavigationTree, order: typ.Sequence[str]) -> NavigationTree:
    """Arrange siblings by their position in ``order``.

    Listed items come first in list order; unlisted items follow, keeping
    their relative order. Siblings on a level touched by the list are then
    renumbered by position, so the final (order, title) sort keeps the
    arrangement.
    """
    positions = {key: index for index, key in reversed(list(enumerate(order)))}
    normalized = _normalized(positions)

    def walk(items: NavigationTree) -> NavigationTree:
        items = [_with_children(item, walk) for item in items]
        ranked = [(_match(item, positions, normalized), item) for item in items]
        if all(rank is None for rank, _item in ranked):
            return items
        ranked.sort(
            key=lambda entry: (
                entry[0] is None,
                entry[0] if entry[0] is not None else entry[1].order,
            )
        )
        return [
            dc.replace(item, order=index) for index, (_rank, item) in enumerate(ranked)
        ]

    return walk(tree)


def apply_sidebar_config(tree: NavigationTree, config: SidebarConfig) -> NavigationTree:
    """Apply hidden, groups, labels, then order; each stage returns a new tree."""
    result = list(tree)
    if config.hidden:
        result = filter_hidden(result, config.hidden)
    if config.groups:
        result = apply_groups(result, config.groups)
    if config.labels:
        result = apply_labels(result, config.labels)
    if config.order:
        result = apply_order(result, config.order)
    return result


__all__ = [
    "SidebarConfig",
    "SidebarGroup",
    "apply_groups",
    "apply_labels",
    "apply_order",
    "apply_sidebar_config",
    "filter_hidden",
    "load_sidebar_config",
    "parse_sidebar_config",
    "validate_sidebar_config",
]
