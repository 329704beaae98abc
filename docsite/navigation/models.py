"""Navigation tree data structures."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

Badge = typ.Literal["deprecated", "new", "beta"]


class NavigationKind(enum.StrEnum):
    """Discriminant for navigation items."""

    DIRECTORY = "directory"
    PAGE = "page"


@dc.dataclass(slots=True, frozen=True)
class NavigationItem:
    """One entry in a navigation forest.

    Items are immutable; the sidebar and sort passes build new items with
    :func:`dataclasses.replace` rather than editing nodes in place.

    Attributes
    ----------
    kind : NavigationKind
        Whether the item groups children or links to a page.
    title : str
        Display title.
    path : str
        Site route for pages; always empty for directories.
    order : int | float
        Sort key within the item's siblings.
    original_path : str
        Content-relative source path, used to match sidebar config keys.
    custom_label : bool
        True when the title came from ``sidebarLabel`` or a sidebar label.
    badge : str, optional
        ``"deprecated"``, ``"new"`` or ``"beta"``.
    children : tuple[NavigationItem, ...]
        Nested items of a directory.
    collapsed : bool, optional
        Initial collapsed state supplied by a sidebar group.
    """

    kind: NavigationKind
    title: str
    order: int | float
    original_path: str
    path: str = ""
    custom_label: bool = False
    badge: Badge | None = None
    children: tuple[NavigationItem, ...] = ()
    collapsed: bool | None = None

    @property
    def is_directory(self) -> bool:
        return self.kind is NavigationKind.DIRECTORY

    def to_dict(self) -> dict[str, typ.Any]:
        """Return a JSON-ready mapping of this item and its descendants."""
        data: dict[str, typ.Any] = {
            "title": self.title,
            "path": self.path,
            "order": self.order,
            "isDirectory": self.is_directory,
            "originalPath": self.original_path,
            "customLabel": self.custom_label,
        }
        if self.badge is not None:
            data["badge"] = self.badge
        if self.collapsed is not None:
            data["collapsed"] = self.collapsed
        if self.is_directory:
            data["children"] = [child.to_dict() for child in self.children]
        return data


NavigationTree = list[NavigationItem]


@dc.dataclass(slots=True, frozen=True)
class NavigationStats:
    """Aggregate counts for a navigation tree."""

    total_items: int
    max_depth: int
    directories_count: int
    pages_count: int


__all__ = [
    "Badge",
    "NavigationItem",
    "NavigationKind",
    "NavigationStats",
    "NavigationTree",
]
