"""Navigation tree building.

:class:`NavigationBuilder` scans a (locale, version) scope into a forest of
:class:`NavigationItem` values, applies an optional sidebar config, and
returns the forest sorted by ``(order, title)`` at every level.
"""

from .builder import (
    NavigationBuilder,
    find_navigation_item,
    format_directory_name,
    get_breadcrumbs,
    get_navigation_stats,
    page_path,
    sort_navigation_tree,
    validate_navigation_tree,
)
from .models import NavigationItem, NavigationKind, NavigationStats, NavigationTree
from .sidebar import (
    SidebarConfig,
    SidebarGroup,
    apply_sidebar_config,
    load_sidebar_config,
    parse_sidebar_config,
    validate_sidebar_config,
)

__all__ = [
    "NavigationBuilder",
    "NavigationItem",
    "NavigationKind",
    "NavigationStats",
    "NavigationTree",
    "SidebarConfig",
    "SidebarGroup",
    "apply_sidebar_config",
    "find_navigation_item",
    "format_directory_name",
    "get_breadcrumbs",
    "get_navigation_stats",
    "load_sidebar_config",
    "page_path",
    "parse_sidebar_config",
    "sort_navigation_tree",
    "validate_navigation_tree",
]
