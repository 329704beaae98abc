"""Typed dataclasses describing loaded documentation content."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

Number = int | float


@dc.dataclass(slots=True, frozen=True)
class ContentValidationError:
    """Diagnostic for a single frontmatter field that failed validation."""

    field: str
    message: str
    file_path: str

    def __str__(self) -> str:
        return f"{self.file_path}: {self.field}: {self.message}"


@dc.dataclass(slots=True, frozen=True)
class PageFrontmatter:
    """Validated metadata block that precedes a document body.

    Attributes
    ----------
    title : str
        Page title used for headings and navigation.
    description : str
        One-line summary of the page.
    version : str
        Documentation version the page belongs to (for example ``"v1"``).
    locale : str
        Locale code of the page (for example ``"en"``).
    order : int | float
        Position of the page among its siblings.
    tags : tuple[str, ...]
        Free-form topic tags.
    last_modified : str, optional
        Authoring timestamp as written in the source.
    deprecated : bool
        Whether the page documents deprecated behaviour.
    redirect_from : tuple[str, ...]
        Legacy URLs that should resolve to this page.
    sidebar_position : int | float, optional
        Navigation order override; takes precedence over ``order``.
    sidebar_label : str, optional
        Navigation title override; takes precedence over ``title``.
    slug : str, optional
        Explicit slug that replaces the path-derived one.
    """

    title: str
    description: str
    version: str
    locale: str
    order: Number
    tags: tuple[str, ...] = ()
    last_modified: str | None = None
    deprecated: bool = False
    redirect_from: tuple[str, ...] = ()
    sidebar_position: Number | None = None
    sidebar_label: str | None = None
    slug: str | None = None

    @classmethod
    def from_mapping(cls, data: typ.Mapping[str, typ.Any]) -> PageFrontmatter:
        """Build frontmatter from an already validated mapping."""
        return cls(
            title=data["title"],
            description=data["description"],
            version=data["version"],
            locale=data["locale"],
            order=data["order"],
            tags=tuple(data.get("tags") or ()),
            last_modified=data.get("lastModified"),
            deprecated=bool(data.get("deprecated", False)),
            redirect_from=tuple(data.get("redirectFrom") or ()),
            sidebar_position=_first_present(
                data, "sidebarPosition", "sidebar_position"
            ),
            sidebar_label=_first_present(data, "sidebarLabel", "sidebar_label"),
            slug=data.get("slug"),
        )

    @property
    def nav_order(self) -> Number:
        """Return the order used by navigation (``sidebar_position`` first)."""
        if self.sidebar_position is not None:
            return self.sidebar_position
        return self.order

    @property
    def nav_title(self) -> str:
        """Return the title used by navigation (``sidebar_label`` first)."""
        return self.sidebar_label if self.sidebar_label is not None else self.title


@dc.dataclass(slots=True, frozen=True)
class ContentDocument:
    """A parsed source file: frontmatter, raw body, slug, and origin path."""

    frontmatter: PageFrontmatter
    body: str
    slug: str
    file_path: str

    @property
    def locale(self) -> str:
        return self.frontmatter.locale

    @property
    def version(self) -> str:
        return self.frontmatter.version

    @property
    def is_home(self) -> bool:
        """Return True for the locale/version home document (empty slug)."""
        return self.slug == ""


@dc.dataclass(slots=True, frozen=True)
class SlugIndex:
    """Every slug that exists within one (locale, version) scope.

    The index is built completely before any link validation starts and is
    never mutated afterwards.
    """

    locale: str
    version: str
    slugs: frozenset[str] = frozenset()

    def __contains__(self, slug: object) -> bool:
        return slug in self.slugs

    def __iter__(self) -> typ.Iterator[str]:
        return iter(sorted(self.slugs))

    def __len__(self) -> int:
        return len(self.slugs)


def _first_present(data: typ.Mapping[str, typ.Any], *keys: str) -> typ.Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


__all__ = [
    "ContentDocument",
    "ContentValidationError",
    "Number",
    "PageFrontmatter",
    "SlugIndex",
]
