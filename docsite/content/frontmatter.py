"""Split, validate, and parse document frontmatter.

Source files start with a ``---`` fenced YAML block followed by a
Markdown-superset body. :func:`parse_document` turns such text into a
:class:`~docsite.content.models.ContentDocument`, collecting every field
problem before raising so callers can report all of them at once.

Examples
--------
>>> from docsite.content.frontmatter import generate_slug
>>> generate_slug("en/v1/guides/setup.mdx")
'guides/setup'
>>> generate_slug("en/v1/index.md")
''
"""

from __future__ import annotations

import datetime as dt
import re
import typing as typ

from frontmatter.default_handlers import YAMLHandler
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from docsite._constants import MARKDOWN_SUFFIXES
from docsite.errors import FrontmatterError

from .models import ContentDocument, ContentValidationError, PageFrontmatter

EXTENSION_PATTERN = re.compile(r"\.mdx?$")

REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("title", "string"),
    ("description", "string"),
    ("version", "string"),
    ("locale", "string"),
    ("order", "number"),
)
OPTIONAL_FIELDS: tuple[tuple[str, str], ...] = (
    ("tags", "string list"),
    ("lastModified", "string"),
    ("deprecated", "boolean"),
    ("redirectFrom", "string list"),
    ("sidebarPosition", "number"),
    ("sidebar_position", "number"),
    ("sidebarLabel", "string"),
    ("sidebar_label", "string"),
    ("slug", "string"),
)


class RuamelYAMLHandler(YAMLHandler):
    """python-frontmatter handler that reads the block with ruamel.yaml.

    Boundary detection and splitting come from python-frontmatter; loading
    uses the same safe YAML 1.2 loader as sidebar configs.
    """

    def load(self, fm: str, **kwargs: object) -> typ.Any:
        loader = YAML(typ="safe")
        loader.version = (1, 2)
        return loader.load(fm)


def split_frontmatter(text: str) -> tuple[dict[str, typ.Any], str]:
    """Return the parsed frontmatter mapping and the remaining body.

    Parameters
    ----------
    text : str
        Full source text of a document.

    Returns
    -------
    tuple[dict[str, Any], str]
        The frontmatter mapping (empty when the document has no block) and
        the body that follows it, unstripped.

    Raises
    ------
    FrontmatterError
        If the block is not valid YAML or is not a mapping.
    """
    handler = RuamelYAMLHandler()
    source = text.removeprefix("\ufeff")
    if not handler.detect(source):
        return {}, text
    try:
        raw, body = handler.split(source)
    except ValueError:
        # An opening rule with no closing one is a thematic break.
        return {}, text

    try:
        loaded = handler.load(raw) or {}
    except YAMLError as exc:
        msg = f"Frontmatter is not valid YAML: {exc}"
        raise FrontmatterError(msg, []) from exc
    if not isinstance(loaded, dict):
        msg = "Frontmatter must be a mapping."
        raise FrontmatterError(msg, [])
    data = {str(key): _normalize_scalar(value) for key, value in loaded.items()}
    return data, body.removeprefix("\r").removeprefix("\n")


def _normalize_scalar(value: object) -> object:
    """Render YAML timestamps as ISO strings so they validate as text."""
    match value:
        case dt.datetime() | dt.date():
            return value.isoformat()
        case _:
            return value


def _matches_kind(value: object, kind: str) -> bool:
    match kind:
        case "string":
            return isinstance(value, str)
        case "number":
            return isinstance(value, int | float) and not isinstance(value, bool)
        case "boolean":
            return isinstance(value, bool)
        case "string list":
            return isinstance(value, list) and all(isinstance(v, str) for v in value)
        case _:  # pragma: no cover - guarded by the field tables
            return False


def validate_frontmatter(
    data: typ.Mapping[str, typ.Any], file_path: str
) -> list[ContentValidationError]:
    """Return every field problem in ``data``; an empty list means valid."""
    errors: list[ContentValidationError] = []
    for field, kind in REQUIRED_FIELDS:
        value = data.get(field)
        if value is None:
            errors.append(
                ContentValidationError(
                    field, f"Required field '{field}' is missing", file_path
                )
            )
        elif not _matches_kind(value, kind):
            errors.append(
                ContentValidationError(field, f"{field} must be a {kind}", file_path)
            )
    for field, kind in OPTIONAL_FIELDS:
        value = data.get(field)
        if value is not None and not _matches_kind(value, kind):
            errors.append(
                ContentValidationError(field, f"{field} must be a {kind}", file_path)
            )
    return errors


def generate_slug(relative_path: str) -> str:
    """Derive the locale/version-relative slug for a content-root path."""
    slug = EXTENSION_PATTERN.sub("", relative_path.replace("\\", "/"))
    parts = [part for part in slug.split("/") if part]
    if parts and parts[-1] == "index":
        parts.pop()
    if len(parts) >= 2:
        return "/".join(parts[2:])
    return "/".join(parts)


def is_markdown_file(name: str) -> bool:
    """Return True when ``name`` carries a Markdown/MDX suffix."""
    return name.endswith(MARKDOWN_SUFFIXES)


def parse_document(text: str, file_path: str, relative_path: str) -> ContentDocument:
    """Parse ``text`` into a validated :class:`ContentDocument`.

    Parameters
    ----------
    text : str
        Full source text including the frontmatter block.
    file_path : str
        Path reported in diagnostics and stored on the document.
    relative_path : str
        Content-root-relative POSIX path used to derive the slug.

    Raises
    ------
    FrontmatterError
        When the frontmatter is malformed or fails validation; ``errors``
        lists every offending field.
    """
    data, body = split_frontmatter(text)
    errors = validate_frontmatter(data, file_path)
    if errors:
        msg = f"Invalid frontmatter in {file_path}"
        raise FrontmatterError(msg, errors)
    frontmatter = PageFrontmatter.from_mapping(data)
    slug = frontmatter.slug if frontmatter.slug is not None else generate_slug(
        relative_path
    )
    return ContentDocument(
        frontmatter=frontmatter,
        body=body,
        slug=slug.strip("/"),
        file_path=file_path,
    )


__all__ = [
    "RuamelYAMLHandler",
    "generate_slug",
    "is_markdown_file",
    "parse_document",
    "split_frontmatter",
    "validate_frontmatter",
]
