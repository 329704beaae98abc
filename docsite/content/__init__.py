"""Load and validate documentation source files.

This subpackage splits each source file into frontmatter and body, validates
the required metadata fields, derives the canonical slug, and indexes the
slugs of a (locale, version) scope for link validation. The primary entry
point is :class:`ContentLoader`; :class:`DocumentCache` is an optional,
caller-owned cache that loaders can share within one build.

Examples
--------
>>> from docsite.content import generate_slug
>>> generate_slug("en/v1/api/users.md")
'api/users'
"""

from .cache import DocumentCache
from .frontmatter import (
    generate_slug,
    is_markdown_file,
    parse_document,
    split_frontmatter,
    validate_frontmatter,
)
from .loader import ContentLoader
from .models import ContentDocument, ContentValidationError, PageFrontmatter, SlugIndex

__all__ = [
    "ContentDocument",
    "ContentLoader",
    "ContentValidationError",
    "DocumentCache",
    "PageFrontmatter",
    "SlugIndex",
    "generate_slug",
    "is_markdown_file",
    "parse_document",
    "split_frontmatter",
    "validate_frontmatter",
]
