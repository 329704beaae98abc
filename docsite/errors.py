"""Exception types raised by the docsite content engine."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .content.models import ContentValidationError


class DocsiteError(Exception):
    """Base class for all docsite errors."""


class FrontmatterError(DocsiteError, ValueError):
    """Raised when a document's frontmatter is missing, malformed, or mistyped.

    Attributes
    ----------
    errors : list[ContentValidationError]
        Per-field diagnostics collected while validating the document.
    """

    def __init__(self, message: str, errors: list[ContentValidationError]) -> None:
        super().__init__(message)
        self.errors = errors


class MarkdownParseError(DocsiteError):
    """Raised by the transform pipeline when a document cannot be parsed."""


class SidebarConfigError(DocsiteError, ValueError):
    """Raised when a sidebar configuration has an invalid shape."""

    def __init__(self, message: str, problems: list[str] | None = None) -> None:
        super().__init__(message)
        self.problems = problems or []


class BackupError(DocsiteError, OSError):
    """Raised when the pre-mutation backup of the content root fails."""


__all__ = [
    "BackupError",
    "DocsiteError",
    "FrontmatterError",
    "MarkdownParseError",
    "SidebarConfigError",
]
