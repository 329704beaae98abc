"""Render document bodies into HTML with a table of contents."""

from __future__ import annotations

import logging
import typing as typ

from markdown import Markdown
from pygments.formatters.html import HtmlFormatter

from .extension import DocsiteExtension
from .models import TransformResult, TransformState

logger = logging.getLogger(__name__)

CODE_BLOCK_CSS_SELECTOR = ".code-block-body"


class MarkdownTransformer:
    """Transform Markdown bodies against a fixed slug index.

    A new ``Markdown`` instance and :class:`TransformState` are created for
    each document, so heading ids and diagnostics are scoped to one body.
    """

    def __init__(
        self,
        slug_index: typ.Container[str] = (),
        *,
        locale: str | None = None,
        version: str | None = None,
        pygments_style: str = "monokai",
    ) -> None:
        """Initialize a transformer.

        Parameters
        ----------
        slug_index : Container[str], optional
            Slugs that exist in the current (locale, version) scope. It must be
            complete before the first call to :meth:`transform`.
        locale, version : str, optional
            When both are given, links written as ``<locale>/<version>/slug``
            are validated like plain slugs, and only the
            ``/<locale>/docs/<version>`` route prefix of this scope is
            stripped from absolute links.
        pygments_style : str, optional
            Pygments style used by :attr:`stylesheet`. Defaults to
            ``"monokai"``.
        """
        self.slug_index = slug_index
        self.locale = locale
        self.version = version
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, nowrap=True)

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._formatter.get_style_defs(CODE_BLOCK_CSS_SELECTOR)

    def transform(self, body: str) -> TransformResult:
        """Render ``body`` and collect its TOC and link diagnostics.

        This never raises. If any pass fails, the untouched source is returned
        with an empty TOC and a single ``Processing error`` diagnostic.
        """
        if not body.strip():
            return TransformResult(html="", toc=[], link_errors=[])
        state = TransformState()
        md = Markdown(
            extensions=[
                "tables",
                "sane_lists",
                DocsiteExtension(
                    state,
                    self.slug_index,
                    self._formatter,
                    self.locale,
                    self.version,
                ),
            ]
        )
        try:
            html = md.convert(body)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Markdown processing failed: %s", exc)
            return TransformResult(
                html=body, toc=[], link_errors=[f"Processing error: {exc}"]
            )
        return TransformResult(
            html=html, toc=state.toc.items, link_errors=state.link_errors
        )


def transform_markdown(
    body: str, slug_index: typ.Container[str] = ()
) -> TransformResult:
    """Transform ``body`` with default settings.

    Examples
    --------
    >>> result = transform_markdown("## Setup\\n\\n## Setup")
    >>> [item.id for item in result.toc]
    ['setup', 'setup-1']
    """
    return MarkdownTransformer(slug_index).transform(body)


__all__ = ["MarkdownTransformer", "transform_markdown"]
