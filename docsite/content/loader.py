"""Discover, load, and index documents under a content root.

The content root is laid out as ``<locale>/<version>/<relative path>``. The
:class:`ContentLoader` reads each Markdown/MDX file, validates its
frontmatter, and exposes the documents of a (locale, version) scope. It also
drives the two-phase build: :meth:`ContentLoader.build_slug_index` indexes the
whole scope first, and only then does :meth:`ContentLoader.transform_all`
render documents against that finished index.

Example
-------
>>> from pathlib import Path
>>> from docsite.content import ContentLoader
>>> loader = ContentLoader(Path("content"))  # doctest: +SKIP
>>> results = loader.transform_all("en", "v1")  # doctest: +SKIP
>>> results["getting-started"].toc[0].title  # doctest: +SKIP
'Install'
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from docsite._constants import DOCS_ROUTE_TEMPLATE
from docsite.errors import FrontmatterError
from docsite.pipeline import MarkdownTransformer

from .frontmatter import (
    generate_slug,
    is_markdown_file,
    parse_document,
    split_frontmatter,
)
from .models import ContentDocument, ContentValidationError, PageFrontmatter, SlugIndex

if typ.TYPE_CHECKING:
    from docsite.pipeline import TransformResult

    from .cache import DocumentCache

logger = logging.getLogger(__name__)

HOME_FILENAMES = ("index.mdx", "index.md")


class ContentLoader:
    """Load documentation files from ``content_root``."""

    def __init__(
        self,
        content_root: Path,
        *,
        cache: DocumentCache | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the loader.

        Parameters
        ----------
        content_root : Path
            Directory containing ``<locale>/<version>`` subtrees.
        cache : DocumentCache, optional
            Caller-owned cache shared across loads; documents are re-read on
            every call when omitted.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package
            templates.
        """
        self.content_root = Path(content_root)
        self.cache = cache
        self.templates_dir = templates_dir or Path(__file__).resolve().parents[1] / (
            "templates"
        )
        self._env: Environment | None = None

    def discover_content_files(
        self, locale: str | None = None, version: str | None = None
    ) -> list[Path]:
        """Return every Markdown/MDX file below the requested scope, sorted.

        Dot-prefixed files and directories are skipped. A missing scope
        directory yields an empty list.
        """
        base = self.content_root
        if locale:
            base = base / locale
            if version:
                base = base / version
        if not base.is_dir():
            return []
        files: list[Path] = []
        self._walk(base, files)
        return sorted(files)

    def _walk(self, directory: Path, files: list[Path]) -> None:
        try:
            entries = sorted(directory.iterdir())
        except OSError as exc:
            logger.warning("Failed to read directory %s: %s", directory, exc)
            return
        for entry in entries:
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                self._walk(entry, files)
            elif entry.is_file() and is_markdown_file(entry.name):
                files.append(entry)

    def relative_path(self, path: Path) -> str:
        """Return ``path`` relative to the content root as a POSIX string."""
        try:
            return path.resolve().relative_to(self.content_root.resolve()).as_posix()
        except ValueError:
            return path.as_posix()

    def read_document(self, path: Path) -> ContentDocument:
        """Parse ``path`` strictly, raising on I/O or frontmatter problems.

        Raises
        ------
        OSError
            If the file cannot be read.
        FrontmatterError
            If the frontmatter is malformed or fails validation.
        """
        if self.cache is not None:
            cached = self.cache.get(path)
            if cached is not None:
                return cached
        text = path.read_text(encoding="utf-8")
        document = parse_document(text, str(path), self.relative_path(path))
        if self.cache is not None:
            self.cache.put(path, document)
        return document

    def load_document(self, path: Path) -> ContentDocument | None:
        """Load ``path``, returning None (and logging why) when it is unusable."""
        try:
            return self.read_document(path)
        except FrontmatterError as exc:
            details = "; ".join(str(err) for err in exc.errors) or str(exc)
            logger.warning("Skipping %s: %s", path, details)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read content file %s: %s", path, exc)
        return None

    def load_all(
        self, locale: str | None = None, version: str | None = None
    ) -> list[ContentDocument]:
        """Load every valid document in scope; invalid ones are dropped.

        When a scope is given, documents whose frontmatter declares a
        different locale or version than the directory they live in are
        dropped as well.
        """
        documents: list[ContentDocument] = []
        for path in self.discover_content_files(locale, version):
            document = self.load_document(path)
            if document is None:
                continue
            if locale and document.locale != locale:
                logger.warning(
                    "Skipping %s: declares locale %r outside %r",
                    path,
                    document.locale,
                    locale,
                )
                continue
            if version and document.version != version:
                logger.warning(
                    "Skipping %s: declares version %r outside %r",
                    path,
                    document.version,
                    version,
                )
                continue
            documents.append(document)
        return documents

    def build_slug_index(self, locale: str, version: str) -> SlugIndex:
        """Index every slug in the (locale, version) scope.

        Slugs come from file paths (or an explicit ``slug`` frontmatter key),
        so a document with otherwise invalid frontmatter is still linkable.
        """
        slugs: set[str] = set()
        for path in self.discover_content_files(locale, version):
            slugs.add(self._peek_slug(path))
        return SlugIndex(locale=locale, version=version, slugs=frozenset(slugs))

    def _peek_slug(self, path: Path) -> str:
        relative = self.relative_path(path)
        try:
            data, _body = split_frontmatter(path.read_text(encoding="utf-8"))
        except (FrontmatterError, OSError, UnicodeDecodeError):
            data = {}
        override = data.get("slug")
        if isinstance(override, str):
            return override.strip("/")
        return generate_slug(relative)

    def transform_all(
        self, locale: str, version: str, *, pygments_style: str = "monokai"
    ) -> dict[str, TransformResult]:
        """Render every valid document in scope against a complete slug index.

        Returns
        -------
        dict[str, TransformResult]
            Transform output keyed by document slug. Broken internal links are
            logged and reported in each result's ``link_errors``.
        """
        index = self.build_slug_index(locale, version)
        transformer = MarkdownTransformer(
            index, locale=locale, version=version, pygments_style=pygments_style
        )
        results: dict[str, TransformResult] = {}
        for document in self.load_all(locale, version):
            result = transformer.transform(document.body)
            if result.link_errors:
                logger.warning(
                    "Link validation errors in %s: %s",
                    document.file_path,
                    ", ".join(result.link_errors),
                )
            results[document.slug] = result
        return results

    def validate_all_links(self, locale: str, version: str) -> dict[str, list[str]]:
        """Return link diagnostics per slug for documents that have any."""
        return {
            slug: result.link_errors
            for slug, result in self.transform_all(locale, version).items()
            if result.link_errors
        }

    def validate_all_content(self) -> list[ContentValidationError]:
        """Return frontmatter diagnostics for every file under the root."""
        errors: list[ContentValidationError] = []
        for path in self.discover_content_files():
            try:
                self.read_document(path)
            except FrontmatterError as exc:
                if exc.errors:
                    errors.extend(exc.errors)
                else:
                    errors.append(ContentValidationError("file", str(exc), str(path)))
            except (OSError, UnicodeDecodeError) as exc:
                errors.append(
                    ContentValidationError(
                        "file", f"Failed to parse file: {exc}", str(path)
                    )
                )
        return errors

    def find_by_slug(
        self, slug: str, locale: str | None = None, version: str | None = None
    ) -> ContentDocument | None:
        """Return the first document matching ``slug`` within the scope."""
        wanted = slug.strip("/")
        if locale and version and not wanted:
            return self.home_document(locale, version)
        for document in self.load_all(locale, version):
            if document.slug == wanted:
                return document
        return None

    def available_locales(self) -> list[str]:
        """Return the sorted locales declared by valid documents."""
        return sorted({doc.locale for doc in self.load_all()})

    def available_versions(self, locale: str | None = None) -> list[str]:
        """Return the sorted versions declared by valid documents."""
        return sorted({doc.version for doc in self.load_all(locale)})

    def all_slugs(self, locale: str, version: str) -> list[str]:
        """Return the slugs of every valid document in scope."""
        return [doc.slug for doc in self.load_all(locale, version)]

    def find_index_file(self, locale: str, version: str) -> Path | None:
        """Return the ``index.mdx``/``index.md`` home file for the scope."""
        for name in HOME_FILENAMES:
            candidate = self.content_root / locale / version / name
            if candidate.is_file():
                return candidate
        return None

    def home_document(self, locale: str, version: str) -> ContentDocument:
        """Return the scope's home document or a generated placeholder.

        The placeholder explains how to add the missing ``index.mdx`` and
        lists the documents that do exist in the scope.
        """
        index_file = self.find_index_file(locale, version)
        if index_file is not None:
            document = self.load_document(index_file)
            if document is not None:
                return document
        frontmatter = PageFrontmatter(
            title="Missing Home Document",
            description=f"Home document for {locale}/{version} is missing",
            version=version,
            locale=locale,
            order=0,
        )
        fallback_path = self.content_root / locale / version / HOME_FILENAMES[0]
        return ContentDocument(
            frontmatter=frontmatter,
            body=self.render_missing_home(locale, version),
            slug="",
            file_path=str(fallback_path),
        )

    def render_missing_home(self, locale: str, version: str) -> str:
        """Render the Markdown body used when a scope has no home document."""
        base = DOCS_ROUTE_TEMPLATE.format(locale=locale, version=version)
        entries = [
            {"title": _format_slug_title(slug), "href": f"{base}/{slug}"}
            for slug in sorted(self.all_slugs(locale, version))
            if slug
        ]
        template = self._environment().get_template("missing_home.md.jinja")
        return template.render(
            locale=locale,
            version=version,
            content_dir=self.content_root.name or str(self.content_root),
            entries=entries,
        )

    def _environment(self) -> Environment:
        if self._env is None:
            self._env = Environment(
                loader=FileSystemLoader(str(self.templates_dir)),
                autoescape=select_autoescape(["html", "xml"]),
                trim_blocks=True,
                lstrip_blocks=True,
                keep_trailing_newline=True,
            )
        return self._env


def _format_slug_title(slug: str) -> str:
    """Turn ``guides/getting-started`` into ``Guides > Getting Started``."""
    return " > ".join(
        " ".join(word[:1].upper() + word[1:] for word in part.split("-"))
        for part in slug.split("/")
    )


__all__ = ["HOME_FILENAMES", "ContentLoader"]
