"""Cyclopts CLI entrypoint for auditing and rendering documentation content.

The ``docsite`` console script wraps the content engine: ``audit`` and
``fix`` run the link auditor over one locale/version, ``normalize`` shows how
links are rewritten, ``nav`` dumps the navigation tree as JSON, ``validate``
reports frontmatter problems, and ``render`` transforms every document in a
scope and summarises its TOC and link diagnostics. Every option can also be
set through an ``INPUT_`` prefixed environment variable, which keeps CI
configuration declarative.

Examples
--------
Audit the English v1 docs:

>>> from docsite.cli import app
>>> app(["audit", "--locale", "en", "--content-version", "v1"])  # doctest: +SKIP

Preview link repairs without touching any file:

>>> app(["fix", "--locale", "en", "--content-version", "v1", "--dry-run"])  # doctest: +SKIP
"""

from __future__ import annotations

import json
import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .content import ContentLoader, DocumentCache
from .link_auditor import LinkAuditor
from .navigation import NavigationBuilder, get_navigation_stats

if typ.TYPE_CHECKING:
    from .link_auditor import BrokenLink

DEFAULT_CONTENT_ROOT = Path("content")

app = App(name="docsite", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]

ContentRootOption = typ.Annotated[
    Path, Parameter(help="Content root directory", env_var="INPUT_CONTENT_ROOT")
]
LocaleOption = typ.Annotated[
    str, Parameter(help="Content locale (e.g. en, es)", env_var="INPUT_LOCALE")
]
VersionOption = typ.Annotated[
    str,
    Parameter(help="Content version (e.g. v1)", env_var="INPUT_CONTENT_VERSION"),
]
VerboseOption = typ.Annotated[
    bool, Parameter(help="Show debug logging", env_var="INPUT_VERBOSE")
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _format_path(path: str | Path) -> str:
    """Return a cwd-relative path when possible, otherwise the path as given."""
    candidate = Path(path)
    if candidate.is_absolute():
        try:
            return str(candidate.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(candidate)
    return str(candidate)


def _print_broken_link(position: int, link: BrokenLink) -> None:
    print(f"{position}. {_format_path(link.file_path)}:{link.line_number}")
    print(f'   Text: "{link.link_text}"')
    print(f'   URL: "{link.original_url}"')
    print(f"   Reason: {link.reason}")
    if link.suggested_fix:
        print(f'   Suggested fix: "{link.suggested_fix}"')


@app.command(help="Audit internal links for one locale and version.")
def audit(
    *,
    locale: LocaleOption,
    content_version: VersionOption,
    content_root: ContentRootOption = DEFAULT_CONTENT_ROOT,
    verbose: VerboseOption = False,
) -> None:
    """Report link totals and every broken link.

    Raises
    ------
    SystemExit
        With status 1 when any broken link is found.
    """
    _configure_logging(verbose)
    result = LinkAuditor(content_root).audit_all_links(locale, content_version)
    print(f"Audit results for {locale}/{content_version}:")
    print(f"- Processed files: {result.processed_files}")
    print(f"- Total links: {result.total_links}")
    print(f"- Valid links: {result.valid_links}")
    print(f"- Broken links: {len(result.broken_links)}")
    print(f"- Fixable links: {len(result.fixable_links)}")
    print(f"- Unfixable links: {len(result.unfixable_links)}")
    for position, link in enumerate(result.broken_links, start=1):
        _print_broken_link(position, link)
    if result.broken_links:
        print(f"Found {len(result.broken_links)} broken links")
        raise SystemExit(1)
    print("All links are valid")


@app.command(help="Rewrite fixable links and strip unfixable ones.")
def fix(
    *,
    locale: LocaleOption,
    content_version: VersionOption,
    content_root: ContentRootOption = DEFAULT_CONTENT_ROOT,
    dry_run: typ.Annotated[
        bool,
        Parameter(help="Report changes without writing files", env_var="INPUT_DRY_RUN"),
    ] = False,
    backup_root: typ.Annotated[
        Path | None,
        Parameter(
            help="Directory for the content backup (defaults to the content "
            "root's parent)",
            env_var="INPUT_BACKUP_ROOT",
        ),
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """Repair broken links, backing up the content root first.

    Raises
    ------
    SystemExit
        With status 1 when the backup or any file update failed.
    """
    _configure_logging(verbose)
    auditor = LinkAuditor(content_root, backup_root=backup_root)
    result = auditor.fix_broken_links(locale, content_version, dry_run=dry_run)
    prefix = "Would fix" if dry_run else "Fixed"
    print(f"{prefix} {result.total_fixed} links")
    for link in result.fixed_links:
        print(
            f"  {_format_path(link.file_path)}:{link.line_number} "
            f'"{link.original_url}" -> "{link.new_url}"'
        )
    prefix = "Would strip" if dry_run else "Stripped"
    print(f"{prefix} {len(result.stripped_links)} links")
    for link in result.stripped_links:
        print(f'  {_format_path(link.file_path)}:{link.line_number} "{link.original_url}"')
    if result.backup_path is not None:
        print(f"backup {_format_path(result.backup_path)}")
    for error in result.errors:
        print(f"error: {error}")
    if result.errors:
        raise SystemExit(1)


@app.command(help="Show how links are normalized for a locale and version.")
def normalize(
    links: list[str],
    *,
    locale: LocaleOption,
    content_version: VersionOption,
) -> None:
    """Print each link next to its normalized form."""
    auditor = LinkAuditor(DEFAULT_CONTENT_ROOT)
    for link in links:
        print(f"{link} -> {auditor.normalize_link(link, locale, content_version)}")


@app.command(help="Print the navigation tree for a locale and version as JSON.")
def nav(
    *,
    locale: LocaleOption,
    content_version: VersionOption,
    content_root: ContentRootOption = DEFAULT_CONTENT_ROOT,
    verbose: VerboseOption = False,
) -> None:
    """Dump the sorted navigation forest and its statistics."""
    _configure_logging(verbose)
    tree = NavigationBuilder(content_root).build_tree(locale, content_version)
    stats = get_navigation_stats(tree)
    payload = {
        "locale": locale,
        "version": content_version,
        "stats": {
            "totalItems": stats.total_items,
            "maxDepth": stats.max_depth,
            "directoriesCount": stats.directories_count,
            "pagesCount": stats.pages_count,
        },
        "tree": [item.to_dict() for item in tree],
    }
    print(json.dumps(payload, indent=2))


@app.command(help="Validate the frontmatter of every document.")
def validate(
    *,
    content_root: ContentRootOption = DEFAULT_CONTENT_ROOT,
    verbose: VerboseOption = False,
) -> None:
    """Print one line per frontmatter problem.

    Raises
    ------
    SystemExit
        With status 1 when any document is invalid.
    """
    _configure_logging(verbose)
    errors = ContentLoader(content_root).validate_all_content()
    for error in errors:
        print(error)
    if errors:
        print(f"Found {len(errors)} content validation errors")
        raise SystemExit(1)
    print("All content is valid")


@app.command(help="Transform every document and summarise TOC and link errors.")
def render(
    *,
    locale: LocaleOption,
    content_version: VersionOption,
    content_root: ContentRootOption = DEFAULT_CONTENT_ROOT,
    pygments_style: typ.Annotated[
        str,
        Parameter(help="Pygments style for code blocks", env_var="INPUT_PYGMENTS_STYLE"),
    ] = "monokai",
    verbose: VerboseOption = False,
) -> None:
    """Render the scope and print one summary line per document."""
    _configure_logging(verbose)
    loader = ContentLoader(content_root, cache=DocumentCache())
    results = loader.transform_all(
        locale, content_version, pygments_style=pygments_style
    )
    for slug, result in sorted(results.items()):
        label = slug or "(home)"
        print(f"{label}: {len(result.toc)} toc entries, {len(result.link_errors)} link errors")
        for error in result.link_errors:
            print(f"  {error}")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``docsite`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
