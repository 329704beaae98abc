"""Audit and repair internal links in Markdown source files.

The auditor works on raw text rather than rendered HTML. For one (locale,
version) scope it indexes every Markdown file, scans each file line by line
for ``[text](url)`` links, and checks every internal target against the
index. Broken links get a repair suggestion when an exact, same-basename, or
sufficiently similar file exists.

:meth:`LinkAuditor.fix_broken_links` rewrites fixable links and strips
unfixable ones down to their text. It always backs up the whole content
root first and touches nothing if the backup fails.

Examples
--------
>>> auditor = LinkAuditor(Path("content"))
>>> auditor.normalize_link("/guides/setup", "en", "v1")
'en/v1/guides/setup'
>>> auditor.normalize_link("en/v1/guides/setup", "en", "v1")
'en/v1/guides/setup'
>>> round(similarity("getting-started", "getting-started-guide"), 3)
0.714
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import logging
import posixpath
import re
import shutil
from pathlib import Path

from docsite._constants import (
    BACKUP_DIR_TEMPLATE,
    MARKDOWN_SUFFIXES,
    SIMILARITY_THRESHOLD,
)
from docsite.content import is_markdown_file
from docsite.errors import BackupError
from docsite.pipeline import is_external

logger = logging.getLogger(__name__)

LINK_PATTERN = re.compile(r"\[([^\]]*)\]\(([^)]+)\)")


@dc.dataclass(slots=True, frozen=True)
class ExtractedLink:
    """A ``[text](url)`` occurrence found in a source file."""

    text: str
    url: str
    file_path: str
    line_number: int


@dc.dataclass(slots=True, frozen=True)
class BrokenLink:
    """A link whose target could not be resolved."""

    file_path: str
    line_number: int
    original_url: str
    link_text: str
    reason: str
    suggested_fix: str | None = None


@dc.dataclass(slots=True, frozen=True)
class FixedLink:
    """A link rewritten to its suggested target."""

    file_path: str
    line_number: int
    original_url: str
    new_url: str
    link_text: str


@dc.dataclass(slots=True)
class AuditResult:
    """Aggregate outcome of auditing one (locale, version) scope."""

    total_links: int = 0
    valid_links: int = 0
    broken_links: list[BrokenLink] = dc.field(default_factory=list)
    fixable_links: list[BrokenLink] = dc.field(default_factory=list)
    unfixable_links: list[BrokenLink] = dc.field(default_factory=list)
    processed_files: int = 0


@dc.dataclass(slots=True)
class FixResult:
    """Aggregate outcome of a fix run.

    Attributes
    ----------
    total_fixed : int
        Number of links rewritten to a suggested target. Stripped links are
        not counted.
    fixed_links : list[FixedLink]
        Links rewritten (or, in a dry run, that would be rewritten).
    stripped_links : list[BrokenLink]
        Unfixable links reduced (or to be reduced) to their text.
    backup_created : bool
        True once the content root has been copied. Always False for dry runs.
    errors : list[str]
        Backup and per-file I/O failures.
    backup_path : Path, optional
        Location of the backup copy, when one was made.
    """

    total_fixed: int = 0
    fixed_links: list[FixedLink] = dc.field(default_factory=list)
    stripped_links: list[BrokenLink] = dc.field(default_factory=list)
    backup_created: bool = False
    errors: list[str] = dc.field(default_factory=list)
    backup_path: Path | None = None


def levenshtein_distance(first: str, second: str) -> int:
    """Return the single-character insert/delete/substitute edit distance."""
    if len(first) < len(second):
        first, second = second, first
    previous = list(range(len(second) + 1))
    for row, char in enumerate(first, start=1):
        current = [row]
        for column, other in enumerate(second, start=1):
            current.append(
                min(
                    previous[column] + 1,
                    current[column - 1] + 1,
                    previous[column - 1] + (char != other),
                )
            )
        previous = current
    return previous[-1]


def similarity(first: str, second: str) -> float:
    """Return ``(max_len - distance) / max_len``; two empty strings score 1."""
    longest = max(len(first), len(second))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(first, second)) / longest


def _strip_markdown_suffix(path: str) -> str:
    stem, suffix = posixpath.splitext(path)
    return stem if suffix in MARKDOWN_SUFFIXES else path


def _is_passthrough(url: str) -> bool:
    return is_external(url) or url.startswith("#")


def extract_slug(url: str) -> str:
    """Drop query string, fragment, and a leading slash from ``url``."""
    return re.split(r"[?#]", url, maxsplit=1)[0].removeprefix("/")


class LinkAuditor:
    """Find, report, and repair broken internal links under ``content_root``."""

    def __init__(
        self,
        content_root: Path,
        *,
        similarity_threshold: float = SIMILARITY_THRESHOLD,
        backup_root: Path | None = None,
    ) -> None:
        """Initialize the auditor.

        Parameters
        ----------
        content_root : Path
            Directory containing ``<locale>/<version>`` subtrees.
        similarity_threshold : float, optional
            Minimum (exclusive) similarity for a fuzzy repair suggestion.
        backup_root : Path, optional
            Directory receiving backups; defaults to the parent of
            ``content_root``. It must not lie inside ``content_root``.
        """
        self.content_root = Path(content_root)
        self.similarity_threshold = similarity_threshold
        self.backup_root = backup_root
        self._index: dict[str, str] = {}

    def markdown_files(self, locale: str, version: str) -> list[Path]:
        """Return the sorted Markdown files of a scope, skipping dot entries."""
        scope = self.content_root / locale / version
        if not scope.is_dir():
            return []
        return sorted(
            path
            for path in scope.rglob("*")
            if path.is_file()
            and is_markdown_file(path.name)
            and not any(
                part.startswith(".") for part in path.relative_to(scope).parts
            )
        )

    def build_index(self, locale: str, version: str) -> dict[str, str]:
        """Index ``slug -> relative file path`` for every file in the scope.

        Slugs are content-root-relative paths without the Markdown suffix,
        e.g. ``en/v1/guides/setup``.
        """
        index: dict[str, str] = {}
        for path in self.markdown_files(locale, version):
            relative = path.relative_to(self.content_root).as_posix()
            index[_strip_markdown_suffix(relative)] = relative
        self._index = index
        return index

    def extract_links(self, text: str, file_path: str) -> list[ExtractedLink]:
        """Return every internal ``[text](url)`` link in ``text`` with its line.

        Image syntax (``![alt](src)``), external URLs, and anchors are
        skipped. Repeated links are all reported.
        """
        links: list[ExtractedLink] = []
        for line_number, line in enumerate(text.split("\n"), start=1):
            for match in LINK_PATTERN.finditer(line):
                if match.start() > 0 and line[match.start() - 1] == "!":
                    continue
                label, url = match.groups()
                if _is_passthrough(url):
                    continue
                links.append(
                    ExtractedLink(
                        text=label, url=url, file_path=file_path, line_number=line_number
                    )
                )
        return links

    def normalize_link(self, url: str, locale: str, version: str) -> str:
        """Prefix internal links with ``<locale>/<version>/``.

        External links and anchors are returned unchanged, and normalizing
        an already normalized link is a no-op.
        """
        if _is_passthrough(url):
            return url
        normalized = url.removeprefix("/")
        prefix = f"{locale}/{version}/"
        if not normalized.startswith(prefix):
            normalized = f"{prefix}{normalized}"
        return normalized

    def validate_link(
        self, link: ExtractedLink, locale: str, version: str
    ) -> tuple[bool, str]:
        """Return ``(is_valid, reason)`` for ``link`` against the current index."""
        slug = extract_slug(self.normalize_link(link.url, locale, version))
        if not slug:
            return False, "Invalid URL format"
        if slug in self._index or _strip_markdown_suffix(slug) in self._index:
            return True, "Valid link"
        if (self.content_root / slug).exists():
            return True, "Valid file path"
        return False, "Target file does not exist"

    def find_plausible_target(self, url: str, locale: str, version: str) -> str | None:
        """Suggest the relative file path a broken ``url`` most likely meant.

        Tries an exact slug match, then a file with the same basename, then
        the most similar indexed slug scoring above the threshold.
        """
        slug = extract_slug(self.normalize_link(url, locale, version))
        if not slug:
            return None
        if slug in self._index:
            return self._index[slug]

        basename = _strip_markdown_suffix(posixpath.basename(slug))
        for candidate, relative in self._index.items():
            if posixpath.basename(candidate) == basename:
                return relative

        scored = [
            (score, relative)
            for candidate, relative in self._index.items()
            if (score := similarity(slug, candidate)) > self.similarity_threshold
        ]
        if not scored:
            return None
        scored.sort(key=lambda entry: entry[0], reverse=True)
        return scored[0][1]

    def audit_all_links(self, locale: str, version: str) -> AuditResult:
        """Index the scope, then validate every link in every file."""
        self.build_index(locale, version)
        files = self.markdown_files(locale, version)
        result = AuditResult(processed_files=len(files))
        for path in files:
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Error processing file %s: %s", path, exc)
                continue
            for link in self.extract_links(text, str(path)):
                result.total_links += 1
                is_valid, reason = self.validate_link(link, locale, version)
                if is_valid:
                    result.valid_links += 1
                    continue
                broken = BrokenLink(
                    file_path=link.file_path,
                    line_number=link.line_number,
                    original_url=link.url,
                    link_text=link.text,
                    reason=reason,
                    suggested_fix=self.find_plausible_target(link.url, locale, version),
                )
                result.broken_links.append(broken)
                if broken.suggested_fix:
                    result.fixable_links.append(broken)
                else:
                    result.unfixable_links.append(broken)
        return result

    def create_backup(self, locale: str, version: str) -> Path:
        """Copy the whole content root next to it (or into ``backup_root``).

        Raises
        ------
        BackupError
            If the copy cannot be made or would land inside the content root.
        """
        root = self.content_root.resolve()
        destination = (self.backup_root or root.parent).resolve()
        stamp = dt.datetime.now(dt.UTC).strftime("%Y%m%dT%H%M%S%f")
        target = destination / BACKUP_DIR_TEMPLATE.format(
            root=root.name, locale=locale, version=version, stamp=stamp
        )
        if target.is_relative_to(root):
            msg = f"Failed to create backup: {target} lies inside {root}"
            raise BackupError(msg)
        try:
            shutil.copytree(root, target)
        except OSError as exc:
            msg = f"Failed to create backup: {exc}"
            raise BackupError(msg) from exc
        logger.info("Backed up %s to %s", root, target)
        return target

    def fix_broken_links(
        self, locale: str, version: str, *, dry_run: bool = False
    ) -> FixResult:
        """Rewrite fixable links and strip unfixable ones.

        The run is audit, then backup, then rewrite. A failed backup aborts
        with no file touched. Each file's edits are applied from the bottom
        line up, replacing the first matching link on the recorded line. In a
        dry run the same edits are computed and reported but nothing is
        written and no backup is made.
        """
        audit = self.audit_all_links(locale, version)
        result = FixResult()
        if not audit.broken_links:
            return result

        if not dry_run:
            try:
                result.backup_path = self.create_backup(locale, version)
            except BackupError as exc:
                logger.warning("%s", exc)
                result.errors.append(str(exc))
                return result
            result.backup_created = True

        by_file: dict[str, list[BrokenLink]] = {}
        for link in audit.broken_links:
            by_file.setdefault(link.file_path, []).append(link)

        for file_path, links in by_file.items():
            try:
                self._fix_file(Path(file_path), links, result, dry_run=dry_run)
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Error processing %s: %s", file_path, exc)
                result.errors.append(f"Error processing {file_path}: {exc}")

        result.total_fixed = len(result.fixed_links)
        return result

    def _fix_file(
        self,
        path: Path,
        links: list[BrokenLink],
        result: FixResult,
        *,
        dry_run: bool,
    ) -> None:
        with path.open(encoding="utf-8", newline="") as handle:
            lines = handle.read().split("\n")
        fixed: list[FixedLink] = []
        stripped: list[BrokenLink] = []
        for link in sorted(links, key=lambda item: item.line_number, reverse=True):
            index = link.line_number - 1
            if not 0 <= index < len(lines):
                continue
            pattern = re.compile(
                r"(?<!!)" + re.escape(f"[{link.link_text}]({link.original_url})")
            )
            if link.suggested_fix:
                replacement = f"[{link.link_text}]({link.suggested_fix})"
            else:
                replacement = link.link_text
            updated, count = pattern.subn(lambda _m: replacement, lines[index], count=1)
            if not count:
                continue
            lines[index] = updated
            if link.suggested_fix:
                fixed.append(
                    FixedLink(
                        file_path=link.file_path,
                        line_number=link.line_number,
                        original_url=link.original_url,
                        new_url=link.suggested_fix,
                        link_text=link.link_text,
                    )
                )
            else:
                stripped.append(link)

        if (fixed or stripped) and not dry_run:
            with path.open("w", encoding="utf-8", newline="") as handle:
                handle.write("\n".join(lines))
        result.fixed_links.extend(fixed)
        result.stripped_links.extend(stripped)


__all__ = [
    "AuditResult",
    "BrokenLink",
    "ExtractedLink",
    "FixResult",
    "FixedLink",
    "LinkAuditor",
    "extract_slug",
    "levenshtein_distance",
    "similarity",
]
