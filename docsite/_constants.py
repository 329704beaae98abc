"""Common literal values used across docsite.

These constants keep file suffixes, reserved filenames, and link heuristics
centralized so the loader, transform pipeline, navigation builder, and link
auditor agree on what counts as a document, an external link, or a
downloadable asset. Intended for internal use within the docsite package.

Examples
--------
>>> from docsite import _constants
>>> ".mdx" in _constants.MARKDOWN_SUFFIXES
True
>>> _constants.BACKUP_DIR_TEMPLATE.format(
...     root="content", locale="en", version="v1", stamp="20250101T000000"
... )
'content-backup-en-v1-20250101T000000'
"""

MARKDOWN_SUFFIXES = (".md", ".mdx")
SIDEBAR_CONFIG_NAMES = ("_sidebar.json", "_sidebar.yaml", "_sidebar.yml")
SIDEBAR_CONFIG_PREFIX = "_sidebar."

EXTERNAL_LINK_PREFIXES = ("http://", "https://", "mailto:", "//")
EXTERNAL_IMAGE_PREFIXES = ("http://", "https://", "//", "data:")

BINARY_ASSET_EXTENSIONS = frozenset(
    {
        ".pdf",
        ".doc",
        ".docx",
        ".xls",
        ".xlsx",
        ".ppt",
        ".pptx",
        ".csv",
        ".json",
        ".xml",
        ".sql",
        ".db",
        ".zip",
        ".tar",
        ".gz",
        ".rar",
        ".7z",
        ".exe",
        ".dmg",
        ".pkg",
        ".deb",
        ".rpm",
        ".msi",
        ".iso",
        ".img",
        ".bin",
    }
)

PLACEHOLDER_LANGUAGES = frozenset({"", "text", "plain", "none"})
CODE_META_KEYWORDS = frozenset(
    {"filename", "title", "highlightlines", "showlinenumbers", "highlight"}
)

SIMILARITY_THRESHOLD = 0.6
BACKUP_DIR_TEMPLATE = "{root}-backup-{locale}-{version}-{stamp}"
DOCS_ROUTE_TEMPLATE = "/{locale}/docs/{version}"
