"""Content engine for versioned, localized Markdown documentation.

The package loads ``<locale>/<version>`` document trees, renders each body to
HTML with a table of contents, builds sidebar navigation, and audits (and
optionally repairs) internal links.

Exports
-------
- ``app``: Cyclopts application behind the ``docsite`` console script.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from docsite import main
>>> callable(main)
True
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
