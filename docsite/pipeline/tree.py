"""Element-tree helpers shared by the replacing passes."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element
else:  # pragma: no cover - type-checking fallback
    Element = typ.Any


def parent_map(root: Element) -> dict[Element, Element]:
    """Return a child-to-parent lookup for every element below ``root``."""
    return {child: parent for parent in root.iter() for child in parent}


def replace_element(
    parents: dict[Element, Element], original: Element, replacement: Element
) -> None:
    """Swap ``original`` for ``replacement`` in place within its parent.

    The original's tail text moves to the replacement so surrounding inline
    content is preserved.
    """
    parent = parents[original]
    index = list(parent).index(original)
    replacement.tail = original.tail
    parent.remove(original)
    parent.insert(index, replacement)
    parents[replacement] = parent


def text_content(element: Element) -> str:
    """Flatten the text of ``element`` and its descendants, ignoring tails."""
    return "".join(element.itertext())


__all__ = ["parent_map", "replace_element", "text_content"]
