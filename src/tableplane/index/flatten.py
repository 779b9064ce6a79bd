"""Tree flattening: parsed document -> addressable (path, value) facts."""

from __future__ import annotations

from tableplane.config.constants import ROOT_PATH
from tableplane.index.models import MarkdownNode


def child_path(parent: str, index: int, kind: str) -> str:
    return f"{parent}.{index}.{kind}"


def flatten(root: MarkdownNode) -> list[tuple[str, str | None]]:
    """Return one ``(path, value)`` pair per node, parents before children.

    A path is built from the ancestor path, the child's position and its
    kind, so identical content always yields identical paths. ``value`` is
    None for nodes that carry neither literal text nor a checked flag.
    """
    facts: list[tuple[str, str | None]] = []
    stack: list[tuple[str, MarkdownNode]] = [(ROOT_PATH, root)]
    while stack:
        path, node = stack.pop()
        facts.append((path, node.fact))
        # Reversed so siblings come out in document order.
        for index in range(len(node.children) - 1, -1, -1):
            child = node.children[index]
            stack.append((child_path(path, index, child.kind), child))
    return facts
