from __future__ import annotations

"""Plain traversal views of a Stage for hierarchy browsers."""

from typing import Any, Iterator

from .model import Prim, Stage


def iter_prims(stage: Stage) -> Iterator[tuple[int, Prim]]:
    """Yield ``(depth, prim)`` pairs in pre-order, roots at depth 0."""
    stack: list[tuple[int, Prim]] = [(0, prim) for prim in reversed(stage.prims)]
    while stack:
        depth, prim = stack.pop()
        yield depth, prim
        stack.extend((depth + 1, child) for child in reversed(prim.children))


def find_prim(stage: Stage, path: str) -> Prim | None:
    for _, prim in iter_prims(stage):
        if prim.path == path:
            return prim
    return None


def _prim_node(prim: Prim) -> dict[str, Any]:
    return {
        "path": prim.path,
        "name": prim.name,
        "type": prim.type_name,
        "active": prim.active,
        "children": [_prim_node(child) for child in prim.children],
    }


def stage_hierarchy(stage: Stage) -> list[dict[str, Any]]:
    """Nested ``{"path", "name", "type", "active", "children"}`` dicts, one per root prim."""
    return [_prim_node(prim) for prim in stage.prims]


def format_hierarchy(stage: Stage, *, indent: str = "  ") -> str:
    """Human-readable outline, one prim per line."""
    lines = [f"{stage.name} ({stage.default_prim})"]
    for depth, prim in iter_prims(stage):
        marker = "" if prim.active else " [inactive]"
        lines.append(f"{indent * (depth + 1)}{prim.name} <{prim.type_name}>{marker}")
    return "\n".join(lines)
