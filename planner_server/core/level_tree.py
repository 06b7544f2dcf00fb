"""
Pure helpers over a flat, parent-pointer level table.

Nothing here touches the database: callers load the levels of one
organization and hand them in. Nodes never hold references to each other;
every relation is resolved by id.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import Optional, Protocol

from planner_shared.schemas.levels import LevelNode


class LevelLike(Protocol):
    id: uuid.UUID
    parent_id: Optional[uuid.UUID]


def build_level_forest(levels: Iterable[LevelLike]) -> list[LevelNode]:
    """Nest a flat list of levels into a forest.

    Levels are grouped by ``parent_id`` and attached under their parent.
    A level whose parent is null, or not part of the input, becomes a root.
    Input order is preserved among roots and among siblings.
    """
    items = list(levels)
    known_ids = {level.id for level in items}

    children_of: dict[uuid.UUID, list[LevelLike]] = defaultdict(list)
    roots: list[LevelLike] = []
    for level in items:
        if level.parent_id is not None and level.parent_id in known_ids:
            children_of[level.parent_id].append(level)
        else:
            roots.append(level)

    def _to_node(level: LevelLike, path: frozenset[uuid.UUID]) -> LevelNode:
        node = LevelNode.model_validate(level, from_attributes=True)
        # path guard keeps corrupt (cyclic) input from recursing forever
        node.children = [
            _to_node(child, path | {child.id})
            for child in children_of.get(level.id, [])
            if child.id not in path
        ]
        return node

    return [_to_node(root, frozenset({root.id})) for root in roots]


def ancestor_ids(
    level_id: Optional[uuid.UUID],
    parent_of: Mapping[uuid.UUID, Optional[uuid.UUID]],
) -> list[uuid.UUID]:
    """Walk parent pointers upward from ``level_id`` (inclusive), nearest first."""
    chain: list[uuid.UUID] = []
    seen: set[uuid.UUID] = set()
    current = level_id
    while current is not None and current not in seen:
        chain.append(current)
        seen.add(current)
        current = parent_of.get(current)
    return chain


def would_create_cycle(
    level_id: uuid.UUID,
    new_parent_id: Optional[uuid.UUID],
    parent_of: Mapping[uuid.UUID, Optional[uuid.UUID]],
) -> bool:
    """True if re-parenting ``level_id`` under ``new_parent_id`` closes a loop.

    That happens exactly when the level is the new parent itself or one of
    its ancestors, i.e. the new parent is a descendant of the level.
    """
    if new_parent_id is None:
        return False
    return level_id in ancestor_ids(new_parent_id, parent_of)
