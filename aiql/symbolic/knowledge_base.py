"""
aiql/symbolic/knowledge_base.py
===============================
Ordered, append-only store of LogicalNodes.

An arena (list, insertion order) plus a de-duplication index (set of the
same nodes). Nodes are frozen dataclasses, so structural equality is the
index key: a node equal to one already stored is never added twice.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Type, TypeVar

from aiql.core.types import Intent, LogicalNode, Statement, is_logical_node

logger = logging.getLogger(__name__)

N = TypeVar("N")


class KnowledgeBase:
    """Append-only node arena with structural de-duplication.

    Objects that are not LogicalNodes are still accepted (the front-end may
    produce variants this core does not know); they are stored but every
    reasoning pattern treats them as inert. Unhashable objects are kept out
    of the index and compared by identity.
    """

    def __init__(self, nodes: Iterable[LogicalNode] = ()):
        self._nodes: List[LogicalNode] = []
        self._index: set = set()
        self.extend(nodes)

    def add(self, node: LogicalNode) -> bool:
        """Append ``node`` unless a structurally equal node is present.

        Returns True if the node was added.
        """
        if node in self:
            return False
        self._nodes.append(node)
        try:
            self._index.add(node)
        except TypeError:
            logger.debug(f"Unhashable node stored without index: {type(node).__name__}")
        return True

    def extend(self, nodes: Iterable[LogicalNode]) -> List[LogicalNode]:
        """Add several nodes; returns the ones that were actually new."""
        return [n for n in nodes if self.add(n)]

    def snapshot(self) -> List[LogicalNode]:
        return list(self._nodes)

    def of_type(self, cls: Type[N]) -> List[N]:
        return [n for n in self._nodes if isinstance(n, cls)]

    def statements(self) -> List[Statement]:
        """All statements of all intents, in knowledge-base order."""
        return [s for intent in self.of_type(Intent) for s in intent.statements]

    @property
    def unknown_nodes(self) -> List[object]:
        return [n for n in self._nodes if not is_logical_node(n)]

    def __contains__(self, node: object) -> bool:
        try:
            return node in self._index
        except TypeError:
            return any(n is node for n in self._nodes)

    def __iter__(self) -> Iterator[LogicalNode]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"KnowledgeBase(nodes={len(self._nodes)})"
