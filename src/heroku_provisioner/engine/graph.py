"""Dependency graph utilities."""

from __future__ import annotations

import heapq
from typing import TYPE_CHECKING

from heroku_provisioner.engine.errors import DependencyCycleError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


class DependencyGraph:
    """A directed graph where nodes depend on other nodes.

    Dependencies on nodes outside the graph are dropped, so callers can pass
    full dependency lists and a subset of nodes (e.g. only those being
    deleted).
    """

    def __init__(
        self,
        nodes: Iterable[str],
        dependencies: Mapping[str, Iterable[str]],
        priorities: Mapping[str, int] | None = None,
    ) -> None:
        self._nodes = set(nodes)
        self._priorities = priorities or {}
        self._deps: dict[str, set[str]] = {
            node: {d for d in dependencies.get(node, []) if d in self._nodes and d != node}
            for node in self._nodes
        }

    def dependents(self, node: str) -> set[str]:
        """Nodes that depend directly on *node*."""
        return {n for n, deps in self._deps.items() if node in deps}

    def _ready_key(self, node: str) -> tuple[int, str]:
        return self._priorities.get(node, 0), node

    def topological_order(self) -> list[str]:
        """Return deterministic topo order (priority, then lexicographic tie-break)."""
        indegree = {n: len(deps) for n, deps in self._deps.items()}
        children: dict[str, list[str]] = {n: [] for n in self._nodes}
        for node, deps in self._deps.items():
            for dep in deps:
                children[dep].append(node)

        ready = [self._ready_key(n) for n, deg in indegree.items() if deg == 0]
        heapq.heapify(ready)

        order: list[str] = []
        while ready:
            _, node = heapq.heappop(ready)
            order.append(node)
            for child in sorted(children[node]):
                indegree[child] -= 1
                if indegree[child] == 0:
                    heapq.heappush(ready, self._ready_key(child))

        if len(order) != len(self._nodes):
            raise DependencyCycleError(sorted(self._nodes.difference(order)))
        return order

    def reverse_topological_order(self) -> list[str]:
        """Dependents first; used to order deletes."""
        return self.topological_order()[::-1]
