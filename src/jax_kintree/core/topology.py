"""Link graph of a kinematic tree and its parent-before-child traversal order.

The graph is stored as an arena over dense link ids: ``parent_of[i]`` is the
parent of link ``i`` (``None`` for the root) and ``children_of[i]`` lists its
children. One edge exists per joint, directed parent -> child.
"""

import dataclasses
import logging
from collections import deque
from typing import FrozenSet, Iterator, Mapping, Optional, Tuple

from jax_kintree.core.description import IndexedLink
from jax_kintree.errors import MalformedDescription, UnreachableLink

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Topology:
    parent_of: Tuple[Optional[int], ...]
    children_of: Tuple[Tuple[int, ...], ...]
    root: int
    leaves: FrozenSet[int]

    @property
    def num_nodes(self) -> int:
        return len(self.parent_of)

    @property
    def num_edges(self) -> int:
        return sum(len(children) for children in self.children_of)

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Yield (parent, child) pairs in parent id order."""
        for parent, children in enumerate(self.children_of):
            for child in children:
                yield parent, child


def build_topology(indexed: Mapping[str, IndexedLink]) -> Topology:
    """Build the parent -> child link graph from an indexed description.

    Args:
        indexed: Output of ``index_description``.

    Returns:
        The tree topology, with its root and leaf ids.

    Raises:
        MalformedDescription: if the links do not form a single tree.
    """
    num_links = len(indexed)
    parent_of = [None] * num_links
    children = [[] for _ in range(num_links)]

    for entry in sorted(indexed.values(), key=lambda e: e.id):
        parent_of[entry.id] = entry.parent_id
        if entry.parent_id is not None:
            children[entry.parent_id].append(entry.id)

    roots = [i for i, p in enumerate(parent_of) if p is None]
    if len(roots) != 1:
        raise MalformedDescription(f"Expected exactly one root link id, found: {roots}")
    root = roots[0]

    # With a single root and one parent per link, the only remaining way to
    # fail being a tree is a cycle detached from the root.
    grounded = {root}
    for start in range(num_links):
        path = []
        node = start
        while node not in grounded:
            if node in path:
                cycle = path[path.index(node):]
                raise MalformedDescription(f"Joints form a cycle through link ids {cycle}")
            path.append(node)
            node = parent_of[node]
        grounded.update(path)

    leaves = frozenset(i for i in range(num_links) if not children[i])

    return Topology(
        parent_of=tuple(parent_of),
        children_of=tuple(tuple(c) for c in children),
        root=root,
        leaves=leaves,
    )


def traversal_order(topology: Topology) -> Tuple[int, ...]:
    """Breadth-first order from the root; every link comes after its parent.

    Raises:
        UnreachableLink: if some link cannot be reached from the root.
    """
    order = []
    queue = deque([topology.root])
    visited = {topology.root}

    while queue:
        current = queue.popleft()
        order.append(current)

        for child in topology.children_of[current]:
            if child not in visited:
                visited.add(child)
                queue.append(child)

    if len(order) != topology.num_nodes:
        raise UnreachableLink(set(range(topology.num_nodes)) - visited)

    logger.debug("Traversal order: %s", order)
    return tuple(order)
