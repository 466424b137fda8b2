"""
Ancestor discovery over the node/edge graph.

Ancestors are the nodes reachable from a node by walking incoming edges
backward. They are the candidate sources of local variables for that node.
"""

from collections import deque
from collections.abc import Iterable

from flowcanvas.core.nodes import Edge, Node


def find_ancestors(
    node_id: str, nodes: Iterable[Node], edges: Iterable[Edge]
) -> list[Node]:
    """
    Collect every node transitively upstream of ``node_id``.

    Breadth-first traversal against incoming edges only. A visited set makes
    the walk terminate on cyclic graphs; a cycle through the start node does
    not add the start node to the result. Edges whose source is not among
    ``nodes`` are skipped.

    Params:
        node_id: Id of the node whose ancestors are requested
        nodes: Current graph nodes
        edges: Current graph edges

    Returns:
        Ancestor nodes in discovery order, each at most once. Callers must
        treat the result as a set.
    """
    node_map = {node.id: node for node in nodes}
    incoming: dict[str, list[str]] = {}
    for edge in edges:
        incoming.setdefault(edge.target, []).append(edge.source)

    ancestors: dict[str, Node] = {}
    visited: set[str] = set()
    queue = deque([node_id])

    while queue:
        current_id = queue.popleft()
        if current_id in visited:
            continue
        visited.add(current_id)

        for source_id in incoming.get(current_id, ()):
            if source_id in visited:
                continue
            source_node = node_map.get(source_id)
            if source_node is None:
                continue
            ancestors[source_id] = source_node
            queue.append(source_id)

    return list(ancestors.values())
