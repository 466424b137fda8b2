"""
Graph store holding the canvas nodes and edges.

The store is the only shared mutable resource of the engine. Every mutation
is expressed against the entry whose id matches, applied to the store's
current state, so independent producer runs compose their writes instead of
overwriting each other with stale copies. Callers keep ids, never node
objects, and re-read through the store after every suspension point.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel

from flowcanvas.core.nodes import Edge, Node
from flowcanvas.exceptions import DuplicateNodeError, GraphError, NodeNotFoundError


class ChangeKind(Enum):
    NODE_ADDED = "node_added"
    NODE_UPDATED = "node_updated"
    NODE_REMOVED = "node_removed"
    EDGE_ADDED = "edge_added"
    EDGE_UPDATED = "edge_updated"
    EDGE_REMOVED = "edge_removed"
    RESET = "reset"


@dataclass(frozen=True)
class GraphChange:
    """
    A single applied mutation.

    Params:
        kind: What happened
        target_id: Id of the node or edge affected (None for a full reset)
        version: Store version after the mutation was applied
    """

    kind: ChangeKind
    target_id: str | None
    version: int


GraphListener = Callable[[GraphChange], None]


class GraphStore:
    """
    Ordered collection of nodes and edges with atomic id-keyed mutations.

    Insertion order is preserved for both nodes and edges. Each applied
    mutation bumps ``version`` by one and is reported to subscribers in the
    order it was applied.
    """

    def __init__(
        self,
        nodes: Iterable[Node] | None = None,
        edges: Iterable[Edge] | None = None,
    ):
        self._nodes: dict[str, Node] = {}
        self._edges: dict[str, Edge] = {}
        self._version = 0
        self._listeners: list[GraphListener] = []
        self._nodes, self._edges = self._index(nodes or (), edges or ())

    @staticmethod
    def _index(
        nodes: Iterable[Node], edges: Iterable[Edge]
    ) -> tuple[dict[str, Node], dict[str, Edge]]:
        node_map: dict[str, Node] = {}
        for node in nodes:
            if node.id in node_map:
                raise DuplicateNodeError(node.id)
            node_map[node.id] = node
        edge_map: dict[str, Edge] = {}
        for edge in edges:
            # Later duplicates win, mirroring an append-or-replace edge list
            edge_map[edge.id] = edge
        return node_map, edge_map

    @property
    def version(self) -> int:
        return self._version

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes.values())

    @property
    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges.values())

    def subscribe(self, listener: GraphListener) -> Callable[[], None]:
        """
        Register a listener called once per applied mutation.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, kind: ChangeKind, target_id: str | None) -> None:
        self._version += 1
        change = GraphChange(kind=kind, target_id=target_id, version=self._version)
        for listener in list(self._listeners):
            listener(change)

    # Reads

    def get_node(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    def require_node(self, node_id: str) -> Node:
        node = self._nodes.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def get_edge(self, edge_id: str) -> Edge | None:
        return self._edges.get(edge_id)

    def incoming_edges(self, node_id: str) -> list[Edge]:
        return [edge for edge in self._edges.values() if edge.target == node_id]

    # Node mutations

    def add_node(self, node: Node) -> Node:
        if node.id in self._nodes:
            raise DuplicateNodeError(node.id)
        self._nodes[node.id] = node
        self._commit(ChangeKind.NODE_ADDED, node.id)
        return node

    def update_node(self, node_id: str, transform: Callable[[Node], Node]) -> Node | None:
        """
        Replace the node whose id matches with ``transform(current)``.

        The transform receives the node as it is in the store at the moment
        of the call. Missing ids are a no-op.

        Params:
            node_id: Id of the node to replace
            transform: Pure function producing the replacement node

        Returns:
            The stored replacement, or None if no node has that id

        Raises:
            GraphError: If the transform changes the node id
        """
        current = self._nodes.get(node_id)
        if current is None:
            return None
        updated = transform(current)
        if updated.id != node_id:
            raise GraphError(
                f"Node update may not change its id ('{node_id}' -> '{updated.id}')"
            )
        self._nodes[node_id] = updated
        self._commit(ChangeKind.NODE_UPDATED, node_id)
        return updated

    def update_node_data(self, node_id: str, **changes: Any) -> Node | None:
        """
        Validate ``changes`` against the node's payload model and store the result.

        Payloads kept as imported (``OpaqueNode``) are merged as plain mappings.
        """

        def apply(node: Node) -> Node:
            if isinstance(node.data, BaseModel):
                data = node.data.model_validate(node.data.model_dump() | changes)
            else:
                raw = node.data if isinstance(node.data, dict) else {}
                data = raw | changes
            return node.model_copy(update={"data": data})

        return self.update_node(node_id, apply)

    def remove_node(self, node_id: str) -> Node | None:
        """Remove a node together with every edge touching it."""
        node = self._nodes.pop(node_id, None)
        if node is None:
            return None
        for edge in [
            e for e in self._edges.values() if node_id in (e.source, e.target)
        ]:
            del self._edges[edge.id]
            self._commit(ChangeKind.EDGE_REMOVED, edge.id)
        self._commit(ChangeKind.NODE_REMOVED, node_id)
        return node

    # Edge mutations

    def upsert_edge(self, edge: Edge) -> Edge:
        """Append an edge, or replace the edge with the same id."""
        kind = ChangeKind.EDGE_UPDATED if edge.id in self._edges else ChangeKind.EDGE_ADDED
        self._edges[edge.id] = edge
        self._commit(kind, edge.id)
        return edge

    def update_edge(self, edge_id: str, **changes: Any) -> Edge | None:
        current = self._edges.get(edge_id)
        if current is None:
            return None
        updated = current.model_validate(current.model_dump() | changes)
        self._edges[edge_id] = updated
        self._commit(ChangeKind.EDGE_UPDATED, edge_id)
        return updated

    def remove_edge(self, edge_id: str) -> Edge | None:
        edge = self._edges.pop(edge_id, None)
        if edge is not None:
            self._commit(ChangeKind.EDGE_REMOVED, edge_id)
        return edge

    def connect(self, source: str, target: str, edge_id: str | None = None) -> Edge:
        """
        Connect two existing nodes.

        An edge that already links ``source`` to ``target`` is returned
        unchanged instead of adding a parallel one.

        Raises:
            NodeNotFoundError: If either endpoint is missing
        """
        self.require_node(source)
        self.require_node(target)
        for edge in self._edges.values():
            if edge.source == source and edge.target == target:
                return edge
        return self.upsert_edge(
            Edge(id=edge_id or f"edge-{source}-{target}", source=source, target=target)
        )

    def replace(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        """
        Swap the whole graph in one step.

        Raises:
            DuplicateNodeError: If ``nodes`` repeats an id; the store is left unchanged
        """
        self._nodes, self._edges = self._index(nodes, edges)
        self._commit(ChangeKind.RESET, None)
