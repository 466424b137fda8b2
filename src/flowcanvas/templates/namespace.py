"""
Variable namespace construction for a node.

A node sees two tiers of variables: local names taken from the sanitized
labels of its ancestors, and every leaf of the global variable store under
``global.``. Only Text ancestors supply local values; other ancestors still
contribute their names for hinting.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from flowcanvas.core.nodes import Node, TextNode
from flowcanvas.core.types import GlobalStore, LocalValues
from flowcanvas.structure.ancestors import find_ancestors
from flowcanvas.structure.graph_store import GraphStore
from flowcanvas.templates.variables import (
    find_variable_tokens,
    get_global_variable_names,
    sanitize_label,
    substitute_variables,
)


def _unique(names: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(names))


def get_local_variable_names(ancestors: Iterable[Node]) -> list[str]:
    """List the sanitized, non-empty labels of ``ancestors`` without duplicates."""
    names = (sanitize_label(node.label) for node in ancestors if node.label)
    return _unique(name for name in names if name)


def build_local_values(ancestors: Iterable[Node]) -> LocalValues:
    """
    Map local variable names to the text of the Text ancestors that define them.

    When two ancestors sanitize to the same name, the one discovered later
    wins.
    """
    values: LocalValues = {}
    for node in ancestors:
        if not isinstance(node, TextNode) or not node.label:
            continue
        name = sanitize_label(node.label)
        if name:
            values[name] = node.data.text
    return values


def get_available_variables(
    ancestors: Iterable[Node], global_store: GlobalStore
) -> list[str]:
    """Union of local and global variable names, duplicates removed, locals first."""
    return _unique(
        [*get_local_variable_names(ancestors), *get_global_variable_names(global_store)]
    )


@dataclass
class VariableNamespace:
    """
    Resolvable variables for one node at one point in time.

    Params:
        local_values: Local name -> value, from Text ancestors only
        local_names: Every local name available for hinting
        global_store: Parsed global variable tree
    """

    local_values: LocalValues = field(default_factory=dict)
    local_names: list[str] = field(default_factory=list)
    global_store: GlobalStore = field(default_factory=dict)

    @property
    def available_variables(self) -> list[str]:
        return _unique([*self.local_names, *get_global_variable_names(self.global_store)])

    def substitute(self, text: str) -> str:
        return substitute_variables(text, self.local_values, self.global_store)

    def unknown_variables(self, text: str) -> list[str]:
        """List tokens in ``text`` that look like variables but name none available."""
        available = set(self.available_variables)
        return _unique(token for token in find_variable_tokens(text) if token not in available)


def build_namespace(
    node_id: str, store: GraphStore, global_store: GlobalStore
) -> VariableNamespace:
    """
    Build the namespace of ``node_id`` from the store's current graph.

    Params:
        node_id: Node whose variables are requested
        store: Graph store read at call time
        global_store: Parsed global variable tree

    Returns:
        The node's namespace; empty locals when the node has no ancestors
    """
    ancestors = find_ancestors(node_id, store.nodes, store.edges)
    return VariableNamespace(
        local_values=build_local_values(ancestors),
        local_names=get_local_variable_names(ancestors),
        global_store=global_store,
    )
