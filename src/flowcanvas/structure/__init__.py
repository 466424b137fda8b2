"""
Graph structure components.

This package provides the graph store, ancestor discovery and the global
variable holder.
"""

from flowcanvas.structure.ancestors import find_ancestors
from flowcanvas.structure.globals import GlobalVariables, parse_global_variables
from flowcanvas.structure.graph_store import (
    ChangeKind,
    GraphChange,
    GraphListener,
    GraphStore,
)

__all__ = [
    "ChangeKind",
    "GraphChange",
    "GraphListener",
    "GraphStore",
    "GlobalVariables",
    "find_ancestors",
    "parse_global_variables",
]
