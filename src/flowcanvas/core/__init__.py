"""
Core flowcanvas components.

This package provides the graph data model and the shared type aliases used
by the structure, templating and execution layers.
"""

from flowcanvas.core.nodes import (
    METHODS_WITH_BODY,
    BaseNode,
    Edge,
    HttpMethod,
    HttpRequestNode,
    HttpRequestNodeData,
    LlmNode,
    LlmNodeData,
    Node,
    NodeData,
    NodeVariant,
    OpaqueNode,
    Position,
    ProducerNode,
    ProducerNodeData,
    RunState,
    TextNode,
    TextNodeData,
)
from flowcanvas.core.types import GlobalStore, LocalValues

__all__ = [
    "BaseNode",
    "Edge",
    "GlobalStore",
    "HttpMethod",
    "HttpRequestNode",
    "HttpRequestNodeData",
    "LlmNode",
    "LlmNodeData",
    "LocalValues",
    "METHODS_WITH_BODY",
    "Node",
    "NodeData",
    "NodeVariant",
    "OpaqueNode",
    "Position",
    "ProducerNode",
    "ProducerNodeData",
    "RunState",
    "TextNode",
    "TextNodeData",
]
