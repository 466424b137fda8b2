"""
Graph data model for flowcanvas.

Nodes are a tagged union keyed by the ``type`` discriminant (the same field
name the persisted snapshot format uses). Every node carries its
variant-specific payload under ``data``; producer payloads additionally carry
the ``isLoading`` flag that backs the node's run state. Entries of unknown type
are carried as ``OpaqueNode`` so imported graphs survive unchanged.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter


class NodeVariant(str, Enum):
    """Discriminant values for the node union."""

    TEXT = "textNode"
    LLM_PROMPT = "llmNode"
    HTTP_REQUEST = "httpRequestNode"


class RunState(Enum):
    """Run state of a producer node."""

    IDLE = "idle"
    RUNNING = "running"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


METHODS_WITH_BODY = frozenset({HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH})


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class NodeData(BaseModel):
    """Fields common to every node payload."""

    # Unknown keys from imported snapshots (styles, UI state) are preserved
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    label: str = ""


class TextNodeData(NodeData):
    text: str = ""


class ProducerNodeData(NodeData):
    """Payload base for nodes that perform an external call when triggered."""

    is_loading: bool = Field(default=False, alias="isLoading")


class LlmNodeData(ProducerNodeData):
    prompt: str = ""
    # Range is applied when a run starts; snapshots may carry any number
    temperature: float = 0.7
    thinking_enabled: bool = Field(default=True, alias="thinkingEnabled")


class HttpRequestNodeData(ProducerNodeData):
    method: HttpMethod = HttpMethod.GET
    url: str = ""
    headers: str = ""
    body: str = ""


class BaseNode(BaseModel):
    """
    Fields common to every node variant.

    Params:
        id: Unique node identifier within a graph
        position: Canvas position (presentation only)
        width: Rendered width when known (presentation only)
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    position: Position = Field(default_factory=Position)
    width: float | None = None

    @property
    def label(self) -> str:
        return self.data.label

    @property
    def run_state(self) -> RunState:
        """Producer nodes are running while their payload is loading; text nodes never run."""
        if isinstance(self.data, ProducerNodeData) and self.data.is_loading:
            return RunState.RUNNING
        return RunState.IDLE


class TextNode(BaseNode):
    type: Literal["textNode"] = "textNode"
    data: TextNodeData = Field(default_factory=TextNodeData)


class LlmNode(BaseNode):
    type: Literal["llmNode"] = "llmNode"
    data: LlmNodeData = Field(default_factory=LlmNodeData)


class HttpRequestNode(BaseNode):
    type: Literal["httpRequestNode"] = "httpRequestNode"
    data: HttpRequestNodeData = Field(default_factory=HttpRequestNodeData)


class OpaqueNode(BaseNode):
    """
    A node kept exactly as it was imported.

    Snapshots may contain node types this engine does not know (groups,
    annotations) or known types whose fields do not fit their payload. Such
    nodes keep their raw ``type`` and ``data``, take part in edges and label
    hinting, but never supply local values and cannot be run.
    """

    type: Any = None
    data: Any = Field(default_factory=dict)
    position: Any = None
    width: Any = None

    @property
    def label(self) -> str:
        label = self.data.get("label") if isinstance(self.data, dict) else None
        return label if isinstance(label, str) else ""


OPAQUE_TAG = "opaque"
_KNOWN_TYPES = frozenset(variant.value for variant in NodeVariant)


def _node_tag(value: Any) -> str:
    if isinstance(value, OpaqueNode):
        return OPAQUE_TAG
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return kind if isinstance(kind, str) and kind in _KNOWN_TYPES else OPAQUE_TAG


Node = Annotated[
    Union[
        Annotated[TextNode, Tag(NodeVariant.TEXT.value)],
        Annotated[LlmNode, Tag(NodeVariant.LLM_PROMPT.value)],
        Annotated[HttpRequestNode, Tag(NodeVariant.HTTP_REQUEST.value)],
        Annotated[OpaqueNode, Tag(OPAQUE_TAG)],
    ],
    Discriminator(_node_tag),
]

ProducerNode = LlmNode | HttpRequestNode


class Edge(BaseModel):
    """A directed edge; variable availability flows from ``source`` to ``target``."""

    model_config = ConfigDict(extra="allow")

    id: str
    source: str
    target: str
    animated: bool = False


node_adapter = TypeAdapter(Node)
node_list_adapter = TypeAdapter(list[Node])
edge_list_adapter = TypeAdapter(list[Edge])
