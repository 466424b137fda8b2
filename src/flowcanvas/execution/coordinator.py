"""
Execution of producer nodes.

Triggering an LLM prompt or HTTP request node runs it through the same
sequence of graph mutations:

    1. enter running (producer ``isLoading`` set)
    2. resolve variables and substitute them into the producer's text fields
    3. spawn a derived Text node holding a pending placeholder, plus an
       animated edge from the producer to it
    4. call the external capability, writing results into the derived node
    5. on failure, replace the derived node's text with ``Error: <message>``
    6. exit running: producer back to idle, edge no longer animated

Step 6 runs on every path. A run only holds ids; every write goes through
the store against the node's current state, so concurrent runs and user
edits made while a run is suspended are preserved.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import uuid4

from flowcanvas.core.nodes import (
    Edge,
    HttpMethod,
    HttpRequestNode,
    LlmNode,
    Node,
    NodeVariant,
    OpaqueNode,
    Position,
    ProducerNode,
    TextNode,
    TextNodeData,
)
from flowcanvas.core.types import GlobalStore
from flowcanvas.exceptions import HttpStatusError, NodeVariantError, PromptValidationError
from flowcanvas.execution.http_request import (
    carries_body,
    format_response_body,
    parse_headers,
)
from flowcanvas.http_client import HttpRequester
from flowcanvas.models import GenerationConfig, TextGenerator
from flowcanvas.structure.graph_store import GraphStore
from flowcanvas.templates.namespace import VariableNamespace, build_namespace

logger = logging.getLogger(__name__)

LLM_OUTPUT_LABEL = "LLM Output"
LLM_PLACEHOLDER = "⏳ Generating..."
HTTP_OUTPUT_LABEL = "HTTP Response"
HTTP_PLACEHOLDER = "⏳ Sending..."
UNKNOWN_ERROR = "An unknown error occurred."

DERIVED_NODE_WIDTH = 320.0
DERIVED_NODE_GAP = 100.0
LLM_NODE_WIDTH = 320.0
HTTP_NODE_WIDTH = 352.0


class RunStatus(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class RunOutcome:
    """
    Result of one producer run.

    Params:
        producer_id: Node that was triggered
        derived_node_id: Text node spawned to hold the result
        edge_id: Edge spawned from producer to derived node
        status: Whether the run succeeded
        text: Final text written to the derived node
        error: Failure description without the ``Error: `` prefix
    """

    producer_id: str
    derived_node_id: str
    edge_id: str
    status: RunStatus
    text: str
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.SUCCEEDED


@dataclass(frozen=True)
class LlmRequest:
    prompt: str
    config: GenerationConfig


@dataclass(frozen=True)
class HttpRequest:
    method: HttpMethod
    url: str
    headers: dict[str, str]
    body: str | None


@dataclass(frozen=True)
class _ProducerPlan:
    node_class: type
    label: str
    placeholder: str
    default_width: float
    prepare: Callable[[Any, VariableNamespace], Any]
    produce: Callable[[Any, Callable[[str], None]], Awaitable[str]]


def _variant_name(node: Node) -> str:
    if isinstance(node, OpaqueNode):
        return f"unrecognised {node.type!r}"
    return node.type


def prepare_llm_request(node: LlmNode, namespace: VariableNamespace) -> LlmRequest:
    data = node.data
    return LlmRequest(
        prompt=namespace.substitute(data.prompt),
        config=GenerationConfig(
            temperature=min(max(data.temperature, 0.0), 1.0),
            thinking_enabled=data.thinking_enabled,
        ),
    )


def prepare_http_request(
    node: HttpRequestNode, namespace: VariableNamespace
) -> HttpRequest:
    """Substitute URL, headers and body independently; the method is never templated."""
    data = node.data
    body = namespace.substitute(data.body) if carries_body(data.method) else None
    return HttpRequest(
        method=data.method,
        url=namespace.substitute(data.url),
        headers=parse_headers(namespace.substitute(data.headers)),
        body=body,
    )


class ExecutionCoordinator:
    """
    Runs producer nodes against a graph store.

    Params:
        store: Graph store read and mutated by runs
        text_generator: Capability used by LLM prompt nodes
        http_requester: Capability used by HTTP request nodes
        globals_source: Returns the parsed global variable tree; called once
            per run, when inputs are resolved
    """

    def __init__(
        self,
        store: GraphStore,
        text_generator: TextGenerator,
        http_requester: HttpRequester,
        globals_source: Callable[[], GlobalStore] | None = None,
    ):
        self.store = store
        self.text_generator = text_generator
        self.http_requester = http_requester
        self._globals_source = globals_source or dict

    async def run_node(self, node_id: str) -> RunOutcome | None:
        """
        Run any producer node.

        Returns:
            The run outcome, or None when the node is not in the graph

        Raises:
            NodeVariantError: If the node is not a producer
        """
        node = self.store.get_node(node_id)
        if node is None:
            logger.debug("Node %s vanished before its run started", node_id)
            return None
        if isinstance(node, LlmNode):
            return await self.run_llm_node(node_id)
        if isinstance(node, HttpRequestNode):
            return await self.run_http_node(node_id)
        raise NodeVariantError(
            node_id, _variant_name(node), "an LLM prompt or HTTP request node"
        )

    def trigger(self, node_id: str) -> "asyncio.Task[RunOutcome | None]":
        """Schedule a run on the running event loop and return its task."""
        return asyncio.create_task(self.run_node(node_id), name=f"run-{node_id}")

    async def run_llm_node(self, node_id: str) -> RunOutcome | None:
        plan = _ProducerPlan(
            node_class=LlmNode,
            label=LLM_OUTPUT_LABEL,
            placeholder=LLM_PLACEHOLDER,
            default_width=LLM_NODE_WIDTH,
            prepare=prepare_llm_request,
            produce=self._stream_completion,
        )
        return await self._execute(node_id, NodeVariant.LLM_PROMPT, plan)

    async def run_http_node(self, node_id: str) -> RunOutcome | None:
        plan = _ProducerPlan(
            node_class=HttpRequestNode,
            label=HTTP_OUTPUT_LABEL,
            placeholder=HTTP_PLACEHOLDER,
            default_width=HTTP_NODE_WIDTH,
            prepare=prepare_http_request,
            produce=self._send_request,
        )
        return await self._execute(node_id, NodeVariant.HTTP_REQUEST, plan)

    async def _stream_completion(
        self, request: LlmRequest, write: Callable[[str], None]
    ) -> str:
        if not request.prompt.strip():
            raise PromptValidationError()
        buffer = ""
        async for chunk in self.text_generator.generate_text_stream(
            request.prompt, request.config
        ):
            buffer += chunk
            write(buffer)
        return buffer

    async def _send_request(
        self, request: HttpRequest, write: Callable[[str], None]
    ) -> str:
        response = await self.http_requester.request(
            request.method.value, request.url, request.headers, request.body
        )
        if not response.ok:
            raise HttpStatusError(response.status_code, response.reason, response.text)
        return format_response_body(response.text)

    async def _execute(
        self, node_id: str, variant: NodeVariant, plan: _ProducerPlan
    ) -> RunOutcome | None:
        producer = self.store.get_node(node_id)
        if producer is None:
            logger.debug("Node %s vanished before its run started", node_id)
            return None
        if not isinstance(producer, plan.node_class):
            raise NodeVariantError(node_id, _variant_name(producer), variant.value)

        logger.info("Running %s node %s", producer.type, node_id)
        self.store.update_node_data(node_id, is_loading=True)
        edge_id = None
        try:
            namespace = build_namespace(node_id, self.store, self._globals_source())
            request = plan.prepare(producer, namespace)
            derived_id, edge_id = self._spawn(producer, plan)

            def write(text: str) -> None:
                self.store.update_node_data(derived_id, text=text)

            try:
                text = await plan.produce(request, write)
            except Exception as e:
                message = str(e) or UNKNOWN_ERROR
                logger.warning("Run of node %s failed: %s", node_id, message, exc_info=True)
                write(f"Error: {message}")
                return RunOutcome(
                    producer_id=node_id,
                    derived_node_id=derived_id,
                    edge_id=edge_id,
                    status=RunStatus.FAILED,
                    text=f"Error: {message}",
                    error=message,
                )

            derived = self.store.get_node(derived_id)
            if derived is not None and derived.data.text != text:
                write(text)
            logger.info("Run of node %s succeeded", node_id)
            return RunOutcome(
                producer_id=node_id,
                derived_node_id=derived_id,
                edge_id=edge_id,
                status=RunStatus.SUCCEEDED,
                text=text,
            )
        finally:
            self.store.update_node_data(node_id, is_loading=False)
            if edge_id is not None:
                self.store.update_edge(edge_id, animated=False)

    def _spawn(self, producer: ProducerNode, plan: _ProducerPlan) -> tuple[str, str]:
        """Add the pending derived node and its animated edge; return their ids."""
        derived_id = f"textnode_{producer.id}_{uuid4().hex[:12]}"
        x_offset = (producer.width or plan.default_width) + DERIVED_NODE_GAP
        self.store.add_node(
            TextNode(
                id=derived_id,
                position=Position(
                    x=producer.position.x + x_offset, y=producer.position.y
                ),
                width=DERIVED_NODE_WIDTH,
                data=TextNodeData(label=plan.label, text=plan.placeholder),
            )
        )
        edge = self.store.upsert_edge(
            Edge(
                id=f"edge-{producer.id}-{derived_id}",
                source=producer.id,
                target=derived_id,
                animated=True,
            )
        )
        return derived_id, edge.id
