"""
Canvas facade tying the graph store, global variables and execution together.

The canvas is what a surrounding application holds: it owns the graph store
and the global variable text, creates nodes with their default payloads,
answers variable hinting queries, runs producer nodes and imports/exports
snapshots.
"""

import logging
import time
from uuid import uuid4

from flowcanvas.config import EngineSettings
from flowcanvas.core.nodes import (
    Edge,
    HttpRequestNode,
    HttpRequestNodeData,
    LlmNode,
    LlmNodeData,
    Position,
    TextNode,
    TextNodeData,
)
from flowcanvas.exceptions import DuplicateNodeError, SnapshotFormatError
from flowcanvas.execution.coordinator import ExecutionCoordinator, RunOutcome
from flowcanvas.http_client import HttpRequester, HttpxRequester
from flowcanvas.models import LangChainTextGenerator, LLMProvider, TextGenerator
from flowcanvas.snapshot import Snapshot, dump_snapshot, load_snapshot
from flowcanvas.structure.globals import DEFAULT_GLOBAL_VARIABLES, GlobalVariables
from flowcanvas.structure.graph_store import GraphStore
from flowcanvas.templates.namespace import VariableNamespace, build_namespace

logger = logging.getLogger(__name__)

DEFAULT_CANVAS_NAME = "Flow Canvas"
DEFAULT_CANVAS_DESCRIPTION = "An interactive canvas to create and connect nodes."


def create_node_id() -> str:
    return f"node_{int(time.time() * 1000)}_{uuid4().hex[:6]}"


def build_example_graph() -> tuple[list[TextNode | LlmNode], list[Edge]]:
    """Two Text nodes feeding an LLM prompt that references both plus a global."""
    nodes = [
        TextNode(
            id="1",
            position=Position(x=50, y=50),
            data=TextNodeData(
                label="Concept", text='Explain what a "node-based editor" is.'
            ),
        ),
        TextNode(
            id="3",
            position=Position(x=50, y=250),
            data=TextNodeData(label="Audience", text="Keep it simple, for a beginner."),
        ),
        LlmNode(
            id="2",
            position=Position(x=500, y=150),
            width=320,
            data=LlmNodeData(
                label="Gemini LLM",
                prompt=(
                    "Combine these ideas in a single paragraph for user $global.user.name:"
                    "\n\nIdea 1: $Concept\nConstraint: $Audience"
                ),
            ),
        ),
    ]
    edges = [
        Edge(id="e1-2", source="1", target="2"),
        Edge(id="e3-2", source="3", target="2"),
    ]
    return nodes, edges


class Canvas:
    """
    A graph of nodes with its global variables and run machinery.

    Params:
        store: Graph store; a new empty one when omitted
        global_variables: Global variable JSON text
        name: Canvas name
        description: Canvas description
        settings: Engine settings; defaults when omitted
        text_generator: LLM capability; LangChain-backed when omitted
        http_requester: HTTP capability; httpx-backed when omitted
    """

    def __init__(
        self,
        store: GraphStore | None = None,
        global_variables: str = DEFAULT_GLOBAL_VARIABLES,
        name: str = DEFAULT_CANVAS_NAME,
        description: str = DEFAULT_CANVAS_DESCRIPTION,
        settings: EngineSettings | None = None,
        text_generator: TextGenerator | None = None,
        http_requester: HttpRequester | None = None,
    ):
        self.settings = settings or EngineSettings()
        self.store = store if store is not None else GraphStore()
        self.global_variables = GlobalVariables(global_variables)
        self.name = name
        self.description = description
        if text_generator is None:
            text_generator = LangChainTextGenerator(
                LLMProvider(self.settings.model_params())
            )
        if http_requester is None:
            http_requester = HttpxRequester(timeout=self.settings.http_timeout)
        self.coordinator = ExecutionCoordinator(
            self.store,
            text_generator,
            http_requester,
            globals_source=lambda: self.global_variables.parsed,
        )

    # Node factories

    def add_text_node(
        self,
        position: Position | None = None,
        label: str = "New Text Node",
        text: str = "Some new text",
    ) -> TextNode:
        node = TextNode(
            id=create_node_id(),
            position=position or Position(),
            data=TextNodeData(label=label, text=text),
        )
        self.store.add_node(node)
        return node

    def add_llm_node(
        self,
        position: Position | None = None,
        label: str = "New LLM Node",
        prompt: str = "Write a haiku about React.",
    ) -> LlmNode:
        node = LlmNode(
            id=create_node_id(),
            position=position or Position(),
            data=LlmNodeData(
                label=label,
                prompt=prompt,
                temperature=self.settings.default_temperature,
                thinking_enabled=self.settings.default_thinking_enabled,
            ),
        )
        self.store.add_node(node)
        return node

    def add_http_request_node(
        self,
        position: Position | None = None,
        label: str = "HTTP Request",
        url: str = "https://jsonplaceholder.typicode.com/todos/1",
    ) -> HttpRequestNode:
        node = HttpRequestNode(
            id=create_node_id(),
            position=position or Position(),
            data=HttpRequestNodeData(
                label=label, url=url, headers="Content-Type: application/json"
            ),
        )
        self.store.add_node(node)
        return node

    # Variables

    def namespace(self, node_id: str) -> VariableNamespace:
        return build_namespace(node_id, self.store, self.global_variables.parsed)

    def available_variables(self, node_id: str) -> list[str]:
        """Variable names usable in ``node_id``'s text fields, for hinting."""
        return self.namespace(node_id).available_variables

    # Execution

    async def run(self, node_id: str) -> RunOutcome | None:
        return await self.coordinator.run_node(node_id)

    # Snapshots

    def import_snapshot(self, source) -> Snapshot:
        """
        Replace the canvas contents with a snapshot.

        ``nodes`` and ``edges`` always replace the current graph; name,
        description and global variables are replaced only when the snapshot
        carries them.

        Raises:
            SnapshotFormatError: If the snapshot is rejected; nothing is applied
        """
        try:
            snapshot = load_snapshot(source)
            self.store.replace(snapshot.nodes, snapshot.edges)
        except DuplicateNodeError as e:
            logger.warning("Snapshot rejected: %s", e)
            raise SnapshotFormatError(str(e)) from e
        except SnapshotFormatError as e:
            logger.warning("Snapshot rejected: %s", e)
            raise
        if snapshot.name is not None:
            self.name = snapshot.name
        if snapshot.description is not None:
            self.description = snapshot.description
        if snapshot.global_variables is not None:
            self.global_variables.raw = snapshot.global_variables
        logger.info(
            "Imported snapshot with %d nodes and %d edges",
            len(snapshot.nodes),
            len(snapshot.edges),
        )
        return snapshot

    def export_snapshot(self) -> str:
        return dump_snapshot(
            list(self.store.nodes),
            list(self.store.edges),
            self.name,
            self.description,
            self.global_variables.raw,
        )
