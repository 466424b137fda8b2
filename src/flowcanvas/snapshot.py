"""
Persisted snapshot format.

A snapshot is a JSON object with ``nodes`` and ``edges`` arrays and optional
``name``, ``description`` and ``globalVariables`` strings. The global
variables travel as JSON text, not as a nested object. Loading accepts any
entries the graph can hold: nodes of unknown type or with fields that do not
fit their type are kept as imported. A snapshot is rejected as a whole, before
anything is applied, only when it is not a JSON object with ``nodes`` and
``edges`` arrays or when an entry cannot be keyed by id.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from flowcanvas.core.nodes import (
    Edge,
    Node,
    OpaqueNode,
    edge_list_adapter,
    node_adapter,
)
from flowcanvas.exceptions import SnapshotFormatError

logger = logging.getLogger(__name__)

MASKED_VALUE = "******** MASKED FOR EXPORT ********"
SENSITIVE_KEY_MARKERS = ("apikey", "secret", "token")


@dataclass(frozen=True)
class Snapshot:
    """
    A loaded snapshot.

    Params:
        nodes: Validated nodes in file order
        edges: Validated edges in file order
        name: Canvas name, None when absent
        description: Canvas description, None when absent
        global_variables: Global variable JSON text, None when absent
    """

    nodes: list[Node]
    edges: list[Edge]
    name: str | None = None
    description: str | None = None
    global_variables: str | None = None


def _load_node(raw: Any, index: int) -> Node:
    """
    Validate one node entry, keeping entries that do not fit their variant.

    Unknown types validate straight to ``OpaqueNode``. A known type whose
    fields do not fit its payload is kept as an ``OpaqueNode`` too, so it
    stays in the graph but is neither a variable source nor runnable.
    """
    try:
        return node_adapter.validate_python(raw)
    except ValidationError as e:
        try:
            node = OpaqueNode.model_validate(raw)
        except ValidationError:
            raise SnapshotFormatError(
                f"node entry {index} is not an object with a string 'id'"
            ) from e
        logger.warning(
            "Node %s does not fit its %r fields and is kept as imported: %s",
            node.id,
            node.type,
            e.errors()[0]["msg"],
        )
        return node


def _load_edge(raw: Any, index: int) -> Edge:
    try:
        return Edge.model_validate(raw)
    except ValidationError as e:
        raise SnapshotFormatError(
            f"edge entry {index} is not an object with string 'id', 'source' and 'target'"
        ) from e


def load_snapshot(source: str | bytes | Mapping[str, Any]) -> Snapshot:
    """
    Parse and validate a snapshot.

    Optional fields that are missing or not strings are reported as None so
    the caller keeps its current value.

    Params:
        source: JSON text or an already parsed object

    Returns:
        The validated snapshot

    Raises:
        SnapshotFormatError: If the text is not JSON, ``nodes`` or ``edges``
            is not an array, or an entry lacks the string ids the graph is
            keyed by
    """
    if isinstance(source, (str, bytes)):
        try:
            source = json.loads(source)
        except ValueError as e:
            raise SnapshotFormatError(f"not valid JSON ({e})") from e
    if not isinstance(source, Mapping):
        raise SnapshotFormatError("top level must be an object")

    raw_nodes = source.get("nodes")
    raw_edges = source.get("edges")
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        raise SnapshotFormatError("'nodes' and 'edges' must be arrays")

    nodes = [_load_node(raw, index) for index, raw in enumerate(raw_nodes)]
    edges = [_load_edge(raw, index) for index, raw in enumerate(raw_edges)]

    def optional_string(key: str) -> str | None:
        value = source.get(key)
        return value if isinstance(value, str) else None

    return Snapshot(
        nodes=nodes,
        edges=edges,
        name=optional_string("name"),
        description=optional_string("description"),
        global_variables=optional_string("globalVariables"),
    )


def mask_sensitive_values(value: Any) -> Any:
    """
    Replace values stored under secret-looking keys.

    A key is secret-looking when its lower-cased form contains ``apikey``,
    ``secret`` or ``token``. Objects and lists are walked recursively.
    """
    if isinstance(value, list):
        return [mask_sensitive_values(item) for item in value]
    if not isinstance(value, dict):
        return value
    masked = {}
    for key, item in value.items():
        lowered = str(key).lower()
        if any(marker in lowered for marker in SENSITIVE_KEY_MARKERS):
            masked[key] = MASKED_VALUE
        else:
            masked[key] = mask_sensitive_values(item)
    return masked


def mask_global_variables(raw: str) -> str:
    """Mask secrets in global variable JSON text; unparseable text is returned as-is."""
    try:
        parsed = json.loads(raw)
    except ValueError as e:
        logger.warning(
            "Could not parse and mask global variables for export, exporting as is: %s", e
        )
        return raw
    return json.dumps(mask_sensitive_values(parsed), indent=2, ensure_ascii=False)


def _dump_node(node: Node) -> dict[str, Any]:
    if isinstance(node, OpaqueNode):
        # Only the keys the entry was imported with
        return node.model_dump(mode="json", by_alias=True, exclude_unset=True)
    return node_adapter.dump_python(node, mode="json", by_alias=True)


def dump_snapshot(
    nodes: list[Node],
    edges: list[Edge],
    name: str,
    description: str,
    global_variables: str,
) -> str:
    """Serialize a canvas to snapshot JSON text with secrets in the global variables masked."""
    flow = {
        "name": name,
        "description": description,
        "globalVariables": mask_global_variables(global_variables),
        "nodes": [_dump_node(node) for node in nodes],
        "edges": edge_list_adapter.dump_python(edges, mode="json", by_alias=True),
    }
    return json.dumps(flow, indent=2, ensure_ascii=False)
