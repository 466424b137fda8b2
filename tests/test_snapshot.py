"""
Tests for the persisted snapshot format.

Focus Areas:
1. Accepting snapshots with optional fields missing
2. Keeping every identifiable entry, rejecting the rest as a whole
3. Secret masking on export
"""

import json

import pytest

from flowcanvas.core.nodes import LlmNode, OpaqueNode, TextNode
from flowcanvas.exceptions import SnapshotFormatError
from flowcanvas.snapshot import (
    MASKED_VALUE,
    dump_snapshot,
    load_snapshot,
    mask_global_variables,
    mask_sensitive_values,
)
from tests.factories import edge, llm_node, text_node

MINIMAL = {
    "nodes": [
        {"id": "1", "type": "textNode", "data": {"label": "Concept", "text": "X"}},
        {"id": "2", "type": "llmNode", "data": {"label": "LLM", "prompt": "$Concept"}},
    ],
    "edges": [{"id": "e1-2", "source": "1", "target": "2"}],
}


class TestLoadSnapshot:
    """Test snapshot validation."""

    def test_optional_fields_absent(self):
        snapshot = load_snapshot(json.dumps(MINIMAL))

        assert [n.id for n in snapshot.nodes] == ["1", "2"]
        assert [e.id for e in snapshot.edges] == ["e1-2"]
        assert snapshot.name is None
        assert snapshot.description is None
        assert snapshot.global_variables is None

    def test_optional_fields_present(self):
        snapshot = load_snapshot(
            {**MINIMAL, "name": "N", "description": "D", "globalVariables": '{"a": 1}'}
        )
        assert (snapshot.name, snapshot.description, snapshot.global_variables) == (
            "N",
            "D",
            '{"a": 1}',
        )

    def test_non_string_global_variables_ignored(self):
        snapshot = load_snapshot({**MINIMAL, "globalVariables": {"a": 1}})
        assert snapshot.global_variables is None

    @pytest.mark.parametrize(
        "source",
        [
            "{broken",
            "[]",
            {"nodes": []},
            {"edges": []},
            {"nodes": {}, "edges": []},
            {"nodes": [], "edges": "none"},
        ],
    )
    def test_structural_rejections(self, source):
        with pytest.raises(SnapshotFormatError):
            load_snapshot(source)

    def test_unknown_node_type_accepted(self):
        group = {"id": "g", "type": "group", "position": {"x": 1, "y": 2}, "data": {"label": "Box"}}
        snapshot = load_snapshot({"nodes": [group, MINIMAL["nodes"][0]], "edges": []})

        assert isinstance(snapshot.nodes[0], OpaqueNode)
        assert snapshot.nodes[0].type == "group"
        assert isinstance(snapshot.nodes[1], TextNode)

    def test_out_of_range_temperature_accepted(self):
        hot = {"id": "l", "type": "llmNode", "data": {"prompt": "p", "temperature": 1.5}}
        (node,) = load_snapshot({"nodes": [hot], "edges": []}).nodes

        assert isinstance(node, LlmNode)
        assert node.data.temperature == 1.5

    def test_known_type_with_misfit_fields_kept_as_imported(self):
        odd = {"id": "t", "type": "textNode", "data": {"label": "Odd", "text": ["not", "text"]}}
        (node,) = load_snapshot({"nodes": [odd], "edges": []}).nodes

        assert isinstance(node, OpaqueNode)
        assert node.data == odd["data"]

    @pytest.mark.parametrize(
        "source",
        [
            {"nodes": ["just a string"], "edges": []},
            {"nodes": [{"type": "textNode", "data": {}}], "edges": []},
            {"nodes": [], "edges": [{"id": "e", "source": "a"}]},
        ],
    )
    def test_entries_without_ids_rejected(self, source):
        with pytest.raises(SnapshotFormatError):
            load_snapshot(source)


class TestMasking:
    """Test masking of secret-looking keys."""

    def test_nested_and_listed_keys(self):
        value = {
            "apiKey": "k",
            "user": {"name": "Alex", "accessToken": "t"},
            "services": [{"clientSecret": "s", "url": "u"}],
        }
        assert mask_sensitive_values(value) == {
            "apiKey": MASKED_VALUE,
            "user": {"name": "Alex", "accessToken": MASKED_VALUE},
            "services": [{"clientSecret": MASKED_VALUE, "url": "u"}],
        }

    def test_masked_key_hides_whole_subtree(self):
        assert mask_sensitive_values({"secrets": {"a": 1}}) == {"secrets": MASKED_VALUE}

    def test_unparseable_text_exported_as_is(self):
        assert mask_global_variables("{oops") == "{oops"


class TestDumpSnapshot:
    def test_round_trip_shape(self):
        nodes = [text_node("1", "Concept", "X"), llm_node("2", "$Concept")]
        text = dump_snapshot(nodes, [edge("1", "2")], "Name", "Desc", '{"apiKey": "k", "a": 1}')

        flow = json.loads(text)
        assert flow["name"] == "Name"
        assert flow["description"] == "Desc"
        assert json.loads(flow["globalVariables"]) == {"apiKey": MASKED_VALUE, "a": 1}
        assert flow["nodes"][1]["type"] == "llmNode"
        assert flow["nodes"][1]["data"]["isLoading"] is False
        assert "thinkingEnabled" in flow["nodes"][1]["data"]

        reloaded = load_snapshot(text)
        assert [n.id for n in reloaded.nodes] == ["1", "2"]
        assert reloaded.nodes[1].data.prompt == "$Concept"

    def test_opaque_nodes_exported_as_imported(self):
        raw = {"id": "g", "type": "group", "data": {"label": "Box"}, "style": {"zIndex": -1}}
        snapshot = load_snapshot({"nodes": [raw], "edges": []})

        flow = json.loads(dump_snapshot(snapshot.nodes, [], "N", "D", "{}"))

        assert flow["nodes"] == [raw]
