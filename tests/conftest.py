"""
Shared test fixtures for the flowcanvas test suite.
"""

import pytest

from flowcanvas.structure.graph_store import GraphStore
from tests.factories import (
    FakeHttpRequester,
    FakeTextGenerator,
    edge,
    llm_node,
    text_node,
)


@pytest.fixture
def text_generator():
    """Streaming capability yielding ``["Hello", " world"]``."""
    return FakeTextGenerator(chunks=["Hello", " world"])


@pytest.fixture
def http_requester():
    return FakeHttpRequester()


@pytest.fixture
def concept_graph():
    """Two Text nodes (Concept, Audience) feeding LLM prompt node C."""
    return GraphStore(
        nodes=[
            text_node("A", "Concept", "Explain X"),
            text_node("B", "Audience", "Simple"),
            llm_node("C", "Combine $Concept and $Audience"),
        ],
        edges=[edge("A", "C"), edge("B", "C")],
    )
