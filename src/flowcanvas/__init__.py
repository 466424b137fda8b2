"""
flowcanvas - variable-scoped dataflow execution for node graphs

flowcanvas runs LLM prompt and HTTP request nodes whose text fields reference
upstream Text nodes and a shared global variable store through ``$variables``.
"""

from importlib.metadata import version

from flowcanvas.canvas import Canvas
from flowcanvas.execution import ExecutionCoordinator, RunOutcome, RunStatus
from flowcanvas.structure import GraphStore, find_ancestors
from flowcanvas.templates import substitute_variables

__version__ = version("flowcanvas")

__all__ = [
    "__version__",
    "Canvas",
    "ExecutionCoordinator",
    "GraphStore",
    "RunOutcome",
    "RunStatus",
    "find_ancestors",
    "substitute_variables",
]
