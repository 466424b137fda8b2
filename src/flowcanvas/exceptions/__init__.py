"""
flowcanvas exception classes.

This package provides all exception types used throughout flowcanvas for
consistent error handling and reporting.
"""

from flowcanvas.exceptions.core import (
    ConfigurationError,
    DuplicateNodeError,
    ExecutionError,
    FlowCanvasError,
    GraphError,
    HttpStatusError,
    HttpTransportError,
    NodeNotFoundError,
    NodeVariantError,
    PromptValidationError,
    SnapshotFormatError,
    TextGenerationError,
)

__all__ = [
    "FlowCanvasError",
    "ConfigurationError",
    "GraphError",
    "DuplicateNodeError",
    "NodeNotFoundError",
    "NodeVariantError",
    "SnapshotFormatError",
    "ExecutionError",
    "PromptValidationError",
    "TextGenerationError",
    "HttpTransportError",
    "HttpStatusError",
]
