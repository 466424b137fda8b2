"""
Exception classes for flowcanvas.

This module defines specific exception types for the error conditions that
can occur while mutating the graph, loading snapshots and running producer
nodes.
"""


class FlowCanvasError(Exception):
    """Base exception for all flowcanvas errors."""

    pass


class ConfigurationError(FlowCanvasError):
    """Raised when engine settings cannot be built from their sources."""

    pass


class GraphError(FlowCanvasError):
    """Base exception for graph store violations."""

    pass


class DuplicateNodeError(GraphError):
    """Raised when a node is appended with an id already present in the graph."""

    def __init__(self, node_id: str):
        """
        Initialize the exception.

        Params:
            node_id: The id that is already taken
        """
        self.node_id = node_id
        super().__init__(f"Node '{node_id}' already exists in the graph")


class NodeNotFoundError(GraphError):
    """Raised when an operation requires a node that is not in the graph."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node '{node_id}' not found in the graph")


class NodeVariantError(GraphError):
    """Raised when a node of the wrong variant is used for an operation."""

    def __init__(self, node_id: str, variant: str, expected: str):
        """
        Initialize the exception.

        Params:
            node_id: The offending node
            variant: The node's actual variant
            expected: Description of the accepted variant(s)
        """
        self.node_id = node_id
        self.variant = variant
        self.expected = expected
        super().__init__(
            f"Node '{node_id}' is a {variant} node, expected {expected}"
        )


class SnapshotFormatError(FlowCanvasError):
    """Raised when a persisted snapshot is rejected as a whole."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid snapshot: {reason}")


class ExecutionError(FlowCanvasError):
    """
    Base exception for producer run failures.

    The message of an ExecutionError is what ends up in the derived node,
    prefixed with ``Error: ``.
    """

    pass


class PromptValidationError(ExecutionError):
    """Raised when a prompt is empty after variable substitution."""

    def __init__(self, message: str = "Prompt is empty after variable substitution."):
        super().__init__(message)


class TextGenerationError(ExecutionError):
    """Raised when the text generation capability fails."""

    pass


class HttpTransportError(ExecutionError):
    """Raised when an HTTP request fails before a response is received."""

    pass


class HttpStatusError(ExecutionError):
    """Raised when an HTTP response carries a non-success status."""

    def __init__(self, status_code: int, reason: str, body: str):
        """
        Initialize the exception.

        Params:
            status_code: Numeric response status
            reason: Status reason phrase
            body: Raw response body text
        """
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"HTTP error! status: {status_code} {reason}\n\n{body}")
