"""
Producer node execution.

This package provides the execution coordinator that runs LLM prompt and
HTTP request nodes, and the HTTP request preparation helpers.
"""

from flowcanvas.execution.coordinator import (
    ExecutionCoordinator,
    HttpRequest,
    LlmRequest,
    RunOutcome,
    RunStatus,
    prepare_http_request,
    prepare_llm_request,
)
from flowcanvas.execution.http_request import (
    carries_body,
    format_response_body,
    parse_headers,
)

__all__ = [
    "ExecutionCoordinator",
    "HttpRequest",
    "LlmRequest",
    "RunOutcome",
    "RunStatus",
    "carries_body",
    "format_response_body",
    "parse_headers",
    "prepare_http_request",
    "prepare_llm_request",
]
