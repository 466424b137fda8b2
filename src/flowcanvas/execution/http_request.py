"""
Request preparation and response formatting for HTTP request nodes.
"""

import json

from flowcanvas.core.nodes import METHODS_WITH_BODY, HttpMethod


def parse_headers(block: str) -> dict[str, str]:
    """
    Parse a newline-delimited ``Key: Value`` block into a header mapping.

    Each line is split on its first colon; keys and values are stripped.
    Lines without a colon or with an empty key are dropped. A repeated key
    keeps its last value.

    Examples:
        "Content-Type: application/json\\nX-Url: http://a" ->
            {"Content-Type": "application/json", "X-Url": "http://a"}
    """
    headers: dict[str, str] = {}
    for line in block.splitlines():
        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        headers[key] = value.strip()
    return headers


def carries_body(method: HttpMethod | str) -> bool:
    return HttpMethod(method) in METHODS_WITH_BODY


def format_response_body(text: str) -> str:
    """Pretty-print ``text`` as JSON (indent 2) when it parses, else return it verbatim."""
    try:
        parsed = json.loads(text)
    except ValueError:
        return text
    return json.dumps(parsed, indent=2, ensure_ascii=False)
