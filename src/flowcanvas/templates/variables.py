"""
Variable naming and substitution for node text fields.

Free text may reference variables as ``$Name`` (a local variable taken from an
ancestor Text node's label) or ``$global.dotted.path`` (a leaf of the global
variable store). Substitution is fail-soft: tokens that do not resolve to a
primitive value are left in the text exactly as written.
"""

import math
import re
from typing import Any

from flowcanvas.core.types import GlobalStore, LocalValues

GLOBAL_PREFIX = "global."

# ASCII \w so names follow [A-Za-z0-9_]
VARIABLE_PATTERN = re.compile(r"\$((?:global\.)?[\w.]+)", re.ASCII)

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def sanitize_label(label: str) -> str:
    """
    Turn a node label into a variable name by dropping everything outside ``[A-Za-z0-9]``.

    Params:
        label: Free-text node label

    Returns:
        The sanitized name; empty when the label has no alphanumeric characters
    """
    return _NON_ALPHANUMERIC.sub("", label)


def flatten_globals(store: Any, prefix: str = "") -> list[str]:
    """
    Flatten a global variable tree into dotted leaf paths.

    Nested objects are recursed into; anything else (including lists and
    null) is a leaf. Empty objects contribute no paths.

    Params:
        store: Parsed global variable tree
        prefix: Path of ``store`` within the enclosing tree

    Returns:
        Dotted paths without the ``global.`` prefix

    Examples:
        {"user": {"name": "Alex"}, "apiKey": "k"} -> ["user.name", "apiKey"]
    """
    if not isinstance(store, dict):
        return []
    paths: list[str] = []
    for key, value in store.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            paths.extend(flatten_globals(value, path))
        else:
            paths.append(path)
    return paths


def get_global_variable_names(store: GlobalStore) -> list[str]:
    """List every global leaf path with the ``global.`` prefix applied."""
    return [f"{GLOBAL_PREFIX}{path}" for path in flatten_globals(store)]


def lookup_path(store: Any, path: str) -> Any:
    """
    Safely resolve a dotted path against a nested tree.

    The whole path is first tried as a single key, so keys that themselves
    contain dots resolve. Otherwise the path is walked segment by segment,
    where a run of segments may also match one dotted key of an object.
    Objects are indexed by key and lists by non-negative integer segment.
    Empty segments are ignored.

    Params:
        store: Tree to search
        path: Dotted path such as ``user.name`` or ``items.0``

    Returns:
        The value found, or ``MISSING`` when any segment is absent, the path
        steps into a scalar, or the path is empty
    """
    if isinstance(store, dict) and path and path in store:
        return store[path]
    segments = [segment for segment in path.split(".") if segment]
    if not segments:
        return MISSING
    return _walk(store, segments)


def _walk(current: Any, segments: list[str]) -> Any:
    if not segments:
        return current
    if isinstance(current, dict):
        # Longest key first: {"a.b": 1} wins over {"a": {"b": 1}}
        for size in range(len(segments), 0, -1):
            key = ".".join(segments[:size])
            if key in current:
                found = _walk(current[key], segments[size:])
                if found is not MISSING:
                    return found
        return MISSING
    if isinstance(current, list) and segments[0].isdigit():
        index = int(segments[0])
        if index >= len(current):
            return MISSING
        return _walk(current[index], segments[1:])
    return MISSING


def _format_float(value: float) -> str:
    """Render a float the way JSON serializers of the browser print numbers."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    mantissa, _, exponent = text.partition("e")
    if not exponent:
        return text
    power = int(exponent)
    if power > -7:
        fraction = mantissa.partition(".")[2]
        return f"{value:.{max(len(fraction) - power, 0)}f}"
    return f"{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def format_primitive(value: Any) -> str | None:
    """
    Render a primitive the way it reads in JSON.

    Floats use the shortest round-tripping digits with exponents written
    as ``1e-7`` and ``1e+21``, switching to exponent form outside
    ``[1e-6, 1e21)``.

    Returns:
        The canonical string, or None when ``value`` is not a string,
        number or boolean
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    return None


def substitute_variables(
    text: str, local_values: LocalValues, global_store: GlobalStore
) -> str:
    """
    Replace ``$name`` and ``$global.path`` tokens in ``text``.

    Global tokens are replaced only when the path resolves to a string,
    number or boolean. Local tokens are replaced when the name is a key of
    ``local_values``. Every other token stays as written.

    Params:
        text: Text containing variable tokens
        local_values: Local variable name -> value
        global_store: Parsed global variable tree

    Returns:
        The substituted text
    """
    if not text:
        return ""

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name.startswith(GLOBAL_PREFIX):
            rendered = format_primitive(
                lookup_path(global_store, name[len(GLOBAL_PREFIX):])
            )
            return match.group(0) if rendered is None else rendered
        value = local_values.get(name)
        return match.group(0) if value is None else value

    return VARIABLE_PATTERN.sub(replace, text)


def find_variable_tokens(text: str) -> list[str]:
    """List the variable names referenced in ``text``, in order of appearance."""
    if not text:
        return []
    return [match.group(1) for match in VARIABLE_PATTERN.finditer(text)]
