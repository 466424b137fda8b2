"""
Variable templating for node text fields.

This package provides label sanitization, global store flattening, the
substitution engine and per-node namespace construction.
"""

from flowcanvas.templates.namespace import (
    VariableNamespace,
    build_local_values,
    build_namespace,
    get_available_variables,
    get_local_variable_names,
)
from flowcanvas.templates.variables import (
    GLOBAL_PREFIX,
    MISSING,
    VARIABLE_PATTERN,
    find_variable_tokens,
    flatten_globals,
    format_primitive,
    get_global_variable_names,
    lookup_path,
    sanitize_label,
    substitute_variables,
)

__all__ = [
    "GLOBAL_PREFIX",
    "MISSING",
    "VARIABLE_PATTERN",
    "VariableNamespace",
    "build_local_values",
    "build_namespace",
    "find_variable_tokens",
    "flatten_globals",
    "format_primitive",
    "get_available_variables",
    "get_global_variable_names",
    "get_local_variable_names",
    "lookup_path",
    "sanitize_label",
    "substitute_variables",
]
