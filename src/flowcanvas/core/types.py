"""
Core type definitions for the flowcanvas engine.

This module contains the type aliases shared by the graph, templating and
execution layers.
"""

from typing import Any

GlobalStore = dict[str, Any]

LocalValues = dict[str, str]
