"""
Holder for the global variable store.

The surrounding application edits global variables as JSON text. The engine
reads them as a parsed tree; text that does not parse to a JSON object
degrades to an empty namespace instead of failing the run that reads it.
"""

import json
import logging

from flowcanvas.core.types import GlobalStore

logger = logging.getLogger(__name__)

DEFAULT_GLOBAL_VARIABLES = json.dumps(
    {"user": {"name": "Alex"}, "apiKey": "your-secret-key-here"}, indent=2
)


def parse_global_variables(raw: str) -> GlobalStore:
    """
    Parse global variable JSON text.

    Params:
        raw: JSON text as edited by the user

    Returns:
        The parsed object, or an empty dict when the text is not valid JSON
        or does not describe an object
    """
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning("Invalid JSON in global variables: %s", e)
        return {}
    if not isinstance(parsed, dict):
        logger.warning(
            "Global variables must be a JSON object, got %s", type(parsed).__name__
        )
        return {}
    return parsed


class GlobalVariables:
    """
    The current global variable text and its parsed form.

    The parsed tree is cached per text value; callers read ``parsed`` once
    per resolution pass and must not mutate the returned mapping.
    """

    def __init__(self, raw: str = DEFAULT_GLOBAL_VARIABLES):
        self._raw = raw
        self._parsed: GlobalStore | None = None

    @property
    def raw(self) -> str:
        return self._raw

    @raw.setter
    def raw(self, value: str) -> None:
        self._raw = value
        self._parsed = None

    @property
    def parsed(self) -> GlobalStore:
        if self._parsed is None:
            self._parsed = parse_global_variables(self._raw)
        return self._parsed
