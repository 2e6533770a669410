"""JSON text columns.

Array and object fields (co-founders, social links, tags, metadata) are
kept in text columns. Writes stringify, reads parse; text that does not
parse reads back as an empty container rather than failing the request.
"""

import json
import logging
from typing import Any

logger = logging.getLogger("venturehub.json_fields")


def dump_list(value) -> str:
    if value is None:
        return "[]"
    if isinstance(value, str):
        # already serialized
        return json.dumps(load_list(value))
    return json.dumps(list(value))


def dump_dict(value) -> str:
    if value is None:
        return "{}"
    if isinstance(value, str):
        return json.dumps(load_dict(value))
    return json.dumps(dict(value))


def _load(text, expected: type, empty: Any):
    if text is None or text == "":
        return empty
    if isinstance(text, expected):
        return text
    try:
        value = json.loads(text)
    except (TypeError, ValueError):
        logger.warning("unparseable json column value: %.60r", text)
        return empty
    if not isinstance(value, expected):
        return empty
    return value


def load_list(text) -> list:
    return _load(text, list, [])


def load_dict(text) -> dict:
    return _load(text, dict, {})
