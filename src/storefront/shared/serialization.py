"""JSON helpers for structured data stored in Text fields."""

import json


def dump_json(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value)


def load_json(value, default=None):
    if not value:
        return default
    if isinstance(value, dict | list):
        return value
    return json.loads(value)
