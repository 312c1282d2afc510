"""JSON loading and ``${VAR}`` environment expansion."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

_VARIABLE = re.compile(r"\$\{([^}]+)\}")


def load_json(path: str | Path) -> Any:
    """Parse the JSON document stored at ``path``."""
    with open(path, encoding="utf-8") as handle:
        return json.load(handle)


def _expand(text: str) -> str:
    match = _VARIABLE.search(text)
    while match:
        value = os.environ.get(match.group(1), "")
        text = text[: match.start()] + value + text[match.end():]
        match = _VARIABLE.search(text)
    return text


def expand_env(value: Any) -> Any:
    """Return ``value`` with every ``${NAME}`` in its strings replaced.

    Lists and dict values are expanded recursively; dict keys and
    non-string scalars are left as they are.  Unset variables expand to an
    empty string.
    """
    if isinstance(value, str):
        return _expand(value)
    if isinstance(value, list):
        return [expand_env(item) for item in value]
    if isinstance(value, dict):
        return {key: expand_env(item) for key, item in value.items()}
    return value