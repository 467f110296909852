"""
Reactive Kernel — Expression Resolver

Pure function: (path, state) → value | None
A lookup language, not an expression language: a dotted path is walked
key by key. No calls, no operators, no evaluation.

A missing path is not exceptional. It resolves to None and renders as
empty text.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from reactive.kernel.types import split_path

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve(path: str, root: Any) -> Any:
    """
    Walk `root` along a dotted path.

    Returns None when any step is absent, when an intermediate value is not
    a container, or when the lookup fails for any other reason.
    """
    try:
        value = root
        for segment in split_path(path):
            if value is None:
                return None
            value = _lookup(value, segment)
        return value
    except Exception as e:
        logger.debug("resolver: lookup of %r failed: %s", path, e)
        return None


def is_truthy(value: Any) -> bool:
    """Non-empty, non-zero, non-false values are truthy. None is falsy."""
    return bool(value)


def to_text(value: Any) -> str:
    """
    Coerce a resolved value to display text.

      None         → ""
      True / False → "true" / "false"
      3.0          → "3"
      [1, 2]       → "1,2"
      {"a": 1}     → '{"a":1}'
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(v) for v in value)
    return str(value)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _lookup(container: Any, segment: str) -> Any:
    """One plain property lookup. Anything that is not a container → None."""
    if isinstance(container, Mapping):
        return container.get(segment)

    if isinstance(container, Sequence) and not isinstance(container, (str, bytes)):
        if segment.isdigit():
            index = int(segment)
            return container[index] if index < len(container) else None
        return None

    logger.debug("resolver: %r is not a container (segment %r)", type(container).__name__, segment)
    return None
