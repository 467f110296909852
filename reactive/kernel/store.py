"""
Reactive Kernel — State Store

Owns the nested state tree. The only component that mutates it.

  initialize(initial)   → deep copy, replaces any prior state
  get_by_path(path)     → same traversal as the resolver
  set_by_path(path, v)  → creates intermediate dicts as needed
  merge(patch)          → deep merge; lists and primitives replace

The store never renders. Callers trigger a render after mutating.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from reactive.kernel.resolver import resolve
from reactive.kernel.types import split_path

logger = logging.getLogger(__name__)


class Store:
    """In-memory owner of one state tree. Instances are independent."""

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._state: dict[str, Any] = {}
        if initial is not None:
            self.initialize(initial)

    @property
    def state(self) -> dict[str, Any]:
        """The live state tree. Direct mutation bypasses merge semantics."""
        return self._state

    def initialize(self, initial: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """
        Deep-copy `initial` into a fresh tree and make it current.
        Re-initialization fully resets state.
        """
        self._state = copy.deepcopy(dict(initial or {}))
        return self._state

    def get_by_path(self, path: str) -> Any:
        """Read a value by dotted path. Missing → None."""
        return resolve(path, self._state)

    def set_by_path(self, path: str, value: Any) -> None:
        """
        Assign `value` at a dotted path.
        Missing or non-dict intermediates are replaced with fresh dicts.
        """
        segments = split_path(path)
        current = self._state

        for segment in segments[:-1]:
            nxt = current.get(segment)
            if not isinstance(nxt, dict):
                if nxt is not None:
                    logger.debug("store: overwriting %s value at %r with {}", type(nxt).__name__, segment)
                nxt = {}
                current[segment] = nxt
            current = nxt

        current[segments[-1]] = value

    def merge(self, patch: Mapping[str, Any]) -> None:
        """Deep-merge `patch` into the state tree."""
        _merge(self._state, patch, prefix="")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _merge(target: dict[str, Any], patch: Mapping[str, Any], prefix: str) -> None:
    """
    Dict values merge recursively; everything else (primitives, lists)
    replaces the existing value wholesale. Patch values are copied so the
    caller's objects are never aliased into the state.
    """
    for key, value in patch.items():
        if isinstance(value, Mapping):
            existing = target.get(key)
            if not isinstance(existing, dict):
                if existing is not None:
                    logger.warning(
                        "store: merge replaced %s at %r with a mapping",
                        type(existing).__name__,
                        f"{prefix}{key}",
                    )
                existing = {}
                target[key] = existing
            _merge(existing, value, prefix=f"{prefix}{key}.")
        else:
            target[key] = copy.deepcopy(value)


def patch_paths(patch: Mapping[str, Any], prefix: str = "") -> list[str]:
    """
    The leaf paths a merge patch touches.

      {"user": {"name": "x"}, "items": [1]}  → ["user.name", "items"]
    """
    paths: list[str] = []
    for key, value in patch.items():
        path = f"{prefix}{key}"
        if isinstance(value, Mapping) and value:
            paths.extend(patch_paths(value, prefix=f"{path}."))
        else:
            paths.append(path)
    return paths
