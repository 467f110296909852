"""
Reactive Kernel — Shared Types

Data classes used across the resolver, parser, renderer, store, scheduler
and binding reconciler. These are the contracts that bind the kernel together.

Directive tree:
- Text        — verbatim template text
- Value       — ${path}, resolved against the state tree
- ItemField   — ${item.field} inside a loop body, read from the current element
- Conditional — ${if:expr} ... ${else} ... ${endif}
- Loop        — ${loop:path} ... ${endloop}
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Union

# ---------------------------------------------------------------------------
# Marker grammar
# ---------------------------------------------------------------------------

MARKER_PATTERN = re.compile(r"\$\{([^}]*)\}")

IF_PREFIX = "if:"
LOOP_PREFIX = "loop:"
ITEM_PREFIX = "item."
ELSE_MARKER = "else"
ENDIF_MARKER = "endif"
ENDLOOP_MARKER = "endloop"

# Default host-document attributes
TEMPLATE_ATTR = "data-template"
ORIGINAL_ATTR = "data-original"
BIND_ATTR = "data-bind"
EVENT_ATTR = "data-event"
DEFAULT_EVENT = "input"

Listener = Callable[[], None]


# ---------------------------------------------------------------------------
# Directive tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Text:
    """Verbatim template text, emitted unchanged."""

    text: str


@dataclass(frozen=True)
class Value:
    """A ${path} marker. `raw` keeps the marker as written."""

    path: str
    raw: str = ""


@dataclass(frozen=True)
class ItemField:
    """A ${item.field} marker inside a loop body. `field` is a literal key."""

    field: str
    raw: str = ""


@dataclass(frozen=True)
class Conditional:
    """
    ${if:expr} then-branch [${else} else-branch] ${endif}.
    Only one branch is rendered; the other is discarded.
    """

    expr: str
    then_branch: tuple[Node, ...] = ()
    else_branch: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Loop:
    """${loop:path} body ${endloop}. The body is rendered once per element."""

    source: str
    body: tuple[Node, ...] = ()


Node = Union[Text, Value, ItemField, Conditional, Loop]


@dataclass(frozen=True)
class Template:
    """A parsed template: the pristine source and its directive tree."""

    source: str
    nodes: tuple[Node, ...]


# ---------------------------------------------------------------------------
# Records and options
# ---------------------------------------------------------------------------


@dataclass
class RenderOptions:
    """Options controlling value substitution."""

    escape_values: bool = False


@dataclass
class TemplateRecord:
    """
    A templated element and its pristine markup.
    Captured once, never recaptured; every render starts from `original`.
    """

    element: Any
    original: str


@dataclass
class BindingRecord:
    """
    A bound input: element, dotted state path, trigger event name.
    `element` is a weak reference; call it to get the element back.
    """

    element: Any
    path: str
    event: str = DEFAULT_EVENT
    handler: Callable[..., None] | None = field(default=None, repr=False)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def split_path(path: str) -> list[str]:
    """
    Split a dotted path into segments.

      "user"               → ["user"]
      "user.profile.name"  → ["user", "profile", "name"]
    """
    return path.strip().split(".")


def paths_overlap(a: str, b: str) -> bool:
    """
    True when one dotted path is a segment prefix of the other.

      paths_overlap("user", "user.name")      → True
      paths_overlap("user.name", "user.age")  → False
      paths_overlap("users", "user")          → False
    """
    sa, sb = split_path(a), split_path(b)
    n = min(len(sa), len(sb))
    return sa[:n] == sb[:n]
