"""
Reactive Kernel — Directive Renderer

Pure function: (pristine template, state, options?) → markup string
No side effects. No IO. Deterministic: same input → same output, always.

Evaluation order per block: a conditional chooses one branch, a loop expands
its body once per element, and every remaining ${path} marker resolves
against the state. Substituted values are inserted as raw markup unless
RenderOptions.escape_values is set; branch and loop bodies are always
emitted verbatim.

Inside a loop body the current element is in scope:
  ${item.name}          → element["name"] (one level, literal key)
  ${if:item.done}       → truthiness of element["done"]
  ${loop:item.children} → iterate element["children"]
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from html import escape as _html_escape
from typing import Any

from reactive.kernel.parser import parse_cached
from reactive.kernel.resolver import is_truthy, resolve, to_text
from reactive.kernel.types import (
    ITEM_PREFIX,
    Conditional,
    ItemField,
    Loop,
    Node,
    RenderOptions,
    Text,
    Value,
)

logger = logging.getLogger(__name__)

# Marks "not inside a loop" (None is a legal loop element)
_NO_ITEM = object()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render(
    template: str,
    state: dict[str, Any],
    options: RenderOptions | None = None,
) -> str:
    """
    Render a pristine template against the current state.
    Returns the fully substituted markup. Never raises for bad data.
    """
    opts = options or RenderOptions()
    parsed = parse_cached(template)
    parts: list[str] = []
    _render_nodes(parsed.nodes, state, _NO_ITEM, opts, parts)
    return "".join(parts)


def escape(text: str) -> str:
    """HTML-escape substituted content."""
    return _html_escape(str(text), quote=True)


# ---------------------------------------------------------------------------
# Tree walk
# ---------------------------------------------------------------------------


def _render_nodes(
    nodes: tuple[Node, ...],
    state: dict[str, Any],
    item: Any,
    opts: RenderOptions,
    out: list[str],
) -> None:
    for node in nodes:
        if isinstance(node, Text):
            out.append(node.text)

        elif isinstance(node, Value):
            out.append(_substitute(resolve(node.path, state), opts))

        elif isinstance(node, ItemField):
            out.append(_substitute(_item_field(item, node.field), opts))

        elif isinstance(node, Conditional):
            chosen = node.then_branch if is_truthy(_resolve_expr(node.expr, state, item)) else node.else_branch
            _render_nodes(chosen, state, item, opts, out)

        elif isinstance(node, Loop):
            _render_loop(node, state, item, opts, out)


def _render_loop(
    node: Loop,
    state: dict[str, Any],
    item: Any,
    opts: RenderOptions,
    out: list[str],
) -> None:
    source = _resolve_expr(node.source, state, item)
    if not isinstance(source, (list, tuple)):
        if source is not None:
            logger.debug("renderer: loop source %r is %s, not a list", node.source, type(source).__name__)
        return

    for element in source:
        _render_nodes(node.body, state, element, opts, out)


def _resolve_expr(expr: str, state: dict[str, Any], item: Any) -> Any:
    """Item-scoped inside a loop, state-scoped everywhere else."""
    if item is not _NO_ITEM and expr.startswith(ITEM_PREFIX):
        return _item_field(item, expr[len(ITEM_PREFIX) :])
    return resolve(expr, state)


def _item_field(item: Any, field: str) -> Any:
    """Shallow field access on a loop element. Missing → None."""
    if isinstance(item, Mapping):
        return item.get(field)
    return None


def _substitute(value: Any, opts: RenderOptions) -> str:
    text = to_text(value)
    return escape(text) if opts.escape_values else text
