"""
Reactive Kernel — Directive Parser

Pure function: template string → Template (directive tree)
Parse once per distinct template string, render many times.

Markers are found with a single regex scan; block markers (if/else/endif,
loop/endloop) are matched with an explicit stack, so directives nest to any
depth. Malformed templates never raise: an unclosed opener or a stray
closer degrades to an ordinary value marker and its text is kept.
"""

from __future__ import annotations

from functools import lru_cache

from reactive.kernel.types import (
    ELSE_MARKER,
    ENDIF_MARKER,
    ENDLOOP_MARKER,
    IF_PREFIX,
    ITEM_PREFIX,
    LOOP_PREFIX,
    MARKER_PATTERN,
    Conditional,
    ItemField,
    Loop,
    Node,
    Template,
    Text,
    Value,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse(source: str) -> Template:
    """
    Tokenize a template into its directive tree.

    Results are NOT cached here. Use parse_cached for repeated renders.
    """
    stack: list[_Frame] = [_Frame("root")]
    pos = 0

    for match in MARKER_PATTERN.finditer(source):
        if match.start() > pos:
            stack[-1].append(Text(source[pos : match.start()]))
        pos = match.end()

        raw = match.group(0)
        content = match.group(1).strip()
        top = stack[-1]

        if content.startswith(IF_PREFIX):
            stack.append(_Frame("if", content[len(IF_PREFIX) :].strip(), raw))
        elif content.startswith(LOOP_PREFIX):
            stack.append(_Frame("loop", content[len(LOOP_PREFIX) :].strip(), raw))
        elif content == ELSE_MARKER and top.kind == "if" and not top.in_else:
            top.in_else = True
            top.else_raw = raw
        elif content == ENDIF_MARKER and _has_open(stack, "if"):
            _close(stack, "if")
        elif content == ENDLOOP_MARKER and _has_open(stack, "loop"):
            _close(stack, "loop")
        elif content.startswith(ITEM_PREFIX) and _has_open(stack, "loop"):
            top.append(ItemField(content[len(ITEM_PREFIX) :], raw))
        else:
            top.append(Value(content, raw))

    if pos < len(source):
        stack[-1].append(Text(source[pos:]))

    # Unclosed blocks fall back to plain markers
    while len(stack) > 1:
        frame = stack.pop()
        stack[-1].extend(frame.degrade())

    return Template(source=source, nodes=tuple(stack[0].children))


@lru_cache(maxsize=512)
def parse_cached(source: str) -> Template:
    """
    Cached version of parse. Templates are immutable once archived,
    so the cache is keyed by the exact template string.
    """
    return parse(source)


@lru_cache(maxsize=512)
def referenced_paths(source: str) -> frozenset[str]:
    """
    The state paths a template reads: value markers, conditional
    expressions and loop sources. Item-scoped expressions inside loops
    are excluded since they read the loop element, not the state.
    """
    paths: set[str] = set()
    _collect_paths(parse_cached(source).nodes, in_loop=False, out=paths)
    return frozenset(paths)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


class _Frame:
    """An open block (or the root) collecting children while parsing."""

    __slots__ = ("kind", "expr", "raw", "then_children", "else_children", "in_else", "else_raw")

    def __init__(self, kind: str, expr: str = "", raw: str = "") -> None:
        self.kind = kind  # "root", "if", "loop"
        self.expr = expr
        self.raw = raw
        self.then_children: list[Node] = []
        self.else_children: list[Node] = []
        self.in_else = False
        self.else_raw = ""

    @property
    def children(self) -> list[Node]:
        return self.then_children

    def append(self, node: Node) -> None:
        if self.in_else:
            self.else_children.append(node)
        else:
            self.then_children.append(node)

    def extend(self, nodes: list[Node]) -> None:
        for node in nodes:
            self.append(node)

    def build(self) -> Node:
        if self.kind == "if":
            return Conditional(self.expr, tuple(self.then_children), tuple(self.else_children))
        return Loop(self.expr, tuple(self.then_children))

    def degrade(self) -> list[Node]:
        """Flatten an unclosed block back into markers and children."""
        opener = self.raw[2:-1].strip()
        nodes: list[Node] = [Value(opener, self.raw), *self.then_children]
        if self.in_else:
            nodes.append(Value(ELSE_MARKER, self.else_raw))
            nodes.extend(self.else_children)
        return nodes


def _has_open(stack: list[_Frame], kind: str) -> bool:
    return any(frame.kind == kind for frame in stack)


def _close(stack: list[_Frame], kind: str) -> None:
    """Close the innermost open block of `kind`, degrading any left open inside it."""
    while stack[-1].kind != kind:
        frame = stack.pop()
        stack[-1].extend(frame.degrade())
    frame = stack.pop()
    stack[-1].append(frame.build())


def _collect_paths(nodes: tuple[Node, ...], in_loop: bool, out: set[str]) -> None:
    for node in nodes:
        if isinstance(node, Value):
            out.add(node.path)
        elif isinstance(node, Conditional):
            if not (in_loop and node.expr.startswith(ITEM_PREFIX)):
                out.add(node.expr)
            _collect_paths(node.then_branch, in_loop, out)
            _collect_paths(node.else_branch, in_loop, out)
        elif isinstance(node, Loop):
            if not (in_loop and node.source.startswith(ITEM_PREFIX)):
                out.add(node.source)
            _collect_paths(node.body, True, out)
