"""
Reactive Kernel — Host Document

The kernel talks to the page through a narrow protocol:

  document.query_all(attribute)   → elements carrying the attribute, document order
  document.on_ready(callback)     → run once the document is ready
  element.get/set/has_attribute   → attribute access
  element.inner_html              → get/set inner markup
  element.value                   → get/set input value
  element.add/remove_event_listener

HtmlDocument is an in-memory implementation built on the standard library
HTML parser. Text is kept as raw markup (entities are not decoded), so
parsing and serializing a page round-trips its text byte for byte.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from html import escape as _html_escape
from html import unescape as _html_unescape
from html.parser import HTMLParser
from typing import Any, Protocol, runtime_checkable

from reactive.kernel.errors import DocumentError

VOID_ELEMENTS: frozenset[str] = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@dataclass
class DomEvent:
    """Passed to event handlers."""

    type: str
    target: Any


Handler = Callable[[DomEvent], None]


@runtime_checkable
class HostElement(Protocol):
    value: str
    inner_html: str

    def get_attribute(self, name: str) -> str | None: ...

    def set_attribute(self, name: str, value: str) -> None: ...

    def has_attribute(self, name: str) -> bool: ...

    def add_event_listener(self, event: str, handler: Handler) -> None: ...

    def remove_event_listener(self, event: str, handler: Handler) -> None: ...


@runtime_checkable
class HostDocument(Protocol):
    def query_all(self, attribute: str) -> list[Any]: ...

    def on_ready(self, callback: Callable[[], None]) -> None: ...


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


class Element:
    """An element node. Children are Elements or raw markup strings."""

    def __init__(self, tag: str, attrs: list[tuple[str, str | None]] | None = None) -> None:
        self.tag = tag
        self.attrs: dict[str, str | None] = dict(attrs or [])
        self.children: list[Element | str] = []
        self.parent: Element | None = None
        self._value: str | None = None
        self._listeners: dict[str, list[Handler]] = {}

    def __repr__(self) -> str:
        return f"Element({self.tag!r}, attrs={self.attrs!r})"

    # -- attributes --

    def get_attribute(self, name: str) -> str | None:
        if name not in self.attrs:
            return None
        value = self.attrs[name]
        return "" if value is None else value

    def set_attribute(self, name: str, value: str) -> None:
        self.attrs[name] = str(value)

    def has_attribute(self, name: str) -> bool:
        return name in self.attrs

    # -- markup --

    @property
    def inner_html(self) -> str:
        return "".join(_serialize(child) for child in self.children)

    @inner_html.setter
    def inner_html(self, markup: str) -> None:
        if self.tag in VOID_ELEMENTS:
            raise DocumentError(f"<{self.tag}> cannot have inner markup")
        for child in self.children:
            if isinstance(child, Element):
                child.parent = None
        self.children = []
        _TreeBuilder(self).build(markup)

    @property
    def outer_html(self) -> str:
        return _serialize(self)

    @property
    def text_content(self) -> str:
        parts: list[str] = []
        for child in self.children:
            if isinstance(child, Element):
                parts.append(child.text_content)
            else:
                parts.append(_html_unescape(child))
        return "".join(parts)

    @property
    def is_connected(self) -> bool:
        node = self
        while node.parent is not None:
            node = node.parent
        return isinstance(node, HtmlDocument)

    # -- form value --

    @property
    def value(self) -> str:
        if self._value is not None:
            return self._value
        if self.tag == "textarea":
            return self.text_content
        return self.get_attribute("value") or ""

    @value.setter
    def value(self, value: str) -> None:
        self._value = str(value)

    # -- events --

    def add_event_listener(self, event: str, handler: Handler) -> None:
        self._listeners.setdefault(event, []).append(handler)

    def remove_event_listener(self, event: str, handler: Handler) -> None:
        handlers = self._listeners.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def dispatch_event(self, event: str) -> None:
        """Run the handlers for `event` synchronously, in attach order."""
        for handler in list(self._listeners.get(event, [])):
            handler(DomEvent(type=event, target=self))

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    # -- traversal --

    def iter_elements(self):
        """Descendant elements in document order."""
        for child in self.children:
            if isinstance(child, Element):
                yield child
                yield from child.iter_elements()

    def query_all(self, attribute: str) -> list[Element]:
        return [el for el in self.iter_elements() if el.has_attribute(attribute)]

    def find(self, attribute: str, value: str) -> Element | None:
        """First descendant whose `attribute` equals `value`."""
        for el in self.iter_elements():
            if el.get_attribute(attribute) == value:
                return el
        return None


class HtmlDocument(Element):
    """
    An in-memory page. Ready callbacks queue until ready() is called,
    and run immediately after that.
    """

    def __init__(self, markup: str = "") -> None:
        super().__init__("#document")
        self._ready = False
        self._ready_callbacks: list[Callable[[], None]] = []
        if markup:
            _TreeBuilder(self).build(markup)

    @property
    def is_ready(self) -> bool:
        return self._ready

    def on_ready(self, callback: Callable[[], None]) -> None:
        if self._ready:
            callback()
        else:
            self._ready_callbacks.append(callback)

    def ready(self) -> None:
        """Fire ready callbacks once, in registration order."""
        if self._ready:
            return
        self._ready = True
        callbacks, self._ready_callbacks = self._ready_callbacks, []
        for callback in callbacks:
            callback()

    def to_html(self, reflect_values: bool = False) -> str:
        """
        Serialize the page. With reflect_values, current input values are
        written back into markup (value attribute / textarea text).
        """
        if not reflect_values:
            return self.inner_html
        return "".join(_serialize(child, reflect_values=True) for child in self.children)


# ---------------------------------------------------------------------------
# Parsing and serialization
# ---------------------------------------------------------------------------


class _TreeBuilder(HTMLParser):
    """Builds children under `root`. Unmatched end tags are ignored."""

    def __init__(self, root: Element) -> None:
        super().__init__(convert_charrefs=False)
        self._stack: list[Element] = [root]

    def build(self, markup: str) -> None:
        self.feed(markup)
        self.close()

    def _append(self, node: Element | str) -> None:
        parent = self._stack[-1]
        if isinstance(node, Element):
            node.parent = parent
        elif parent.children and isinstance(parent.children[-1], str):
            parent.children[-1] += node
            return
        parent.children.append(node)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = Element(tag, attrs)
        self._append(element)
        if tag not in VOID_ELEMENTS:
            self._stack.append(element)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._append(Element(tag, attrs))

    def handle_endtag(self, tag: str) -> None:
        for i in range(len(self._stack) - 1, 0, -1):
            if self._stack[i].tag == tag:
                del self._stack[i:]
                return

    def handle_data(self, data: str) -> None:
        self._append(data)

    def handle_entityref(self, name: str) -> None:
        self._append(f"&{name};")

    def handle_charref(self, name: str) -> None:
        self._append(f"&#{name};")

    def handle_comment(self, data: str) -> None:
        self._append(f"<!--{data}-->")

    def handle_decl(self, decl: str) -> None:
        self._append(f"<!{decl}>")

    def handle_pi(self, data: str) -> None:
        self._append(f"<?{data}>")


def _serialize(node: Element | str, reflect_values: bool = False) -> str:
    if isinstance(node, str):
        return node

    attrs = dict(node.attrs)
    if reflect_values and node.tag == "input" and node._value is not None:
        attrs["value"] = node._value

    parts = [f"<{node.tag}"]
    for name, value in attrs.items():
        if value is None:
            parts.append(f" {name}")
        else:
            parts.append(f' {name}="{_html_escape(value, quote=True)}"')
    parts.append(">")

    if node.tag in VOID_ELEMENTS:
        return "".join(parts)

    if reflect_values and node.tag == "textarea" and node._value is not None:
        parts.append(_html_escape(node._value, quote=False))
    else:
        parts.extend(_serialize(child, reflect_values) for child in node.children)
    parts.append(f"</{node.tag}>")
    return "".join(parts)
