"""
Reactive Kernel — Binding Reconciler

Keeps input elements and state paths in sync, both ways:

  input event   → store.set_by_path(path, element.value) → render_all()
  after render  → element.value = text of store.get_by_path(path)

The refresh step writes only when the displayed text differs from the
state value. That comparison is what stops write → render → write
oscillation: the refresh runs after every pass, including the pass
triggered by the element's own event.
"""

from __future__ import annotations

import logging
import weakref
from typing import Any

from reactive.kernel.errors import BindingError
from reactive.kernel.resolver import to_text
from reactive.kernel.scheduler import RenderScheduler
from reactive.kernel.store import Store
from reactive.kernel.types import BIND_ATTR, DEFAULT_EVENT, EVENT_ATTR, BindingRecord

logger = logging.getLogger(__name__)


class BindingReconciler:
    """Two-way bindings for one document, one store, one scheduler."""

    def __init__(
        self,
        document: Any,
        store: Store,
        scheduler: RenderScheduler,
        *,
        bind_attr: str = BIND_ATTR,
        event_attr: str = EVENT_ATTR,
        default_event: str = DEFAULT_EVENT,
    ) -> None:
        self._document = document
        self._store = store
        self._scheduler = scheduler
        self._bind_attr = bind_attr
        self._event_attr = event_attr
        self._default_event = default_event
        self._records: weakref.WeakKeyDictionary[Any, BindingRecord] = weakref.WeakKeyDictionary()
        self._remove_listener = None

    # -- binding --

    def bind_all(self) -> list[BindingRecord]:
        """
        Bind every not-yet-bound element carrying the bind attribute.
        An element that cannot be bound is logged and skipped.
        """
        records = []
        for element in self._document.query_all(self._bind_attr):
            if element in self._records:
                continue
            try:
                records.append(self.bind(element))
            except BindingError as e:
                logger.warning("bindings: skipping %r: %s", element, e)
        return records

    def bind(self, element: Any, path: str | None = None, event: str | None = None) -> BindingRecord:
        """
        Bind one element. Path and event default to the element's attributes.
        Binding an already-bound element returns its existing record.
        """
        existing = self._records.get(element)
        if existing is not None:
            return existing

        path = path or element.get_attribute(self._bind_attr)
        if not path:
            raise BindingError(f"element {element!r} has no state path", attribute=self._bind_attr)
        event = event or element.get_attribute(self._event_attr) or self._default_event

        element_ref = weakref.ref(element)

        def on_change(_event: Any = None) -> None:
            target = element_ref()
            if target is not None:
                self._write(target, path)

        record = BindingRecord(element=element_ref, path=path, event=event, handler=on_change)
        self._records[element] = record

        self._refresh(element, record)
        element.add_event_listener(event, on_change)

        if self._remove_listener is None:
            self._remove_listener = self._scheduler.add_listener(self.refresh_all)

        logger.debug("bindings: bound %r to %r on %r", element, path, event)
        return record

    def unbind(self, element: Any) -> bool:
        """Detach an element's handler and forget it. False if it was not bound."""
        record = self._records.pop(element, None)
        if record is None:
            return False
        element.remove_event_listener(record.event, record.handler)
        return True

    def dispose(self) -> None:
        """Unbind everything and stop listening to render passes."""
        for element in list(self._records.keys()):
            self.unbind(element)
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None

    def is_bound(self, element: Any) -> bool:
        return element in self._records

    @property
    def bindings(self) -> list[BindingRecord]:
        return list(self._records.values())

    # -- sync --

    def refresh_all(self) -> None:
        """Pull state into every bound element. Runs after each render pass."""
        for element, record in list(self._records.items()):
            if not getattr(element, "is_connected", True):
                # Removed from the page by a re-render
                self.unbind(element)
                continue
            self._refresh(element, record)

    def _refresh(self, element: Any, record: BindingRecord) -> None:
        value = self._store.get_by_path(record.path)
        if value is None:
            return
        text = to_text(value)
        if element.value != text:
            element.value = text

    def _write(self, element: Any, path: str) -> None:
        self._store.set_by_path(path, element.value)
        self._scheduler.render_all()
