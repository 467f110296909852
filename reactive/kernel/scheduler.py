"""
Reactive Kernel — Render Scheduler

Finds templated elements, archives each pristine template exactly once,
and re-renders every templated element from it on demand. After each pass
the registered listeners run, in registration order, so they always see
post-render state.

No change detection: render_all touches every templated element on every
call. render_affected is an opt-in narrowing by referenced state paths.

A render requested while a pass is running is coalesced: the running pass
does one more full pass when it finishes, up to max_passes in a row.
"""

from __future__ import annotations

import logging
import weakref
from collections.abc import Iterable
from typing import Any

from reactive.kernel.parser import referenced_paths
from reactive.kernel.renderer import render
from reactive.kernel.store import Store
from reactive.kernel.types import (
    ORIGINAL_ATTR,
    TEMPLATE_ATTR,
    Listener,
    RenderOptions,
    TemplateRecord,
    paths_overlap,
)

logger = logging.getLogger(__name__)


class RenderScheduler:
    """Re-renders templated elements of one document against one store."""

    def __init__(
        self,
        document: Any,
        store: Store,
        *,
        options: RenderOptions | None = None,
        template_attr: str = TEMPLATE_ATTR,
        original_attr: str = ORIGINAL_ATTR,
        max_passes: int = 8,
    ) -> None:
        self._document = document
        self._store = store
        self._options = options or RenderOptions()
        self._template_attr = template_attr
        self._original_attr = original_attr
        self._max_passes = max(1, max_passes)
        # element → pristine markup; detached elements drop out on their own
        self._originals: weakref.WeakKeyDictionary[Any, str] = weakref.WeakKeyDictionary()
        self._listeners: list[Listener] = []
        self._rendering = False
        self._pending = False
        self.pass_count = 0

    # -- templates --

    def scan(self) -> None:
        """Archive every templated element's pristine markup, then render it."""
        for element in self._document.query_all(self._template_attr):
            self.archive(element)
            self.render_element(element)

    def archive(self, element: Any) -> TemplateRecord:
        """Capture the pristine template once. Later calls never recapture it."""
        original = self._originals.get(element)
        if original is None:
            if not element.has_attribute(self._original_attr):
                element.set_attribute(self._original_attr, element.inner_html)
            original = element.get_attribute(self._original_attr) or ""
            self._originals[element] = original
        return TemplateRecord(element=element, original=original)

    def template_for(self, element: Any) -> str | None:
        """The pristine template for an element, or None if never archived."""
        original = self._originals.get(element)
        if original is not None:
            return original
        original = element.get_attribute(self._original_attr)
        if not original:
            return None
        return self.archive(element).original

    def render_element(self, element: Any) -> bool:
        """Render one element from its pristine template. False if skipped."""
        template = self.template_for(element)
        if not template:
            logger.debug("scheduler: no pristine template on %r, skipping", element)
            return False
        element.inner_html = render(template, self._store.state, self._options)
        return True

    # -- passes --

    def render_all(self) -> None:
        """Render every templated element in document order, then notify listeners."""
        self._run(paths=None)

    def render_affected(self, paths: Iterable[str]) -> None:
        """
        Render only elements whose templates read one of `paths`
        (or a parent/child of one), then notify listeners.
        """
        self._run(paths=list(paths))

    def _run(self, paths: list[str] | None) -> None:
        if self._rendering:
            # Coalesce into one more full pass after the current one
            self._pending = True
            return

        self._rendering = True
        try:
            passes = 0
            while True:
                passes += 1
                self._pending = False
                self._pass(paths)
                if not self._pending:
                    break
                if passes >= self._max_passes:
                    logger.warning(
                        "scheduler: render requested during %d consecutive passes, stopping",
                        passes,
                    )
                    self._pending = False
                    break
                paths = None
        finally:
            self._rendering = False

    def _pass(self, paths: list[str] | None) -> None:
        self.pass_count += 1
        for element in self._document.query_all(self._template_attr):
            if paths is not None and not self._affected(element, paths):
                continue
            self.render_element(element)
        self._notify()

    def _affected(self, element: Any, paths: list[str]) -> bool:
        template = self.template_for(element)
        if not template:
            return False
        return any(paths_overlap(ref, changed) for ref in referenced_paths(template) for changed in paths)

    @property
    def template_attr(self) -> str:
        return self._template_attr

    @property
    def is_rendering(self) -> bool:
        return self._rendering

    # -- listeners --

    def add_listener(self, listener: Listener) -> Listener:
        """
        Register a zero-argument callback run after every pass.
        Returns a callable that removes it again.
        """
        self._listeners.append(listener)

        def remove() -> None:
            self.remove_listener(listener)

        return remove

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear_listeners(self) -> None:
        self._listeners.clear()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("scheduler: listener %r failed", listener)
