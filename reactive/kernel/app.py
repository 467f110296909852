"""
Reactive Kernel — Entry Points

Sits between the pieces (store, scheduler, reconciler) and the page.
Coordinates the lifecycle of one reactive document:

  create_store(initial)  → live state; scan + bind when the document is ready
  update_state(patch)    → deep merge, then re-render
  render_all()           → re-render after direct mutation of the state
  dispose()              → drop bindings and listeners

Each Reactive owns its own store and listener registry, so several can run
side by side (one per document, or one per test).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from reactive.config import Settings
from reactive.kernel.bindings import BindingReconciler
from reactive.kernel.scheduler import RenderScheduler
from reactive.kernel.store import Store, patch_paths
from reactive.kernel.types import Listener, RenderOptions

logger = logging.getLogger(__name__)


class Reactive:
    """One store, one document, kept in sync."""

    def __init__(self, document: Any, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        s = self._settings

        self.document = document
        self.store = Store()
        self.scheduler = RenderScheduler(
            document,
            self.store,
            options=RenderOptions(escape_values=s.ESCAPE_VALUES),
            template_attr=s.TEMPLATE_ATTR,
            original_attr=s.ORIGINAL_ATTR,
            max_passes=s.MAX_RENDER_PASSES,
        )
        self.bindings = BindingReconciler(
            document,
            self.store,
            self.scheduler,
            bind_attr=s.BIND_ATTR,
            event_attr=s.EVENT_ATTR,
            default_event=s.DEFAULT_EVENT,
        )
        self.track_dependencies = s.TRACK_DEPENDENCIES
        self._ready_hooked = False
        self._started = False

    @property
    def state(self) -> dict[str, Any]:
        """The live state tree."""
        return self.store.state

    # -- lifecycle --

    def create_store(self, initial_data: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """
        Initialize state from a deep copy of `initial_data` and return it.
        The first call also schedules the initial scan and bind for when
        the document is ready. Later calls reset state only.
        """
        state = self.store.initialize(initial_data)
        if not self._ready_hooked:
            self._ready_hooked = True
            self.document.on_ready(self._start)
        return state

    def _start(self) -> None:
        if self._started:
            return
        self._started = True
        self.scheduler.scan()
        bound = self.bindings.bind_all()
        logger.debug("reactive: document ready, %d input(s) bound", len(bound))

    def dispose(self) -> None:
        """Unbind all inputs and drop every registered listener."""
        self.bindings.dispose()
        self.scheduler.clear_listeners()

    # -- mutation --

    def update_state(self, patch: Mapping[str, Any]) -> None:
        """Deep-merge `patch` into state, then re-render."""
        self.store.merge(patch)
        if self.track_dependencies:
            self.scheduler.render_affected(patch_paths(patch))
        else:
            self.scheduler.render_all()

    def render_all(self) -> None:
        """Re-render every templated element and notify listeners."""
        self.scheduler.render_all()

    def add_listener(self, listener: Listener) -> Listener:
        """Run `listener` after every render pass. Returns its remover."""
        return self.scheduler.add_listener(listener)


def create_store(
    initial_data: Mapping[str, Any] | None,
    document: Any,
    settings: Settings | None = None,
) -> Reactive:
    """Build a Reactive for `document` and initialize its state."""
    reactive = Reactive(document, settings=settings)
    reactive.create_store(initial_data)
    return reactive
