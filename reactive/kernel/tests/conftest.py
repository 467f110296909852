"""
Reactive kernel test configuration.

Shared page fixtures: an in-memory document wired to its own store,
scheduler and reconciler. Every test gets fresh instances.
"""

import pytest

from reactive.kernel.bindings import BindingReconciler
from reactive.kernel.dom import HtmlDocument
from reactive.kernel.scheduler import RenderScheduler
from reactive.kernel.store import Store


class Page:
    """A document plus the kernel pieces driving it."""

    def __init__(self, markup, state=None, **scheduler_kwargs):
        self.document = HtmlDocument(markup)
        self.store = Store(state or {})
        self.scheduler = RenderScheduler(self.document, self.store, **scheduler_kwargs)
        self.bindings = BindingReconciler(self.document, self.store, self.scheduler)

    def start(self):
        self.scheduler.scan()
        self.bindings.bind_all()
        return self

    def el(self, element_id):
        element = self.document.find("id", element_id)
        assert element is not None, f"no element with id={element_id!r}"
        return element


@pytest.fixture
def make_page():
    """Build a started Page from markup and initial state."""

    def _make(markup, state=None, **scheduler_kwargs):
        return Page(markup, state, **scheduler_kwargs).start()

    return _make
