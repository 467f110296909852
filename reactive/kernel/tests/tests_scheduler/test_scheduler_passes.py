"""
Reactive Scheduler — Render Pass Tests

From the scheduler contract:
  - pristine templates are archived exactly once
  - render_all re-renders every templated element in document order,
    then runs listeners in registration order
  - elements without a pristine template are skipped
  - a render requested during a pass is coalesced into one more pass
"""

import logging

from reactive.kernel.dom import HtmlDocument
from reactive.kernel.scheduler import RenderScheduler
from reactive.kernel.store import Store

PAGE = (
    '<h1 id="title" data-template>Hello ${user.name}</h1>'
    '<p id="count" data-template>${count} item(s)</p>'
    '<p id="static">${user.name}</p>'
)


def make(markup=PAGE, state=None, **kwargs):
    document = HtmlDocument(markup)
    store = Store(state if state is not None else {"user": {"name": "Jane"}, "count": 2})
    return document, store, RenderScheduler(document, store, **kwargs)


# ============================================================================
# Archiving
# ============================================================================


class TestScan:
    def test_scan_archives_and_renders(self):
        document, _, scheduler = make()
        scheduler.scan()
        title = document.find("id", "title")
        assert title.inner_html == "Hello Jane"
        assert title.get_attribute("data-original") == "Hello ${user.name}"

    def test_untemplated_elements_untouched(self):
        document, _, scheduler = make()
        scheduler.scan()
        assert document.find("id", "static").inner_html == "${user.name}"

    def test_pristine_template_never_recaptured(self):
        document, store, scheduler = make()
        scheduler.scan()
        title = document.find("id", "title")

        title.inner_html = "tampered"
        scheduler.scan()
        store.merge({"user": {"name": "Bob"}})
        scheduler.render_all()

        assert title.get_attribute("data-original") == "Hello ${user.name}"
        assert title.inner_html == "Hello Bob"

    def test_existing_original_attribute_is_kept(self):
        markup = '<div id="d" data-template data-original="Hi ${name}">stale</div>'
        document, _, scheduler = make(markup, {"name": "Ann"})
        scheduler.scan()
        assert document.find("id", "d").inner_html == "Hi Ann"

    def test_archive_records_element_and_template(self):
        document, _, scheduler = make()
        title = document.find("id", "title")
        record = scheduler.archive(title)
        assert record.element is title
        assert record.original == "Hello ${user.name}"


# ============================================================================
# render_all
# ============================================================================


class TestRenderAll:
    def test_rerenders_from_pristine_after_mutation(self):
        document, store, scheduler = make()
        scheduler.scan()
        store.state["count"] = 5
        scheduler.render_all()
        assert document.find("id", "count").inner_html == "5 item(s)"

    def test_repeated_renders_are_stable(self):
        document, _, scheduler = make()
        scheduler.scan()
        first = document.to_html()
        scheduler.render_all()
        scheduler.render_all()
        assert document.to_html() == first

    def test_element_without_template_is_skipped(self):
        """Never archived, no data-original: left exactly as it is."""
        document, _, scheduler = make('<div id="d" data-template>raw ${x}</div>', {"x": 1})
        scheduler.render_all()
        assert document.find("id", "d").inner_html == "raw ${x}"

    def test_empty_template_is_skipped(self):
        document, _, scheduler = make('<div id="d" data-template></div>', {})
        scheduler.scan()
        scheduler.render_all()
        assert document.find("id", "d").inner_html == ""

    def test_listeners_run_after_all_elements(self):
        document, store, scheduler = make()
        scheduler.scan()
        seen = []
        scheduler.add_listener(
            lambda: seen.append((document.find("id", "title").inner_html, document.find("id", "count").inner_html))
        )
        store.merge({"user": {"name": "Bob"}, "count": 9})
        scheduler.render_all()
        assert seen == [("Hello Bob", "9 item(s)")]

    def test_listeners_run_in_registration_order(self):
        _, _, scheduler = make()
        calls = []
        scheduler.add_listener(lambda: calls.append("first"))
        scheduler.add_listener(lambda: calls.append("second"))
        scheduler.add_listener(lambda: calls.append("third"))
        scheduler.render_all()
        assert calls == ["first", "second", "third"]

    def test_listener_can_be_removed(self):
        _, _, scheduler = make()
        calls = []
        remove = scheduler.add_listener(lambda: calls.append(1))
        scheduler.render_all()
        remove()
        scheduler.render_all()
        assert calls == [1]
        assert scheduler.listener_count == 0

    def test_failing_listener_does_not_stop_others(self, caplog):
        _, _, scheduler = make()
        calls = []

        def broken():
            raise ValueError("nope")

        scheduler.add_listener(broken)
        scheduler.add_listener(lambda: calls.append("ran"))
        with caplog.at_level(logging.ERROR, logger="reactive.kernel.scheduler"):
            scheduler.render_all()
        assert calls == ["ran"]
        assert "listener" in caplog.text


# ============================================================================
# Re-entrancy
# ============================================================================


class TestReentrancy:
    def test_nested_request_is_coalesced(self):
        _, _, scheduler = make()
        calls = []

        def listener():
            calls.append(scheduler.is_rendering)
            if len(calls) == 1:
                scheduler.render_all()

        scheduler.add_listener(listener)
        scheduler.render_all()

        assert scheduler.pass_count == 2
        assert calls == [True, True]
        assert scheduler.is_rendering is False

    def test_nested_requests_in_one_pass_coalesce_to_one(self):
        _, _, scheduler = make()
        calls = []

        def listener():
            calls.append(1)
            if len(calls) == 1:
                scheduler.render_all()
                scheduler.render_all()
                scheduler.render_all()

        scheduler.add_listener(listener)
        scheduler.render_all()
        assert scheduler.pass_count == 2

    def test_endless_requests_are_capped(self, caplog):
        _, _, scheduler = make(max_passes=3)
        scheduler.add_listener(scheduler.render_all)
        with caplog.at_level(logging.WARNING, logger="reactive.kernel.scheduler"):
            scheduler.render_all()
        assert scheduler.pass_count == 3
        assert "consecutive passes" in caplog.text


# ============================================================================
# render_affected (opt-in dependency tracking)
# ============================================================================


class TestRenderAffected:
    def test_only_elements_reading_changed_paths(self):
        document, store, scheduler = make()
        scheduler.scan()
        store.state["user"]["name"] = "Bob"
        store.state["count"] = 7

        scheduler.render_affected(["user.name"])

        assert document.find("id", "title").inner_html == "Hello Bob"
        assert document.find("id", "count").inner_html == "2 item(s)"

    def test_parent_path_change_counts(self):
        document, store, scheduler = make()
        scheduler.scan()
        store.state["user"] = {"name": "Zed"}
        scheduler.render_affected(["user"])
        assert document.find("id", "title").inner_html == "Hello Zed"

    def test_listeners_still_run(self):
        _, _, scheduler = make()
        calls = []
        scheduler.add_listener(lambda: calls.append(1))
        scheduler.render_affected(["nothing.here"])
        assert calls == [1]
