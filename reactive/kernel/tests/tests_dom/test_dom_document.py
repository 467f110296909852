"""
Reactive Host Document — In-Memory Page Tests

HtmlDocument parses a page once and serializes it back. Text keeps its
raw markup, so a page without form edits round-trips unchanged.
"""

import pytest

from reactive.kernel.dom import DomEvent, Element, HostDocument, HostElement, HtmlDocument
from reactive.kernel.errors import DocumentError


class TestRoundTrip:
    @pytest.mark.parametrize(
        "markup",
        [
            '<!DOCTYPE html><p class="a">x &amp; y</p><br><input value="v" disabled>',
            "<div><!-- note --><span>&#169; 2024</span></div>",
            '<ul><li data-template data-original="">${x}</li></ul>',
        ],
    )
    def test_serializes_back_unchanged(self, markup):
        assert HtmlDocument(markup).to_html() == markup

    def test_attribute_values_are_unescaped_then_escaped(self):
        document = HtmlDocument("<p title='say \"hi\" &amp; go'>x</p>")
        p = document.find("title", 'say "hi" & go')
        assert p is not None
        assert document.to_html() == '<p title="say &quot;hi&quot; &amp; go">x</p>'

    def test_valueless_attribute_reads_as_empty(self):
        document = HtmlDocument("<div data-template>a</div>")
        div = document.query_all("data-template")[0]
        assert div.get_attribute("data-template") == ""
        assert div.has_attribute("data-template")
        assert div.get_attribute("data-missing") is None

    def test_unmatched_end_tag_is_ignored(self):
        document = HtmlDocument("<p>a</span>b</p>")
        assert document.to_html() == "<p>ab</p>"


class TestInnerHtml:
    def test_setter_reparses(self):
        document = HtmlDocument('<div id="d">old</div>')
        div = document.find("id", "d")
        div.inner_html = '<b id="b">new</b> text'
        assert document.find("id", "b").text_content == "new"
        assert div.outer_html == '<div id="d"><b id="b">new</b> text</div>'

    def test_void_element_rejects_markup(self):
        document = HtmlDocument('<input id="i">')
        with pytest.raises(DocumentError):
            document.find("id", "i").inner_html = "x"

    def test_text_content_decodes_entities(self):
        document = HtmlDocument('<p id="p">a &lt; <b>b</b></p>')
        assert document.find("id", "p").text_content == "a < b"


class TestFormValues:
    def test_input_value_defaults_to_attribute(self):
        document = HtmlDocument('<input id="i" value="start">')
        assert document.find("id", "i").value == "start"

    def test_textarea_value_defaults_to_text(self):
        document = HtmlDocument('<textarea id="t">hello</textarea>')
        assert document.find("id", "t").value == "hello"

    def test_values_reflected_only_on_request(self):
        document = HtmlDocument('<input id="i" value="a"><textarea id="t">b</textarea>')
        document.find("id", "i").value = "new"
        document.find("id", "t").value = "x < y"

        assert document.to_html() == '<input id="i" value="a"><textarea id="t">b</textarea>'
        assert document.to_html(reflect_values=True) == (
            '<input id="i" value="new"><textarea id="t">x &lt; y</textarea>'
        )


class TestTraversal:
    def test_query_all_in_document_order(self):
        document = HtmlDocument('<div a="1" id="x"><span a id="y"></span></div><p id="n"></p><p a id="z"></p>')
        assert [el.get_attribute("id") for el in document.query_all("a")] == ["x", "y", "z"]

    def test_is_connected(self):
        document = HtmlDocument('<div id="d"><span id="s"></span></div>')
        span = document.find("id", "s")
        assert span.is_connected

        document.find("id", "d").inner_html = ""
        assert not span.is_connected
        assert not Element("div").is_connected


class TestReady:
    def test_callbacks_wait_for_ready(self):
        document = HtmlDocument("<p></p>")
        calls = []
        document.on_ready(lambda: calls.append("a"))
        document.on_ready(lambda: calls.append("b"))
        assert calls == []

        document.ready()
        document.ready()
        assert calls == ["a", "b"]
        assert document.is_ready

    def test_callback_after_ready_runs_immediately(self):
        document = HtmlDocument("<p></p>")
        document.ready()
        calls = []
        document.on_ready(lambda: calls.append(1))
        assert calls == [1]


class TestEvents:
    def test_dispatch_runs_handlers_in_order(self):
        element = Element("input")
        seen = []
        element.add_event_listener("input", lambda e: seen.append(("first", e.type, e.target)))
        element.add_event_listener("input", lambda e: seen.append(("second", e.type, e.target)))
        element.dispatch_event("input")
        assert seen == [("first", "input", element), ("second", "input", element)]

    def test_remove_listener(self):
        element = Element("input")
        seen = []

        def handler(event: DomEvent):
            seen.append(event)

        element.add_event_listener("change", handler)
        element.remove_event_listener("change", handler)
        element.dispatch_event("change")
        assert seen == []
        assert element.listener_count("change") == 0


class TestProtocols:
    def test_in_memory_page_satisfies_host_protocols(self):
        document = HtmlDocument('<input id="i">')
        assert isinstance(document, HostDocument)
        assert isinstance(document.find("id", "i"), HostElement)
