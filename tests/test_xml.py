"""Tests for XML mode."""

from tagcraft import Environment, html, xml


class TestXmlMode:
    """XML rendering rules."""

    def test_empty_element_self_closes(self):
        @xml
        def doc():
            foo()

        assert doc.render() == "<foo/>"

    def test_empty_element_with_attributes(self):
        @xml
        def doc():
            link(href="/feed", rel="self")

        assert doc.render() == '<link href="/feed" rel="self"/>'

    def test_block_of_only_pass_self_closes(self):
        @xml
        def doc():
            with foo(id="1"):
                pass
            with bar():
                pass
                pass

        assert doc.render() == '<foo id="1"/><bar/>'

    def test_block_of_only_pass_in_html_keeps_close_tag(self):
        @html
        def page():
            with div():
                pass

        assert page.render() == "<div></div>"

    def test_nested_document(self):
        @xml
        def feed(entries):
            with rss(version="2.0"):
                with channel():
                    title_("News")
                    with item(_for=entries) as entry:
                        title_(entry)

        assert feed.render(["a", "b"]) == (
            '<rss version="2.0"><channel><title>News</title>'
            "<item><title>a</title></item><item><title>b</title></item>"
            "</channel></rss>"
        )

    def test_namespaced_tags(self):
        @xml
        def envelope(body):
            with soap__Envelope(xmlns__soap="http://schemas.xmlsoap.org/soap/envelope/"):
                soap__Body(body)

        assert envelope.render("x") == (
            '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">'
            "<soap:Body>x</soap:Body></soap:Envelope>"
        )

    def test_html_builtin_is_a_plain_element(self):
        @xml
        def doc():
            with html():
                body()

        assert doc.render() == "<html><body/></html>"

    def test_xml_escaping_uses_apos(self):
        @xml
        def doc(value):
            note(value)

        assert doc.render("it's") == "<note>it&apos;s</note>"

    def test_same_function_in_two_modes(self):
        env = Environment()

        def fragment():
            span()

        assert env.html(fragment).render() == "<span></span>"
        assert env.xml(fragment).render() == "<span/>"

    def test_lowercase_names_are_tags_even_when_bound(self):
        @xml
        def entry(name):
            author(name)

        @xml
        def feed():
            with entries():
                entry("Ada")

        assert feed.render() == "<entries><entry>Ada</entry></entries>"

    def test_const_tag_component(self):
        @xml
        def Entry(name):
            author(name)

        @xml
        def feed():
            with entries():
                Entry("Ada")

        assert feed.render() == "<entries><author>Ada</author></entries>"

    def test_html_mode_document_wrapper_differs(self):
        @html
        def page():
            with html():
                body()

        assert page.render() == "<!DOCTYPE html><html><body></body></html>"
