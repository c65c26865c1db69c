"""Tests for the attribute tokenizer and per-attribute policy."""

from __future__ import annotations

from svg_sanitizer.attributes import (
    escape_attribute_value,
    is_safe_href,
    iter_attributes,
    neutralize_url_references,
    sanitize_attributes,
    sanitize_style,
)


def _pairs(raw):
    return [(a.name, a.value) for a in iter_attributes(raw)]


# --- Tokenizer ---


class TestIterAttributes:
    def test_quoting_styles(self):
        assert _pairs(' a="1" b=\'2\' c=3 d') == [
            ("a", "1"), ("b", "2"), ("c", "3"), ("d", ""),
        ]

    def test_whitespace_around_equals(self):
        assert _pairs(' x = "1"\n\ty=\t2') == [("x", "1"), ("y", "2")]

    def test_name_case_preserved_and_folded(self):
        attr = next(iter_attributes(' viewBox="0 0 1 1"'))
        assert attr.name == "viewBox"
        assert attr.lower == "viewbox"
        assert attr.value == "0 0 1 1"

    def test_namespaced_names(self):
        assert _pairs(' xlink:href="#a" xml:space="preserve"') == [
            ("xlink:href", "#a"), ("xml:space", "preserve"),
        ]

    def test_attribute_without_leading_whitespace_is_skipped(self):
        assert _pairs(' x="1"y="2"') == [("x", "1")]

    def test_unterminated_quote_reads_bare_value(self):
        assert _pairs(' title="abc def') == [("title", '"abc'), ("def", "")]

    def test_quoted_value_may_contain_the_other_quote(self):
        assert _pairs(""" a='say "hi"' b="it's" """) == [
            ("a", 'say "hi"'), ("b", "it's"),
        ]

    def test_garbage_is_skipped(self):
        assert _pairs(' "x" = 5 ok="1"') == [("ok", "1")]

    def test_empty_input(self):
        assert _pairs("") == []
        assert _pairs("   ") == []

    def test_pathological_input_completes(self):
        raw = ' a="' * 20000
        attrs = list(iter_attributes(raw))
        assert attrs[0].name == "a"

        assert len(list(iter_attributes(" a" * 30000))) == 30000


# --- href ---


class TestSafeHref:
    def test_fragment(self):
        assert is_safe_href("#logo")
        assert is_safe_href("  #logo ")

    def test_raster_data_uris(self):
        assert is_safe_href("data:image/png;base64,iVBORw0KGgo=")
        assert is_safe_href("data:image/jpeg;base64,/9j/")
        assert is_safe_href("data:image/jpg;base64,/9j/")
        assert is_safe_href("data:image/gif;base64,R0lG")
        assert is_safe_href("data:image/webp;base64,UklG")
        assert is_safe_href("DATA:IMAGE/PNG;BASE64,iVBOR")

    def test_unsafe_values(self):
        assert not is_safe_href("http://evil.example/x.svg#y")
        assert not is_safe_href("//evil.example/x.svg")
        assert not is_safe_href("javascript:alert(1)")
        assert not is_safe_href("data:image/svg+xml;base64,PHN2Zz4=")
        assert not is_safe_href("data:text/html,<script>alert(1)</script>")
        assert not is_safe_href("data:image/png,raw")
        assert not is_safe_href("logo.png")
        assert not is_safe_href("")


# --- url() ---


class TestNeutralizeUrlReferences:
    def test_local_reference_kept(self):
        assert neutralize_url_references("url(#grad)") == "url(#grad)"

    def test_remote_reference_replaced(self):
        assert neutralize_url_references("url(http://evil.example/p.svg#x)") == "none"

    def test_quoted_and_spaced_reference_is_normalized(self):
        assert neutralize_url_references("url( '#a' )") == "url(#a)"
        assert neutralize_url_references('url("#a")') == "url(#a)"

    def test_every_reference_rewritten(self):
        value = "URL(#a) url(x) foo"
        assert neutralize_url_references(value) == "url(#a) none foo"

    def test_surrounding_text_preserved(self):
        value = "fill:url(https://evil.example/a);stroke:url(#b)"
        assert neutralize_url_references(value) == "fill:none;stroke:url(#b)"

    def test_unterminated_reference_unchanged(self):
        assert neutralize_url_references("url(#a") == "url(#a"

    def test_mismatched_quotes_unchanged(self):
        assert neutralize_url_references("url('#a\")") == "url('#a\")"

    def test_no_reference(self):
        assert neutralize_url_references("#ff0000") == "#ff0000"
        assert neutralize_url_references("") == ""

    def test_pathological_input_completes(self):
        value = "url(" * 25000
        assert neutralize_url_references(value) == value

        value = "url(a" + "url(" * 25000 + ")"
        assert neutralize_url_references(value) == "none"


# --- style ---


class TestSanitizeStyle:
    def test_javascript_url(self):
        assert sanitize_style("fill:url(javascript:alert(1))") == "fill:none)"

    def test_expression(self):
        assert sanitize_style("width:expression(alert(1))") == "width:alert(1))"

    def test_schemes_stripped_case_insensitively(self):
        cleaned = sanitize_style("a:JavaScript:x;b:VBScript:y;behavior:url(#b)")
        assert "javascript" not in cleaned.lower()
        assert "vbscript" not in cleaned.lower()
        assert "behavior:" not in cleaned.lower()

    def test_data_text_url(self):
        assert sanitize_style("fill:url('data:text/html,x')") == "fill:none"

    def test_data_application_url(self):
        assert sanitize_style("fill:url(data:application/x-foo,1)") == "fill:none"

    def test_remote_url(self):
        assert sanitize_style("background:url(https://evil.example/t.png)") == "background:none"

    def test_safe_style_unchanged(self):
        style = "fill:url(#grad);stroke:#000;font-family:'Inter', sans-serif"
        assert sanitize_style(style) == style


# --- Escaping ---


class TestEscape:
    def test_escape(self):
        assert escape_attribute_value('a&b"c<d>e') == "a&amp;b&quot;c&lt;d&gt;e"

    def test_single_quote_untouched(self):
        assert escape_attribute_value("it's") == "it's"

    def test_ampersand_escaped_first(self):
        assert escape_attribute_value("&lt;") == "&amp;lt;"


# --- Policy ---


class TestSanitizeAttributes:
    def test_event_handler_stripped(self):
        attrs, issues = sanitize_attributes(' onclick="x()" fill="red"', "rect")
        assert attrs == ' fill="red"'
        assert issues == ['Event handler attribute "onclick" stripped']

    def test_event_handler_any_case(self):
        attrs, issues = sanitize_attributes(' ONLOAD="x()" OnMouseOver=y', "svg")
        assert attrs == ""
        assert issues == [
            'Event handler attribute "ONLOAD" stripped',
            'Event handler attribute "OnMouseOver" stripped',
        ]

    def test_unknown_attribute_stripped(self):
        attrs, issues = sanitize_attributes(' data-x="1" id="a"', "g")
        assert attrs == ' id="a"'
        assert issues == ['Attribute "data-x" stripped (not in allowlist)']

    def test_allowlist_is_case_insensitive(self):
        attrs, issues = sanitize_attributes(' viewBox="0 0 10 10" PreserveAspectRatio="none"', "svg")
        assert attrs == ' viewBox="0 0 10 10" PreserveAspectRatio="none"'
        assert issues == []

    def test_remote_href_stripped(self):
        attrs, issues = sanitize_attributes(' href="http://evil.example/x.svg#y"', "use")
        assert attrs == ""
        assert issues == ["Unsafe href value stripped from <use>"]

    def test_xlink_href_fragment_kept(self):
        attrs, issues = sanitize_attributes(' xlink:href="#a" x="1"', "use")
        assert attrs == ' xlink:href="#a" x="1"'
        assert issues == []

    def test_image_data_uri_kept(self):
        attrs, issues = sanitize_attributes(' href="data:image/png;base64,iVBOR"', "image")
        assert attrs == ' href="data:image/png;base64,iVBOR"'
        assert issues == []

    def test_style_neutralized(self):
        attrs, issues = sanitize_attributes(' style="fill:url(javascript:alert(1))"', "rect")
        assert attrs == ' style="fill:none)"'
        assert issues == ["Unsafe CSS expression stripped from style attribute"]

    def test_clean_style_no_issue(self):
        attrs, issues = sanitize_attributes(' style="fill:#fff"', "rect")
        assert attrs == ' style="fill:#fff"'
        assert issues == []

    def test_presentation_url_neutralized(self):
        attrs, issues = sanitize_attributes(' fill="url(http://evil.example/p.svg#x)"', "rect")
        assert attrs == ' fill="none"'
        assert issues == ['External url() reference stripped from "fill"']

    def test_presentation_local_url_kept(self):
        attrs, issues = sanitize_attributes(' fill="url(#grad)" mask="url(#m)"', "rect")
        assert attrs == ' fill="url(#grad)" mask="url(#m)"'
        assert issues == []

    def test_presentation_url_normalized_is_reported(self):
        attrs, issues = sanitize_attributes(" stroke=\"url( '#a' )\"", "path")
        assert attrs == ' stroke="url(#a)"'
        assert issues == ['External url() reference stripped from "stroke"']

    def test_values_escaped(self):
        attrs, _ = sanitize_attributes(""" id="a&b<c" class='x"y'""", "g")
        assert attrs == ' id="a&amp;b&lt;c" class="x&quot;y"'

    def test_bare_attribute_gets_empty_value(self):
        attrs, _ = sanitize_attributes(" visibility", "g")
        assert attrs == ' visibility=""'

    def test_order_and_duplicates_preserved(self):
        attrs, _ = sanitize_attributes(' y="2" x="1" y="3"', "rect")
        assert attrs == ' y="2" x="1" y="3"'

    def test_issue_order_follows_source(self):
        _, issues = sanitize_attributes(' foo="1" onclick="x" href="http://a"', "use")
        assert issues == [
            'Attribute "foo" stripped (not in allowlist)',
            'Event handler attribute "onclick" stripped',
            "Unsafe href value stripped from <use>",
        ]

    def test_blank(self):
        assert sanitize_attributes("", "g") == ("", [])
        assert sanitize_attributes("  \n", "g") == ("", [])


# --- Whitespace ---


class TestUnicodeWhitespace:
    def test_attributes_split_on_no_break_space(self):
        assert _pairs("\u00a0a=\u3000'1'\u2003b=2") == [("a", "1"), ("b", "2")]

    def test_href_trimmed(self):
        assert is_safe_href("\ufeff#logo\u00a0")

    def test_url_inner_trimmed(self):
        assert neutralize_url_references("url(\u00a0#g\u3000)") == "url(#g)"

    def test_style_pattern_spans_unicode_space(self):
        assert sanitize_style("width:expression\u00a0(1)") == "width:1)"
        assert sanitize_style("fill:url(\u2003javascript:x)") == "fill:none"

    def test_information_separator_does_not_split(self):
        assert _pairs(" a=1\x1cb=2") == [("a", "1\x1cb=2")]

    def test_blank_with_unicode_space(self):
        assert sanitize_attributes("\u00a0\ufeff", "g") == ("", [])
