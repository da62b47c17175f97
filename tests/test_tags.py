"""Tests for trill.tags — html() and css() template tags."""

from types import SimpleNamespace

import pytest

from trill.tags import css, escape, html, join


def _template(*parts: object) -> SimpleNamespace:
    """A stand-in for a PEP 750 template: alternating literals and values."""
    strings = [p for i, p in enumerate(parts) if i % 2 == 0]
    interpolations = [
        SimpleNamespace(value=p, conversion=None, format_spec="")
        for i, p in enumerate(parts)
        if i % 2 == 1
    ]
    return SimpleNamespace(strings=tuple(strings), interpolations=tuple(interpolations))


class TestEscape:
    def test_escapes_reserved_characters(self) -> None:
        assert escape("""<a href="x">'&'</a>""") == (
            "&lt;a href=&quot;x&quot;&gt;&#039;&amp;&#039;&lt;/a&gt;"
        )

    def test_no_double_escaping(self) -> None:
        assert escape("&lt;") == "&amp;lt;"

    def test_none_is_empty(self) -> None:
        assert escape(None) == ""

    def test_stringifies(self) -> None:
        assert escape(42) == "42"


class TestHtml:
    def test_plain_literal(self) -> None:
        assert html(["<div>hello <span>world</span></div>"]) == (
            "<div>hello <span>world</span></div>"
        )

    def test_single_string(self) -> None:
        assert html("<p>hi</p>") == "<p>hi</p>"

    def test_value_is_escaped(self) -> None:
        assert html(["<div>hello ", "</div>"], "<b>") == "<div>hello &lt;b&gt;</div>"

    def test_all_five_characters(self) -> None:
        tom_and_jerry = """<span>"tom" & 'jerry'</span>"""
        assert html(["<div>hello ", "</div>"], tom_and_jerry) == (
            "<div>hello &lt;span&gt;&quot;tom&quot; &amp; &#039;jerry&#039;&lt;/span&gt;</div>"
        )

    def test_literals_untouched(self) -> None:
        assert html(['<a title="', "\">&</a>"], "x") == '<a title="x">&</a>'

    def test_none_renders_empty(self) -> None:
        assert html(["<p>", "</p>"], None) == "<p></p>"

    def test_non_string_values(self) -> None:
        assert html(["<i>", "/", "</i>"], 3, 4.5) == "<i>3/4.5</i>"

    def test_dollar_sentinel_skips_escaping(self) -> None:
        inner = "<b>ok</b>"
        assert html(["<div>$", "</div>"], inner) == "<div><b>ok</b></div>"

    def test_dollar_sentinel_applies_to_one_value(self) -> None:
        result = html(["$", " ", ""], "<i>", "<i>")
        assert result == "<i> &lt;i&gt;"

    def test_nested_fragment(self) -> None:
        jerry = "'jerry'"
        tom_and_jerry = html(['<span>"tom" & ', "</span>"], jerry)
        assert html(["<div>hello $", "</div>"], tom_and_jerry) == (
            """<div>hello <span>"tom" & &#039;jerry&#039;</span></div>"""
        )

    def test_dollar_in_literal_text_also_opts_out(self) -> None:
        # A price literal ending in "$" is indistinguishable from the marker
        assert html(["Total: $", ""], "<5>") == "Total: <5>"

    def test_trailing_dollar_without_value_is_kept(self) -> None:
        assert html(["costs 5$"]) == "costs 5$"

    def test_sentinel_with_none(self) -> None:
        assert html(["<div>$", "</div>"], None) == "<div></div>"

    def test_missing_values_render_empty(self) -> None:
        assert html(["<a>", "</a>"]) == "<a></a>"


class TestCss:
    def test_plain(self) -> None:
        assert css(["html body { color: black }"]) == "html body { color: black }"

    def test_values_not_escaped(self) -> None:
        assert css(["a ", " b"], "<>&") == "a <>& b"

    def test_value_in_rule(self) -> None:
        assert css(["html body ", ""], "{ color: black }") == "html body { color: black }"

    def test_none_renders_empty(self) -> None:
        assert css(["a{", "}"], None) == "a{}"

    def test_dollar_is_literal(self) -> None:
        assert css(["$", ""], "x") == "$x"


class TestTemplateObjects:
    def test_html_escapes_interpolations(self) -> None:
        assert html(_template("<div>hello ", "<b>", "</div>")) == "<div>hello &lt;b&gt;</div>"

    def test_html_sentinel(self) -> None:
        assert html(_template("<div>$", "<b>ok</b>", "</div>")) == "<div><b>ok</b></div>"

    def test_css(self) -> None:
        assert css(_template("a ", "<>&", " b")) == "a <>& b"

    def test_conversion_and_format_spec(self) -> None:
        template = SimpleNamespace(
            strings=("<i>", " ", "</i>"),
            interpolations=(
                SimpleNamespace(value="x", conversion="r", format_spec=""),
                SimpleNamespace(value=3.14159, conversion=None, format_spec=".2f"),
            ),
        )
        assert html(template) == "<i>&#039;x&#039; 3.14</i>"

    def test_rejects_extra_values(self) -> None:
        with pytest.raises(TypeError):
            html(_template("a", 1, "b"), 2)


class TestJoin:
    def test_joins_fragments(self) -> None:
        rows = join(html(["<li>", "</li>"], item) for item in ("a", "<b>"))
        assert rows == "<li>a</li><li>&lt;b&gt;</li>"

    def test_skips_none(self) -> None:
        assert join(["<a>", None, "<b>"], "\n") == "<a>\n\n<b>"
