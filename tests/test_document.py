"""Tests for trill.document — the page shell."""

from trill.document import render_document
from trill.head import HeadConfig, HeadContent


class TestRenderDocument:
    def test_shell(self) -> None:
        assert render_document("<div>hi</div>", '<link rel="preload">') == (
            '<html>\n<head>\n<link rel="preload">\n</head>\n<body><div>hi</div></body>\n</html>\n'
        )

    def test_none_body(self) -> None:
        assert "<body></body>" in render_document(None)

    def test_head_content_object(self) -> None:
        head = HeadContent(HeadConfig(base_library="/htmx.js"))
        page = render_document("x", head)
        assert '<head>\n<script src="/htmx.js"></script>\n</head>' in page

    def test_body_not_escaped(self) -> None:
        assert "<body><b>&</b></body>" in render_document("<b>&</b>")
