"""Document shell — wraps a component's fragment in a full HTML page."""

from typing import Any

from trill.head import HeadContent


def render_document(body: Any, head: HeadContent | str = "") -> str:
    """Wrap *body* in ``<html>``, with *head* as the ``<head>`` contents.

    ``None`` renders as an empty body.
    """
    inner = "" if body is None else str(body)
    return f"<html>\n<head>\n{head}\n</head>\n<body>{inner}</body>\n</html>\n"
