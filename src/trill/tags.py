"""HTML and CSS template tags.

Python has no tagged template literals, so a tag takes the literal
segments and the interpolated values separately, literal first::

    html(["<div>hello ", "</div>"], name)

On Python 3.14 the same tags accept ``t"..."`` template strings::

    html(t"<div>hello {name}</div>")

Interpolated values are HTML-escaped by ``html()``. A literal segment
ending in ``$`` opts the following value out of escaping, which is how
already-rendered fragments are nested::

    inner = html(t"<b>{name}</b>")
    html(t"<div>${inner}</div>")

The ``$`` check looks only at the character, so literal text that
happens to end in a dollar sign also disables escaping for the next value.

``css()`` never escapes; HTML entities would corrupt style text.
"""

from collections.abc import Iterable, Iterator, Sequence
from typing import Any

_HTML_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#039;",
    }
)

# Trailing marker on a literal segment: insert the next value unescaped
_RAW_SENTINEL = "$"

_CONVERSIONS = {"r": repr, "s": str, "a": ascii}


def escape(value: Any) -> str:
    """Stringify *value* and escape ``& < > " '`` in a single pass.

    ``None`` becomes the empty string.
    """
    if value is None:
        return ""
    return str(value).translate(_HTML_ESCAPES)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def html(strings: Any, *values: Any) -> str:
    """Join literal segments with escaped values.

    *strings* is a sequence of N+1 literal segments (or a single string,
    or a template object) and *values* the N interpolated values.
    """
    parts: list[str] = []
    for literal, value, has_value in _pairs(strings, values):
        if not has_value:
            parts.append(literal)
        elif literal.endswith(_RAW_SENTINEL):
            parts.append(literal[: -len(_RAW_SENTINEL)])
            parts.append(_stringify(value))
        else:
            parts.append(literal)
            parts.append(escape(value))
    return "".join(parts)


def css(strings: Any, *values: Any) -> str:
    """Join literal segments with values, without any escaping."""
    parts: list[str] = []
    for literal, value, has_value in _pairs(strings, values):
        parts.append(literal)
        if has_value:
            parts.append(_stringify(value))
    return "".join(parts)


def _pairs(strings: Any, values: Sequence[Any]) -> Iterator[tuple[str, Any, bool]]:
    """Yield ``(literal, value, has_value)`` for each literal segment.

    Values beyond the last literal segment are ignored.
    """
    if _is_template(strings):
        if values:
            msg = "Pass either a template object or literal segments with values, not both."
            raise TypeError(msg)
        strings, values = _split_template(strings)
    elif isinstance(strings, str):
        strings = (strings,)

    segments: Sequence[str] = tuple(strings)
    for i, literal in enumerate(segments):
        if i < len(segments) - 1:
            value = values[i] if i < len(values) else None
            yield literal, value, True
        else:
            yield literal, None, False


def _is_template(obj: Any) -> bool:
    """True for PEP 750 template objects (``t"..."`` literals)."""
    return hasattr(obj, "strings") and hasattr(obj, "interpolations")


def _split_template(template: Any) -> tuple[tuple[str, ...], list[Any]]:
    """Turn a template object into literal segments and converted values."""
    values = [_interpolated_value(item) for item in template.interpolations]
    return tuple(template.strings), values


def _interpolated_value(interpolation: Any) -> Any:
    value = interpolation.value
    conversion = getattr(interpolation, "conversion", None)
    format_spec = getattr(interpolation, "format_spec", "")
    if conversion:
        value = _CONVERSIONS[conversion](value)
    if format_spec:
        value = format(value, format_spec)
    return value


def join(fragments: Iterable[Any], separator: str = "") -> str:
    """Join already-rendered fragments, treating ``None`` as empty.

    Handy for nesting a list of rendered rows with ``$``::

        rows = join(html(t"<li>{item}</li>") for item in items)
        html(t"<ul>${rows}</ul>")
    """
    return separator.join(_stringify(fragment) for fragment in fragments)
