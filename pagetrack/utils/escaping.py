"""Sanitizing and escaping helpers for admin input and page output.

Values typed into the admin form are cleaned with :func:`sanitize_text_field`
before they are stored. Values written back into pages are escaped for the
context they land in: :func:`escape_attr` for HTML attributes and
:func:`escape_js` for single-quoted string literals inside inline scripts.
"""

import html
import re
import unicodedata


# Whole script/style elements, including their content
_SCRIPT_STYLE_RE = re.compile(
    r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)
_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

# Characters that could end the string literal, the script element or the line
_JS_ESCAPES = {
    "\\": "\\\\",
    "'": "\\u0027",
    '"': "\\u0022",
    "`": "\\u0060",
    "<": "\\u003C",
    ">": "\\u003E",
    "&": "\\u0026",
    "/": "\\/",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _is_control(char: str) -> bool:
    return unicodedata.category(char) in ("Cc", "Cs") and char not in "\t\n\r"


def sanitize_text_field(value: object) -> str:
    """Clean a single-line text field coming from a form.

    - Converts ``None`` to an empty string and other values to ``str``.
    - Drops script/style elements with their content, then every other tag.
    - Removes any remaining ``<``.
    - Replaces control characters and line breaks with spaces.
    - Collapses runs of whitespace into one space and trims both ends.
    """
    if value is None:
        return ""
    if isinstance(value, bytes):
        text = value.decode("utf-8", errors="ignore")
    else:
        text = str(value)

    if "<" in text:
        text = _SCRIPT_STYLE_RE.sub("", text)
        text = _TAG_RE.sub("", text)
        text = text.replace("<", "")

    text = "".join(" " if _is_control(char) else char for char in text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def escape_js(value: object) -> str:
    """Escape ``value`` for a quoted string literal in an inline ``<script>``.

    The result never contains a quote, a line break, ``<`` or ``/`` in raw
    form, so neither the literal nor the surrounding script element can be
    closed by it.
    """
    text = "" if value is None else str(value)
    out = []
    for char in text:
        escaped = _JS_ESCAPES.get(char)
        if escaped is None and unicodedata.category(char) == "Cc":
            escaped = f"\\u{ord(char):04X}"
        out.append(char if escaped is None else escaped)
    return "".join(out)


def escape_attr(value: object) -> str:
    """Escape ``value`` for a double-quoted HTML attribute."""
    return html.escape("" if value is None else str(value), quote=True)


def escape_html(value: object) -> str:
    """Escape ``value`` for an HTML text node."""
    return html.escape("" if value is None else str(value), quote=False)
