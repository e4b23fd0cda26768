"""Utility helpers for pagetrack."""

from .escaping import escape_attr, escape_html, escape_js, sanitize_text_field


__all__ = ["escape_attr", "escape_html", "escape_js", "sanitize_text_field"]
