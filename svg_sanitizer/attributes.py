"""Tokenize and sanitize the attribute text of a single SVG start tag."""

from __future__ import annotations

import re
import string
from collections.abc import Iterator
from typing import NamedTuple

from svg_sanitizer.policy import (
    HREF_ATTRIBUTES,
    URL_ATTRIBUTES,
    WHITESPACE,
    WHITESPACE_RANGES,
    ascii_lower,
    is_allowed_attribute,
    is_event_handler,
    trim,
)

_NAME_START = frozenset(string.ascii_letters + "_:")
_NAME_CHARS = _NAME_START | frozenset(string.digits + ".-")
_QUOTES = "\"'"

# Characters that end the inner part of a url(...) reference
_URL_STOP = re.compile(r"[)'\"]")

# Raster images embedded as base64 are the only non-fragment href allowed
_SAFE_DATA_URI = re.compile(
    r"data:image/(?:png|jpeg|jpg|gif|webp);base64,",
    re.IGNORECASE | re.ASCII,
)

_WS = f"[{WHITESPACE_RANGES}]"

# Applied in order to style values. The url(...) prefixes only drop the
# scheme; the url() pass that follows replaces what is left with "none".
_STYLE_SUBSTITUTIONS = tuple(
    (re.compile(pattern, re.IGNORECASE | re.ASCII), replacement)
    for pattern, replacement in (
        (rf"expression{_WS}*\(", ""),
        (rf"javascript{_WS}*:", ""),
        (rf"vbscript{_WS}*:", ""),
        (rf"behavior{_WS}*:", ""),
        (rf"url{_WS}*\({_WS}*(['\"]?)javascript:", r"url(\1"),
        (rf"url{_WS}*\({_WS}*(['\"]?)data:text/", r"url(\1"),
        (rf"url{_WS}*\({_WS}*(['\"]?)data:application/", r"url(\1"),
    )
)


class Attribute(NamedTuple):
    """One name/value pair as written in the source markup."""

    name: str
    lower: str
    value: str


def iter_attributes(raw_attrs: str) -> Iterator[Attribute]:
    """Yield attributes from the text between a tag name and its closing '>'.

    Recognizes ``name``, ``name=bare``, ``name="value"`` and ``name='value'``.
    Every attribute must be preceded by whitespace; anything else that cannot
    start an attribute is skipped. A quoted value missing its closing quote is
    read as a bare value, quote included.
    """
    pos = 0
    end = len(raw_attrs)

    while pos < end:
        if raw_attrs[pos] not in WHITESPACE:
            pos += 1
            continue

        while pos < end and raw_attrs[pos] in WHITESPACE:
            pos += 1
        if pos >= end or raw_attrs[pos] not in _NAME_START:
            continue

        start = pos
        pos += 1
        while pos < end and raw_attrs[pos] in _NAME_CHARS:
            pos += 1
        name = raw_attrs[start:pos]

        value, pos = _read_value(raw_attrs, pos)
        yield Attribute(name, ascii_lower(name), value)


def _read_value(raw_attrs: str, pos: int) -> tuple[str, int]:
    """Read an optional ``= value`` part starting right after a name."""
    end = len(raw_attrs)
    after_name = pos

    while pos < end and raw_attrs[pos] in WHITESPACE:
        pos += 1
    if pos >= end or raw_attrs[pos] != "=":
        return "", after_name

    pos += 1
    while pos < end and raw_attrs[pos] in WHITESPACE:
        pos += 1

    if pos < end and raw_attrs[pos] in _QUOTES:
        close = raw_attrs.find(raw_attrs[pos], pos + 1)
        if close != -1:
            return raw_attrs[pos + 1:close], close + 1

    start = pos
    while pos < end and raw_attrs[pos] not in WHITESPACE and raw_attrs[pos] != ">":
        pos += 1
    return raw_attrs[start:pos], pos


def is_safe_href(value: str) -> bool:
    """True for local fragment references and base64 raster data URIs."""
    stripped = trim(value)
    if stripped.startswith("#"):
        return True
    return _SAFE_DATA_URI.match(stripped) is not None


def neutralize_url_references(value: str) -> str:
    """Rewrite every url(...) reference in a presentation value.

    ``url(#id)`` survives (with the inner reference trimmed); any other
    target, remote or data, is replaced by the keyword ``none``.
    """
    folded = ascii_lower(value)
    end = len(value)
    parts: list[str] = []
    copied = 0

    # Index of the next ')', quote or -1, reused while the scan stays behind it
    stop_at = -2

    candidate = folded.find("url")
    while candidate != -1:
        pos = candidate + 3
        while pos < end and value[pos] in WHITESPACE:
            pos += 1
        if pos >= end or value[pos] != "(":
            candidate = folded.find("url", candidate + 1)
            continue

        pos += 1
        while pos < end and value[pos] in WHITESPACE:
            pos += 1

        quote = ""
        if pos < end and value[pos] in _QUOTES:
            quote = value[pos]
            pos += 1

        if stop_at != -1 and stop_at < pos:
            found = _URL_STOP.search(value, pos)
            stop_at = found.start() if found else -1
        if stop_at == -1:
            break

        inner = value[pos:stop_at]
        pos = stop_at
        if quote:
            if value[pos] != quote:
                candidate = folded.find("url", candidate + 1)
                continue
            pos += 1
            while pos < end and value[pos] in WHITESPACE:
                pos += 1
        if pos >= end or value[pos] != ")":
            candidate = folded.find("url", candidate + 1)
            continue

        target = trim(inner)
        parts.append(value[copied:candidate])
        parts.append(f"url({target})" if target.startswith("#") else "none")
        copied = pos + 1
        candidate = folded.find("url", copied)

    parts.append(value[copied:])
    return "".join(parts)


def sanitize_style(value: str) -> str:
    """Strip script-capable CSS constructs and neutralize url() targets."""
    cleaned = value
    for pattern, replacement in _STYLE_SUBSTITUTIONS:
        cleaned = pattern.sub(replacement, cleaned)
    return neutralize_url_references(cleaned)


def escape_attribute_value(value: str) -> str:
    """Escape a value for use inside a double-quoted XML attribute."""
    return (
        value.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


def sanitize_attributes(raw_attrs: str, tag_name: str) -> tuple[str, list[str]]:
    """Apply the attribute policy to the raw attribute text of one tag.

    Args:
        raw_attrs: Everything between the tag name and the closing '>' (or
            '/>'), including the leading whitespace.
        tag_name: Lowercase tag name, used in issue messages.

    Returns:
        Tuple of (sanitized attribute text, issues). The text is either empty
        or a sequence of `` name="value"`` items in source order.
    """
    issues: list[str] = []
    if not trim(raw_attrs):
        return "", issues

    parts: list[str] = []
    for attr in iter_attributes(raw_attrs):
        if is_event_handler(attr.lower):
            issues.append(f'Event handler attribute "{attr.name}" stripped')
            continue

        if not is_allowed_attribute(attr.lower):
            issues.append(f'Attribute "{attr.name}" stripped (not in allowlist)')
            continue

        value = attr.value

        if attr.lower in HREF_ATTRIBUTES and not is_safe_href(value):
            issues.append(f"Unsafe href value stripped from <{tag_name}>")
            continue

        if attr.lower == "style":
            cleaned = sanitize_style(value)
            if cleaned != value:
                issues.append("Unsafe CSS expression stripped from style attribute")
            value = cleaned
        elif attr.lower in URL_ATTRIBUTES:
            cleaned = neutralize_url_references(value)
            if cleaned != value:
                issues.append(f'External url() reference stripped from "{attr.name}"')
            value = cleaned

        parts.append(f' {attr.name}="{escape_attribute_value(value)}"')

    return "".join(parts), issues
