"""Single-pass markup scanner that applies the SVG element policy.

The scanner walks the raw template once, deciding at every '<' which
construct starts there (comment, CDATA, processing instruction, DOCTYPE,
closing tag, opening tag, or a stray '<') and whether to emit it, drop it, or
suppress everything up to the matching closing tag. It does not build a tree
and does not require well-formed XML.
"""

from __future__ import annotations

import string

from svg_sanitizer.attributes import sanitize_attributes
from svg_sanitizer.policy import WHITESPACE, ascii_lower, is_allowed_tag, is_stripped_tag

_NAME_START = frozenset(string.ascii_letters)
_NAME_CHARS = _NAME_START | frozenset(string.digits + ":.-")


class StripStack:
    """Names of the elements whose content is currently being suppressed.

    Each frame is ``[name, depth]``. Opening a same-named element inside the
    top frame increments its depth, so nested ``<foo><foo>..</foo></foo>``
    only ends suppression at the outer closing tag.
    """

    __slots__ = ("_frames",)

    def __init__(self) -> None:
        self._frames: list[list] = []

    def __bool__(self) -> bool:
        return bool(self._frames)

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def top(self) -> str | None:
        return self._frames[-1][0] if self._frames else None

    def push(self, name: str) -> None:
        if self._frames and self._frames[-1][0] == name:
            self._frames[-1][1] += 1
        else:
            self._frames.append([name, 1])

    def nest(self, name: str) -> None:
        """Record a same-named element opened inside the top frame."""
        if self._frames and self._frames[-1][0] == name:
            self._frames[-1][1] += 1

    def close(self, name: str) -> bool:
        """Close one level of the top frame if it is named `name`."""
        if not self._frames or self._frames[-1][0] != name:
            return False
        frame = self._frames[-1]
        frame[1] -= 1
        if frame[1] == 0:
            self._frames.pop()
        return True


class MarkupScanner:
    """Scan one template. Instances are single-use and not shared."""

    def __init__(self, raw: str):
        self.raw = raw
        self.pos = 0
        self.issues: list[str] = []
        self._out: list[str] = []
        self._stack = StripStack()
        # Cached result of the last search for '>'
        self._gt_from = -1
        self._gt_at = -1

    @property
    def suppressing(self) -> bool:
        return bool(self._stack)

    def scan(self) -> tuple[str, list[str]]:
        raw = self.raw
        end = len(raw)

        while self.pos < end:
            lt = raw.find("<", self.pos)
            if lt == -1:
                self._emit(raw[self.pos:])
                self.pos = end
                break

            self._emit(raw[self.pos:lt])
            self.pos = lt

            if raw.startswith("<!--", lt):
                if not self._comment():
                    break
            elif raw.startswith("<![CDATA[", lt):
                if not self._cdata():
                    break
            elif raw.startswith("<?", lt):
                self._processing_instruction()
            elif raw.startswith("<!", lt):
                self._doctype()
            elif raw.startswith("</", lt) and self._close_tag():
                continue
            elif self._open_tag():
                continue
            else:
                # A '<' that starts no construct is copied as text
                self._emit("<")
                self.pos = lt + 1

        return "".join(self._out), self.issues

    # --- Output ---

    def _emit(self, text: str) -> None:
        if text and not self._stack:
            self._out.append(text)

    # --- Markup declarations ---

    def _comment(self) -> bool:
        close = self.raw.find("-->", self.pos + 4)
        if close == -1:
            self.issues.append("Malformed HTML comment stripped")
            return False
        self.issues.append("HTML comment stripped")
        self.pos = close + 3
        return True

    def _cdata(self) -> bool:
        close = self.raw.find("]]>", self.pos + 9)
        if close == -1:
            self.issues.append("Malformed CDATA stripped")
            return False
        self._emit(self.raw[self.pos:close + 3])
        self.pos = close + 3
        return True

    def _processing_instruction(self) -> None:
        close = self.raw.find("?>", self.pos + 2)
        self.pos = len(self.raw) if close == -1 else close + 2
        self.issues.append("Processing instruction stripped")

    def _doctype(self) -> None:
        close = self._find_gt(self.pos + 2)
        self.pos = len(self.raw) if close == -1 else close + 1
        self.issues.append("DOCTYPE stripped")

    # --- Tags ---

    def _read_name(self, pos: int) -> int:
        """Return the index just past a tag name starting at `pos` (or `pos`)."""
        raw = self.raw
        end = len(raw)
        if pos >= end or raw[pos] not in _NAME_START:
            return pos
        pos += 1
        while pos < end and raw[pos] in _NAME_CHARS:
            pos += 1
        return pos

    def _close_tag(self) -> bool:
        raw = self.raw
        start = self.pos + 2
        name_end = self._read_name(start)
        if name_end == start:
            return False

        pos = name_end
        while pos < len(raw) and raw[pos] in WHITESPACE:
            pos += 1
        if pos >= len(raw) or raw[pos] != ">":
            return False

        name = ascii_lower(raw[start:name_end])
        if not self._stack.close(name) and not self._stack:
            if is_allowed_tag(name):
                self._out.append(raw[self.pos:pos + 1])
            elif not is_stripped_tag(name):
                self.issues.append(f"Unknown closing tag </{name}> stripped")

        self.pos = pos + 1
        return True

    def _open_tag(self) -> bool:
        raw = self.raw
        start = self.pos + 1
        name_end = self._read_name(start)
        if name_end == start or name_end >= len(raw):
            return False

        nxt = raw[name_end]
        if nxt == ">":
            tag_end = name_end
        elif nxt == "/":
            if not raw.startswith(">", name_end + 1):
                return False
            tag_end = name_end + 1
        elif nxt in WHITESPACE:
            tag_end = self._find_gt(name_end)
            if tag_end == -1:
                return False
        else:
            return False

        self_closing = raw[tag_end - 1] == "/" and tag_end > name_end
        attrs_end = tag_end - 1 if self_closing else tag_end
        raw_name = raw[start:name_end]
        name = ascii_lower(raw_name)
        self.pos = tag_end + 1

        if is_stripped_tag(name):
            self.issues.append(f"<{name}> element stripped")
            if not self_closing:
                self._stack.push(name)
            return True

        if self._stack:
            if not self_closing:
                self._stack.nest(name)
            return True

        if not is_allowed_tag(name):
            self.issues.append(f"Unknown element <{name}> stripped")
            if not self_closing:
                self._stack.push(name)
            return True

        attrs, attr_issues = sanitize_attributes(raw[name_end:attrs_end], name)
        self.issues.extend(attr_issues)
        self._out.append(f"<{raw_name}{attrs}{' /' if self_closing else ''}>")
        return True

    def _find_gt(self, pos: int) -> int:
        """Index of the first '>' at or after `pos`, or -1."""
        if self._gt_from != -1 and self._gt_from <= pos and (
            self._gt_at == -1 or pos <= self._gt_at
        ):
            return self._gt_at
        self._gt_from = pos
        self._gt_at = self.raw.find(">", pos)
        return self._gt_at


def scan_markup(raw: str) -> tuple[str, list[str]]:
    """Sanitize `raw` markup in one pass.

    Args:
        raw: Template text that already passed the size and shape checks.

    Returns:
        Tuple of (sanitized markup, issues in the order they were found).
    """
    return MarkupScanner(raw).scan()
