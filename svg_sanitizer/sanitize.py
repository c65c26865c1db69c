"""Public entry point: sanitize a raw SVG template and hash the result."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from svg_sanitizer.hashing import content_hash
from svg_sanitizer.policy import trim
from svg_sanitizer.scanner import scan_markup
from svg_sanitizer.validator import postcheck, precheck

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SanitizeResult:
    """Outcome of one sanitize_svg() call.

    `issues` lists what was removed or rewritten and never blocks a template.
    `errors` lists validation failures; any error means the template must be
    rejected and `hash` is empty.
    """

    sanitized_svg: str
    hash: str
    issues: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "sanitized_svg": self.sanitized_svg,
            "hash": self.hash,
            "issues": list(self.issues),
            "errors": list(self.errors),
            "valid": self.valid,
        }


def sanitize_svg(raw_svg: str) -> SanitizeResult:
    """Sanitize a user-submitted SVG certificate template.

    Pure function of its input: the same string always produces the same
    sanitized output and hash. Failures are reported in the result, never
    raised.

    Args:
        raw_svg: Template text as uploaded.

    Returns:
        SanitizeResult. When the size or shape precheck fails the sanitized
        output is empty; when a later check fails it is kept for inspection.
    """
    errors = precheck(raw_svg)
    if errors:
        logger.debug("Template rejected before scanning: %s", errors[0])
        return SanitizeResult(sanitized_svg="", hash="", errors=tuple(errors))

    sanitized, issues = scan_markup(trim(raw_svg))
    errors = postcheck(sanitized)

    digest = "" if errors else content_hash(sanitized.encode("utf-8"))

    logger.debug(
        "Sanitized template: %d bytes in, %d chars out, %d issues, %d errors",
        len(raw_svg.encode("utf-8")),
        len(sanitized),
        len(issues),
        len(errors),
    )

    return SanitizeResult(
        sanitized_svg=sanitized,
        hash=digest,
        issues=tuple(issues),
        errors=tuple(errors),
    )
