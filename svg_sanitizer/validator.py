"""Size, shape and placeholder checks for certificate templates."""

from __future__ import annotations

import re

from svg_sanitizer.policy import WHITESPACE_RANGES, trim

# 100 KiB, the same limit CertNFT enforces on-chain
MAX_TEMPLATE_SIZE = 102400

# Tokens substituted per certificate; every one must survive sanitization
REQUIRED_PLACEHOLDERS = (
    "{{CERT_TYPE}}",
    "{{ITERATION}}",
    "{{TEAM_MEMBERS}}",
    "{{ACCOUNT}}",
    "{{STATUS}}",
    "{{TOKEN_ID}}",
)

# Optional XML declaration, then the root <svg> element
_SVG_DOCUMENT = re.compile(
    rf"(<\?xml[^>]*\?>[{WHITESPACE_RANGES}]*)?<svg[{WHITESPACE_RANGES}>]",
    re.IGNORECASE | re.ASCII,
)


def utf8_size(text: str) -> int:
    return len(text.encode("utf-8"))


def precheck(raw: str) -> list[str]:
    """Checks that run before any scanning. Stops at the first failure.

    Returns:
        List of error strings. Empty means the input may be scanned.
    """
    size = utf8_size(raw)
    if size > MAX_TEMPLATE_SIZE:
        return [f"SVG exceeds maximum size ({size} > {MAX_TEMPLATE_SIZE} bytes)"]

    if not _SVG_DOCUMENT.match(trim(raw)):
        return ["Input must be an SVG document starting with <svg>"]

    return []


def postcheck(sanitized: str) -> list[str]:
    """Checks on the sanitized output: placeholders first, then size."""
    errors = [
        f"Missing required placeholder: {placeholder}"
        for placeholder in REQUIRED_PLACEHOLDERS
        if placeholder not in sanitized
    ]

    size = utf8_size(sanitized)
    if size > MAX_TEMPLATE_SIZE:
        errors.append(
            f"Sanitized SVG exceeds maximum size ({size} > {MAX_TEMPLATE_SIZE} bytes)"
        )

    return errors


def validate(raw: str, sanitized: str) -> list[str]:
    """Run the precheck on `raw`, then the postcheck on `sanitized`.

    Args:
        raw: Template as submitted.
        sanitized: Scanner output for `raw`.

    Returns:
        Precheck errors if there are any, otherwise postcheck errors.
    """
    return precheck(raw) or postcheck(sanitized)
