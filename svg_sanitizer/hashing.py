"""Content hash shared with the certificate contract.

The contract re-derives ``keccak256(templateBytes)`` from the sanitized bytes
and compares it with the recorded value. Keccak-256 is the original Keccak
padding used by Ethereum, which is NOT the NIST SHA3-256 in hashlib; the two
give different digests for the same input.
"""

from __future__ import annotations

from Crypto.Hash import keccak


def keccak256(data: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=data).digest()


def content_hash(data: bytes) -> str:
    """Return the 0x-prefixed lowercase hex keccak-256 of `data`.

    This is the same string form ethers' ``keccak256`` returns and the
    contract stores as ``bytes32``.
    """
    return "0x" + keccak256(data).hex()


def normalize_hash(value: str) -> str:
    """Lowercase a hex hash and make sure it carries the 0x prefix."""
    value = value.strip().lower()
    return value if value.startswith("0x") else "0x" + value


def verify_content_hash(content: str | bytes, expected: str) -> bool:
    """Check content against a hash recorded elsewhere.

    Args:
        content: Sanitized template, as text (UTF-8 encoded here) or bytes.
        expected: Hex hash, with or without 0x, any case.

    Returns:
        True if the recomputed hash matches.
    """
    data = content.encode("utf-8") if isinstance(content, str) else content
    return content_hash(data) == normalize_hash(expected)
