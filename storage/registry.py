"""Registry of published templates, keyed by sanitized content hash."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from svg_sanitizer.hashing import normalize_hash

logger = logging.getLogger(__name__)

_CONFIG_DIR = Path(__file__).parent.parent / "config"
_DEFAULT_REGISTRY = _CONFIG_DIR / "template_registry.yaml"


def _registry_file(registry_path: str | Path | None) -> Path:
    return Path(registry_path) if registry_path else _DEFAULT_REGISTRY


def _load(filepath: Path) -> dict[str, Any]:
    """Read the registry file, returning {} when it does not exist yet."""
    if not filepath.exists():
        return {}

    with filepath.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    templates = data.get("templates")
    return templates if isinstance(templates, dict) else {}


def _save(filepath: Path, templates: dict[str, Any]) -> None:
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with filepath.open("w", encoding="utf-8") as f:
        yaml.dump({"templates": templates}, f, default_flow_style=False, sort_keys=True)


def get_cid_by_hash(
    sanitized_hash: str,
    registry_path: str | Path | None = None,
) -> str | None:
    """Look up the CID a template was published under.

    Args:
        sanitized_hash: Content hash of the sanitized template (0x optional).
        registry_path: Override path to the registry YAML file.

    Returns:
        The CID, or None if the hash was never recorded.
    """
    entry = _load(_registry_file(registry_path)).get(normalize_hash(sanitized_hash))
    if not isinstance(entry, dict):
        return None
    return entry.get("cid")


def record_template(
    sanitized_hash: str,
    cid: str,
    registry_path: str | Path | None = None,
) -> bool:
    """Record a newly published template.

    Idempotent: an existing entry for the hash is left untouched.

    Returns:
        True if a new entry was written, False if the hash was already present.
    """
    filepath = _registry_file(registry_path)
    key = normalize_hash(sanitized_hash)
    templates = _load(filepath)

    if key in templates:
        logger.debug("Template %s already registered", key)
        return False

    templates[key] = {
        "cid": cid,
        "pinned_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }

    _save(filepath, templates)
    logger.info("Registered template %s -> %s", key, cid)
    return True


def remove_template(
    sanitized_hash: str,
    registry_path: str | Path | None = None,
) -> bool:
    """Remove a template from the registry.

    Returns:
        True if the hash was found and removed, False if not found.
    """
    filepath = _registry_file(registry_path)
    key = normalize_hash(sanitized_hash)
    templates = _load(filepath)

    if key not in templates:
        return False

    del templates[key]
    _save(filepath, templates)
    logger.info("Removed template %s", key)
    return True


def list_templates(registry_path: str | Path | None = None) -> list[dict[str, Any]]:
    """List registered templates sorted by hash."""
    entries = []
    for key, entry in sorted(_load(_registry_file(registry_path)).items()):
        if not isinstance(entry, dict) or "cid" not in entry:
            logger.warning("Skipping malformed registry entry %s", key)
            continue
        entries.append({
            "hash": key,
            "cid": entry["cid"],
            "pinned_at": entry.get("pinned_at", ""),
        })
    return entries
