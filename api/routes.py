"""Flask API routes: the only entry point for certificate templates."""

from __future__ import annotations

import functools
import hmac
import logging
import os

from flask import Blueprint, Response, current_app, jsonify, request

from storage.ipfs import IPFSAPIError, IPFSClient, IPFSConfig
from storage.registry import get_cid_by_hash, list_templates, record_template, remove_template
from svg_sanitizer.hashing import content_hash, normalize_hash, verify_content_hash
from svg_sanitizer.policy import describe_policy
from svg_sanitizer.sanitize import sanitize_svg
from svg_sanitizer.validator import MAX_TEMPLATE_SIZE, REQUIRED_PLACEHOLDERS

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")

_SVG_CONTENT_TYPES = {"image/svg+xml", "text/plain", "application/xml", "text/xml"}


def require_api_key(f):
    """Decorator that checks X-API-Key header against TEMPLATE_API_KEY env var."""
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        api_key = os.environ.get("TEMPLATE_API_KEY")
        if not api_key:
            logger.error("TEMPLATE_API_KEY not configured")
            return jsonify({"error": "Server misconfiguration: API key not set"}), 500

        provided = request.headers.get("X-API-Key", "")
        if not provided:
            return jsonify({"error": "Missing X-API-Key header"}), 401

        if not hmac.compare_digest(provided, api_key):
            return jsonify({"error": "Invalid API key"}), 403

        return f(*args, **kwargs)
    return decorated


def _get_ipfs_client() -> IPFSClient:
    """Create an IPFS client from app config or env vars."""
    config = current_app.config.get("IPFS_CONFIG")
    if config and isinstance(config, IPFSConfig):
        return IPFSClient(config)
    return IPFSClient()


def _registry_path() -> str | None:
    return current_app.config.get("TEMPLATE_REGISTRY_PATH")


def _read_svg_body() -> tuple[str | None, str]:
    """Extract the raw SVG from the request.

    Accepts JSON {"svg": "..."} or a raw SVG/XML body.

    Returns:
        Tuple of (svg text or None, error message).
    """
    if request.mimetype in _SVG_CONTENT_TYPES:
        try:
            return request.get_data().decode("utf-8"), ""
        except UnicodeDecodeError:
            return None, "SVG body must be UTF-8"

    body = request.get_json(silent=True)
    if not body:
        return None, "Request body must be JSON or image/svg+xml"

    svg = body.get("svg") if isinstance(body, dict) else None
    if not isinstance(svg, str) or not svg:
        return None, "Missing 'svg' field"
    return svg, ""


# --- Health ---


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({"status": "ok", "service": "cert-template-sanitizer"})


# --- Policy ---


@api_bp.route("/policy", methods=["GET"])
def get_policy():
    """Describe what a template may contain, for template authors."""
    policy = describe_policy()
    policy["required_placeholders"] = list(REQUIRED_PLACEHOLDERS)
    policy["max_template_size"] = MAX_TEMPLATE_SIZE
    return jsonify(policy)


# --- Sanitize (dry run) ---


@api_bp.route("/templates/sanitize", methods=["POST"])
@require_api_key
def sanitize_template():
    """Sanitize a template WITHOUT publishing it.

    Returns the full sanitize result, including the sanitized SVG when
    validation failed, so authors can see what was stripped.
    """
    svg, error = _read_svg_body()
    if svg is None:
        return jsonify({"error": error}), 400

    result = sanitize_svg(svg)
    return jsonify(result.to_dict())


# --- Publish ---


@api_bp.route("/templates", methods=["POST"])
@require_api_key
def publish_template():
    """Sanitize a template, upload it to IPFS, and register its hash.

    The hash returned here is the value to record on-chain; the contract
    recomputes it from the bytes stored under the CID.
    """
    svg, error = _read_svg_body()
    if svg is None:
        return jsonify({"error": error}), 400

    result = sanitize_svg(svg)
    if not result.valid:
        logger.info("Rejected template: %s", "; ".join(result.errors))
        return jsonify({
            "error": "Template failed validation",
            "errors": list(result.errors),
            "issues": list(result.issues),
        }), 422

    registry_path = _registry_path()
    existing_cid = get_cid_by_hash(result.hash, registry_path)
    if existing_cid:
        return jsonify({
            "success": True,
            "existing": True,
            "cid": existing_cid,
            "hash": result.hash,
            "issues": list(result.issues),
        })

    data = result.sanitized_svg.encode("utf-8")
    try:
        cid = _get_ipfs_client().add_bytes(data, filename="template.svg")
    except IPFSAPIError as e:
        logger.error("IPFS upload failed for %s: %s", result.hash, e)
        return jsonify({
            "error": f"IPFS upload failed: {e}",
            "status_code": e.status_code,
        }), 502

    record_template(result.hash, cid, registry_path)

    return jsonify({
        "success": True,
        "existing": False,
        "cid": cid,
        "hash": result.hash,
        "size": len(data),
        "issues": list(result.issues),
    }), 201


# --- Registry ---


@api_bp.route("/templates", methods=["GET"])
def get_templates():
    """List all published templates."""
    return jsonify({"templates": list_templates(_registry_path())})


@api_bp.route("/templates/<template_hash>", methods=["GET"])
def get_template(template_hash: str):
    """Look up the CID for a sanitized template hash."""
    cid = get_cid_by_hash(template_hash, _registry_path())
    if not cid:
        return jsonify({"error": f"Template '{template_hash}' not found"}), 404
    return jsonify({"hash": normalize_hash(template_hash), "cid": cid})


# --- Verify ---


@api_bp.route("/templates/verify", methods=["POST"])
@require_api_key
def verify_template():
    """Check sanitized template bytes against a recorded hash.

    Request body:
    {
        "svg": "<svg ...>...</svg>",   (already sanitized)
        "hash": "0x..."
    }
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    missing = [key for key in ("svg", "hash") if not body.get(key)]
    if missing:
        return jsonify({"error": f"Missing required fields: {', '.join(missing)}"}), 400

    svg, expected = body["svg"], body["hash"]
    if not isinstance(svg, str) or not isinstance(expected, str):
        return jsonify({"error": "'svg' and 'hash' must be strings"}), 400

    return jsonify({
        "match": verify_content_hash(svg, expected),
        "hash": content_hash(svg.encode("utf-8")),
    })


# --- Stored content ---


@api_bp.route("/templates/<template_hash>/content", methods=["GET"])
def get_template_content(template_hash: str):
    """Fetch a published template from IPFS and check it against its hash."""
    cid = get_cid_by_hash(template_hash, _registry_path())
    if not cid:
        return jsonify({"error": f"Template '{template_hash}' not found"}), 404

    try:
        data = _get_ipfs_client().cat(cid)
    except IPFSAPIError as e:
        logger.error("IPFS fetch failed for %s: %s", cid, e)
        return jsonify({"error": f"IPFS fetch failed: {e}", "status_code": e.status_code}), 502

    if not verify_content_hash(data, template_hash):
        logger.error("Content under %s does not match %s", cid, template_hash)
        return jsonify({
            "error": "Stored content does not match the template hash",
            "cid": cid,
            "hash": content_hash(data),
        }), 502

    return Response(data, mimetype="image/svg+xml")


@api_bp.route("/templates/<template_hash>", methods=["DELETE"])
@require_api_key
def delete_template(template_hash: str):
    """Unpin a template and drop it from the registry."""
    registry_path = _registry_path()
    cid = get_cid_by_hash(template_hash, registry_path)
    if not cid:
        return jsonify({"error": f"Template '{template_hash}' not found"}), 404

    try:
        _get_ipfs_client().unpin(cid)
    except IPFSAPIError as e:
        logger.error("IPFS unpin failed for %s: %s", cid, e)
        return jsonify({"error": f"IPFS unpin failed: {e}", "status_code": e.status_code}), 502

    remove_template(template_hash, registry_path)
    return jsonify({"success": True, "hash": normalize_hash(template_hash), "cid": cid})


# --- IPFS node ---


@api_bp.route("/ipfs/status", methods=["GET"])
def ipfs_status():
    """Test the connection to the configured IPFS node."""
    result = _get_ipfs_client().test_connection()
    status_code = 200 if result["ok"] else 502
    return jsonify(result), status_code
