"""IPFS HTTP RPC client for publishing sanitized templates."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger(__name__)

# Default timeout for RPC requests (seconds)
_TIMEOUT = 30


@dataclass
class IPFSConfig:
    """Connection settings for a Kubo-compatible IPFS node."""

    api_url: str = "http://localhost:5001"
    fallback_api_url: str | None = None
    timeout: float = _TIMEOUT
    pin: bool = True

    @property
    def rpc_url(self) -> str:
        """Base RPC URL (e.g. http://localhost:5001/api/v0)."""
        return f"{self.api_url.rstrip('/')}/api/v0"

    @classmethod
    def from_env(cls) -> IPFSConfig:
        """Load configuration from environment variables.

        Reads: IPFS_API_URL, IPFS_FALLBACK_API_URL, IPFS_TIMEOUT, IPFS_PIN
        """
        return cls(
            api_url=os.environ.get("IPFS_API_URL", "http://localhost:5001"),
            fallback_api_url=os.environ.get("IPFS_FALLBACK_API_URL") or None,
            timeout=float(os.environ.get("IPFS_TIMEOUT", str(_TIMEOUT))),
            pin=os.environ.get("IPFS_PIN", "true").lower() in ("true", "1", "yes"),
        )


class IPFSClient:
    """Uploads and fetches template bytes through the IPFS RPC API.

    Every Kubo RPC endpoint is a POST. Reads fall back to a second node when
    one is configured; writes only go to the primary node.
    """

    def __init__(self, config: IPFSConfig | None = None):
        self.config = config or IPFSConfig.from_env()
        self._session = requests.Session()

    def add_bytes(self, data: bytes, filename: str = "template.svg") -> str:
        """Add content to IPFS and return its CID.

        Args:
            data: Bytes to store, e.g. the UTF-8 sanitized template.
            filename: Name sent in the multipart upload.

        Returns:
            CIDv1 string.

        Raises:
            IPFSAPIError: If the node rejects the upload or returns no CID.
        """
        params = {
            "cid-version": 1,
            "pin": "true" if self.config.pin else "false",
        }
        files = {"file": (filename, data, "image/svg+xml")}

        logger.info("Uploading %s to IPFS (%d bytes)", filename, len(data))

        result = self._request(self.config.rpc_url, "add", params=params, files=files)
        cid = result.get("Hash")
        if not cid:
            raise IPFSAPIError("IPFS add returned no CID", response_body=str(result))

        logger.info("Uploaded %s to IPFS: %s", filename, cid)
        return cid

    def cat(self, cid: str) -> bytes:
        """Fetch content by CID, trying the fallback node if the primary fails.

        Raises:
            IPFSAPIError: If no configured node returns the content.
        """
        try:
            return self._raw_request(self.config.rpc_url, "cat", params={"arg": cid}).content
        except IPFSAPIError as e:
            if not self.config.fallback_api_url:
                raise
            logger.warning("Primary IPFS node failed for %s, trying fallback: %s", cid, e)

        fallback_url = f"{self.config.fallback_api_url.rstrip('/')}/api/v0"
        try:
            return self._raw_request(fallback_url, "cat", params={"arg": cid}).content
        except IPFSAPIError as e:
            raise IPFSAPIError(
                f"Failed to fetch CID {cid} from both primary and fallback IPFS nodes"
            ) from e

    def unpin(self, cid: str) -> None:
        """Remove a pin from the primary node."""
        self._request(self.config.rpc_url, "pin/rm", params={"arg": cid})
        logger.info("Unpinned %s", cid)

    def test_connection(self) -> dict[str, Any]:
        """Check that the primary node answers.

        Returns:
            Dict with 'ok' bool and 'version' or 'error' info.
        """
        try:
            result = self._request(self.config.rpc_url, "version")
            return {"ok": True, "version": result.get("Version", "")}
        except IPFSAPIError as e:
            return {"ok": False, "error": str(e), "status_code": e.status_code}

    # --- Internal ---

    def _request(self, base_url: str, command: str, **kwargs: Any) -> Any:
        return self._raw_request(base_url, command, **kwargs).json()

    def _raw_request(self, base_url: str, command: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", self.config.timeout)
        try:
            response = self._session.post(f"{base_url}/{command}", **kwargs)
        except requests.RequestException as e:
            raise IPFSAPIError(f"IPFS request failed: {e}") from e
        self._check_response(response)
        return response

    @staticmethod
    def _check_response(response: requests.Response) -> None:
        """Raise IPFSAPIError for non-2xx RPC responses."""
        if response.ok:
            return

        try:
            error_data = response.json()
            message = error_data.get("Message", response.reason)
            code = str(error_data.get("Code", ""))
        except ValueError:
            message = response.text or response.reason
            code = ""

        raise IPFSAPIError(
            message=f"IPFS API error: {message}",
            status_code=response.status_code,
            error_code=code,
            response_body=response.text,
        )


class IPFSAPIError(Exception):
    """Raised when an IPFS RPC request fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str = "",
        response_body: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.response_body = response_body
