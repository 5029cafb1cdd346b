from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

import requests
from google.auth.credentials import Credentials
from google.auth.transport.requests import AuthorizedSession

from vision.schemas import BatchAnnotateImagesRequest

log = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
DEFAULT_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"


class VisionAPIError(RuntimeError):
    """The vision service answered, but not with a usable batch response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AnnotationClient(Protocol):
    def batch_annotate(self, batch: BatchAnnotateImagesRequest) -> Dict[str, Any]:
        """Submit a batch and return the decoded batch response."""
        ...


def _error_message(resp: requests.Response) -> str:
    """
    Build an error string from a failed `images:annotate` reply.

    Google APIs wrap failures as `{"error": {"code": ..., "message": ...}}`;
    anything else falls back to the HTTP status line.
    """
    try:
        err = resp.json().get("error") or {}
    except (ValueError, AttributeError):
        err = {}

    if isinstance(err, dict) and err.get("message"):
        return f"googleapi: Error {err.get('code', resp.status_code)}: {err['message']}"
    return f"googleapi: got HTTP response code {resp.status_code} {resp.reason or ''}".rstrip()


class CloudVisionClient:
    """
    `AnnotationClient` backed by the Cloud Vision REST API.

    The session carries the OAuth2 credentials; token refresh is handled by
    `AuthorizedSession` on each call.
    """

    def __init__(self, session: requests.Session, endpoint: str = DEFAULT_ENDPOINT):
        self.session = session
        self.endpoint = endpoint

    @classmethod
    def from_credentials(
        cls,
        credentials: Credentials,
        endpoint: str = DEFAULT_ENDPOINT,
    ) -> "CloudVisionClient":
        return cls(AuthorizedSession(credentials), endpoint=endpoint)

    def batch_annotate(self, batch: BatchAnnotateImagesRequest) -> Dict[str, Any]:
        body = batch.to_wire()
        log.info("[VISION] POST %s (%d request(s))", self.endpoint, len(batch.requests))

        resp = self.session.post(self.endpoint, json=body)
        if resp.status_code // 100 != 2:
            message = _error_message(resp)
            log.error("[VISION] %s", message)
            raise VisionAPIError(message, status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            raise VisionAPIError(f"malformed response from vision service: {e}", resp.status_code) from e

        if not isinstance(payload, dict):
            raise VisionAPIError("malformed response from vision service: expected an object", resp.status_code)
        return payload
