from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional, Protocol, Sequence

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.constants import DEFAULT_HTTP_TIMEOUT_SECONDS
from ..core.exceptions import PhotoAuditError
from .model import AuditAdvisory, AuditContext, normalize_advisory

log = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class _RetryableHTTPError(requests.RequestException):
    pass


class PhotoAuditClient(Protocol):
    def audit(self, image_urls: Sequence[str], context: AuditContext) -> AuditAdvisory:
        """Raises PhotoAuditError."""
        raise NotImplementedError


class HttpPhotoAuditClient:
    """Adapter for the external photo-audit advisory service.

    POST {base_url}/audit {"image_urls": [...], "context": {...}} -> advisory JSON
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    ):
        if not base_url:
            raise ValueError("Photo audit service URL is required (AUDIT_SERVICE_URL)")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = float(timeout)

    def audit(self, image_urls: Sequence[str], context: AuditContext) -> AuditAdvisory:
        if not image_urls:
            raise PhotoAuditError("No images provided to photo audit")

        body = {"image_urls": list(image_urls), "context": asdict(context)}
        try:
            payload = self._post_with_retry(body)
        except requests.RequestException as e:
            raise PhotoAuditError(f"Photo audit request failed: {e}") from e
        except ValueError as e:
            raise PhotoAuditError("Photo audit returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise PhotoAuditError("Photo audit returned a non-object response")
        return normalize_advisory(payload)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout, _RetryableHTTPError)),
        reraise=True,
    )
    def _post_with_retry(self, body: dict):
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        resp = self.session.post(f"{self.base_url}/audit", json=body, headers=headers, timeout=self.timeout)
        if resp.status_code in RETRYABLE_STATUS_CODES:
            log.warning("photo audit answered %s, will retry", resp.status_code)
            raise _RetryableHTTPError(f"Server error: {resp.status_code}")
        resp.raise_for_status()
        return resp.json()
