from __future__ import annotations

import logging
import uuid
from typing import Optional, Protocol

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.constants import DEFAULT_HTTP_TIMEOUT_SECONDS
from ..core.exceptions import StorageError

log = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class _RetryableHTTPError(requests.RequestException):
    pass


class ObjectStorage(Protocol):
    def put(self, data: bytes, *, key: str, content_type: str) -> str:
        """Store bytes write-once under `key` and return a fetchable URL."""
        raise NotImplementedError


def visit_photo_key(project_id: str, officer_code: str) -> str:
    return f"visits/{project_id}/{officer_code}/{uuid.uuid4()}.jpg"


def progress_photo_key(project_id: str, package_id: str) -> str:
    return f"progress/{project_id}/{package_id}/{uuid.uuid4()}.jpg"


class HttpObjectStorage:
    """Bucket-over-HTTP storage: PUT {upload_base_url}/{key}.

    Uploads are idempotent per key, so transient failures are retried with
    exponential backoff.
    """

    def __init__(
        self,
        upload_base_url: str,
        *,
        public_base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    ):
        if not upload_base_url:
            raise ValueError("Storage URL is required (STORAGE_BASE_URL)")
        self.upload_base_url = upload_base_url.rstrip("/")
        self.public_base_url = (public_base_url or upload_base_url).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = float(timeout)

    def put(self, data: bytes, *, key: str, content_type: str) -> str:
        if not data:
            raise StorageError("Refusing to store an empty object")
        try:
            self._put_with_retry(data, key=key, content_type=content_type)
        except requests.RequestException as e:
            log.error("storage upload failed for %s: %s", key, e)
            raise StorageError(f"Upload failed for {key}") from e
        return f"{self.public_base_url}/{key}"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout, _RetryableHTTPError)),
        reraise=True,
    )
    def _put_with_retry(self, data: bytes, *, key: str, content_type: str) -> None:
        resp = self.session.put(
            f"{self.upload_base_url}/{key}",
            data=data,
            headers={"Content-Type": content_type},
            timeout=self.timeout,
        )
        if resp.status_code in RETRYABLE_STATUS_CODES:
            log.warning("storage answered %s for %s, will retry", resp.status_code, key)
            raise _RetryableHTTPError(f"Server error: {resp.status_code}")
        resp.raise_for_status()
