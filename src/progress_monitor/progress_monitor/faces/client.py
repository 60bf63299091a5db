from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from ..core.constants import DEFAULT_HTTP_TIMEOUT_SECONDS
from ..core.exceptions import FaceMatchServiceError

log = logging.getLogger(__name__)


class FaceComparisonClient(Protocol):
    def compare(self, master_url: str, live_url: str) -> float:
        """Similarity score 0..100. Raises FaceMatchServiceError."""
        raise NotImplementedError


class HttpFaceComparisonClient:
    """Adapter for the external face comparison service.

    POST {base_url}/compare {"master_url": ..., "live_url": ...} -> {"similarity": 0..100}

    No retry: a second attempt could mask a genuine mismatch or allow
    similarity probing.
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
            raise ValueError("Face comparison service URL is required (FACE_SERVICE_URL)")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = float(timeout)

    def compare(self, master_url: str, live_url: str) -> float:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            resp = self.session.post(
                f"{self.base_url}/compare",
                json={"master_url": master_url, "live_url": live_url},
                headers=headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as e:
            raise FaceMatchServiceError(f"Face comparison request failed: {e}") from e
        except ValueError as e:
            raise FaceMatchServiceError("Face comparison returned invalid JSON") from e

        similarity = payload.get("similarity") if isinstance(payload, dict) else None
        if not isinstance(similarity, (int, float)):
            # No face found in one of the images comes back without a score.
            log.info("face comparison returned no similarity score")
            return 0.0
        return max(0.0, min(100.0, float(similarity)))
