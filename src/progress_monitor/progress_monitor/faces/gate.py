from __future__ import annotations

import logging

from ..core.constants import DEFAULT_FACE_MATCH_MIN_SCORE
from ..core.exceptions import FaceMatchServiceError
from .client import FaceComparisonClient

log = logging.getLogger(__name__)


class FaceMatchGate:
    """Pass/fail decision over an external similarity score.

    Fail-closed: any service error is a failed match. The bypass flag exists
    for non-production environments only and is logged on every use.
    """

    def __init__(
        self,
        client: FaceComparisonClient | None,
        *,
        min_score: float = DEFAULT_FACE_MATCH_MIN_SCORE,
        allow_bypass: bool = False,
    ):
        self._client = client
        self._min_score = float(min_score)
        self._allow_bypass = bool(allow_bypass)
        if self._allow_bypass:
            log.warning("FACE MATCH BYPASS ENABLED: every face check will pass without comparison")

    @property
    def min_score(self) -> float:
        return self._min_score

    def matches(self, master_url: str, live_url: str) -> bool:
        if self._allow_bypass:
            log.warning("FACE MATCH BYPASS: skipping real face comparison for %s", live_url)
            return True

        if self._client is None:
            log.error("face comparison client not configured, failing closed")
            return False

        try:
            similarity = self._client.compare(master_url, live_url)
        except FaceMatchServiceError:
            log.exception("face comparison failed, failing closed")
            return False

        log.info("face similarity=%.2f threshold=%.2f", similarity, self._min_score)
        return similarity >= self._min_score
