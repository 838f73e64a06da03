# paywall/pending.py
"""
Holder for the preview analysis computed before login/payment.

Kept in memory and mirrored to durable storage, so the preview survives
the full-page navigation to checkout and back. Every method is
synchronous: `take()` can run before the first await of a commit.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from paywall.models import PendingResult
from paywall.storage import PENDING_RESULT_KEY, Storage

_logger = logging.getLogger(__name__)


class PendingResultHolder:
    def __init__(self, storage: Storage):
        self._storage = storage
        self._memory: Optional[PendingResult] = None

    def store(self, payload: Dict[str, Any], form_snapshot: Dict[str, Any]) -> PendingResult:
        """Store a new preview, replacing any previous one."""
        return self.put(PendingResult(payload=payload, form_snapshot=dict(form_snapshot)))

    def put(self, result: PendingResult) -> PendingResult:
        self._memory = result
        self._storage.set(PENDING_RESULT_KEY, json.dumps(result.to_dict()))
        _logger.debug("Pending result stored")
        return result

    def restore(self) -> Optional[PendingResult]:
        """In-memory copy first, then durable storage."""
        if self._memory is not None:
            return self._memory

        raw = self._storage.get(PENDING_RESULT_KEY)
        if raw is None:
            return None

        try:
            result = PendingResult.from_dict(json.loads(raw))
        except ValueError as e:
            _logger.warning(f"Discarding unreadable pending result: {e}")
            self._storage.delete(PENDING_RESULT_KEY)
            return None

        self._memory = result
        return result

    def clear(self) -> None:
        self._memory = None
        self._storage.delete(PENDING_RESULT_KEY)

    def take(self) -> Optional[PendingResult]:
        """Restore and clear in one step. A second take() returns None."""
        result = self.restore()
        if result is not None:
            self.clear()
        return result

    def forget_memory(self) -> None:
        """Drop only the in-memory copy, as a page reload would."""
        self._memory = None

    @property
    def has_pending(self) -> bool:
        return self.restore() is not None
