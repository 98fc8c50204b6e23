# core/fingerprint_cache.py
"""In-memory cache of enhancement results keyed by draft fingerprint."""

from __future__ import annotations

import hashlib
import time
from collections.abc import Callable

import structlog

from models.letter_models import (
    CachedEnhancement,
    EnhancementFingerprint,
    EnhancementResult,
    LetterDraft,
)

logger = structlog.get_logger(__name__)

FINGERPRINT_LENGTH = 32
_FIELD_SEPARATOR = "|"


def compute_fingerprint(draft: LetterDraft) -> EnhancementFingerprint:
    """Return a fixed-length cache key for the draft's current contents.

    Field values are trimmed before hashing, so whitespace-only edits map to
    the same key. This is a cache key, not a security boundary.
    """
    send_date = draft.send_date.isoformat() if draft.send_date else ""
    joined = _FIELD_SEPARATOR.join(
        (draft.title.strip(), draft.goal.strip(), draft.content.strip(), send_date)
    )
    digest = hashlib.sha256(joined.encode("utf-8")).hexdigest()
    return digest[:FINGERPRINT_LENGTH]


class FingerprintCache:
    """TTL-bound mapping of fingerprints to enhancement results.

    Scoped to the running process and never persisted. Safe to share between
    sessions on one event loop: writes for the same fingerprint are
    interchangeable, so the last one wins.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[EnhancementFingerprint, CachedEnhancement] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: CachedEnhancement, now: float) -> bool:
        return now - entry.stored_at > self.ttl_seconds

    def get(self, fingerprint: EnhancementFingerprint) -> EnhancementResult | None:
        entry = self._entries.get(fingerprint)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            del self._entries[fingerprint]
            logger.debug("Evicted expired enhancement", fingerprint=fingerprint)
            return None
        return entry.result

    def contains(self, fingerprint: EnhancementFingerprint) -> bool:
        """Report whether a fresh entry exists without evicting anything."""
        entry = self._entries.get(fingerprint)
        return entry is not None and not self._is_expired(entry, self._clock())

    def put(
        self, fingerprint: EnhancementFingerprint, result: EnhancementResult
    ) -> None:
        self._entries[fingerprint] = CachedEnhancement(
            fingerprint=fingerprint, result=result, stored_at=self._clock()
        )

    def purge_expired(self) -> int:
        """Evict every expired entry and return how many were dropped."""
        now = self._clock()
        expired = [
            fp for fp, entry in self._entries.items() if self._is_expired(entry, now)
        ]
        for fp in expired:
            del self._entries[fp]
        if expired:
            logger.debug("Purged expired enhancements", count=len(expired))
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
