# orchestration/enhancement_session.py
"""Enhancement lifecycle for one open letter form.

A session takes a draft through ``idle -> loading -> success | error`` and
then lets the caller accept the suggested title, goal, content and
milestones one at a time or all at once. Results are shared with other
sessions through a ``FingerprintCache`` so identical drafts are only sent to
the enhancement service once per TTL window.

Every call to ``enhance`` captures a request token. When the gateway
settles, the response is committed only if that token is still current, so a
slow response for an older draft can never overwrite the state produced by a
newer request.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from datetime import date
from typing import Any

import structlog

from config import settings
from core.enhancement_gateway import EnhancementGateway
from core.fingerprint_cache import FingerprintCache, compute_fingerprint
from models.letter_models import (
    EnhancementField,
    EnhancementFingerprint,
    EnhancementResult,
    EnhancementStatus,
    LetterDraft,
    MilestoneSuggestion,
)
from orchestration.notifications import (
    LoggingNotifier,
    Notice,
    NoticeLevel,
    Notifier,
    enhancement_failed_notice,
)
from utils.milestone_scheduling import assign_due_dates

logger = structlog.get_logger(__name__)

ApplyFieldCallback = Callable[[EnhancementField, str], Awaitable[None] | None]
ApplyMilestonesCallback = Callable[
    [list[MilestoneSuggestion]], Awaitable[None] | None
]


async def _call(callback: Callable[..., Any], *args: Any) -> None:
    outcome = callback(*args)
    if inspect.isawaitable(outcome):
        await outcome


class EnhancementSession:
    """Coordinates one enhancement attempt and the application of its results."""

    def __init__(
        self,
        gateway: EnhancementGateway,
        cache: FingerprintCache,
        on_apply_field: ApplyFieldCallback,
        on_apply_milestones: ApplyMilestonesCallback | None = None,
        notifier: Notifier | None = None,
        apply_field_delay: float = 0.0,
        apply_milestones_delay: float = 0.0,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._gateway = gateway
        self._cache = cache
        self._on_apply_field = on_apply_field
        self._on_apply_milestones = on_apply_milestones
        self._notifier = notifier or LoggingNotifier()
        # UX pacing only; zero skips the pause entirely
        self.apply_field_delay = apply_field_delay
        self.apply_milestones_delay = apply_milestones_delay
        self._today = today

        self._status = EnhancementStatus.IDLE
        self._result: EnhancementResult | None = None
        self._request_token = 0
        self._last_draft: LetterDraft | None = None
        self._closed = False

        self.last_fingerprint: EnhancementFingerprint | None = None
        self.applied_fields: set[EnhancementField] = set()
        self.applying_fields: set[EnhancementField] = set()
        self.milestones_applied = False
        self.is_applying_milestones = False
        self.is_expanded = False
        self.is_using_cache = False

    # --- state -----------------------------------------------------------

    @property
    def status(self) -> EnhancementStatus:
        return self._status

    @property
    def current_result(self) -> EnhancementResult | None:
        return self._result

    @property
    def has_enhancement_data(self) -> bool:
        return self._status is EnhancementStatus.SUCCESS

    @property
    def is_closed(self) -> bool:
        return self._closed

    def set_expanded(self, expanded: bool) -> None:
        self.is_expanded = expanded

    def has_cached_result(self, draft: LetterDraft) -> bool:
        return self._cache.contains(compute_fingerprint(draft))

    def can_enhance(self, draft: LetterDraft) -> bool:
        """Whether the enhance action should be offered for this draft."""
        return (
            not self._closed
            and bool(draft.goal.strip())
            and self._status is not EnhancementStatus.LOADING
            and not self.has_cached_result(draft)
        )

    def close(self) -> None:
        """Detach the session from its form; in-flight responses are dropped."""
        self._closed = True
        self._request_token += 1
        if self._status is EnhancementStatus.LOADING:
            self._status = EnhancementStatus.IDLE
        logger.debug("Enhancement session closed")

    def _notify(self, notice: Notice) -> None:
        self._notifier.notify(notice)

    def _reset_application_state(self) -> None:
        self.applied_fields = set()
        self.applying_fields = set()
        self.milestones_applied = False
        self.is_applying_milestones = False

    def _commit_success(self, result: EnhancementResult, from_cache: bool) -> None:
        self._result = result
        self._status = EnhancementStatus.SUCCESS
        self.is_expanded = True
        self.is_using_cache = from_cache

    def _is_current(self, token: int) -> bool:
        return token == self._request_token and not self._closed

    # --- enhancement -----------------------------------------------------

    async def enhance(self, draft: LetterDraft) -> EnhancementStatus:
        """Request suggestions for ``draft``, superseding any earlier request."""
        if self._closed:
            logger.debug("enhance() ignored on a closed session")
            return self._status
        if not draft.goal.strip():
            self._notify(
                Notice(
                    "Goal Required",
                    "Add a goal to your letter before requesting an enhancement.",
                    level=NoticeLevel.WARNING,
                )
            )
            return self._status

        self._request_token += 1
        token = self._request_token
        self._last_draft = draft
        fingerprint = compute_fingerprint(draft)
        self.last_fingerprint = fingerprint
        self._reset_application_state()

        cached = self._cache.get(fingerprint)
        if cached is not None:
            logger.info("Using cached enhancement", fingerprint=fingerprint)
            self._commit_success(cached, from_cache=True)
            self._notify(
                Notice(
                    "Cached Enhancement Restored",
                    "Using previously generated suggestions for these inputs.",
                    level=NoticeLevel.SUCCESS,
                )
            )
            return self._status

        self._status = EnhancementStatus.LOADING
        self._result = None
        self.is_expanded = False
        self.is_using_cache = False

        # Snapshot the fields; the caller may keep editing while we wait.
        title, goal, content, send_date = (
            draft.title,
            draft.goal,
            draft.content,
            draft.send_date,
        )
        try:
            result = await self._gateway.enhance(title, goal, content, send_date)
        except asyncio.CancelledError:
            if self._is_current(token):
                self._status = EnhancementStatus.ERROR
            raise
        except Exception as exc:  # any gateway failure is an Error transition
            if not self._is_current(token):
                logger.debug(
                    "Discarding failure of superseded enhancement request",
                    fingerprint=fingerprint,
                    error=str(exc),
                )
                return self._status
            logger.warning(
                "Enhancement request failed",
                fingerprint=fingerprint,
                title_length=len(title),
                goal_length=len(goal),
                content_length=len(content),
                send_date=send_date.isoformat() if send_date else None,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            self._status = EnhancementStatus.ERROR
            self._notify(enhancement_failed_notice(exc))
            return self._status

        self._cache.put(fingerprint, result)
        if not self._is_current(token):
            logger.debug(
                "Discarding response of superseded enhancement request",
                fingerprint=fingerprint,
            )
            return self._status

        self._commit_success(result, from_cache=False)
        logger.info(
            "Enhancement ready",
            fingerprint=fingerprint,
            milestone_count=len(result.suggested_milestones),
        )
        self._notify(
            Notice(
                "Letter Enhanced",
                "Your letter has been enhanced with AI. Review the suggestions below.",
                level=NoticeLevel.SUCCESS,
            )
        )
        return self._status

    async def retry(self) -> EnhancementStatus:
        """Repeat the failed request with the same draft."""
        if self._status is not EnhancementStatus.ERROR or self._last_draft is None:
            logger.debug("retry() ignored", status=self._status.value)
            return self._status
        return await self.enhance(self._last_draft)

    # --- application -----------------------------------------------------

    async def apply_field(self, field: EnhancementField | str) -> bool:
        """Write one suggested value into the draft. Returns True if applied."""
        return await self._apply_field(EnhancementField(field), announce=True)

    async def _apply_field(self, field: EnhancementField, announce: bool) -> bool:
        result = self._result
        if self._status is not EnhancementStatus.SUCCESS or result is None:
            logger.debug("apply_field() ignored", field=field.value, status=self._status.value)
            return False
        if field in self.applied_fields or field in self.applying_fields:
            return False

        token = self._request_token
        value = result.suggested_value(field)
        self.applying_fields.add(field)
        try:
            if self.apply_field_delay > 0:
                await asyncio.sleep(self.apply_field_delay)
            if not self._is_current(token):
                return False
            try:
                await _call(self._on_apply_field, field, value)
            except Exception as exc:
                logger.error(
                    "Applying field suggestion failed",
                    field=field.value,
                    value_preview=value[:100],
                    error=str(exc),
                    exc_info=True,
                )
                self._notify(
                    Notice(
                        "Failed to Apply Enhancement",
                        f"Could not apply {field.value} enhancement. The form may be locked or there was a validation error.",
                        level=NoticeLevel.ERROR,
                    )
                )
                return False
            if not self._is_current(token):
                return False
            self.applied_fields.add(field)
        finally:
            if token == self._request_token:
                self.applying_fields.discard(field)

        if announce:
            self._notify(
                Notice(
                    "Enhancement Applied",
                    f"Updated {field.value} with AI suggestion.",
                    level=NoticeLevel.SUCCESS,
                )
            )
        return True

    async def apply_milestones(self) -> bool:
        """Forward every suggested milestone to the caller. Returns True if applied."""
        return await self._apply_milestones(announce=True)

    def _milestones_pending(self) -> bool:
        return bool(
            self._result is not None
            and self._result.suggested_milestones
            and self._on_apply_milestones is not None
            and not self.milestones_applied
        )

    async def _apply_milestones(self, announce: bool) -> bool:
        if self._status is not EnhancementStatus.SUCCESS or not self._milestones_pending():
            logger.debug(
                "apply_milestones() ignored",
                status=self._status.value,
                milestones_applied=self.milestones_applied,
            )
            return False
        if self.is_applying_milestones:
            return False

        token = self._request_token
        result = self._result
        callback = self._on_apply_milestones
        if result is None or callback is None:
            return False
        milestones = assign_due_dates(
            result.suggested_milestones,
            get_date=lambda m: m.target_date,
            with_date=lambda m, d: m.model_copy(update={"target_date": d}),
            today=self._today(),
        )
        self.is_applying_milestones = True
        try:
            if self.apply_milestones_delay > 0:
                await asyncio.sleep(self.apply_milestones_delay)
            if not self._is_current(token):
                return False
            try:
                await _call(callback, milestones)
            except Exception as exc:
                logger.error(
                    "Applying milestone suggestions failed",
                    milestone_count=len(milestones),
                    milestones=[(m.title, m.percentage) for m in milestones],
                    error=str(exc),
                    exc_info=True,
                )
                self._notify(
                    Notice(
                        "Failed to Apply Milestones",
                        "Could not apply suggested milestones. There may be a validation error or the form is locked.",
                        level=NoticeLevel.ERROR,
                    )
                )
                return False
            if not self._is_current(token):
                return False
            self.milestones_applied = True
        finally:
            if token == self._request_token:
                self.is_applying_milestones = False

        if announce:
            self._notify(
                Notice(
                    "Milestones Applied",
                    f"Added {len(milestones)} suggested milestones.",
                    level=NoticeLevel.SUCCESS,
                )
            )
        return True

    async def apply_all_remaining(self) -> bool:
        """Apply every pending field suggestion, then the milestones.

        Returns True only when every pending apply went through.
        """
        result = self._result
        if self._status is not EnhancementStatus.SUCCESS or result is None:
            logger.debug("apply_all_remaining() ignored", status=self._status.value)
            return False

        pending_fields = [
            field
            for field in EnhancementField
            if field not in self.applied_fields and result.suggested_value(field) != ""
        ]
        milestones_pending = self._milestones_pending()
        if not pending_fields and not milestones_pending:
            self._notify(
                Notice(
                    "Nothing to Apply",
                    "All enhancements have already been applied.",
                )
            )
            return False

        token = self._request_token
        failed: list[str] = []
        for field in pending_fields:
            if not self._is_current(token):
                return False
            if not await self._apply_field(field, announce=False):
                failed.append(field.value)
        if milestones_pending and self._is_current(token):
            if not await self._apply_milestones(announce=False):
                failed.append("milestones")
        if not self._is_current(token):
            return False
        if failed:
            logger.warning("apply_all_remaining() incomplete", failed=failed)
            return False

        self._notify(
            Notice(
                "All Enhancements Applied",
                "Your letter has been updated with all remaining AI suggestions.",
                level=NoticeLevel.SUCCESS,
            )
        )
        return True


def create_letter_enhancement_session(
    gateway: EnhancementGateway,
    on_apply_field: ApplyFieldCallback,
    on_apply_milestones: ApplyMilestonesCallback | None = None,
    *,
    cache: FingerprintCache | None = None,
    notifier: Notifier | None = None,
) -> EnhancementSession:
    """Build a session for the whole-letter flow using configured pacing and TTL."""
    if cache is None:
        cache = FingerprintCache(ttl_seconds=settings.ENHANCEMENT_CACHE_TTL_SECONDS)
    return EnhancementSession(
        gateway=gateway,
        cache=cache,
        on_apply_field=on_apply_field,
        on_apply_milestones=on_apply_milestones,
        notifier=notifier,
        apply_field_delay=settings.APPLY_FIELD_DELAY_SECONDS,
        apply_milestones_delay=settings.APPLY_MILESTONES_DELAY_SECONDS,
    )
