# orchestration/field_enhancer.py
"""Progressive per-field flow: enhance one field, or infer milestones."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date
from typing import Protocol

import structlog

from models.letter_models import (
    EnhancementField,
    FieldSuggestion,
    InferredMilestone,
    LetterDraft,
)
from orchestration.notifications import (
    LoggingNotifier,
    Notice,
    NoticeLevel,
    Notifier,
)
from utils.milestone_scheduling import assign_due_dates

logger = structlog.get_logger(__name__)


class FieldEnhancementGateway(Protocol):
    async def enhance_field(
        self,
        field: EnhancementField,
        original_content: str,
        context: dict[str, str] | None = None,
    ) -> FieldSuggestion: ...

    async def infer_milestones(
        self, goal: str, content: str, title: str | None = None
    ) -> list[InferredMilestone]: ...


class FieldEnhancer:
    def __init__(
        self,
        gateway: FieldEnhancementGateway,
        notifier: Notifier | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._gateway = gateway
        self._notifier = notifier or LoggingNotifier()
        self._today = today
        self.is_enhancing_field = False
        self.is_inferring_milestones = False

    @property
    def is_loading(self) -> bool:
        return self.is_enhancing_field or self.is_inferring_milestones

    async def enhance_field(
        self, field: EnhancementField | str, draft: LetterDraft
    ) -> FieldSuggestion | None:
        """Ask for a better version of one field, using the others as context."""
        field = EnhancementField(field)
        original = draft.get_field(field)
        if not original.strip():
            self._notifier.notify(
                Notice(
                    "Nothing to Enhance",
                    f"Write a {field.value} first, then ask for suggestions.",
                    level=NoticeLevel.WARNING,
                )
            )
            return None

        context = {
            other.value: draft.get_field(other)
            for other in EnhancementField
            if other is not field and draft.get_field(other).strip()
        }
        self.is_enhancing_field = True
        try:
            return await self._gateway.enhance_field(field, original, context)
        except Exception as exc:
            logger.warning(
                "Field enhancement failed", field=field.value, error=str(exc)
            )
            self._notifier.notify(
                Notice("Enhancement failed", str(exc), level=NoticeLevel.ERROR)
            )
            return None
        finally:
            self.is_enhancing_field = False

    async def infer_milestones(
        self, draft: LetterDraft, existing_due_dates: Iterable[date] = ()
    ) -> list[InferredMilestone]:
        """Infer milestones from the goal and content, scheduling undated ones."""
        if not draft.goal.strip() or not draft.content.strip():
            self._notifier.notify(
                Notice(
                    "More Detail Needed",
                    "Milestones are inferred from both your goal and your letter.",
                    level=NoticeLevel.WARNING,
                )
            )
            return []

        self.is_inferring_milestones = True
        try:
            inferred = await self._gateway.infer_milestones(
                draft.goal, draft.content, draft.title or None
            )
        except Exception as exc:
            logger.warning("Milestone inference failed", error=str(exc))
            self._notifier.notify(
                Notice(
                    "Milestone inference failed", str(exc), level=NoticeLevel.ERROR
                )
            )
            return []
        finally:
            self.is_inferring_milestones = False

        logger.info("Milestones inferred", count=len(inferred))
        return assign_due_dates(
            inferred,
            get_date=lambda m: m.due_date,
            with_date=lambda m, d: m.model_copy(update={"due_date": d}),
            existing_due_dates=existing_due_dates,
            today=self._today(),
        )


def create_field_enhancer(
    gateway: FieldEnhancementGateway, notifier: Notifier | None = None
) -> FieldEnhancer:
    """Build the per-field flow around an injected gateway."""
    return FieldEnhancer(gateway=gateway, notifier=notifier)
