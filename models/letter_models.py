# models/letter_models.py
"""Letter drafts and the enhancement payloads exchanged with the gateway."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

EnhancementFingerprint = str


class EnhancementField(str, Enum):
    """Letter fields that can receive an AI suggestion."""

    TITLE = "title"
    GOAL = "goal"
    CONTENT = "content"


class EnhancementStatus(str, Enum):
    """Lifecycle of a single enhancement attempt."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class LetterDraft(BaseModel):
    """The in-progress letter a user is editing.

    Owned by the form; the orchestrator only reads it, and writes back
    through the caller's apply callbacks.
    """

    model_config = ConfigDict(validate_assignment=True)

    title: str = ""
    goal: str = ""
    content: str = ""
    send_date: date | None = None

    def get_field(self, field: EnhancementField) -> str:
        return getattr(self, EnhancementField(field).value)

    def set_field(self, field: EnhancementField, value: str) -> None:
        setattr(self, EnhancementField(field).value, value)

    def request_payload(self) -> dict[str, Any]:
        """Body sent to the enhancement function."""
        return {
            "title": self.title,
            "goal": self.goal,
            "content": self.content,
            "send_date": self.send_date.isoformat() if self.send_date else None,
        }


class EnhancedLetter(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = ""
    goal: str = ""
    content: str = ""


class MilestoneSuggestion(BaseModel):
    """A milestone proposed by the enhancement service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    description: str = ""
    percentage: int = Field(0, ge=0, le=100)
    target_date: date | None = None

    @field_validator("target_date", mode="before")
    @classmethod
    def _blank_date_is_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("percentage", mode="before")
    @classmethod
    def _round_percentage(cls, value: Any) -> Any:
        if isinstance(value, float):
            return round(value)
        return value


class EnhancementResult(BaseModel):
    """Improved letter text plus milestone suggestions. Immutable."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    enhanced_letter: EnhancedLetter = Field(alias="enhancedLetter")
    suggested_milestones: tuple[MilestoneSuggestion, ...] = Field(
        default=(), alias="suggestedMilestones"
    )

    @property
    def enhanced_title(self) -> str:
        return self.enhanced_letter.title

    @property
    def enhanced_goal(self) -> str:
        return self.enhanced_letter.goal

    @property
    def enhanced_content(self) -> str:
        return self.enhanced_letter.content

    def suggested_value(self, field: EnhancementField) -> str:
        return getattr(self.enhanced_letter, EnhancementField(field).value)


class CachedEnhancement(BaseModel):
    model_config = ConfigDict(frozen=True)

    fingerprint: EnhancementFingerprint
    result: EnhancementResult
    stored_at: float


class FieldSuggestion(BaseModel):
    """Suggestion for a single field from the per-field flow."""

    model_config = ConfigDict(frozen=True)

    field: EnhancementField
    suggestion: str
    explanation: str = ""


class InferredMilestone(BaseModel):
    """Milestone inferred from a goal and letter content."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str
    reasoning: str = ""
    due_date: date | None = Field(default=None, alias="dueDate")

    @field_validator("due_date", mode="before")
    @classmethod
    def _blank_date_is_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value
