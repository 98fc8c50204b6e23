"""Central package for FutureLetter data models."""

from .letter_models import (
    CachedEnhancement,
    EnhancedLetter,
    EnhancementField,
    EnhancementFingerprint,
    EnhancementResult,
    EnhancementStatus,
    FieldSuggestion,
    InferredMilestone,
    LetterDraft,
    MilestoneSuggestion,
)

__all__ = [
    "CachedEnhancement",
    "EnhancedLetter",
    "EnhancementField",
    "EnhancementFingerprint",
    "EnhancementResult",
    "EnhancementStatus",
    "FieldSuggestion",
    "InferredMilestone",
    "LetterDraft",
    "MilestoneSuggestion",
]
