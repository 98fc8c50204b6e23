from datetime import date

from rich.console import Console

from core.enhancement_gateway import EnhancementGatewayError, GatewayErrorKind
from models.letter_models import (
    EnhancedLetter,
    EnhancementField,
    EnhancementResult,
    LetterDraft,
    MilestoneSuggestion,
)
from orchestration.notifications import (
    LoggingNotifier,
    Notice,
    NoticeLevel,
    enhancement_failed_notice,
)
from ui.suggestion_display import ConsoleNotifier, render_suggestions


def _console() -> Console:
    return Console(record=True, width=120, color_system=None)


def test_render_suggestions_shows_fields_and_milestones():
    draft = LetterDraft(title="T", goal="Learn Spanish", content="Dear [me]")
    result = EnhancementResult(
        enhanced_letter=EnhancedLetter(
            title="Learn Spanish Fluently", goal="Reach B2", content="Dear future me"
        ),
        suggested_milestones=[
            MilestoneSuggestion(
                title="Complete A1", percentage=25, target_date=date(2026, 3, 1)
            )
        ],
    )
    console = _console()
    console.print(
        render_suggestions(draft, result, applied={EnhancementField.TITLE}, from_cache=True)
    )
    text = console.export_text()

    assert "AI Suggestions (cached)" in text
    assert "Learn Spanish Fluently" in text
    assert "Dear [me]" in text
    assert "Complete A1" in text
    assert "2026-03-01" in text
    assert "applied" in text


def test_console_notifier_marks_retryable_notices():
    console = _console()
    ConsoleNotifier(console).notify(
        Notice("Network Error", "Check your connection.", NoticeLevel.ERROR, retryable=True)
    )
    text = console.export_text()
    assert "Network Error - Check your connection." in text
    assert "retry available" in text


def test_failure_notice_depends_on_error_kind():
    rate_limited = enhancement_failed_notice(
        EnhancementGatewayError("429", kind=GatewayErrorKind.RATE_LIMITED)
    )
    generic = enhancement_failed_notice(RuntimeError("boom"))
    assert rate_limited.title == "Rate Limit Exceeded"
    assert generic.title == "Enhancement Failed"
    assert rate_limited.retryable and generic.retryable


def test_logging_notifier_accepts_every_level():
    notifier = LoggingNotifier()
    for level in NoticeLevel:
        notifier.notify(Notice("title", "description", level))
