# orchestration/cli_runner.py
"""Command-line runner for a single letter enhancement session."""

from __future__ import annotations

import asyncio

import structlog
from rich.console import Console

from core.enhancement_gateway import HttpEnhancementGateway
from models.letter_models import (
    EnhancementField,
    EnhancementStatus,
    LetterDraft,
    MilestoneSuggestion,
)
from orchestration.enhancement_session import create_letter_enhancement_session
from ui.suggestion_display import ConsoleNotifier, milestone_table, render_suggestions
from utils.logging import setup_logging
from yaml_parser import load_letter_draft

logger = structlog.get_logger(__name__)


async def _run(
    draft: LetterDraft, apply_all: bool, console: Console
) -> EnhancementStatus:
    accepted_milestones: list[MilestoneSuggestion] = []

    def apply_field(field: EnhancementField, value: str) -> None:
        draft.set_field(field, value)

    def apply_milestones(milestones: list[MilestoneSuggestion]) -> None:
        accepted_milestones.extend(milestones)

    gateway = HttpEnhancementGateway()
    session = create_letter_enhancement_session(
        gateway,
        apply_field,
        apply_milestones,
        notifier=ConsoleNotifier(console),
    )
    try:
        status = await session.enhance(draft)
        if status is EnhancementStatus.SUCCESS and session.current_result:
            console.print(
                render_suggestions(
                    draft, session.current_result, from_cache=session.is_using_cache
                )
            )
            if apply_all:
                await session.apply_all_remaining()
                console.print(
                    render_suggestions(
                        draft,
                        session.current_result,
                        applied=set(session.applied_fields),
                        from_cache=session.is_using_cache,
                    )
                )
                console.print(draft.model_dump_json(indent=2))
                if accepted_milestones:
                    console.print(milestone_table(accepted_milestones))
        return status
    finally:
        session.close()
        await gateway.aclose()


def run(draft_path: str, apply_all: bool = False) -> int:
    """Load the draft, enhance it, and return a process exit code."""
    setup_logging()
    console = Console()
    draft = load_letter_draft(draft_path)
    if draft is None:
        console.print(f"[red]Could not load a letter draft from {draft_path}[/red]")
        return 2
    try:
        status = asyncio.run(_run(draft, apply_all, console))
    except KeyboardInterrupt:
        logger.info("Enhancement cancelled by user.")
        return 130
    return 0 if status is EnhancementStatus.SUCCESS else 1
