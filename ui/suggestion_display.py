# ui/suggestion_display.py
"""Rich rendering of enhancement suggestions and user notices."""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from models.letter_models import (
    EnhancementField,
    EnhancementResult,
    LetterDraft,
    MilestoneSuggestion,
)
from orchestration.notifications import Notice, NoticeLevel

_NOTICE_STYLES = {
    NoticeLevel.INFO: "cyan",
    NoticeLevel.SUCCESS: "green",
    NoticeLevel.WARNING: "yellow",
    NoticeLevel.ERROR: "bold red",
}


class ConsoleNotifier:
    """Prints notices to a Rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def notify(self, notice: Notice) -> None:
        style = _NOTICE_STYLES[notice.level]
        line = Text.assemble((notice.title, style), " - ", notice.description)
        if notice.retryable:
            line.append(" (retry available)", style="dim")
        self.console.print(line)


def milestone_table(milestones: list[MilestoneSuggestion]) -> Table:
    table = Table(title="Suggested Milestones", expand=True)
    table.add_column("%", justify="right", width=4)
    table.add_column("Milestone")
    table.add_column("Target", width=10)
    for milestone in milestones:
        table.add_row(
            str(milestone.percentage),
            Text.assemble(milestone.title, "\n", (milestone.description, "dim")),
            milestone.target_date.isoformat() if milestone.target_date else "-",
        )
    return table


def render_suggestions(
    draft: LetterDraft,
    result: EnhancementResult,
    applied: set[EnhancementField] | None = None,
    from_cache: bool = False,
) -> Panel:
    """Side-by-side view of the draft and the suggested replacement per field."""
    applied = applied or set()
    fields = Table.grid(padding=(0, 2), expand=True)
    fields.add_column("Field", style="bold", width=8)
    fields.add_column("Current")
    fields.add_column("Suggested")
    for field in EnhancementField:
        label = field.value.title()
        if field in applied:
            label += " [green]applied[/green]"
        fields.add_row(
            label, Text(draft.get_field(field)), Text(result.suggested_value(field))
        )

    parts: list[Table] = [fields]
    if result.suggested_milestones:
        parts.append(milestone_table(list(result.suggested_milestones)))
    title = "AI Suggestions" + (" (cached)" if from_cache else "")
    return Panel(Group(*parts), title=title, border_style="blue", expand=True)
