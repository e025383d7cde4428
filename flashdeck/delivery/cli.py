"""
flashdeck: terminal host for the scheduling core.

Commands:
- flashdeck init                      - Create the collection
- flashdeck add-deck NAME             - Create a deck
- flashdeck add-card DECK FRONT BACK  - Add a new card
- flashdeck decks                     - List decks
- flashdeck queue DECK                - Show today's queue
- flashdeck answer CARD GRADE         - Grade a single card
- flashdeck study DECK                - Interactive study session
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from flashdeck.config import Settings, get_settings
from flashdeck.db.repository import add_card, create_deck, list_decks, load_card
from flashdeck.errors import FlashdeckError
from flashdeck.log_setup import configure_logging
from flashdeck.scheduling.card import Answer, CardQueue
from flashdeck.scheduling.collection import AppContext
from flashdeck.scheduling.queue import Queue, QueueEntry
from flashdeck.scheduling.states import (
    CardState,
    LearningState,
    NewState,
    ReviewState,
    SchedulingStates,
    get_current_card_state,
)

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="flashdeck",
    help="flashdeck: spaced repetition from the terminal",
    no_args_is_help=True,
)
console = Console()


# =============================================================================
# Styling
# =============================================================================

STYLES = {
    "info": "bold cyan",
    "error": "bold red",
    "dim": "dim",
    "queue": {
        CardQueue.NEW: "green",
        CardQueue.LEARNING: "yellow",
        CardQueue.REVIEW: "blue",
    },
}


def style_queue(queue: CardQueue) -> str:
    color = STYLES["queue"].get(queue, "white")
    return f"[{color}]{queue.name.lower()}[/{color}]"


def describe_state(state: CardState) -> str:
    """Short label for a successor, e.g. '4d' or 'learn'."""
    if isinstance(state, ReviewState):
        return f"{state.scheduled_days}d"
    if isinstance(state, LearningState):
        return "learn"
    if isinstance(state, NewState):
        return "new"
    return "?"


def describe_states(states: SchedulingStates) -> str:
    return "  ".join(
        f"{answer.value}:{answer.name.title()} {describe_state(states.for_answer(answer))}"
        for answer in Answer
    )


# =============================================================================
# Context
# =============================================================================


@app.callback()
def main_callback(
    ctx: typer.Context,
    db: Optional[str] = typer.Option(
        None,
        "--db",
        help="Collection path (overrides FLASHDECK_DATABASE_PATH)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    settings = get_settings()
    if db:
        settings = settings.model_copy(update={"database_path": db})

    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_file)
    ctx.obj = settings


@contextmanager
def open_context(ctx: typer.Context) -> Iterator[AppContext]:
    """Open the collection and report flashdeck errors as a clean exit."""
    settings: Settings = ctx.obj or get_settings()
    try:
        with AppContext.open(settings) as app_ctx:
            yield app_ctx
    except FlashdeckError as e:
        logger.debug(f"Command failed: {e!r}")
        console.print(f"[{STYLES['error']}]Error:[/] {e}")
        raise typer.Exit(1) from e


# =============================================================================
# Commands
# =============================================================================


@app.command()
def init(ctx: typer.Context) -> None:
    """Create the collection if it does not exist."""
    with open_context(ctx) as app_ctx:
        col = app_ctx.collection
        console.print(
            f"[green]Collection ready at {col.col_path}[/green] (day {col.timing.days_elapsed})"
        )


@app.command("add-deck")
def add_deck(ctx: typer.Context, name: str = typer.Argument(..., help="Deck name")) -> None:
    """Create a deck."""
    with open_context(ctx) as app_ctx:
        deck_id = create_deck(app_ctx.collection.storage, name)
        console.print(f"[green]Created deck {deck_id}: {name}[/green]")


@app.command("add-card")
def add_card_command(
    ctx: typer.Context,
    deck_id: int = typer.Argument(..., help="Deck id"),
    front: str = typer.Argument(..., help="Question side"),
    back: str = typer.Argument(..., help="Answer side"),
) -> None:
    """Add a new card to a deck."""
    with open_context(ctx) as app_ctx:
        card = add_card(app_ctx.collection.storage, deck_id, front, back)
        console.print(f"[green]Added card {card.id} to deck {deck_id}[/green]")


@app.command()
def decks(ctx: typer.Context) -> None:
    """List decks and their card counts."""
    with open_context(ctx) as app_ctx:
        rows = list_decks(app_ctx.collection.storage)

    table = Table(title="Decks")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Cards", justify="right")
    for row in rows:
        table.add_row(str(row["id"]), row["name"], str(row["cards"]))
    console.print(table)


@app.command()
def queue(ctx: typer.Context, deck_id: int = typer.Argument(..., help="Deck id")) -> None:
    """Show today's queue for a deck."""
    with open_context(ctx) as app_ctx:
        built = app_ctx.collection.build_queue(deck_id)
        print_queue(built)


def print_queue(built: Queue) -> None:
    stats = built.stats
    console.print(
        f"[{STYLES['info']}]Review {stats.review}  Learning {stats.learning}  New {stats.new}[/]"
    )

    table = Table()
    table.add_column("#", justify="right")
    table.add_column("Card", justify="right")
    table.add_column("Queue")
    table.add_column("Next intervals", style=STYLES["dim"])

    for index, entry in enumerate(built.core, start=1):
        table.add_row(
            str(index),
            str(entry.card_id),
            style_queue(_queue_of(entry.states.current)),
            describe_states(entry.states),
        )
    console.print(table)


@app.command()
def answer(
    ctx: typer.Context,
    card_id: int = typer.Argument(..., help="Card id"),
    grade: str = typer.Argument(..., help="again|hard|good|easy or 1-4"),
) -> None:
    """Grade one card."""
    parsed = _parse_grade(grade)
    with open_context(ctx) as app_ctx:
        card = app_ctx.collection.answer_card(card_id, parsed)
        console.print(
            f"Card {card.id}: {style_queue(card.queue)}  due={card.due}  interval={card.interval}d"
        )


@app.command()
def study(ctx: typer.Context, deck_id: int = typer.Argument(..., help="Deck id")) -> None:
    """Study a deck until its queue is empty."""
    with open_context(ctx) as app_ctx:
        col = app_ctx.collection
        session_queue = col.build_queue(deck_id)
        total = len(session_queue)
        reviewed = 0

        if session_queue.is_empty:
            console.print("[green]Nothing due. Come back tomorrow.[/green]")
            return

        while (entry := session_queue.pop_front()) is not None:
            card = load_card(entry.card_id, col.storage)
            console.print(
                Panel(
                    card.front,
                    title=f"Card {reviewed + 1}/{total}  |  {style_queue(card.queue)}",
                    title_align="left",
                    border_style="cyan",
                    padding=(1, 2),
                )
            )
            Prompt.ask("[dim]Press Enter to reveal[/dim]", default="", show_default=False)
            console.print(Panel(card.back, border_style="green", padding=(1, 2)))
            console.print(f"[dim]{describe_states(entry.states)}[/dim]")

            choice = Prompt.ask("Grade", choices=["1", "2", "3", "4", "q"], default="3")
            if choice == "q":
                break

            updated = col.answer_card(entry.card_id, Answer(int(choice)))
            reviewed += 1

            if updated.queue == CardQueue.LEARNING:
                # Still learning: see it again later this session
                states = col.scheduler.next_states(get_current_card_state(updated))
                session_queue.push_back(QueueEntry(card_id=updated.id, states=states))
                total += 1

        console.print(f"\n[green]Session complete: {reviewed} answers recorded[/green]")


# =============================================================================
# Helpers
# =============================================================================


def _queue_of(state: CardState) -> CardQueue:
    if isinstance(state, NewState):
        return CardQueue.NEW
    if isinstance(state, LearningState):
        return CardQueue.LEARNING
    return CardQueue.REVIEW


def _parse_grade(grade: str) -> Answer:
    try:
        return Answer.parse(grade)
    except (KeyError, ValueError) as e:
        raise typer.BadParameter(f"Unknown grade {grade!r}; use again, hard, good, easy or 1-4") from e


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
