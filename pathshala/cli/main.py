"""
Pathshala CLI - terminal front end for math practice and progress.

Usage:
    pathshala practice -o addition -d easy   # Practice five problems
    pathshala progress                       # Totals, streak and badges
    pathshala activity --days 7              # Activity per day
    pathshala letter A --completed           # Record letter progress
    pathshala story add "Title" -w cat -w sun
    pathshala recover math_scores            # Reset a corrupt collection
"""

from __future__ import annotations

import asyncio
import random
import sys
import time
from collections.abc import Awaitable, Callable
from typing import Annotated, TypeVar

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.text import Text

from pathshala.config import Settings, get_settings
from pathshala.core.models import (
    Difficulty,
    IconKind,
    Language,
    LetterProgressRecord,
    Operation,
    PracticeProblem,
    UserProfile,
)
from pathshala.practice.problem_generator import ProblemGenerator
from pathshala.practice.session import PracticeSession
from pathshala.progress.analytics import ProgressAnalytics
from pathshala.storage.record_store import (
    Collection,
    CorruptRecordError,
    ReadStatus,
    RecordStore,
    RecordStoreError,
    SingletonKey,
)
from pathshala.storage.repository import RecordRepository
from pathshala.storage.sql_store import SqlRecordStore

T = TypeVar("T")

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="pathshala",
    help="🍎 Pathshala - math practice and learning progress",
    add_completion=False,
    rich_markup_mode="rich",
)

story_app = typer.Typer(help="Manage favourite stories")
app.add_typer(story_app, name="story")

console = Console()

ICON_EMOJI = {
    IconKind.APPLE: "🍎",
    IconKind.BALLOON: "🎈",
    IconKind.STAR: "⭐",
    IconKind.HEART: "❤️",
    IconKind.ANIMAL: "🐶",
}


def setup_logging(settings: Settings, verbose: bool = False) -> None:
    """Configure loguru sinks for the CLI process."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="1 MB", retention=5)


def open_store(settings: Settings) -> RecordStore:
    return SqlRecordStore(settings.get_database_url(), timeout=settings.store_timeout_seconds)


def _run(action: Callable[[RecordStore], Awaitable[T]]) -> T:
    """Open the store, run ``action`` and report store failures without a traceback."""
    settings = get_settings()

    async def runner() -> T:
        async with open_store(settings) as store:
            return await action(store)

    try:
        return asyncio.run(runner())
    except CorruptRecordError as e:
        console.print(f"[red]Saved data for '{e.key}' is damaged and could not be read.[/]")
        console.print(f"[yellow]Run [bold]pathshala recover {e.key}[/bold] to reset it.[/]")
        raise typer.Exit(2)
    except RecordStoreError as e:
        console.print(f"[red]Storage error: {e}[/]")
        raise typer.Exit(1)


# =============================================================================
# Practice
# =============================================================================


def render_problem(problem: PracticeProblem) -> Panel:
    """Question text plus one line per visual group."""
    body = Text(problem.question_text + "\n\n", style="bold")
    for group in problem.visual_groups:
        body.append(ICON_EMOJI[group.icon_kind] * group.count or "-", style=group.color)
        body.append(f"  ({group.count})\n", style="dim")
    return Panel(
        body,
        title=f"[bold cyan]{problem.operation.value.upper()}[/bold cyan]",
        subtitle=problem.difficulty.value,
        border_style="cyan",
        padding=(1, 2),
    )


@app.command()
def practice(
    operation: Annotated[
        Operation, typer.Option("--operation", "-o", help="Operation to practice")
    ] = Operation.ADDITION,
    difficulty: Annotated[
        Difficulty, typer.Option("--difficulty", "-d", help="Difficulty level")
    ] = Difficulty.EASY,
    rounds: Annotated[
        int, typer.Option("--rounds", "-n", min=1, help="Number of problems")
    ] = 5,
    seed: Annotated[
        int | None, typer.Option("--seed", help="Seed for reproducible problems")
    ] = None,
) -> None:
    """
    Practice multiple-choice math problems and save the score.

    Examples:
        pathshala practice                      # 5 easy additions
        pathshala practice -o division -d hard  # Hard division
    """
    settings = get_settings()
    session = PracticeSession(operation, difficulty, ProblemGenerator(random.Random(seed)))
    started = time.monotonic()

    for round_number in range(1, rounds + 1):
        problem = session.next_problem()
        console.print(f"[dim]Problem {round_number} of {rounds}[/dim]")
        console.print(render_problem(problem))

        options = session.options(settings.distractor_count, settings.distractor_max_attempts)
        console.print("   ".join(f"[bold]{value}[/bold]" for value in options))
        answer = Prompt.ask("Your answer", choices=[str(value) for value in options])

        if session.submit(int(answer)):
            console.print("[green]✓ Correct![/green]\n")
        else:
            console.print(f"[red]✗ Not quite. The answer is {problem.answer}.[/red]\n")

    async def finish(store: RecordStore):
        record = await session.finish(store)
        ProgressAnalytics(store).log_session((time.monotonic() - started) / 60)
        return record

    _run(finish)
    console.print(
        Panel(
            f"You got [bold green]{session.correct}[/] out of [bold]{session.attempted}[/] right!",
            title="🏆 Session complete",
            border_style="green",
        )
    )


# =============================================================================
# Progress
# =============================================================================


@app.command()
def progress() -> None:
    """Show overall progress, learning streak and badges."""
    settings = get_settings()

    async def collect(store: RecordStore):
        analytics = ProgressAnalytics(store, streak_window_days=settings.streak_window_days)
        return (
            await analytics.overall_progress(),
            await analytics.learning_streak(),
            await analytics.achievements(),
        )

    overall, streak, achievements = _run(collect)

    table = Table(title="📈 Learning Progress")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Letters learned", str(overall.letters_learned))
    table.add_row("Math problems solved", str(overall.math_problems_completed))
    table.add_row("Stories saved", str(overall.stories_created))
    table.add_row("Accuracy", f"{overall.accuracy_percent}%")
    table.add_row("Learning streak", f"{streak} day(s)")
    console.print(table)

    if achievements.badges:
        console.print("[bold]Badges:[/bold] " + "  ".join(achievements.badges))
    else:
        console.print("[dim]No badges yet[/dim]")
    console.print(f"[yellow]Next:[/yellow] {achievements.next_milestone_text}")


@app.command()
def activity(
    days: Annotated[
        int | None, typer.Option("--days", min=0, help="Look-back window in days")
    ] = None,
) -> None:
    """Show activity counts per day."""
    window = days if days is not None else get_settings().activity_window_days
    recent = _run(lambda store: ProgressAnalytics(store).recent_activity(window))

    if not recent.daily_activity_counts:
        console.print(f"[dim]No activity in the last {window} day(s)[/dim]")
        return

    table = Table(title=f"🗓 Activity (last {window} days)")
    table.add_column("Date", style="cyan")
    table.add_column("Activities", style="green", justify="right")
    for day, count in sorted(recent.daily_activity_counts.items()):
        table.add_row(day.isoformat(), str(count))
    console.print(table)
    console.print(
        f"[dim]{len(recent.recent_math_scores)} practice session(s), "
        f"{len(recent.recent_letter_records)} letter record(s)[/dim]"
    )


@app.command()
def letter(
    letter_id: Annotated[str, typer.Argument(help="Letter identifier, e.g. A or ক")],
    language: Annotated[
        Language, typer.Option("--language", "-l", help="Alphabet language")
    ] = Language.ENGLISH,
    completed: Annotated[
        bool, typer.Option("--completed/--incomplete", help="Whether the letter is learned")
    ] = True,
    score: Annotated[
        int | None, typer.Option("--score", help="Optional tracing score")
    ] = None,
) -> None:
    """Record progress on an alphabet letter."""
    record = LetterProgressRecord(
        letter_id=letter_id, language=language, completed=completed, score=score
    )
    _run(lambda store: RecordRepository(store).save_learning_progress(record))
    status = "learned" if completed else "practised"
    console.print(f"[green]✓ Letter {letter_id} ({language.value}) {status}[/green]")


@app.command()
def profile(
    name: Annotated[str | None, typer.Option("--name", help="Child's name")] = None,
    age: Annotated[int | None, typer.Option("--age", min=0, help="Child's age")] = None,
) -> None:
    """Show the profile and settings, or save a new profile with --name and --age."""

    async def handle(store: RecordStore):
        repo = RecordRepository(store)
        if name is not None and age is not None:
            await repo.save_user_profile(UserProfile(name=name, age=age))
            await repo.set_onboarding_completed(True)
        return await repo.get_user_profile(), await repo.get_settings()

    if (name is None) != (age is None):
        console.print("[red]Pass both --name and --age to save a profile[/]")
        raise typer.Exit(1)

    user, app_settings = _run(handle)

    table = Table(title="👤 Profile")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    if user is None:
        table.add_row("Profile", "[dim]not set[/dim]")
    else:
        table.add_row("Name", user.name)
        table.add_row("Age", str(user.age))
    table.add_row("Language", app_settings.language.value)
    table.add_row("Volume", f"{app_settings.volume:.0%}")
    table.add_row("Theme", app_settings.theme)
    console.print(table)


# =============================================================================
# Stories
# =============================================================================


@story_app.command("add")
def story_add(
    title: Annotated[str, typer.Argument(help="Story title")],
    content: Annotated[str, typer.Option("--content", "-c", help="Story text")] = "",
    words: Annotated[
        list[str] | None, typer.Option("--word", "-w", help="Word used in the story")
    ] = None,
) -> None:
    """Save a story to favourites."""
    _run(lambda store: RecordRepository(store).save_favorite_story(title, content, words or []))
    console.print(f"[green]✓ Saved '{title}'[/green]")


@story_app.command("list")
def story_list() -> None:
    """List favourite stories."""
    stories = _run(lambda store: RecordRepository(store).get_favorite_stories())
    if not stories:
        console.print("[dim]No favourite stories yet[/dim]")
        return

    table = Table(title="📖 Favourite Stories")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Words", style="white")
    table.add_column("Saved", style="dim")
    for index, story in enumerate(stories):
        table.add_row(
            str(index), story.title, ", ".join(story.words), story.timestamp.strftime("%Y-%m-%d")
        )
    console.print(table)


@story_app.command("delete")
def story_delete(
    index: Annotated[int, typer.Argument(help="Position shown by 'story list'")],
) -> None:
    """Delete a favourite story by position."""
    try:
        removed = _run(lambda store: RecordRepository(store).delete_favorite_story(index))
    except IndexError as e:
        console.print(f"[red]{e}[/]")
        raise typer.Exit(1)
    console.print(f"[green]✓ Deleted '{removed.title}'[/green]")


# =============================================================================
# Maintenance
# =============================================================================


def parse_store_key(value: str) -> Collection | SingletonKey:
    """Typer callback turning a key name into a Collection or SingletonKey."""
    for kind in (Collection, SingletonKey):
        try:
            return kind(value)
        except ValueError:
            continue
    choices = ", ".join(key.value for key in (*Collection, *SingletonKey))
    raise typer.BadParameter(f"'{value}' is not a stored key. Choose from: {choices}")


@app.command()
def recover(
    key: Annotated[
        str,
        typer.Argument(
            help="Collection or singleton to check, e.g. math_scores or settings",
            callback=parse_store_key,
        ),
    ],
) -> None:
    """Check a stored collection or singleton and reset it if its data is damaged."""

    async def handle(store: RecordStore):
        if isinstance(key, Collection):
            outcome = await store.load(key)
        else:
            outcome = await store.load_value(key)
        if outcome.status is ReadStatus.CORRUPT:
            await store.reset(key)
        return outcome

    outcome = _run(handle)
    if outcome.status is ReadStatus.CORRUPT:
        console.print(f"[yellow]'{key.value}' was damaged and has been reset.[/]")
    elif outcome.status is ReadStatus.ABSENT:
        console.print(f"[dim]'{key.value}' is empty[/dim]")
    elif isinstance(key, Collection):
        console.print(f"[green]✓ '{key.value}' is healthy ({len(outcome.records)} records)[/]")
    else:
        console.print(f"[green]✓ '{key.value}' is healthy[/]")


@app.command()
def reset(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Delete all saved progress, stories, profile and settings."""
    if not yes and not Confirm.ask("Delete all saved data?", default=False):
        console.print("[dim]Nothing deleted[/dim]")
        return
    _run(lambda store: RecordRepository(store).clear_all())
    console.print("[green]✓ All data cleared[/green]")


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """
    🍎 Pathshala - math practice and learning progress.

    Data is kept in ~/.pathshala (override with PATHSHALA_DATA_DIR).
    """
    setup_logging(get_settings(), verbose)


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
