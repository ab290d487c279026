"""Lingua command line tool: manage cards, find duplicates and practice."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import random
from datetime import UTC, datetime
from pathlib import Path

import click
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.table import Table

from lingua.core.logging_config import configure_logging
from lingua.core.practice_session import PracticeSessionEngine
from lingua.core.settings import Settings, get_settings
from lingua.domain.duplicates.models.duplicate_models import (
    PRESET_NAMES,
    DuplicateDetectionConfig,
)
from lingua.domain.duplicates.services.detect_duplicates import (
    DetectDuplicates,
    DetectDuplicatesRequest,
)
from lingua.domain.learning.models.card_models import NounData
from lingua.domain.learning.models.practice_models import PracticeItem
from lingua.domain.learning.models.preferences import ExercisePreferences
from lingua.domain.learning.services.build_practice_queue import PracticeQueueBuilder
from lingua.domain.learning.services.schedule_exercise import ExerciseScheduler
from lingua.domain.shared.models import ExerciseType
from lingua.infrastructure.database.card_store import CardStore
from lingua.infrastructure.messaging.event_bus import EventBus
from lingua.infrastructure.repositories.card_file_repository import (
    CardFileRepository,
)
from lingua.utils.text_similarity import normalize_text

logger = logging.getLogger(__name__)
console = Console()

SELF_ASSESSED = frozenset(
    {ExerciseType.READING_RECOGNITION, ExerciseType.CONJUGATION_PRACTICE}
)


def _scheduler_from(settings: Settings) -> ExerciseScheduler:
    return ExerciseScheduler(
        base_interval_days=settings.base_interval_days,
        streak_factor=settings.streak_factor,
        retry_interval_days=settings.retry_interval_days,
        max_interval_days=settings.max_interval_days,
    )


def _preferences_for(types: tuple[str, ...]) -> ExercisePreferences:
    if not types:
        return ExercisePreferences.defaults()
    return ExercisePreferences(enabled_types=frozenset(ExerciseType(t) for t in types))


@click.group()
@click.option("--db", "db_path", default=None, help="SQLite database path")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, db_path: str | None, verbose: bool) -> None:
    """Spaced-repetition flashcard practice and duplicate detection."""
    settings = get_settings()
    configure_logging(settings, verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["store"] = CardStore(db_path or settings.database_path)


@cli.command("import-cards")
@click.argument(
    "file", required=False, type=click.Path(dir_okay=False, path_type=Path)
)
@click.pass_context
def import_cards(ctx: click.Context, file: Path | None) -> None:
    """Import cards from a JSON FILE (default: configured cards file)."""
    settings: Settings = ctx.obj["settings"]
    store: CardStore = ctx.obj["store"]
    file = file or Path(settings.cards_json_path)
    try:
        cards = CardFileRepository(file).load()
    except FileNotFoundError as e:
        console.print(f"[red]❌ Cards file not found: {file}[/red]")
        raise SystemExit(1) from e
    except PydanticValidationError as e:
        logger.error(f"Rejected cards file {file}: {e}")
        console.print(f"[red]❌ Invalid cards file: {e.error_count()} errors[/red]")
        raise SystemExit(1) from e

    count = store.add_cards(cards)
    console.print(f"[green]✅ Imported {count} cards from {file}[/green]")


@cli.command("export-cards")
@click.argument(
    "file", required=False, type=click.Path(dir_okay=False, path_type=Path)
)
@click.option("--language", default=None, help="Only export this language")
@click.pass_context
def export_cards(ctx: click.Context, file: Path | None, language: str | None) -> None:
    """Export cards to a JSON FILE (default: configured cards file)."""
    settings: Settings = ctx.obj["settings"]
    store: CardStore = ctx.obj["store"]
    file = file or Path(settings.cards_json_path)
    cards = store.get_all_cards(language)
    CardFileRepository(file).save(cards)
    console.print(f"[green]✅ Exported {len(cards)} cards to {file}[/green]")


@cli.command()
@click.option(
    "--preset",
    type=click.Choice(PRESET_NAMES),
    default=None,
    help="Detection preset (default from settings)",
)
@click.option("--language", default=None, help="Only analyse this language")
@click.option(
    "--all-languages",
    is_flag=True,
    help="Also compare cards across different languages",
)
@click.pass_context
def duplicates(
    ctx: click.Context, preset: str | None, language: str | None, all_languages: bool
) -> None:
    """List likely duplicate cards."""
    settings: Settings = ctx.obj["settings"]
    store: CardStore = ctx.obj["store"]

    preset = preset or settings.duplicate_preset
    config = DuplicateDetectionConfig.from_preset(preset)
    if all_languages:
        config = dataclasses.replace(config, same_language_only=False)

    request = DetectDuplicatesRequest(
        cards=store.get_all_cards(), language=language, config=config
    )
    result = asyncio.run(DetectDuplicates(EventBus()).call(request))

    if not result.duplicate_map:
        console.print(
            f"[green]No duplicates among {result.cards_analyzed} cards[/green]"
        )
        return

    table = Table(title=f"Duplicates ({preset})")
    table.add_column("Card", style="cyan")
    table.add_column("Duplicate", style="magenta")
    table.add_column("Strategy", style="yellow")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Reason", style="white")

    cards = {card.id: card for card in request.cards}
    for card_id, matches in result.duplicate_map.items():
        card = cards[card_id]
        for match in matches:
            other = match.duplicate_card
            table.add_row(
                f"{card.front_text} → {card.back_text}",
                f"{other.front_text} → {other.back_text}",
                match.strategy.display_name,
                f"{match.similarity_percent}%",
                match.reason,
            )

    console.print(table)
    console.print(
        f"\n[yellow]{result.duplicate_count} of {result.cards_analyzed} cards "
        f"have duplicates[/yellow]"
    )


@cli.command()
@click.option("--language", default=None, help="Only this language")
@click.pass_context
def due(ctx: click.Context, language: str | None) -> None:
    """Show exercises that are due now."""
    settings: Settings = ctx.obj["settings"]
    store: CardStore = ctx.obj["store"]

    builder = PracticeQueueBuilder(settings.min_multiple_choice_pool)
    queue = builder.build(
        store.get_all_cards(),
        ExercisePreferences.defaults(),
        datetime.now(UTC),
        active_language=language or settings.active_language,
    )

    if not queue:
        console.print("[green]Nothing is due. 🎉[/green]")
        return

    table = Table(title=f"Due Exercises ({len(queue)})")
    table.add_column("Front", style="cyan")
    table.add_column("Back", style="green")
    table.add_column("Exercise", style="yellow")
    table.add_column("Mastery", style="magenta")

    for item in queue:
        score = item.card.get_exercise_score(item.exercise_type)
        table.add_row(
            item.card.front_text,
            item.card.back_text,
            item.exercise_type.display_name,
            score.mastery_level.value if score else "New",
        )
    console.print(table)


def _expected_answer(item: PracticeItem) -> str:
    card = item.card
    match item.exercise_type:
        case ExerciseType.REVERSE_TRANSLATION:
            return card.front_text
        case ExerciseType.ARTICLE_SELECTION:
            if isinstance(card.word_data, NounData):
                return card.word_data.gender
            return card.german_article or ""
        case ExerciseType.SENTENCE_BUILDING:
            return card.examples[0]
        case _:
            return card.back_text


def _prompt_for(item: PracticeItem) -> str:
    card = item.card
    match item.exercise_type:
        case ExerciseType.REVERSE_TRANSLATION:
            return card.back_text
        case ExerciseType.SENTENCE_BUILDING:
            words = card.examples[0].split()
            random.shuffle(words)
            return " / ".join(words)
        case _:
            return card.front_text


def _ask(engine: PracticeSessionEngine) -> bool | None:
    """Run one exercise on the terminal; None means the learner skipped."""
    state = engine.state
    item = state.current_item
    if item is None:
        raise RuntimeError("No active practice item")

    console.print(
        f"\n[bold blue]{state.current_index + 1}/{state.total_count}[/bold blue] "
        f"[dim]{item.exercise_type.display_name}[/dim]"
    )
    console.print(f"[bold]{_prompt_for(item)}[/bold]")
    expected = _expected_answer(item)

    if item.exercise_type in SELF_ASSESSED:
        click.prompt("Press Enter to reveal", default="", show_default=False)
        console.print(f"[green]{expected}[/green]")
        return click.confirm("Did you know it?", default=True)

    if state.multiple_choice_options:
        for number, option in enumerate(state.multiple_choice_options, 1):
            console.print(f"  {number}. {option}")
        choice = click.prompt(
            "Answer (0 to skip)",
            type=click.IntRange(0, len(state.multiple_choice_options)),
        )
        if choice == 0:
            return None
        answer = state.multiple_choice_options[choice - 1]
    else:
        answer = click.prompt("Answer (empty to skip)", default="", show_default=False)
        if not answer.strip():
            return None
        engine.update_user_input(answer)

    is_correct = normalize_text(answer) == normalize_text(expected)
    if is_correct:
        console.print("[green]✅ Correct[/green]")
    else:
        console.print(f"[red]❌ Expected: {expected}[/red]")
    return is_correct


@cli.command()
@click.option("--language", default=None, help="Only practice this language")
@click.option(
    "--type",
    "types",
    multiple=True,
    type=click.Choice([t.value for t in ExerciseType.implemented()]),
    help="Exercise types to practice (repeatable, default all)",
)
@click.pass_context
def practice(ctx: click.Context, language: str | None, types: tuple[str, ...]) -> None:
    """Run an interactive practice session."""
    settings: Settings = ctx.obj["settings"]
    store: CardStore = ctx.obj["store"]
    asyncio.run(_run_practice(settings, store, language, _preferences_for(types)))


async def _run_practice(
    settings: Settings,
    store: CardStore,
    language: str | None,
    preferences: ExercisePreferences,
) -> None:
    async def on_complete(reviewed: int) -> None:
        # Still active here, so the stats describe the finished session
        stats = engine.session_stats()
        console.print(
            f"\n[bold green]Session complete: {reviewed} reviewed, "
            f"{stats.accuracy:.0%} correct in "
            f"{int(stats.duration.total_seconds())}s[/bold green]"
        )

    engine = PracticeSessionEngine(
        get_all_cards=store.get_all_cards,
        get_review_cards=store.get_review_cards,
        update_card=store.update_card,
        on_session_complete=on_complete,
        preferences=preferences,
        scheduler=_scheduler_from(settings),
        queue_builder=PracticeQueueBuilder(settings.min_multiple_choice_pool),
        active_language=language or settings.active_language,
        option_count=settings.multiple_choice_options,
    )

    state = engine.start_session()
    if state.no_due_items:
        console.print("[green]Nothing is due. 🎉[/green]")
        return

    try:
        while engine.is_session_active:
            result = _ask(engine)
            if result is None:
                await engine.skip_exercise()
                continue
            engine.check_answer(result)
            await engine.confirm_answer_and_advance()
    except click.Abort:
        logger.info("Practice session aborted by user")
        await engine.end_session()
        raise


if __name__ == "__main__":
    cli()
