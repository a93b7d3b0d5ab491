"""vocadrill CLI: vocabulary management, review drills and statistics."""

import asyncio
import json
import logging
import sys
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer

from vocadrill.application.config import AppConfig, resolve_config
from vocadrill.domain.errors import DuplicateItemError, StorageError
from vocadrill.domain.review.models import ReviewItem

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="vocadrill: spaced-repetition vocabulary trainer.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage vocadrill configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


class ReviewMode(str, Enum):
    FLASHCARD = "flashcard"
    QUIZ = "quiz"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _config_from_ctx(ctx: typer.Context) -> AppConfig:
    """Resolve config with the global options and apply its log level."""
    obj = ctx.obj or {}
    config = resolve_config(
        {
            "data_dir": obj.get("data_dir"),
            "storage_backend": obj.get("storage_backend"),
            "verbose": obj.get("verbose"),
        }
    )
    logging.getLogger("vocadrill").setLevel(_LOG_LEVELS.get(config.verbose, logging.DEBUG))
    return config


def _build_service(ctx: typer.Context):
    from vocadrill.application.factory import get_review_repository
    from vocadrill.application.review_service import ReviewService

    config = _config_from_ctx(ctx)
    return ReviewService(get_review_repository(config), config)


def _run(coro) -> Any:
    """Run a coroutine, turning storage failures into a clean exit."""
    try:
        return asyncio.run(coro)
    except StorageError as e:
        typer.secho(f"Storage error: {e}", fg="red", err=True)
        raise typer.Exit(1) from e


def _item_to_dict(item: ReviewItem) -> dict[str, Any]:
    data = asdict(item)
    data["last_reviewed"] = item.last_reviewed.isoformat() if item.last_reviewed else None
    data["next_review"] = item.next_review.isoformat() if item.next_review else None
    return data


def _describe_due(item: ReviewItem) -> str:
    if item.next_review is None:
        return "new"
    return f"due {item.next_review:%Y-%m-%d %H:%M}"


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None, typer.Option("--data-dir", help="Directory holding the JSON store.")
    ] = None,
    storage: Annotated[
        str | None, typer.Option("--storage", help="Storage backend: json, memory.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for vocadrill."""
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    ctx.obj["storage_backend"] = storage
    # 0 means "not given" so the configured verbosity applies
    ctx.obj["verbose"] = verbose or None


# ---------------------------------------------------------------------------
# Vocabulary commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    term: Annotated[str, typer.Argument(help="Term to learn.")],
    definition: Annotated[str, typer.Argument(help="Meaning or translation.")],
    item_id: Annotated[
        str | None, typer.Option("--id", help="Explicit item id. Generated if omitted.")
    ] = None,
):
    """[bold green]Add[/bold green] a term to the vocabulary set."""
    service = _build_service(ctx)
    try:
        item = _run(service.add_term(term, definition, item_id=item_id))
    except DuplicateItemError as e:
        typer.secho(str(e), fg="red", err=True)
        raise typer.Exit(1) from e
    typer.secho(f"Added {item.id}: {item.term}", fg="green")


@app.command()
def remove(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Id of the item to delete.")],
):
    """Delete a term and its review history."""
    service = _build_service(ctx)
    if not _run(service.remove_term(item_id)):
        typer.secho(f"No item with id '{item_id}'.", fg="yellow", err=True)
        raise typer.Exit(1)
    typer.echo(f"Removed {item_id}")


@app.command("list")
def list_items(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List every term with its scheduling state."""
    from vocadrill.application.review.scheduler import mastery_level

    items = _run(_build_service(ctx).list_items())

    if json_output:
        typer.echo(json.dumps([_item_to_dict(i) for i in items], indent=2))
        return

    if not items:
        typer.secho("No terms yet. Add one with 'vocadrill add'.", fg="yellow")
        return

    for item in items:
        typer.echo(
            f"{item.id}  {item.term} = {item.definition}  "
            f"[{mastery_level(item).value}, ef={item.ease_factor:.2f}, "
            f"ivl={item.interval_days}d, {_describe_due(item)}]"
        )


@app.command()
def due(
    ctx: typer.Context,
    limit: Annotated[
        int | None, typer.Option(help="Maximum items. Defaults to the session limit.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show the items due for review, most urgent first."""
    items = _run(_build_service(ctx).get_due_items(limit))

    if json_output:
        typer.echo(json.dumps([_item_to_dict(i) for i in items], indent=2))
        return

    if not items:
        typer.secho("Nothing due. Come back later.", fg="green")
        return

    typer.echo(f"Due: {len(items)}")
    for item in items:
        typer.echo(f"  {item.id}  {item.term}  ({_describe_due(item)})")


@app.command()
def answer(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Id of the reviewed item.")],
    quality: Annotated[
        int | None, typer.Option(help="Quality 0-5 (out-of-range values are clamped).")
    ] = None,
    rating: Annotated[
        str | None, typer.Option(help="Flashcard button: wrong, hard, good, easy.")
    ] = None,
    correct: Annotated[
        bool | None,
        typer.Option("--correct/--incorrect", help="Quiz result, combined with --confidence."),
    ] = None,
    confidence: Annotated[str, typer.Option(help="Quiz confidence: high or low.")] = "low",
):
    """Record a single answer without starting a drill."""
    given = [v for v in (quality, rating, correct) if v is not None]
    if len(given) != 1:
        typer.secho(
            "Pass exactly one of --quality, --rating or --correct/--incorrect.",
            fg="red",
            err=True,
        )
        raise typer.Exit(2)

    service = _build_service(ctx)
    if quality is not None:
        updated = _run(service.record_review(item_id, quality))
    elif rating is not None:
        try:
            updated = _run(service.record_flashcard(item_id, rating))
        except ValueError as e:
            typer.secho(str(e), fg="red", err=True)
            raise typer.Exit(2) from e
    else:
        updated = _run(service.record_quiz_answer(item_id, bool(correct), confidence))

    if updated is None:
        typer.secho(f"No item with id '{item_id}'.", fg="yellow", err=True)
        raise typer.Exit(1)

    typer.echo(
        f"{updated.term}: next review in {updated.interval_days}d "
        f"(ef={updated.ease_factor:.2f}, streak={updated.repetitions})"
    )


@app.command()
def review(
    ctx: typer.Context,
    limit: Annotated[
        int | None, typer.Option(help="Maximum items. Defaults to the session limit.")
    ] = None,
    mode: Annotated[
        ReviewMode,
        typer.Option(
            "--mode",
            help=(
                "Drill type. "
                "'flashcard' = rate yourself Wrong/Hard/Good/Easy. "
                "'quiz' = say whether you were right and how confident you felt."
            ),
        ),
    ] = ReviewMode.FLASHCARD,
):
    """Run an interactive review session over the due items.

    Each answer is scheduled immediately; a session summary is appended to
    the study history at the end.
    """
    from vocadrill.application.review.quality import rating_to_quality, response_to_quality
    from vocadrill.domain.constants import PASSING_QUALITY

    service = _build_service(ctx)

    async def run():
        items = await service.get_due_items(limit)
        if not items:
            typer.secho("Nothing due. Come back later.", fg="green")
            return

        qualities: list[int] = []
        for index, item in enumerate(items, start=1):
            typer.secho(f"\n[{index}/{len(items)}] {item.term}", bold=True)
            typer.prompt("Press Enter to reveal", default="", show_default=False)
            typer.echo(f"  -> {item.definition}")

            if mode is ReviewMode.FLASHCARD:
                while True:
                    choice = typer.prompt("Rate (wrong/hard/good/easy)", default="good")
                    try:
                        quality = rating_to_quality(choice)
                        break
                    except ValueError:
                        typer.secho("Pick one of: wrong, hard, good, easy.", fg="yellow")
            else:
                was_correct = typer.confirm("Did you get it right?", default=True)
                confidence = typer.prompt("Confidence (high/low)", default="high")
                quality = response_to_quality(was_correct, confidence)

            updated = await service.record_review(item.id, quality)
            if updated is None:
                typer.secho(f"  {item.id} was removed meanwhile; skipped.", fg="yellow")
                continue
            qualities.append(int(quality))
            typer.echo(f"  next review in {updated.interval_days}d")

        if not qualities:
            return

        correct = sum(1 for q in qualities if q >= PASSING_QUALITY)
        await service.log_session(
            items_studied=len(qualities),
            correct_answers=correct,
            average_quality=sum(qualities) / len(qualities),
            mode=mode.value,
        )
        typer.secho(f"\nSession done: {correct}/{len(qualities)} correct.", fg="green")

    _run(run())


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show study statistics: due items, streaks, mastery and time estimate."""
    result = _run(_build_service(ctx).get_statistics())

    if json_output:
        typer.echo(json.dumps(asdict(result), indent=2))
        return

    minutes, seconds = divmod(result.estimated_time, 60)
    typer.echo(f"Items: {result.total_items}  Mastered: {result.mastered_items}"
               f"  Learning: {result.learning_items}")
    typer.echo(f"Due now: {result.items_to_review}  Overdue: {result.overdue_items}"
               f"  Estimated time: {minutes}m {seconds:02d}s")
    typer.echo(f"Reviews: {result.total_reviews}  Correct: {result.correct_reviews}"
               f"  Success rate: {result.success_rate:.0%}"
               f"  Avg quality: {result.average_quality:.2f}")
    typer.echo(f"Streak: {result.study_streak}d  Longest: {result.longest_streak}d")


@app.command()
def target(
    ctx: typer.Context,
    level: Annotated[
        str | None, typer.Option(help="Learner level: beginner, intermediate, advanced.")
    ] = None,
):
    """Suggest how many reviews to do today."""
    try:
        count = _run(_build_service(ctx).get_daily_target(level))
    except ValueError as e:
        typer.secho(str(e), fg="red", err=True)
        raise typer.Exit(2) from e
    typer.echo(f"Suggested reviews today: {count}")


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@app.command()
def serve(
    port: Annotated[int, typer.Option(help="Port to bind the server to.")] = 8777,
    host: Annotated[str, typer.Option(help="Host to bind the server to.")] = "127.0.0.1",
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Start the HTTP API used by the web and mobile front ends."""
    import uvicorn

    typer.echo(f"Starting vocadrill server on http://{host}:{port}")
    uvicorn.run("vocadrill.server:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _config_from_ctx(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


if __name__ == "__main__":
    app()
