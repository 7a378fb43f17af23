"""
Typer CLI for the mastery analytics engine.

Commands:
    mastery confidence FILE            - Confidence score from recent attempts
    mastery cycle FILE --difficulty    - Verdict for the last five attempts
    mastery peak-time FILE             - Best time-of-day bucket
    mastery recommend FILE --hour      - Pomodoro focus/break recommendation
    mastery bucket HOUR                - Time bucket for an hour of day
    mastery db init                    - Initialize database tables

FILE is a JSON list of attempt records, e.g.
    [{"accuracy": 1, "responseTime": 30, "expectedSeconds": 40,
      "timestamp": "2025-01-06T09:15:00"}]

Usage:
    mastery --help
    mastery confidence attempts.json
    mastery recommend attempts.json --hour 9 --json
"""

from __future__ import annotations

import json
import sys
from datetime import datetime
from pathlib import Path

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from src.analytics.confidence import ConfidenceEngine
from src.analytics.cycle import analyze_cycle
from src.analytics.peak_time import detect_peak_bucket
from src.analytics.schedule import most_recent, recommend_from_history
from src.core.attempt import Attempt, expected_seconds_for
from src.core.time_buckets import classify_hour

app = typer.Typer(
    help="mastery: adaptive mastery and scheduling analytics",
    no_args_is_help=True,
)

console = Console()


def _configure_logging(level: str | None = None) -> None:
    settings = get_settings()
    logger.remove()
    logger.add(
        sys.stderr,
        level=level or settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB", retention=5)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log computations at DEBUG level"),
):
    """Adaptive mastery and scheduling analytics over attempt histories."""
    _configure_logging("DEBUG" if verbose else None)


# ========================================
# Helpers
# ========================================


def _load_attempts(path: Path) -> list[Attempt]:
    """Read a JSON list of attempt records; exits with code 1 on bad input."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        rprint(f"[red]✗[/red] File not found: {path}")
        raise typer.Exit(code=1)
    except json.JSONDecodeError as e:
        rprint(f"[red]✗[/red] Invalid JSON in {path}: {e}")
        raise typer.Exit(code=1)

    if not isinstance(payload, list):
        rprint(f"[red]✗[/red] Expected a JSON list of attempts in {path}")
        raise typer.Exit(code=1)

    attempts = [Attempt.from_record(item) for item in payload if isinstance(item, dict)]
    skipped = len(payload) - len(attempts)
    if skipped:
        logger.warning(f"Skipped {skipped} non-object entries in {path}")
    return attempts


def _emit_json(data: dict) -> None:
    typer.echo(json.dumps(data, indent=2, default=str))


# ========================================
# ANALYTICS COMMANDS
# ========================================


@app.command("confidence")
def confidence_cmd(
    file: Path = typer.Argument(..., help="JSON list of attempts, most recent first"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Compute the confidence score (70% accuracy, 30% speed)."""
    engine = ConfidenceEngine.from_settings()
    attempts = _load_attempts(file)
    result = engine.compute(most_recent(attempts, engine.window))

    if as_json:
        _emit_json(result.to_dict())
        return

    table = Table(title="Confidence")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Confidence", f"{result.confidence:.2f}")
    table.add_row("Accuracy score", f"{result.accuracy_score:.2f}")
    table.add_row("Speed score", f"{result.speed_score:.2f}")
    table.add_row("Attempts used", str(result.attempts_used))
    console.print(table)


@app.command("cycle")
def cycle_cmd(
    file: Path = typer.Argument(..., help="JSON list of attempts, most recent first"),
    difficulty: str = typer.Option("medium", "--difficulty", "-d", help="Session difficulty: easy, medium, hard"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Analyze the last five attempts as one completed cycle."""
    settings = get_settings()
    attempts = most_recent(_load_attempts(file), settings.cycle_size)
    if not attempts:
        rprint("[yellow]⚠[/yellow] No attempts to analyze")
        raise typer.Exit(code=1)

    summary = analyze_cycle(
        attempts,
        expected_seconds_for(difficulty),
        cycle_size=settings.cycle_size,
        mastery_accuracy=settings.mastery_accuracy_threshold,
    )

    if as_json:
        _emit_json(summary.to_dict())
        return

    table = Table(title=f"Cycle Summary ({difficulty})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Accuracy", f"{summary.accuracy_percent}%")
    table.add_row("Correct / wrong", f"{summary.correct_count} / {summary.wrong_count}")
    table.add_row("Median time", f"{summary.median_time:g}s (expected {summary.expected_seconds:g}s)")
    table.add_row("Mastery achieved", "[green]yes[/green]" if summary.mastery_achieved else "[red]no[/red]")
    table.add_row("Weakness", summary.weakness_tag.value)
    table.add_row("Next action", summary.next_action.value)
    console.print(table)


@app.command("peak-time")
def peak_time_cmd(
    file: Path = typer.Argument(..., help="JSON list of timestamped attempts"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Find the time-of-day bucket with the best accuracy."""
    settings = get_settings()
    result = detect_peak_bucket(_load_attempts(file), min_attempts=settings.peak_min_attempts)

    if as_json:
        _emit_json(result.to_dict())
        return

    if not result.ready:
        rprint(
            f"[yellow]⚠[/yellow] Not enough data yet to determine peak study time "
            f"({result.attempts_analyzed}/{settings.peak_min_attempts} attempts)"
        )
        return

    table = Table(title="Accuracy by Time of Day")
    table.add_column("Bucket", style="cyan")
    table.add_column("Attempts", justify="right")
    table.add_column("Accuracy", justify="right")
    for bucket, stats in result.bucket_stats.items():
        style = "bold green" if bucket == result.bucket else None
        table.add_row(bucket.value, str(stats.attempts), f"{round(stats.accuracy * 100)}%", style=style)
    console.print(table)

    if result.bucket is None:
        rprint("[yellow]⚠[/yellow] No bucket has any correct answers yet")
    else:
        rprint(f"Peak study time: [bold green]{result.bucket.value}[/bold green] ({result.accuracy_percent}%)")


@app.command("recommend")
def recommend_cmd(
    file: Path = typer.Argument(..., help="JSON list of timestamped attempts"),
    hour: int | None = typer.Option(None, "--hour", min=0, max=23, help="Hour of day (default: now)"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
) -> None:
    """Recommend Pomodoro focus/break durations."""
    settings = get_settings()
    current_hour = datetime.now().hour if hour is None else hour
    recommendation = recommend_from_history(
        _load_attempts(file),
        current_hour,
        peak_min_attempts=settings.peak_min_attempts,
        recent_window=settings.schedule_recent_window,
        min_recent=settings.schedule_min_recent,
    )

    if as_json:
        _emit_json(recommendation.to_dict())
        return

    table = Table(title="Pomodoro Recommendation")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Focus", f"{recommendation.focus_minutes} min")
    table.add_row("Break", f"{recommendation.break_minutes} min")
    table.add_row("Reason", recommendation.reason_code.value)
    for key, value in recommendation.context.items():
        table.add_row(key.replace("_", " ").capitalize(), str(value))
    console.print(table)


@app.command("bucket")
def bucket_cmd(
    hour: int = typer.Argument(..., help="Hour of day, 0-23"),
) -> None:
    """Show the time-of-day bucket for an hour."""
    try:
        bucket = classify_hour(hour)
    except ValueError as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    typer.echo(bucket.value)


# ========================================
# DATABASE COMMANDS
# ========================================

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """
    Initialize database tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    from src.db.database import init_db

    init_db()
    rprint(f"[green]✓[/green] Database initialized at {get_settings().database_url}")


@app.command("info")
def show_info() -> None:
    """Show configuration."""
    settings = get_settings()

    table = Table(title="mastery-engine Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Database URL", settings.database_url)
    table.add_row("Log Level", settings.log_level)
    table.add_row("Confidence window", str(settings.confidence_window))
    table.add_row(
        "Confidence weights",
        f"{settings.confidence_accuracy_weight} accuracy / {settings.confidence_speed_weight} speed",
    )
    table.add_row("Cycle", f"{settings.cycle_size} attempts, {settings.cycle_scope} scope")
    for name, seconds in settings.get_difficulty_seconds().items():
        table.add_row(f"Expected ({name})", f"{seconds:g}s")

    console.print(table)


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
