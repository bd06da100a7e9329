#!/usr/bin/env python3
"""
SoakMap - Data Pipeline Entry Point

Ingests scraped springs without creating duplicates, validates stored
springs, and cleans up duplicates already in the database.

Usage:
    python -m soakmap.main ingest data/scraped/idaho.json
    python -m soakmap.main dedupe
    python -m soakmap.main dedupe --fix-duplicates
    python -m soakmap.main validate --fix
    python -m soakmap.main status
"""

from pathlib import Path

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from soakmap.config import settings, DATA_SOURCES
from soakmap.deduplication import DeduplicationService, RepositoryError
from soakmap.ingest import run_ingest
from soakmap.repository import SqlSpringRepository
from soakmap.utils.logging import set_command, setup_logging
from soakmap.validation import apply_fixes, validate_springs
from soakmap.validation import delete_invalid as delete_invalid_springs


console = Console()


def get_repository() -> SqlSpringRepository:
    """Repository used by the CLI commands."""
    return SqlSpringRepository()


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write logs to this file (rotated)",
)
@click.pass_context
def cli(ctx, debug: bool, log_file: Path | None):
    """SoakMap Data Pipeline"""
    if debug or log_file:
        setup_logging(level="DEBUG" if debug else None, log_file=log_file)
    set_command(ctx.invoked_subcommand or "pipeline")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--dry-run", is_flag=True, help="Check for duplicates without inserting")
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Insert at most this many new springs")
@click.option("--batch-size", type=click.IntRange(min=1), default=None, help="Springs per insert batch")
def ingest(file: Path, dry_run: bool, limit: int | None, batch_size: int | None):
    """
    Insert scraped springs from FILE, skipping duplicates of existing springs.

    FILE is a JSON array of springs as written by a scraper.
    """
    console.print(f"\n[bold blue]SoakMap - Spring Ingestion[/bold blue]")
    console.print(f"File: {file}")
    console.print(f"Dry run: {dry_run}\n")

    repository = get_repository()
    service = DeduplicationService(repository)

    try:
        result = run_ingest(file, service, repository, dry_run=dry_run, limit=limit, batch_size=batch_size)
    except RepositoryError as e:
        logger.exception("Ingestion failed")
        raise click.ClickException(str(e))
    except ValueError as e:
        # Malformed JSON or not an array of springs
        logger.error(f"Cannot read {file}: {e}")
        raise click.ClickException(f"Cannot read {file}: {e}")

    table = Table(title="Ingestion Summary")
    table.add_column("Loaded")
    table.add_column("Invalid")
    table.add_column("New")
    table.add_column("Duplicates")
    table.add_column("Inserted")
    table.add_column("Duration")

    duration = f"{result.duration_seconds:.1f}s" if result.duration_seconds is not None else "-"
    table.add_row(
        str(result.loaded),
        str(result.invalid),
        str(result.new),
        str(len(result.duplicates)),
        str(result.inserted),
        duration,
    )
    console.print(table)

    if result.duplicates:
        dupes = Table(title="Rejected Duplicates")
        dupes.add_column("Name")
        dupes.add_column("State")
        dupes.add_column("Matches Existing")

        for dupe in result.duplicates:
            dupes.add_row(dupe.draft.name, dupe.draft.state, str(dupe.existing_id))

        console.print(dupes)

    for error in result.errors[:10]:
        console.print(f"[yellow]Invalid: {error}[/yellow]")
    if len(result.errors) > 10:
        console.print(f"[dim]... and {len(result.errors) - 10} more invalid springs[/dim]")


@cli.command()
@click.option("--fix-duplicates", is_flag=True, help="Delete the duplicates that are found")
def dedupe(fix_duplicates: bool):
    """Find duplicate springs in the database and optionally merge them."""
    console.print("\n[bold blue]SoakMap - Duplicate Check[/bold blue]\n")

    service = DeduplicationService(get_repository())

    try:
        groups = service.find_duplicate_groups()
    except RepositoryError as e:
        logger.exception("Duplicate check failed")
        raise click.ClickException(str(e))

    if not groups:
        console.print("[green]No duplicates found![/green]")
        return

    total = sum(len(g.delete_ids) for g in groups)
    console.print(f"[yellow]Found {len(groups)} duplicate groups ({total} springs to merge)[/yellow]\n")

    limit = settings.dedup.report_limit
    table = Table()
    table.add_column("Keep")
    table.add_column("State")
    table.add_column("Merge")
    table.add_column("Spread")

    for group in groups[:limit]:
        keep = group.keep
        others = ", ".join(f"\"{s.name}\" ({s.score})" for s in group.springs[1:])
        if group.chained:
            others += " [dim](chained)[/dim]"
        spread = f"{group.spread_meters:.0f}m" if group.spread_meters is not None else "-"
        table.add_row(f"\"{keep.name}\" ({keep.score})", keep.record.state, others, spread)

    console.print(table)
    if len(groups) > limit:
        console.print(f"[dim]... and {len(groups) - limit} more groups[/dim]")

    if not fix_duplicates:
        console.print("\nRun with --fix-duplicates to merge these")
        return

    console.print("\nMerging duplicates...")
    try:
        result = service.merge_with_report(groups)
    except RepositoryError as e:
        logger.exception("Merge failed")
        raise click.ClickException(str(e))

    console.print(f"[green]Merged {result.deleted} duplicate springs[/green]")
    for skipped in result.skipped:
        ids = ", ".join(map(str, skipped.invalid_ids))
        console.print(f"[red]Skipped \"{skipped.group.keep.name}\": {skipped.reason}{f' ({ids})' if ids else ''}[/red]")


@cli.command()
@click.option("--fix", is_flag=True, help="Apply safe automatic fixes")
@click.option("--delete-invalid", is_flag=True, help="Delete springs with unusable name, state or location")
def validate(fix: bool, delete_invalid: bool):
    """Check stored springs against the ingest rules and report issues by field."""

    console.print("\n[bold blue]SoakMap - Data Validation[/bold blue]\n")
    if fix:
        logger.warning("FIX MODE - will apply automatic fixes")
    if delete_invalid:
        logger.warning("DELETE MODE - will delete invalid springs")

    repository = get_repository()

    try:
        springs = repository.read_all()
    except RepositoryError as e:
        logger.exception("Validation failed")
        raise click.ClickException(str(e))

    if not springs:
        console.print("[yellow]No springs to validate[/yellow]")
        return

    report = validate_springs(springs)

    if not report.issues:
        console.print(f"[green]No validation issues found in {report.checked} springs![/green]")
        return

    console.print(f"[yellow]Found {len(report.issues)} issues in {report.checked} springs[/yellow]\n")

    table = Table(title="Issues by Field")
    table.add_column("Field")
    table.add_column("Issues")
    table.add_column("Examples")

    for field_name, issues in report.by_field().items():
        examples = "\n".join(
            escape(f"{issue.name}: {issue.issue} (value: {issue.current_value!r})") for issue in issues[:3]
        )
        table.add_row(field_name, str(len(issues)), examples)

    console.print(table)

    try:
        if fix:
            fixed = apply_fixes(report, repository)
            console.print(f"[green]Fixed {fixed} springs[/green]")
        if delete_invalid:
            deleted = delete_invalid_springs(report, repository)
            console.print(f"[green]Deleted {deleted} invalid springs[/green]")
    except RepositoryError as e:
        logger.exception("Applying validation changes failed")
        raise click.ClickException(str(e))

    if not fix and not delete_invalid:
        console.print("\nRun with --fix to apply automatic fixes, --delete-invalid to remove unusable springs")


@cli.command()
def init_db():
    """Create the springs table if it does not exist."""
    from soakmap.database import create_all_tables

    create_all_tables()
    console.print("[green]Database tables created[/green]")


@cli.command()
def status():
    """Show the number of springs in the database."""
    console.print("\n[bold blue]SoakMap - Pipeline Status[/bold blue]\n")

    try:
        count = get_repository().count()
    except RepositoryError as e:
        raise click.ClickException(str(e))

    stats_table = Table()
    stats_table.add_column("Metric")
    stats_table.add_column("Value")
    stats_table.add_row("Springs", str(count))
    stats_table.add_row("Proximity Threshold", f"{settings.dedup.proximity_threshold}°")
    console.print(stats_table)


@cli.command()
def list_sources():
    """List all known data sources."""
    console.print("\n[bold blue]Available Data Sources[/bold blue]\n")

    table = Table()
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Description")

    for source_id, source_info in DATA_SOURCES.items():
        table.add_row(
            source_id,
            source_info.get("name", source_id),
            source_info.get("description", ""),
        )

    console.print(table)


if __name__ == "__main__":
    cli()
