#!/usr/bin/env python3
"""
Command-line interface for managing backups.

Backups snapshot both partitions ("zh" and "en") of the JOBFOLIO store and
are kept in one global list, newest first.

Commands:
    create  - Create a full backup unconditionally
    smart   - Create a backup only if data changed since the newest backup
    list    - List backups with their collection sizes
    restore - Restore one partition from a backup
    export  - Export a backup to JSON files
    import  - Import a backup file as a new backup
    delete  - Delete a backup
    usage   - Show storage usage
    prune   - Delete auto-backups beyond the retention count
"""

import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from jobfolio.contexts.backup import (
    BackupEngine,
    export_backup_as_file,
    import_backup_from_file,
    restore_to_partition,
)
from jobfolio.contexts.backup.logger import setup_backup_logger
from jobfolio.contexts.storage import (
    EntityNotFoundError,
    InvalidBackupFormatError,
    JsonFileKeyValueStore,
    StorageQuotaExceededError,
)
from jobfolio.utils.timestamp import format_timestamp

load_dotenv()
JOBFOLIO_STORE_PATH = Path(os.getenv("JOBFOLIO_STORE_PATH", "data/jobfolio_store.json"))

app = typer.Typer(
    add_completion=False,
    help="Create, restore, export and import JOBFOLIO backups",
    invoke_without_command=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    store: Path = typer.Option(JOBFOLIO_STORE_PATH, "--store", "-s", help="Path to the JSON store"),
    log: bool = typer.Option(False, "--log", help="Write a session log under LOGS_PATH"),
):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    if log:
        log_file = setup_backup_logger(store)
        typer.echo(f"Logging to {log_file}")

    ctx.obj = BackupEngine(JsonFileKeyValueStore(store))


def _fail(message: str) -> None:
    typer.secho(f"✗ {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command("create")
def create_command(
    ctx: typer.Context,
    description: str = typer.Option("Manual backup", "--description", "-d", help="Backup label"),
    auto: bool = typer.Option(False, "--auto", help="Mark the backup as automatic"),
):
    """
    Create a full backup of both partitions, even if nothing changed.

    Examples:\n

        $ manage_backups.py create -d "Before cleanup"
    """
    engine: BackupEngine = ctx.obj
    try:
        backup_id = engine.create_full_partition_backup(description, is_auto_backup=auto)
    except StorageQuotaExceededError as e:
        _fail(str(e))

    typer.secho(f"✓ Created {backup_id}", fg=typer.colors.GREEN)


@app.command("smart")
def smart_command(
    ctx: typer.Context,
    description: str = typer.Option("Auto backup", "--description", "-d", help="Backup label"),
    manual: bool = typer.Option(False, "--manual", help="Mark the backup as manual"),
    force: bool = typer.Option(False, "--force", "-f", help="Back up even if nothing changed"),
):
    """
    Create a backup only if data changed since the newest backup.

    Examples:\n

        $ manage_backups.py smart            # Skips when nothing changed

        $ manage_backups.py smart --force    # Always writes
    """
    engine: BackupEngine = ctx.obj
    try:
        backup_id = engine.create_smart_backup(description, is_auto_backup=not manual, force=force)
    except StorageQuotaExceededError as e:
        _fail(str(e))

    if backup_id is None:
        typer.secho("⊘ No changes since the last backup, nothing written", fg=typer.colors.YELLOW)
    else:
        typer.secho(f"✓ Created {backup_id}", fg=typer.colors.GREEN)


@app.command("list")
def list_command(ctx: typer.Context):
    """List backups, newest first."""
    engine: BackupEngine = ctx.obj
    backups = engine.get_all_backups()

    if not backups:
        typer.echo("No backups found")
        return

    typer.secho(f"\n{len(backups)} backup(s)", fg=typer.colors.BLUE, bold=True)
    for backup in backups:
        kind = "auto" if backup.metadata.is_auto_backup else "manual"
        when = format_timestamp(backup.metadata.export_date, relative=True)
        typer.echo(f"\n{backup.id}  [{kind}, v{backup.metadata.version}, {when}]")
        typer.echo(f"  {backup.metadata.description}")
        for partition, counts in backup.counts().items():
            sizes = ", ".join(f"{n} {name}" for name, n in counts.items())
            typer.echo(f"  {partition}: {sizes}")


@app.command("restore")
def restore_command(
    ctx: typer.Context,
    backup_id: str = typer.Argument(..., help="Backup id (see 'list')"),
    partition: str = typer.Argument(..., help="Partition to restore into: zh or en"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
):
    """
    Replace a partition's data with the contents of a backup.

    Examples:\n

        $ manage_backups.py restore backup-1731520000000-1a2b3c en
    """
    engine: BackupEngine = ctx.obj
    if not yes:
        typer.confirm(f"This replaces all '{partition}' data with {backup_id}. Continue?", abort=True)

    try:
        result = restore_to_partition(engine, backup_id, partition)
    except (EntityNotFoundError, ValueError) as e:
        _fail(str(e))

    if result.skipped:
        typer.secho(f"⊘ Nothing restored: {result.message}", fg=typer.colors.YELLOW)
        return

    for name, count in result.restored.items():
        typer.echo(f"  {name}: {count}")

    if result.success:
        typer.secho(f"✓ Restored {result.total_restored} record(s) into '{partition}'", fg=typer.colors.GREEN)
    else:
        typer.secho(f"⚠ Restored with {len(result.failures)} failure(s):", fg=typer.colors.YELLOW)
        for failure in result.failures:
            typer.secho(f"  ✗ {failure}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


@app.command("export")
def export_command(
    ctx: typer.Context,
    backup_id: str = typer.Argument(..., help="Backup id (see 'list')"),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Destination directory (default: JOBFOLIO_EXPORT_PATH)"
    ),
):
    """Export a backup to JSON files (one per partition)."""
    engine: BackupEngine = ctx.obj
    try:
        paths = export_backup_as_file(engine, backup_id, output_dir)
    except EntityNotFoundError as e:
        _fail(str(e))

    for path in paths:
        typer.secho(f"✓ {path}", fg=typer.colors.GREEN)


@app.command("import")
def import_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Exported backup JSON file"),
):
    """
    Import a backup file (dual-partition or legacy) as a new backup.

    Importing does not restore; run 'restore' afterwards.
    """
    engine: BackupEngine = ctx.obj
    try:
        backup = import_backup_from_file(engine, file)
    except InvalidBackupFormatError as e:
        _fail(f"Invalid backup file: {e.message}")

    typer.secho(f"✓ Imported as {backup.id} (format {backup.metadata.version})", fg=typer.colors.GREEN)


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    backup_id: str = typer.Argument(..., help="Backup id (see 'list')"),
):
    """Delete a backup."""
    engine: BackupEngine = ctx.obj
    if not engine.delete_backup(backup_id):
        _fail(f"Backup not found: {backup_id}")
    typer.secho(f"✓ Deleted {backup_id}", fg=typer.colors.GREEN)


@app.command("usage")
def usage_command(ctx: typer.Context):
    """Show how much of the storage capacity is in use."""
    engine: BackupEngine = ctx.obj
    usage = engine.get_storage_usage()
    typer.echo(f"Used: {usage.used / 1024:.1f} KB of {usage.total / 1024:.0f} KB ({usage.percentage}%)")


@app.command("prune")
def prune_command(
    ctx: typer.Context,
    keep: Optional[int] = typer.Option(
        None, "--keep", "-k", min=0, help="Auto-backups to keep (default from backup policy)"
    ),
):
    """Delete automatic backups beyond the newest KEEP; manual backups are untouched."""
    engine: BackupEngine = ctx.obj
    deleted = engine.prune_auto_backups(keep)
    if not deleted:
        typer.echo("Nothing to prune")
        return
    for backup_id in deleted:
        typer.echo(f"  - {backup_id}")
    typer.secho(f"✓ Pruned {len(deleted)} auto backup(s)", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
