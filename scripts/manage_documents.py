#!/usr/bin/env python3
"""
Command-line interface for resume documents and application links.

Every command works on one partition ("zh" by default, "en" with -p en).

Commands:
    init-templates - Seed the starter section templates
    list-versions  - List resume / cover-letter versions
    compose        - Print (or save) the LaTeX of a composition
    diff           - Compare two versions line by line
    link           - Point an application's resume or cover letter at a version
    status         - Set an application's status
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from jobfolio.contexts.documents import (
    CompositionStore,
    CVVersionStore,
    SectionStore,
    compare_versions,
    format_diff_for_display,
    get_diff_stats,
)
from jobfolio.contexts.storage import EntityNotFoundError, JsonFileKeyValueStore, KeyValueStore
from jobfolio.contexts.tracking import ApplicationLinker, ApplicationStore
from jobfolio.utils.timestamp import format_timestamp

load_dotenv()
JOBFOLIO_STORE_PATH = Path(os.getenv("JOBFOLIO_STORE_PATH", "data/jobfolio_store.json"))

app = typer.Typer(
    add_completion=False,
    help="Manage resume versions, sections, compositions and application links",
    invoke_without_command=True,
)


@dataclass
class Session:
    kv: KeyValueStore
    partition: str


@app.callback()
def main(
    ctx: typer.Context,
    store: Path = typer.Option(JOBFOLIO_STORE_PATH, "--store", "-s", help="Path to the JSON store"),
    partition: str = typer.Option("zh", "--partition", "-p", help="Partition: zh or en"),
):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    if partition not in ("zh", "en"):
        typer.secho(f"Unknown partition '{partition}' (expected zh or en)", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    ctx.obj = Session(kv=JsonFileKeyValueStore(store), partition=partition)


def _fail(message: str) -> None:
    typer.secho(f"✗ {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command("init-templates")
def init_templates_command(ctx: typer.Context):
    """Seed one starter template per section type (skipped if templates exist)."""
    session: Session = ctx.obj
    created = SectionStore(session.kv, session.partition).initialize_default_templates()

    if not created:
        typer.echo(f"Templates already present in '{session.partition}', nothing seeded")
        return
    for template in created:
        typer.secho(f"✓ {template.section_type}: {template.title}", fg=typer.colors.GREEN)


@app.command("list-versions")
def list_versions_command(
    ctx: typer.Context,
    document_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Only 'resume' or 'cover-letter' versions"
    ),
):
    """List document versions, highest version number first."""
    session: Session = ctx.obj
    store = CVVersionStore(session.kv, session.partition)
    try:
        versions = store.get_by_type(document_type) if document_type else store.get_all()
    except ValueError as e:
        _fail(str(e))

    if not versions:
        typer.echo(f"No versions in '{session.partition}'")
        return

    typer.secho(f"\n{len(versions)} version(s) in '{session.partition}'", fg=typer.colors.BLUE, bold=True)
    for version in sorted(versions, key=lambda v: v.version_number, reverse=True):
        label = version.title or version.note or ""
        linked = len(version.linked_applications or [])
        typer.echo(
            f"  v{version.version_number:<3} {version.kind:<12} {format_timestamp(version.created):<19} "
            f"{version.id}  {label}" + (f"  [{linked} linked]" if linked else "")
        )


@app.command("compose")
def compose_command(
    ctx: typer.Context,
    composition_id: str = typer.Argument(..., help="Composition id"),
    save: bool = typer.Option(False, "--save", help="Store the LaTeX as a new resume version"),
    note: Optional[str] = typer.Option(None, "--note", help="Note for the saved version"),
):
    """
    Print the LaTeX of a composition, or save it as a new resume version.

    Examples:\n

        $ manage_documents.py compose 3f2a...            # Print LaTeX

        $ manage_documents.py -p en compose 3f2a... --save
    """
    session: Session = ctx.obj
    store = CompositionStore(session.kv, session.partition)
    try:
        if save:
            version = store.create_version_from_composition(composition_id, note=note)
            typer.secho(f"✓ Saved as version {version.version_number} ({version.id})", fg=typer.colors.GREEN)
        else:
            typer.echo(store.generate_latex_from_composition(composition_id))
    except EntityNotFoundError as e:
        _fail(str(e))


@app.command("diff")
def diff_command(
    ctx: typer.Context,
    old_id: str = typer.Argument(..., help="Older version id"),
    new_id: str = typer.Argument(..., help="Newer version id"),
    stats_only: bool = typer.Option(False, "--stats", help="Only print the change summary"),
):
    """Compare two versions line by line."""
    session: Session = ctx.obj
    store = CVVersionStore(session.kv, session.partition)

    old, new = store.get_by_id(old_id), store.get_by_id(new_id)
    for version_id, version in ((old_id, old), (new_id, new)):
        if version is None:
            _fail(f"CVVersion not found: {version_id}")

    result = compare_versions(old.content, new.content)
    if not stats_only and result.has_changes:
        typer.echo(format_diff_for_display(result.changes))
    typer.secho(get_diff_stats(result), fg=typer.colors.BLUE, bold=True)


@app.command("link")
def link_command(
    ctx: typer.Context,
    application_id: str = typer.Argument(..., help="Application id"),
    version_id: Optional[str] = typer.Argument(None, help="Version id (omit to clear the link)"),
    document_type: str = typer.Option("resume", "--type", "-t", help="'resume' or 'cover-letter'"),
):
    """Link an application to a document version, keeping both sides in step."""
    session: Session = ctx.obj
    linker = ApplicationLinker(
        ApplicationStore(session.kv, session.partition),
        CVVersionStore(session.kv, session.partition),
    )
    try:
        application = linker.set_document_link(application_id, version_id, document_type)
    except (EntityNotFoundError, ValueError) as e:
        _fail(str(e))

    target = version_id or "nothing"
    typer.secho(
        f"✓ {application.title} @ {application.company}: {document_type} -> {target}",
        fg=typer.colors.GREEN,
    )


@app.command("status")
def status_command(
    ctx: typer.Context,
    application_id: str = typer.Argument(..., help="Application id"),
    status: str = typer.Argument(..., help="saved, applied, interviewing, offered or rejected"),
):
    """Set an application's status."""
    session: Session = ctx.obj
    try:
        application = ApplicationStore(session.kv, session.partition).update_status(application_id, status)
    except (EntityNotFoundError, ValueError) as e:
        _fail(str(e))

    typer.secho(f"✓ {application.title} @ {application.company} -> {application.status}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
