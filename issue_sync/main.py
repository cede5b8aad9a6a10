"""issue-sync CLI: a thin application layer over IssueSyncService."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Annotated, Any, TypeVar

import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from issue_sync.config import ConfigResolver
from issue_sync.errors import IssueSyncError
from issue_sync.gateway import IssueGateway
from issue_sync.models import IssueSnapshot, LocalTaskSyncState, TaskFieldChanges
from issue_sync.providers.jira import JiraClient
from issue_sync.service import IssueSyncService
from issue_sync.settings import IssueSyncSettings, TomlConfigStore, list_projects

app = typer.Typer(help="issue-sync: keep local tasks in step with Jira issues", no_args_is_help=True)

ProjectOpt = Annotated[
    str,
    typer.Option("--project", "-p", help="Local project id, as named under projects in the config file"),
]

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Service factory
# ---------------------------------------------------------------------------


def build_service(settings: IssueSyncSettings | None = None) -> IssueSyncService:
    settings = settings or IssueSyncSettings()
    return IssueSyncService(
        ConfigResolver(TomlConfigStore(settings.config_path)),
        IssueGateway(JiraClient(settings)),
    )


def _run(coro: Coroutine[Any, Any, T]) -> T:
    try:
        return asyncio.run(coro)
    except IssueSyncError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")] = False,
) -> None:
    level = "DEBUG" if verbose else IssueSyncSettings().log_level
    logging.basicConfig(level=level, format="%(message)s", handlers=[RichHandler(show_path=False)], force=True)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _changes_table(title: str, changes: TaskFieldChanges) -> Table:
    table = Table(title=title)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for field, value in changes.model_dump().items():
        table.add_row(field, "—" if value is None else escape(str(value)))
    return table


def _snapshot_table(snapshot: IssueSnapshot) -> Table:
    table = Table(title=escape(f"{snapshot.key}: {snapshot.summary}"))
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Updated", str(snapshot.updated))
    table.add_row("Story points", "—" if snapshot.story_points is None else str(snapshot.story_points))
    attachments = snapshot.attachments or []
    table.add_row("Attachments", escape(", ".join(a.filename for a in attachments)) or "none")
    table.add_row("Description", escape(snapshot.description or "_No description provided._"))
    return table


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("show")
def show(
    issue_key: Annotated[str, typer.Argument(help="Jira issue key (e.g. KEY-123)")],
    project: ProjectOpt,
) -> None:
    """Show a Jira issue."""
    snapshot = _run(build_service().get_by_id(issue_key, project))
    rprint(_snapshot_table(snapshot))


@app.command("search")
def search(
    term: Annotated[str, typer.Argument(help="Search term")],
    project: ProjectOpt,
) -> None:
    """Search issues for the project's Jira integration."""
    items = _run(build_service().search(term, project))
    if not items:
        rprint("[dim]No matching issues.[/dim]")
        return

    table = Table(title=f"Results for '{escape(term)}'")
    table.add_column("Key", style="cyan")
    table.add_column("Summary")
    for item in items:
        table.add_row(escape(item.issue_ref.issue_id), escape(item.summary))
    rprint(table)


@app.command("link")
def link(
    issue_key: Annotated[str, typer.Argument(help="Jira issue key (e.g. KEY-123)")],
    project: ProjectOpt,
) -> None:
    """Print the browser URL for an issue."""
    typer.echo(_run(build_service().issue_link(issue_key, project)))


@app.command("import-candidates")
def import_candidates(
    project: ProjectOpt,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Issue keys already imported (repeatable)"),
    ] = None,
) -> None:
    """List issues matching the project's auto-import JQL."""
    service = build_service()
    snapshots = _run(service.list_new_issues_for_import(project, exclude or []))

    table = Table(title="Import candidates")
    table.add_column("Key", style="cyan")
    table.add_column("Task title")
    table.add_column("Pts")
    for snapshot in snapshots:
        data = service.get_add_task_data(snapshot)
        points = "—" if data.issue_points is None else str(data.issue_points)
        table.add_row(escape(snapshot.key), escape(data.title), points)
    rprint(table)


@app.command("refresh")
def refresh(
    issue_key: Annotated[str, typer.Argument(help="Jira issue key (e.g. KEY-123)")],
    project: ProjectOpt,
    last_updated: Annotated[
        int | None,
        typer.Option("--last-updated", help="Last known update, epoch milliseconds"),
    ] = None,
) -> None:
    """Show the changes a sync would merge into the local task."""
    task = LocalTaskSyncState(project_id=project, issue_id=issue_key, issue_last_updated=last_updated)
    result = _run(build_service().refresh_task(task))
    if result is None:
        rprint(f"[green]✓[/green] {escape(issue_key)} is up to date")
        return
    rprint(_changes_table(f"{escape(result.display_title)} was updated", result.changes))


@app.command("projects")
def projects() -> None:
    """List projects configured in the config file."""
    settings = IssueSyncSettings()
    try:
        names = list_projects(settings.config_path)
    except IssueSyncError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc
    if not names:
        rprint(f"[yellow]No projects configured in {escape(str(settings.config_path))}[/yellow]")
        return
    for name in names:
        typer.echo(name)
