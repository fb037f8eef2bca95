from __future__ import annotations

import logging
from itertools import islice
from typing import Any, Iterable

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .client import ResourceRequest, ZohoClient
from .config import Settings
from .errors import ConfigError, RefreshFailure, ServerError, ZohoError
from .filters import BugFilter, StatusType, TaskFilter, TaskStatus, page_range
from .oauth import OAuthTokenProvider
from .storage import TokenStore, token_path

app = typer.Typer(help="Zoho Projects listing CLI")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _create_client(settings: Settings) -> ZohoClient:
    tokens = OAuthTokenProvider(
        settings.credentials(),
        store=TokenStore(token_path(settings.data_dir)),
    )
    return ZohoClient(tokens)


def _select_context(client: ZohoClient, settings: Settings) -> None:
    client.set_portal(settings.portal)
    if settings.project:
        client.set_project(settings.project)


def _render(title: str, columns: list[str], rows: Iterable[list[Any]]) -> None:
    table = Table(title=title)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*["" if value is None else str(value) for value in row])
    console.print(table)


def _run(title: str, columns: list[str], build, limit: int | None, expand: bool = False, row=None) -> None:
    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        with _create_client(settings) as client:
            _select_context(client, settings)
            request: ResourceRequest = build(client)
            items = islice(request.iter_get(expand_children=expand), limit)
            _render(title, columns, [row(item) for item in items])
    except RefreshFailure as exc:
        raise typer.BadParameter(f"Zoho authorization failed: {exc}") from exc
    except ServerError as exc:
        if exc.status == 401:
            raise typer.BadParameter("Zoho rejected the access token.") from exc
        raise typer.BadParameter(f"Zoho API error: {exc}") from exc
    except ZohoError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def tasks(
    subtasks: bool = typer.Option(False, "--subtasks", help="Also list subtasks"),
    status: TaskStatus | None = typer.Option(None, "--status", help="Task status filter"),
    page_size: int | None = typer.Option(None, "--range", help="Items per request (max 100)"),
    limit: int | None = typer.Option(None, "--limit", help="Stop after this many tasks"),
) -> None:
    """List tasks in the configured project."""

    def build(client: ZohoClient) -> ResourceRequest:
        request = client.tasks()
        if status:
            request = request.filter(TaskFilter.status(status))
        if page_size:
            request = request.filter(page_range(page_size))
        return request

    _run(
        "Tasks",
        ["ID", "Key", "Name", "Status", "Subtasks"],
        build,
        limit,
        expand=subtasks,
        row=lambda task: [
            task.id,
            task.key,
            task.name,
            task.status.name if task.status else None,
            task.subtasks,
        ],
    )


@app.command()
def bugs(
    open_only: bool = typer.Option(False, "--open", help="Only open bugs"),
    limit: int | None = typer.Option(None, "--limit", help="Stop after this many bugs"),
) -> None:
    """List bugs in the configured project."""

    def build(client: ZohoClient) -> ResourceRequest:
        request = client.bugs()
        if open_only:
            request = request.filter(BugFilter.status_type(StatusType.OPEN))
        return request

    _run(
        "Bugs",
        ["ID", "Key", "Title", "Assignee", "Closed"],
        build,
        limit,
        row=lambda bug: [bug.id, bug.key, bug.title, bug.assignee_name, bug.closed],
    )


@app.command()
def tasklists(limit: int | None = typer.Option(None, "--limit")) -> None:
    """List tasklists in the configured project."""
    _run(
        "Tasklists",
        ["ID", "Name", "Completed", "Milestone"],
        lambda client: client.tasklists(),
        limit,
        row=lambda tasklist: [
            tasklist.id,
            tasklist.name,
            tasklist.completed,
            tasklist.milestone.name if tasklist.milestone else None,
        ],
    )


@app.command()
def categories(limit: int | None = typer.Option(None, "--limit")) -> None:
    _run(
        "Categories",
        ["ID", "Name"],
        lambda client: client.categories(),
        limit,
        row=lambda category: [category.id, category.name],
    )


@app.command()
def forums(limit: int | None = typer.Option(None, "--limit")) -> None:
    """List forum posts in the configured project."""
    _run(
        "Forums",
        ["ID", "Name", "Posted by", "Date"],
        lambda client: client.forums(),
        limit,
        row=lambda forum: [forum.id, forum.name, forum.posted_person, forum.post_date],
    )


if __name__ == "__main__":
    app()
