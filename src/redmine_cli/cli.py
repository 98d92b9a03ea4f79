"""Command-line interface for redmine-cli.

Provides commands to list, show, open, create, take, finish and edit issues
of a Redmine project.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Optional

import click
import typer
from rich.console import Console
from rich.markup import escape

from redmine_cli import __version__
from redmine_cli.client import RedmineClient
from redmine_cli.config import Settings, load_settings
from redmine_cli.errors import RedmineCliError
from redmine_cli.interactive import open_in_editor, select_parent_issue
from redmine_cli.issues import IssueFilter, SortOrder, filter_issues, group_by_parent, sort_issues
from redmine_cli.logging import bind_context, clear_context, get_logger, setup_logging
from redmine_cli.models import IssueBody
from redmine_cli.render import print_groups, print_issue, print_issues
from redmine_cli.resolve import (
    ME,
    expand_me,
    resolve_release,
    resolve_status,
    resolve_tracker,
    resolve_user,
    select_user,
    web_url,
)

# Create Typer app
app = typer.Typer(
    name="redmine",
    help="Work with the issues of a Redmine project from the command line.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich consoles: command output on stdout, errors on stderr
console = Console()
err_console = Console(stderr=True)

log = get_logger("redmine_cli.cli")

DESCRIPTION_HEADER = "Enter the issue description"


@contextmanager
def cli_errors() -> Iterator[None]:
    """Turn redmine-cli errors into a red message and a non-zero exit."""
    try:
        yield
    except RedmineCliError as e:
        log.debug("Command failed", error_type=type(e).__name__, error=e.message)
        err_console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(e.exit_code) from e


def _settings(ctx: typer.Context) -> Settings:
    # Set by the app callback, which runs before every command
    return ctx.obj


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]redmine-cli[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    server: Annotated[
        Optional[str],
        typer.Option("--server", "-S", help="Address of the Redmine server."),
    ] = None,
    project: Annotated[
        Optional[str],
        typer.Option("--project", "-P", help="Project identifier."),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Extra configuration file, applied last."),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Log HTTP requests and responses to stderr."),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """redmine-cli - Work with Redmine issues from the command line."""
    with cli_errors():
        settings = load_settings(config_path)

    overrides = {}
    if server:
        overrides["server"] = server.rstrip("/")
    if project:
        overrides["project"] = project
    if overrides:
        settings = settings.model_copy(update=overrides)

    setup_logging(settings.logging, debug=debug)
    clear_context()
    bind_context(command=ctx.invoked_subcommand)
    log.debug("Settings loaded", server=settings.server, project=settings.project)

    ctx.obj = settings


@app.command("list")
def list_issues(
    ctx: typer.Context,
    parent_issue: Annotated[
        Optional[str],
        typer.Option("--parent-issue", "-p", help="Filter to the specified parent issue."),
    ] = None,
    status: Annotated[
        Optional[str],
        typer.Option("--status", "-s", help="Filter to the specified statuses."),
    ] = None,
    release: Annotated[
        Optional[str],
        typer.Option("--release", "-r", help="Filter to the specified release."),
    ] = None,
    user: Annotated[
        Optional[str],
        typer.Option("--user", "-u", help="Filter to issues assigned to the specified user."),
    ] = None,
    me: Annotated[
        bool,
        typer.Option("--me", help="Filter to issues assigned to me."),
    ] = False,
    sort: Annotated[
        SortOrder,
        typer.Option("--sort", "-o", help="Sort order."),
    ] = SortOrder.STATUS,
    group: Annotated[
        bool,
        typer.Option("--group", "-g", help="Group issues under their parent issue."),
    ] = False,
) -> None:
    """List the issues of the project.

    Filters take expressions such as "new|inprogress", "!none" or "none".
    """
    settings = _settings(ctx)

    with cli_errors():
        assignee = select_user(settings, user, me)
        with RedmineClient.from_settings(settings) as client:
            all_issues = client.list_issues()

    issue_filter = IssueFilter(parent=parent_issue, status=status, release=release, assignee=assignee)
    issues = sort_issues(filter_issues(all_issues, issue_filter), sort)
    log.debug("Issues selected", total=len(all_issues), shown=len(issues))

    if group:
        print_groups(console, group_by_parent(issues, all_issues))
    else:
        print_issues(console, issues)


@app.command()
def show(
    ctx: typer.Context,
    issue_id: Annotated[int, typer.Argument(metavar="ISSUE", help="Issue id.")],
) -> None:
    """Display details of an issue."""
    settings = _settings(ctx)

    with cli_errors(), RedmineClient.from_settings(settings) as client:
        issue = client.get_issue(issue_id)

    print_issue(console, issue)


@app.command("open")
def open_issue(
    ctx: typer.Context,
    issue_id: Annotated[int, typer.Argument(metavar="ISSUE", help="Issue id.")],
) -> None:
    """Open an issue in the browser."""
    settings = _settings(ctx)

    with cli_errors():
        url = f"{web_url(settings)}/issues/{issue_id}"

    log.debug("Launching browser", url=url)
    click.launch(url)


@app.command()
def new(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Issue title.")],
    description: Annotated[
        Optional[str],
        typer.Option("--description", "-d", help="Set the description."),
    ] = None,
    edit_description: Annotated[
        bool,
        typer.Option("--edit-description", "-D", help="Write the description in an editor."),
    ] = False,
    tracker: Annotated[
        str,
        typer.Option("--tracker", "-t", help="Set the tracker."),
    ] = "Task",
    parent_issue: Annotated[
        Optional[int],
        typer.Option("--parent-issue", "-p", help="Set the parent issue."),
    ] = None,
    select_parent: Annotated[
        bool,
        typer.Option("--select-parent", help="Pick the parent issue from a list."),
    ] = False,
    status: Annotated[
        str,
        typer.Option("--status", "-s", help="Set the status."),
    ] = "New",
    release: Annotated[
        Optional[str],
        typer.Option("--release", "-r", help="Set the target release."),
    ] = None,
    user: Annotated[
        Optional[str],
        typer.Option("--user", "-u", help="Assign to the specified user."),
    ] = None,
    me: Annotated[
        bool,
        typer.Option("--me", help="Assign to me."),
    ] = False,
) -> None:
    """Create a new issue."""
    settings = _settings(ctx)

    with cli_errors():
        user_name = select_user(settings, user, me)

        with RedmineClient.from_settings(settings) as client:
            project = client.get_project()
            tracker_resource = resolve_tracker(client, tracker)
            status_resource = resolve_status(client, status)

            if edit_description:
                description = open_in_editor(settings, DESCRIPTION_HEADER, description or "")

            if parent_issue is None and (select_parent or settings.require_parent):
                parent_issue = select_parent_issue(client, console)

            body = IssueBody(
                project_id=project.id,
                tracker_id=tracker_resource.id,
                status_id=status_resource.id,
                subject=title,
                description=description,
                parent_issue_id=parent_issue,
            )

            if release is not None:
                body.fixed_version_id = resolve_release(client, release).id

            if user_name is not None:
                body.assigned_to_id = resolve_user(client, user_name).id

            issue_id = client.create_issue(body)

        url = f"{web_url(settings)}/issues/{issue_id}"

    log.info("Issue created", issue_id=issue_id)
    console.print(f"Created issue #{issue_id} {url}", highlight=False)


@app.command()
def take(
    ctx: typer.Context,
    issue_id: Annotated[int, typer.Argument(metavar="ISSUE", help="Issue id.")],
    user: Annotated[
        str,
        typer.Argument(help='User to assign, "me" by default.'),
    ] = ME,
    status: Annotated[
        str,
        typer.Option("--status", "-s", help="Set the status."),
    ] = "In Progress",
    skip_status: Annotated[
        bool,
        typer.Option("--skip-status", help="Don't set the status."),
    ] = False,
    show_issue: Annotated[
        bool,
        typer.Option("--show", help="Show the issue after taking it."),
    ] = False,
) -> None:
    """Assign yourself or someone else to an issue."""
    settings = _settings(ctx)

    with cli_errors():
        user_name = expand_me(settings, user)

        with RedmineClient.from_settings(settings) as client:
            assignee = resolve_user(client, user_name)
            body = IssueBody(assigned_to_id=assignee.id)

            if not skip_status:
                body.status_id = resolve_status(client, status).id

            client.update_issue(issue_id, body)
            issue = client.get_issue(issue_id) if show_issue else None

    log.info("Issue taken", issue_id=issue_id, user=user_name)
    if issue is not None:
        print_issue(console, issue)
    else:
        console.print(f"Assigned #{issue_id} to {user_name}", highlight=False)


@app.command()
def finish(
    ctx: typer.Context,
    issue_id: Annotated[int, typer.Argument(metavar="ISSUE", help="Issue id.")],
    status: Annotated[
        str,
        typer.Option("--status", "-s", help="Status to set."),
    ] = "Resolved",
    user: Annotated[
        Optional[str],
        typer.Option("--user", "-u", help="Assign to the specified user."),
    ] = None,
    me: Annotated[
        bool,
        typer.Option("--me", help="Assign to me."),
    ] = False,
) -> None:
    """Set the status of an issue."""
    settings = _settings(ctx)

    with cli_errors():
        user_name = select_user(settings, user, me)

        with RedmineClient.from_settings(settings) as client:
            status_resource = resolve_status(client, status)
            body = IssueBody(status_id=status_resource.id)

            if user_name is not None:
                body.assigned_to_id = resolve_user(client, user_name).id

            client.update_issue(issue_id, body)

    log.info("Issue finished", issue_id=issue_id, status=status_resource.name)
    console.print(f"Set #{issue_id} to {status_resource.name}", highlight=False)


@app.command()
def edit(
    ctx: typer.Context,
    issue_id: Annotated[int, typer.Argument(metavar="ISSUE", help="Issue id.")],
    title: Annotated[
        Optional[str],
        typer.Option("--title", "-T", help="Set the title."),
    ] = None,
    description: Annotated[
        Optional[str],
        typer.Option("--description", "-d", help="Set the description."),
    ] = None,
    edit_description: Annotated[
        bool,
        typer.Option("--edit-description", "-D", help="Edit the description in an editor."),
    ] = False,
    tracker: Annotated[
        Optional[str],
        typer.Option("--tracker", "-t", help="Set the tracker."),
    ] = None,
    parent_issue: Annotated[
        Optional[int],
        typer.Option("--parent-issue", "-p", help="Set the parent issue."),
    ] = None,
    select_parent: Annotated[
        bool,
        typer.Option("--select-parent", help="Pick the parent issue from a list."),
    ] = False,
    status: Annotated[
        Optional[str],
        typer.Option("--status", "-s", help="Set the status."),
    ] = None,
    release: Annotated[
        Optional[str],
        typer.Option("--release", "-r", help="Set the target release."),
    ] = None,
    user: Annotated[
        Optional[str],
        typer.Option("--user", "-u", help="Assign to the specified user."),
    ] = None,
    me: Annotated[
        bool,
        typer.Option("--me", help="Assign to me."),
    ] = False,
) -> None:
    """Edit an issue. Only the given fields are changed."""
    settings = _settings(ctx)

    with cli_errors():
        user_name = select_user(settings, user, me)

        with RedmineClient.from_settings(settings) as client:
            if edit_description:
                current = client.get_issue(issue_id)
                tracker_name = current.tracker.name if current.tracker else "Issue"
                header = f"{DESCRIPTION_HEADER}\n{tracker_name} #{current.id}\n{current.subject}"
                initial = description if description is not None else current.description or ""
                description = open_in_editor(settings, header, initial)

            if parent_issue is None and select_parent:
                parent_issue = select_parent_issue(client, console)

            body = IssueBody(subject=title, description=description, parent_issue_id=parent_issue)

            if tracker is not None:
                body.tracker_id = resolve_tracker(client, tracker).id

            if status is not None:
                body.status_id = resolve_status(client, status).id

            if release is not None:
                body.fixed_version_id = resolve_release(client, release).id

            if user_name is not None:
                body.assigned_to_id = resolve_user(client, user_name).id

            if body.is_empty():
                console.print("[yellow]Nothing to update.[/yellow]")
                return

            client.update_issue(issue_id, body)

    log.info("Issue edited", issue_id=issue_id, fields=sorted(body.model_dump(exclude_none=True)))
    console.print(f"Updated issue #{issue_id}", highlight=False)


# One-letter aliases
app.command("l", hidden=True)(list_issues)
app.command("s", hidden=True)(show)
app.command("o", hidden=True)(open_issue)
app.command("n", hidden=True)(new)
app.command("t", hidden=True)(take)
app.command("f", hidden=True)(finish)
app.command("e", hidden=True)(edit)


if __name__ == "__main__":
    app()
