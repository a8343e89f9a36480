"""taskledger CLI: all commands."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Annotated

import typer
from pydantic import SecretStr
from rich import print as rprint
from rich.table import Table

from taskledger.errors import PageOutOfBoundsError
from taskledger.logging import setup_logging
from taskledger.models import Contract, Contributor, Page, Project, Provider, User
from taskledger.projects import ManagerProjects
from taskledger.providers.base import IssueProvider
from taskledger.providers.github import GitHubProvider
from taskledger.providers.gitlab import GitLabProvider
from taskledger.settings import get_settings, set_default_profile
from taskledger.tasks import AssignedTask

app = typer.Typer(help="taskledger: project views and task valuation for GitHub + GitLab", no_args_is_help=True)

ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-k", help="Profile name from ~/.config/taskledger/config.toml"),
]

DEFAULT_DEADLINE_DAYS = 10


@app.callback()
def main(
    verbose: Annotated[int, typer.Option("--verbose", "-v", count=True, help="-v for INFO, -vv for DEBUG")] = 0,
    log_file: Annotated[Path | None, typer.Option("--log-file", help="Also write logs to this file")] = None,
) -> None:
    setup_logging(verbose, log_file)


# ---------------------------------------------------------------------------
# Provider factory
# ---------------------------------------------------------------------------


def get_provider(profile: str | None = None) -> IssueProvider:
    settings = get_settings(profile=profile)
    match settings.provider:
        case "github":
            return GitHubProvider(settings)
        case "gitlab":
            return GitLabProvider(settings)
        case _:
            rprint(f"[red]Unknown provider '{settings.provider}'. Valid: github, gitlab[/red]")
            raise typer.Exit(1)


def manager_projects(provider: IssueProvider, manager_id: int) -> ManagerProjects:
    """The provider's repos, as the Projects of one manager. Re-fetched on every read."""

    def supplier() -> list[Project]:
        return [
            Project(repo_full_name=repo.full_name, provider=repo.provider, owner=repo.owner, manager_id=manager_id)
            for repo in provider.list_repos()
        ]

    return ManagerProjects(manager_id, supplier)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("projects")
def projects_cmd(
    profile: ProfileOpt = None,
    owner: Annotated[str | None, typer.Option("--owner", "-o", help="Only projects owned by this user")] = None,
    page: Annotated[int, typer.Option("--page", "-p", help="Page number, starting at 1")] = 1,
    size: Annotated[int | None, typer.Option("--size", "-s", min=1, help="Page size (default: page_size)")] = None,
) -> None:
    """List one page of the projects the configured manager sees."""
    settings = get_settings(profile=profile)
    provider = get_provider(profile)

    view = manager_projects(provider, settings.manager_id)
    if owner:
        view = view.owned_by(User(username=owner, provider=Provider(name=settings.provider)))

    page_size = size or settings.page_size
    try:
        window = view.page(Page(number=page, size=page_size))
    except PageOutOfBoundsError as exc:
        rprint(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Projects of manager {settings.manager_id} (page {page}, size {page_size})")
    table.add_column("Repo", style="cyan")
    table.add_column("Provider")
    table.add_column("Owner")

    for project in window:
        table.add_row(project.repo_full_name, project.provider, project.owner.username)

    rprint(table)


@app.command("value")
def value_cmd(
    repo: Annotated[str, typer.Argument(help="Repo full name (owner/repo or group/project)")],
    issue_id: Annotated[str, typer.Argument(help="Issue number (42, #42, or !42 for a GitLab MR)")],
    rate: Annotated[str, typer.Option("--rate", "-r", help="Hourly rate in the smallest currency unit")],
    profile: ProfileOpt = None,
    estimation: Annotated[
        int | None, typer.Option("--estimation", "-e", min=0, help="Minutes (default: the issue's estimation)")
    ] = None,
    contributor: Annotated[
        str | None, typer.Option("--contributor", "-c", help="Assignee username (default: the issue author)")
    ] = None,
) -> None:
    """Show what an issue is worth when assigned under the given hourly rate."""
    try:
        hourly_rate = Decimal(rate)
    except InvalidOperation:
        hourly_rate = None
    if hourly_rate is None or not hourly_rate.is_finite():
        rprint(f"[red]Invalid rate '{rate}'. Use a decimal amount, e.g. 5000 or 49.99[/red]")
        raise typer.Exit(1)

    settings = get_settings(profile=profile)
    provider = get_provider(profile)
    issue = provider.get_issue(repo, issue_id)

    project = Project(
        repo_full_name=issue.repo_full_name,
        provider=issue.provider,
        owner=User(username=issue.repo_full_name.split("/", 1)[0], provider=Provider(name=issue.provider)),
        manager_id=settings.manager_id,
    )
    contract = Contract(
        project=project,
        contributor=Contributor(username=contributor or issue.author, provider=issue.provider),
        role=issue.role,
        hourly_rate=hourly_rate,
    )
    assigned = datetime.now(UTC)
    task = AssignedTask(
        contract=contract,
        issue_id=issue.issue_id,
        assignment_date=assigned,
        deadline=assigned + timedelta(days=DEFAULT_DEADLINE_DAYS),
        estimation=issue.estimation if estimation is None else estimation,
    )

    table = Table(title=f"{project.repo_full_name}#{task.issue_id}: {issue.title}")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Role", task.role.value)
    table.add_row("Assignee", task.assignee.username)
    table.add_row("Estimation", f"{task.estimation} min")
    table.add_row("Hourly rate", str(hourly_rate))
    table.add_row("Deadline", task.deadline.strftime("%Y-%m-%d"))
    table.add_row("Value", str(task.value()))

    rprint(table)


@app.command("set-default")
def set_default(
    profile: Annotated[str, typer.Argument(help="Profile name to set as default")],
) -> None:
    """Make a profile the default one."""
    path = set_default_profile(profile)
    rprint(f'[green]✓[/green] Default profile set to "{profile}" in {path}')


def _masked(secret: SecretStr | None) -> str:
    if secret is None:
        return "[dim](not set)[/dim]"
    value = secret.get_secret_value()
    # last five characters only, enough to tell two tokens apart
    return "***" if len(value) <= 5 else f"***{value[-5:]}"


@app.command("config-show")
def config_show(profile: ProfileOpt = None) -> None:
    """Show the settings the active profile resolves to. Tokens are masked."""
    settings = get_settings(profile=profile)

    table = Table(title="taskledger configuration")
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    rows = {
        "default_profile": settings.default_profile or "[dim](not set)[/dim]",
        "provider": settings.provider,
        "github_auth": settings.github_auth,
        "github_token": _masked(settings.github_token),
        "gitlab_url": settings.gitlab_url,
        "gitlab_token": _masked(settings.gitlab_token),
        "manager_id": str(settings.manager_id),
        "page_size": str(settings.page_size),
    }
    for name, value in rows.items():
        table.add_row(name, value)

    rprint(table)
