"""Shared test fixtures."""

from collections.abc import Callable
from decimal import Decimal

import pytest

from taskledger.models import GITHUB, GITLAB, Contract, Contributor, Issue, Project, Provider, Role, User


def make_user(username: str, provider: str = GITHUB) -> User:
    return User(username=username, provider=Provider(name=provider))


def make_project(
    repo_full_name: str,
    provider: str = GITHUB,
    owner: str = "mihai",
    owner_provider: str | None = None,
) -> Project:
    return Project(
        repo_full_name=repo_full_name,
        provider=provider,
        owner=make_user(owner, owner_provider or provider),
        manager_id=1,
    )


@pytest.fixture
def project() -> Project:
    return make_project("john/repo")


@pytest.fixture
def numbered_projects() -> Callable[[int], list[Project]]:
    """repo-1 .. repo-n, all on GitHub."""

    def build(count: int) -> list[Project]:
        return [make_project(f"repo-{i}") for i in range(1, count + 1)]

    return build


@pytest.fixture
def contributor() -> Contributor:
    return Contributor(username="vlad", provider=GITHUB)


@pytest.fixture
def contract_factory(project: Project, contributor: Contributor) -> Callable[[int | str], Contract]:
    def build(hourly_rate: int | str) -> Contract:
        return Contract(
            project=project,
            contributor=contributor,
            role=Role.DEV,
            hourly_rate=Decimal(hourly_rate),
        )

    return build


@pytest.fixture
def github_issue() -> Issue:
    return Issue(
        issue_id="42",
        repo_full_name="john/repo",
        provider=GITHUB,
        author="mihai",
        role=Role.DEV,
        title="Fix null check",
        url="https://github.com/john/repo/issues/42",
        labels=["bug"],
    )


@pytest.fixture
def gitlab_merge_request() -> Issue:
    return Issue(
        issue_id="7",
        repo_full_name="group/project",
        provider=GITLAB,
        author="vlad",
        role=Role.REV,
        title="Add invoices",
    )
