"""Shared pydantic models: the contract between providers, views and tasks."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

GITHUB = "github"
GITLAB = "gitlab"

DEFAULT_ESTIMATION = 60  # minutes, when the provider gives none


class Role(str, Enum):
    DEV = "DEV"  # developer work, driven by issues
    REV = "REV"  # review work, driven by pull/merge requests


class Provider(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str  # "github" | "gitlab"


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str
    provider: Provider


class Contributor(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str
    provider: str


class ProjectManager(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    provider: str


class Repo(BaseModel):
    """A repository as reported by a provider, before it becomes a Project."""

    model_config = ConfigDict(frozen=True)

    full_name: str  # owner/repo or group/subgroup/project
    provider: str
    owner: User


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    repo_full_name: str
    provider: str
    owner: User
    manager_id: int | None = None
    webhook_token: str | None = None


class Contract(BaseModel):
    model_config = ConfigDict(frozen=True)

    project: Project
    contributor: Contributor
    role: Role
    hourly_rate: Decimal  # smallest currency unit, e.g. cents


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    issue_id: str  # provider-native number, as a string
    repo_full_name: str
    provider: str
    author: str
    role: Role = Role.DEV
    title: str = ""
    url: str | None = None
    state: str = "Open"
    labels: list[str] = []
    comments: list[str] = []
    estimation: int = DEFAULT_ESTIMATION


class Page(BaseModel):
    """1-based page window. Number bounds are checked by the view being paged."""

    model_config = ConfigDict(frozen=True)

    number: int
    size: int = Field(ge=1)
