"""Abstract base class for issue providers."""

from abc import ABC, abstractmethod

from taskledger.models import Issue, Repo


class IssueProvider(ABC):
    @abstractmethod
    def get_issue(self, repo_full_name: str, issue_id: str) -> Issue: ...

    @abstractmethod
    def list_repos(self) -> list[Repo]: ...
