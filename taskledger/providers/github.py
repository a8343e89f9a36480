"""GitHub REST API v3 provider."""

import logging
import subprocess

import httpx

from taskledger.models import GITHUB, Issue, Provider, Repo, Role, User
from taskledger.providers.base import IssueProvider
from taskledger.settings import LedgerSettings

BASE_URL = "https://api.github.com"

logger = logging.getLogger(__name__)


class GitHubProvider(IssueProvider):
    def __init__(self, settings: LedgerSettings) -> None:
        self._token = self._resolve_token(settings)
        self._headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _resolve_token(self, settings: LedgerSettings) -> str:
        if settings.github_auth == "gh-cli":
            result = subprocess.run(
                ["gh", "auth", "token"],
                capture_output=True,
                text=True,
            )
            if result.returncode != 0:
                raise RuntimeError("gh auth token failed. Run: gh auth login")
            return result.stdout.strip()
        if settings.github_token:
            return settings.github_token.get_secret_value()
        raise RuntimeError("No GitHub credentials. Set github_token in your config profile.")

    def _get(self, path: str, params: dict | None = None) -> dict | list:
        logger.debug("GET %s%s", BASE_URL, path)
        response = httpx.get(
            f"{BASE_URL}{path}",
            headers=self._headers,
            params=params or {},
            timeout=30,
        )
        if response.status_code == 401:
            raise RuntimeError("GitHub API returned 401. Update the github_token of the active profile.")
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _parse_number(issue_id: str) -> int:
        """Accepts "42" or "#42"."""
        try:
            return int(issue_id.removeprefix("#"))
        except ValueError:
            raise RuntimeError(f"Cannot parse GitHub issue number '{issue_id}'. Use 42 or #42.") from None

    def _issue_from_node(self, node: dict, repo_full_name: str, comments: list[str]) -> Issue:
        # repository_url: https://api.github.com/repos/owner/repo
        repository_url = node.get("repository_url")
        if repository_url:
            repo_full_name = repository_url.split("/repos/", 1)[1]
        state = "Open" if node.get("state", "open") == "open" else "Closed"
        return Issue(
            issue_id=str(node["number"]),
            repo_full_name=repo_full_name,
            provider=GITHUB,
            author=node.get("user", {}).get("login", ""),
            role=Role.REV if "pull_request" in node else Role.DEV,
            title=node.get("title", ""),
            url=node.get("html_url"),
            state=state,
            labels=[label["name"] for label in node.get("labels", [])],
            comments=comments,
        )

    def _comments(self, repo_full_name: str, number: int) -> list[str]:
        nodes = self._get(f"/repos/{repo_full_name}/issues/{number}/comments", params={"per_page": "50"})
        return [f"{c['user']['login']}: {c['body']}" for c in nodes]  # type: ignore[index, union-attr]

    def get_issue(self, repo_full_name: str, issue_id: str) -> Issue:
        number = self._parse_number(issue_id)
        node = self._get(f"/repos/{repo_full_name}/issues/{number}")
        comments = self._comments(repo_full_name, number)
        return self._issue_from_node(node, repo_full_name, comments)  # type: ignore[arg-type]

    def list_repos(self) -> list[Repo]:
        # NOTE: fetches page 1 only (up to 100 results). Full pagination not implemented.
        nodes = self._get("/user/repos", params={"per_page": "100"})
        result = []
        for node in nodes:  # type: ignore[union-attr]
            if not node.get("permissions", {}).get("push"):
                continue
            result.append(
                Repo(
                    full_name=node["full_name"],
                    provider=GITHUB,
                    owner=User(username=node["owner"]["login"], provider=Provider(name=GITHUB)),
                )
            )
        return result
