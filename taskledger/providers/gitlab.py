"""GitLab REST API v4 provider."""

import logging
from urllib.parse import quote

import httpx

from taskledger.models import GITLAB, Issue, Provider, Repo, Role, User
from taskledger.providers.base import IssueProvider
from taskledger.settings import LedgerSettings

logger = logging.getLogger(__name__)

DEVELOPER_ACCESS = 30


class GitLabProvider(IssueProvider):
    def __init__(self, settings: LedgerSettings) -> None:
        if not settings.gitlab_token:
            raise RuntimeError("No GitLab credentials. Set gitlab_token in your config profile.")
        self._base_url = settings.gitlab_url.rstrip("/")
        self._headers = {"PRIVATE-TOKEN": settings.gitlab_token.get_secret_value()}

    def _get(self, path: str, params: dict | None = None) -> dict | list:
        logger.debug("GET %s%s", self._base_url, path)
        response = httpx.get(
            f"{self._base_url}{path}",
            headers=self._headers,
            params=params or {},
            timeout=30,
        )
        if response.status_code == 401:
            raise RuntimeError("GitLab API returned 401. Update the gitlab_token of the active profile.")
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _parse_reference(issue_id: str) -> tuple[str, int]:
        """Map a GitLab reference to (resource, iid).

        "12" and "#12" are issues, "!12" is a merge request.
        """
        if issue_id.startswith("!"):
            resource, number = "merge_requests", issue_id[1:]
        else:
            resource, number = "issues", issue_id.removeprefix("#")
        try:
            return resource, int(number)
        except ValueError:
            raise RuntimeError(f"Cannot parse GitLab reference '{issue_id}'. Use 12, #12 or !12.") from None

    def get_issue(self, repo_full_name: str, issue_id: str) -> Issue:
        resource, iid = self._parse_reference(issue_id)
        # Namespaced paths must be URL-encoded: group/project -> group%2Fproject
        base = f"/projects/{quote(repo_full_name, safe='')}/{resource}/{iid}"
        node = self._get(base)
        notes = self._get(f"{base}/notes", params={"per_page": "50", "sort": "asc"})
        comments = [
            f"{n['author']['username']}: {n['body']}"
            for n in notes  # type: ignore[union-attr]
            if not n.get("system")
        ]
        state = "Open" if node.get("state") == "opened" else "Closed"  # type: ignore[union-attr]
        return Issue(
            issue_id=str(node["iid"]),  # type: ignore[call-overload]
            repo_full_name=repo_full_name,
            provider=GITLAB,
            author=node.get("author", {}).get("username", ""),  # type: ignore[union-attr]
            role=Role.REV if resource == "merge_requests" else Role.DEV,
            title=node.get("title", ""),  # type: ignore[union-attr]
            url=node.get("web_url"),  # type: ignore[union-attr]
            state=state,
            labels=list(node.get("labels", [])),  # type: ignore[union-attr]
            comments=comments,
        )

    def list_repos(self) -> list[Repo]:
        # NOTE: fetches page 1 only (up to 100 results). Full pagination not implemented.
        nodes = self._get(
            "/projects",
            params={"membership": "true", "min_access_level": str(DEVELOPER_ACCESS), "per_page": "100"},
        )
        result = []
        for node in nodes:  # type: ignore[union-attr]
            # namespace.path is the owning user or group
            result.append(
                Repo(
                    full_name=node["path_with_namespace"],
                    provider=GITLAB,
                    owner=User(username=node["namespace"]["path"], provider=Provider(name=GITLAB)),
                )
            )
        return result
