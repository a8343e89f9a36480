"""Read-only, lazily re-evaluated views over Projects.

A view wraps a supplier: a zero-argument callable returning a fresh iterable of
Project each time it is called. Views never cache. Iterating twice calls the
supplier twice; ``page()`` takes exactly one snapshot per call and the returned
page is fixed to that snapshot.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator

from taskledger.errors import InvalidScopeError, PageOutOfBoundsError
from taskledger.models import Page, Project, ProjectManager, Repo, User

logger = logging.getLogger(__name__)

ProjectSupplier = Callable[[], Iterable[Project]]


def is_owned_by(project: Project, user: User) -> bool:
    owner = project.owner
    return owner.username == user.username and owner.provider.name == user.provider.name


def page_window(projects: list[Project], page: Page) -> list[Project]:
    """Return the slice of ``projects`` covered by ``page``.

    An empty collection pages to an empty window for any number >= 1.
    """
    if page.number < 1:
        raise PageOutOfBoundsError(f"Page number must be at least 1, got {page.number}.")
    total = len(projects)
    if total == 0:
        return []
    total_pages = (total + page.size - 1) // page.size
    if page.number > total_pages:
        raise PageOutOfBoundsError(
            f"Page {page.number} is out of bounds: {total} projects "
            f"fit in {total_pages} page(s) of {page.size}."
        )
    start = (page.number - 1) * page.size
    return projects[start : start + page.size]


class ProjectsView(ABC):
    """Operations shared by every Projects collection."""

    def __init__(self, supplier: ProjectSupplier) -> None:
        self._supplier = supplier

    def __iter__(self) -> Iterator[Project]:
        return iter(self._supplier())

    @abstractmethod
    def _derive(self, supplier: ProjectSupplier) -> "ProjectsView":
        """Wrap a narrowed supplier in a view of the right kind."""

    @abstractmethod
    def assigned_to(self, manager_id: int) -> "ManagerProjects": ...

    def get_project_by_id(self, repo_full_name: str, provider: str) -> Project | None:
        for project in self:
            if project.repo_full_name == repo_full_name and project.provider == provider:
                return project
        return None

    def owned_by(self, user: User) -> "ProjectsView":
        return self._derive(lambda: (p for p in self if is_owned_by(p, user)))

    def page(self, page: Page) -> "ProjectsView":
        projects = list(self)
        try:
            window = page_window(projects, page)
        except PageOutOfBoundsError:
            logger.warning("Page %d (size %d) out of bounds for %d projects", page.number, page.size, len(projects))
            raise
        logger.debug(
            "Page %d (size %d): %d of %d projects", page.number, page.size, len(window), len(projects)
        )
        return self._derive(lambda: window)


class ManagerProjects(ProjectsView):
    """The Projects of one project manager. Never accepts registrations."""

    def __init__(self, manager_id: int, supplier: ProjectSupplier) -> None:
        super().__init__(supplier)
        self.manager_id = manager_id

    def _derive(self, supplier: ProjectSupplier) -> "ManagerProjects":
        return ManagerProjects(self.manager_id, supplier)

    def assigned_to(self, manager_id: int) -> "ManagerProjects":
        if manager_id != self.manager_id:
            logger.error("Projects of manager %s requested from view of manager %s", manager_id, self.manager_id)
            raise InvalidScopeError(
                f"These are the projects of manager {self.manager_id}, "
                f"they do not belong to manager {manager_id}."
            )
        return self

    def register(self, repo: Repo, manager: ProjectManager, webhook_token: str) -> Project:
        raise InvalidScopeError(
            f"Projects of manager {self.manager_id} are read-only, "
            f"cannot register {repo.full_name} here."
        )


class ProjectsSelection(ProjectsView):
    """An unscoped, read-only selection of Projects (filtered or paged)."""

    def _derive(self, supplier: ProjectSupplier) -> "ProjectsSelection":
        return ProjectsSelection(supplier)

    def assigned_to(self, manager_id: int) -> ManagerProjects:
        return ManagerProjects(manager_id, lambda: (p for p in self if p.manager_id == manager_id))


class RegisteredProjects(ProjectsSelection):
    """In-memory registry of every Project; the only collection that accepts new ones."""

    def __init__(self, projects: Iterable[Project] = ()) -> None:
        self._projects: list[Project] = list(projects)
        super().__init__(lambda: list(self._projects))

    def register(self, repo: Repo, manager: ProjectManager, webhook_token: str) -> Project:
        project = Project(
            repo_full_name=repo.full_name,
            provider=repo.provider,
            owner=repo.owner,
            manager_id=manager.id,
            webhook_token=webhook_token,
        )
        self._projects.append(project)
        logger.info("Registered %s/%s with manager %s", project.provider, project.repo_full_name, manager.id)
        return project
