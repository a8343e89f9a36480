"""Tasks: issues turned into billable work, assigned or not."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from fractions import Fraction

from taskledger.models import Contract, Contributor, Issue, Project, Role
from taskledger.providers.base import IssueProvider

MINUTES_PER_HOUR = 60


def round_half_up(amount: Fraction) -> Decimal:
    """Round an exact amount to whole units, ties away from zero."""
    units = int(abs(amount) + Fraction(1, 2))
    return Decimal(units if amount >= 0 else -units)


class Task:
    """Base of both task shapes.

    Equality and hashing use only the issue-within-project key, so an assigned
    and an unassigned Task for the same issue compare equal.
    """

    issue_id: str
    project: Project
    role: Role
    estimation: int  # minutes, stored as given

    @property
    def assignee(self) -> Contributor | None:
        return None

    def issue(self, issues: IssueProvider) -> Issue:
        return issues.get_issue(self.project.repo_full_name, self.issue_id)

    def _key(self) -> tuple[str, str, str]:
        return self.issue_id, self.project.repo_full_name, self.project.provider

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Task):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())


@dataclass(frozen=True, eq=False)
class UnassignedTask(Task):
    project: Project
    issue_id: str
    role: Role
    estimation: int


@dataclass(frozen=True, eq=False)
class AssignedTask(Task):
    contract: Contract
    issue_id: str
    assignment_date: datetime
    deadline: datetime
    estimation: int

    @property  # type: ignore[override]
    def project(self) -> Project:
        return self.contract.project

    @property  # type: ignore[override]
    def role(self) -> Role:
        return self.contract.role

    @property
    def assignee(self) -> Contributor:
        return self.contract.contributor

    def value(self) -> Decimal:
        """Contract rate applied to the estimation, rounded half up to whole units."""
        rate = self.contract.hourly_rate
        if rate == 0:
            return Decimal(0)
        raw = Fraction(rate) * Fraction(self.estimation, MINUTES_PER_HOUR)
        return round_half_up(raw)
