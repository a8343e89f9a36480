"""Tests for taskledger.tasks."""

from datetime import datetime, timedelta
from decimal import Decimal
from fractions import Fraction
from unittest.mock import MagicMock

import pytest

from taskledger.models import GITHUB, GITLAB, Contract, Issue, Project, Role
from taskledger.tasks import AssignedTask, UnassignedTask, round_half_up
from tests.conftest import make_project

NOW = datetime(2026, 10, 18, 12, 0)


def _assigned(contract: Contract, estimation: int, issue_id: str = "123") -> AssignedTask:
    return AssignedTask(
        contract=contract,
        issue_id=issue_id,
        assignment_date=NOW,
        deadline=NOW + timedelta(days=10),
        estimation=estimation,
    )


class TestUnassignedTask:
    def test_returns_project(self, project: Project) -> None:
        task = UnassignedTask(project, "issueId123", Role.DEV, 60)
        assert task.project is project

    def test_returns_role(self, project: Project) -> None:
        task = UnassignedTask(project, "issueId123", Role.REV, 60)
        assert task.role is Role.REV

    def test_assignee_is_none(self, project: Project) -> None:
        assert UnassignedTask(project, "issueId123", Role.DEV, 60).assignee is None

    def test_returns_estimation(self, project: Project) -> None:
        assert UnassignedTask(project, "issueId123", Role.DEV, 45).estimation == 45

    def test_has_no_value_or_dates(self, project: Project) -> None:
        task = UnassignedTask(project, "issueId123", Role.DEV, 45)
        assert not hasattr(task, "value")
        assert not hasattr(task, "deadline")
        assert not hasattr(task, "assignment_date")

    def test_frozen(self, project: Project) -> None:
        task = UnassignedTask(project, "issueId123", Role.DEV, 45)
        with pytest.raises(Exception):
            task.estimation = 10  # type: ignore[misc]


class TestAssignedTask:
    def test_project_and_role_from_contract(self, contract_factory) -> None:
        contract = contract_factory(100)
        task = _assigned(contract, 60)
        assert task.project is contract.project
        assert task.role is contract.role

    def test_returns_assignee(self, contract_factory, contributor) -> None:
        assert _assigned(contract_factory(100), 60).assignee == contributor

    def test_returns_dates(self, contract_factory) -> None:
        task = _assigned(contract_factory(100), 60)
        assert task.assignment_date == NOW
        assert task.deadline == NOW + timedelta(days=10)

    def test_returns_estimation(self, contract_factory) -> None:
        assert _assigned(contract_factory(100), 120).estimation == 120

    def test_estimation_not_clamped(self, contract_factory) -> None:
        assert _assigned(contract_factory(100), -5).estimation == -5


class TestValue:
    def test_value(self, contract_factory) -> None:
        assert _assigned(contract_factory(50000), 30).value() == Decimal(25000)

    def test_value_exact(self, contract_factory) -> None:
        assert _assigned(contract_factory(25000), 45).value() == Decimal(18750)

    def test_zero_rate(self, contract_factory) -> None:
        assert _assigned(contract_factory(0), 120).value() == Decimal(0)

    @pytest.mark.parametrize("rate", [0, 1, 25000, "49.99"])
    def test_zero_estimation(self, contract_factory, rate) -> None:
        assert _assigned(contract_factory(rate), 0).value() == Decimal(0)

    @pytest.mark.parametrize(
        ("rate", "estimation", "expected"),
        [
            (10000, 7, 1167),  # 1166.666...
            (10000, 1, 167),  # 166.666...
            (100, 1, 2),  # 1.666...
            (1, 30, 1),  # 0.5
            (3, 10, 1),  # 0.5
            (1, 90, 2),  # 1.5
            (5, 18, 2),  # 1.5
            (1, 29, 0),  # 0.4833...
            (7, 5, 1),  # 0.5833...
            ("0.5", 60, 1),  # 0.5
            ("12.34", 60, 12),
            ("12.50", 60, 13),
        ],
    )
    def test_rounds_half_up(self, contract_factory, rate, estimation: int, expected: int) -> None:
        assert _assigned(contract_factory(rate), estimation).value() == Decimal(expected)

    def test_value_is_whole_units(self, contract_factory) -> None:
        value = _assigned(contract_factory(10000), 7).value()
        assert value == value.to_integral_value()

    def test_round_half_up_negative(self) -> None:
        assert round_half_up(Fraction(-1, 2)) == Decimal(-1)
        assert round_half_up(Fraction(-7, 5)) == Decimal(-1)
        assert round_half_up(Fraction(0)) == Decimal(0)


class TestIdentity:
    def test_equal_on_same_issue_and_project(self, contract_factory) -> None:
        contract = contract_factory(100)
        first = _assigned(contract, 120)
        second = _assigned(contract, 30)
        assert first == second
        assert hash(first) == hash(second)

    def test_assignment_state_does_not_matter(self, contract_factory, project: Project) -> None:
        assigned = _assigned(contract_factory(100), 120)
        unassigned = UnassignedTask(project, "123", Role.REV, 15)
        assert assigned == unassigned
        assert hash(assigned) == hash(unassigned)
        assert len({assigned, unassigned}) == 1

    def test_equal_projects_by_key(self) -> None:
        one = UnassignedTask(make_project("john/repo", owner="a"), "123", Role.DEV, 60)
        two = UnassignedTask(make_project("john/repo", owner="b"), "123", Role.DEV, 60)
        assert one == two

    def test_different_issue(self, project: Project) -> None:
        assert UnassignedTask(project, "123", Role.DEV, 60) != UnassignedTask(project, "124", Role.DEV, 60)

    def test_different_repo(self) -> None:
        one = UnassignedTask(make_project("john/repo"), "123", Role.DEV, 60)
        two = UnassignedTask(make_project("john/other"), "123", Role.DEV, 60)
        assert one != two

    def test_different_provider(self) -> None:
        one = UnassignedTask(make_project("john/repo", provider=GITHUB), "123", Role.DEV, 60)
        two = UnassignedTask(make_project("john/repo", provider=GITLAB), "123", Role.DEV, 60)
        assert one != two

    def test_not_equal_to_other_types(self, project: Project) -> None:
        assert UnassignedTask(project, "123", Role.DEV, 60) != "123"


class TestIssue:
    def test_looks_up_issue_in_project_repo(self, project: Project, github_issue: Issue) -> None:
        issues = MagicMock()
        issues.get_issue.return_value = github_issue
        task = UnassignedTask(project, "42", Role.DEV, 60)
        assert task.issue(issues) is github_issue
        issues.get_issue.assert_called_once_with("john/repo", "42")

    def test_assigned_task_uses_contract_project(self, contract_factory, github_issue: Issue) -> None:
        issues = MagicMock()
        issues.get_issue.return_value = github_issue
        _assigned(contract_factory(100), 60, issue_id="42").issue(issues)
        issues.get_issue.assert_called_once_with("john/repo", "42")
