"""Integration tests for the groupsweep CLI."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from rich.console import Console
from typer.testing import CliRunner

from groupsweep.cli.main import app
from groupsweep.models.delete_result import DeleteResult
from groupsweep.models.resource import ResourceClass, ResourceHandle
from tests.fixtures.resources import create_instance, create_reservation, failed


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("GROUPSWEEP_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.delenv("GROUPSWEEP_RESOURCE_GROUP", raising=False)
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.setattr("groupsweep.cli.main.console", Console(width=200))


def _inventory(instances: list[ResourceHandle], reservations: list[ResourceHandle]) -> Mock:
    inventory = Mock()
    inventory.group_name = "ci-functional"
    inventory.region = "us-east-1"
    inventory.list_resources.side_effect = lambda resource_class: {
        ResourceClass.INSTANCE: instances,
        ResourceClass.CAPACITY_RESERVATION: reservations,
    }[resource_class]
    return inventory


def _deleter(results: dict[str, DeleteResult]) -> Mock:
    deleter = Mock()
    deleter.aws_profile = None
    deleted: list[str] = []

    async def delete(resource: ResourceHandle) -> DeleteResult:
        deleted.append(resource.resource_id)
        return results.get(resource.resource_id, DeleteResult.success())

    deleter.delete = delete
    deleter.deleted = deleted
    return deleter


class TestCleanupCLI:
    """Integration tests for running the cleanup from the command line."""

    def test_full_cleanup_exits_zero(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test a successful run deletes both phases and writes an audit log."""
        deleter = _deleter({})
        inventory = _inventory([create_instance("i-1"), create_instance("i-2")], [create_reservation("cr-1")])

        with patch("groupsweep.cli.main.GroupInventory", return_value=inventory) as mock_inventory, patch(
            "groupsweep.cli.main.ResourceDeleter", return_value=deleter
        ):
            result = runner.invoke(
                app,
                ["--resource-group", "ci-functional", "--region", "us-east-1", "--storage-path", str(tmp_path)],
            )

        assert result.exit_code == 0, result.output
        assert "Cleanup complete" in result.output
        assert "at most 30s backoff per resource" in result.output
        assert deleter.deleted == ["i-1", "i-2", "cr-1"]
        mock_inventory.assert_called_once_with("ci-functional", region="us-east-1", aws_profile=None)
        assert list((tmp_path / "audit-logs").glob("*/*/operation-*.yaml"))

    def test_terminal_failure_exits_non_zero(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test an unrecoverable delete failure stops the run with exit code 2."""
        deleter = _deleter({"i-1": failed("UnauthorizedOperation")})
        inventory = _inventory([create_instance("i-1")], [create_reservation("cr-1")])

        with patch("groupsweep.cli.main.GroupInventory", return_value=inventory), patch(
            "groupsweep.cli.main.ResourceDeleter", return_value=deleter
        ):
            result = runner.invoke(app, ["-g", "ci-functional", "--storage-path", str(tmp_path)])

        assert result.exit_code == 2
        assert "Cleanup aborted" in result.output
        assert "cr-1" not in deleter.deleted

    def test_missing_resource_group(self, runner: CliRunner) -> None:
        """Test running without a resource group is a configuration error."""
        result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "No resource group" in result.output

    def test_invalid_batch_size(self, runner: CliRunner) -> None:
        """Test a zero batch size is rejected before any AWS call."""
        with patch("groupsweep.cli.main.GroupInventory") as mock_inventory:
            result = runner.invoke(app, ["-g", "ci-functional", "--batch-size", "0"])

        assert result.exit_code == 1
        assert "batch_size" in result.output
        mock_inventory.assert_not_called()

    def test_preview_lists_without_deleting(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test preview shows the plan and deletes nothing."""
        deleter = _deleter({})
        inventory = _inventory([create_instance("i-1", name="web-1")], [create_reservation("cr-1")])

        with patch("groupsweep.cli.main.GroupInventory", return_value=inventory), patch(
            "groupsweep.cli.main.ResourceDeleter", return_value=deleter
        ):
            result = runner.invoke(app, ["-g", "ci-functional", "--storage-path", str(tmp_path), "preview"])

        assert result.exit_code == 0, result.output
        assert "web-1" in result.output
        assert "2 resource(s) would be deleted" in result.output
        assert deleter.deleted == []

    def test_history_after_preview(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test history lists operations recorded in the audit log."""
        inventory = _inventory([create_instance("i-1")], [])

        with patch("groupsweep.cli.main.GroupInventory", return_value=inventory), patch(
            "groupsweep.cli.main.ResourceDeleter", return_value=_deleter({})
        ):
            runner.invoke(app, ["-g", "ci-functional", "--storage-path", str(tmp_path), "preview"])

        result = runner.invoke(app, ["--storage-path", str(tmp_path), "history"])

        assert result.exit_code == 0, result.output
        assert "dry-run" in result.output

    def test_history_empty(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--storage-path", str(tmp_path), "history"])

        assert result.exit_code == 0
        assert "No cleanup operations" in result.output

    def test_history_rejects_non_positive_limit(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test --limit must be at least one."""
        result = runner.invoke(app, ["--storage-path", str(tmp_path), "history", "--limit", "0"])

        assert result.exit_code == 2

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "groupsweep version" in result.output
