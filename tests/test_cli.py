"""Tests for CLI commands."""

import shutil
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from critpath.cli import app

runner = CliRunner()

EXAMPLE = Path("examples/launch_plan.yaml")


@pytest.fixture
def plan(tmp_path: Path) -> Path:
    """A writable copy of the example launch plan."""
    path = tmp_path / "launch_plan.yaml"
    shutil.copy(EXAMPLE, path)
    return path


def _stored(path: Path) -> dict:
    return yaml.safe_load(path.read_text(encoding="utf-8"))["projects"]["launch"]["milestones"]


class TestScheduleCommand:
    """Test the schedule CLI command."""

    def test_schedule_table(self) -> None:
        result = runner.invoke(app, ["schedule", str(EXAMPLE)])

        assert result.exit_code == 0
        assert "ID" in result.stdout
        assert "SLACK" in result.stdout
        assert "Project launch ends 2025-02-06" in result.stdout
        release_line = next(
            line for line in result.stdout.splitlines() if line.startswith("release")
        )
        assert release_line.rstrip().endswith("yes")

    def test_schedule_does_not_write_by_default(self, plan: Path) -> None:
        before = plan.read_text(encoding="utf-8")
        result = runner.invoke(app, ["schedule", str(plan)])
        assert result.exit_code == 0
        assert plan.read_text(encoding="utf-8") == before

    def test_schedule_write(self, plan: Path) -> None:
        result = runner.invoke(app, ["schedule", str(plan), "--write"])

        assert result.exit_code == 0
        assert "Schedule written to" in result.stdout
        stored = _stored(plan)
        assert stored["backend"]["schedule"]["is_critical"] is True
        assert stored["frontend_polish"]["schedule"]["slack"] == 19

    def test_unknown_project(self) -> None:
        result = runner.invoke(app, ["schedule", str(EXAMPLE), "--project", "nope"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_invalid_current_date(self) -> None:
        result = runner.invoke(app, ["schedule", str(EXAMPLE), "--current-date", "tomorrow"])
        assert result.exit_code == 1
        assert "Invalid date format" in result.output

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["schedule", str(tmp_path / "absent.yaml")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_cycle_reported(self, tmp_path: Path) -> None:
        path = tmp_path / "cycle.yaml"
        path.write_text(
            "projects:\n  p:\n    start_date: 2025-01-06\n    milestones:\n"
            "      a: {name: A, duration: 1, dependencies: [b]}\n"
            "      b: {name: B, duration: 1, dependencies: [a]}\n",
            encoding="utf-8",
        )
        result = runner.invoke(app, ["schedule", str(path)])
        assert result.exit_code == 1
        assert "circular dependency" in result.output

    def test_config_option(self, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text("scheduler:\n  critical_slack_threshold: 30\n", encoding="utf-8")
        result = runner.invoke(app, ["--config", str(config), "schedule", str(EXAMPLE)])
        assert result.exit_code == 0
        docs_line = next(line for line in result.stdout.splitlines() if line.startswith("docs"))
        assert docs_line.rstrip().endswith("yes")


class TestCriticalPathCommand:
    """Test the critical-path CLI command."""

    def test_lists_critical_milestones_in_order(self) -> None:
        result = runner.invoke(app, ["critical-path", str(EXAMPLE)])

        assert result.exit_code == 0
        ids = [line.split("\t")[0] for line in result.stdout.splitlines()]
        assert ids == ["kickoff", "backend", "backend_hardening", "backend_load_test", "release"]


class TestGraphCommand:
    """Test the graph CLI command."""

    def test_graph_stdout(self) -> None:
        result = runner.invoke(app, ["graph", str(EXAMPLE)])
        assert result.exit_code == 0
        assert "digraph launch {" in result.stdout
        assert '"kickoff" -> "backend" [color="red", penwidth=2];' in result.stdout

    def test_graph_critical_view_to_file(self, tmp_path: Path) -> None:
        output = tmp_path / "graph.dot"
        result = runner.invoke(
            app, ["graph", str(EXAMPLE), "--view", "critical-path", "-o", str(output)]
        )
        assert result.exit_code == 0
        assert "Graph written to" in result.stdout
        dot = output.read_text(encoding="utf-8")
        assert '"frontend"' not in dot
        assert '"backend_load_test"' in dot


class TestAddCommand:
    """Test the add CLI command."""

    def test_add_milestone(self, plan: Path) -> None:
        result = runner.invoke(
            app,
            [
                "add",
                str(plan),
                "--id",
                "qa",
                "--name",
                "QA pass",
                "--duration",
                "4",
                "-d",
                "frontend_polish",
                "-d",
                "docs",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Added qa: 2025-01-18 - 2025-01-22" in result.stdout
        stored = _stored(plan)
        assert stored["qa"]["dependencies"] == ["frontend_polish", "docs"]
        assert stored["qa"]["order"] == 8
        assert stored["kickoff"]["schedule"]["earliest_start"] == "2025-01-06"

    def test_add_unknown_dependency(self, plan: Path) -> None:
        result = runner.invoke(
            app, ["add", str(plan), "--id", "qa", "--name", "QA", "-d", "ghost"]
        )
        assert result.exit_code == 1
        assert "'ghost'" in result.output
        assert "qa" not in _stored(plan)


class TestDeleteCommand:
    """Test the delete CLI command."""

    def test_delete_leaf(self, plan: Path) -> None:
        runner.invoke(app, ["add", str(plan), "--id", "extra", "--name", "Extra"])
        result = runner.invoke(app, ["delete", str(plan), "extra"])
        assert result.exit_code == 0
        assert "Deleted extra" in result.stdout
        assert "extra" not in _stored(plan)

    def test_delete_requires_decision(self, plan: Path) -> None:
        result = runner.invoke(app, ["delete", str(plan), "backend_hardening"])
        assert result.exit_code == 1
        assert "--accept-suggestion" in result.output
        assert "backend_hardening" in _stored(plan)

    def test_delete_accept_suggestion(self, plan: Path) -> None:
        result = runner.invoke(
            app, ["delete", str(plan), "backend_hardening", "--accept-suggestion"]
        )

        assert result.exit_code == 0, result.output
        assert "Re-pointed backend_load_test to backend" in result.stdout
        stored = _stored(plan)
        assert "backend_hardening" not in stored
        assert stored["backend_load_test"]["dependencies"] == ["backend"]

    def test_delete_with_replacement(self, plan: Path) -> None:
        runner.invoke(
            app,
            ["add", str(plan), "--id", "qa", "--name", "QA", "-d", "frontend_polish", "-d", "docs"],
        )
        runner.invoke(app, ["add", str(plan), "--id", "ship", "--name", "Ship", "-d", "qa"])

        result = runner.invoke(app, ["delete", str(plan), "qa", "--replacement", "docs"])

        assert result.exit_code == 0, result.output
        assert "Re-pointed ship to docs" in result.stdout
        assert _stored(plan)["ship"]["dependencies"] == ["docs"]

    def test_delete_replacement_must_be_candidate(self, plan: Path) -> None:
        result = runner.invoke(
            app, ["delete", str(plan), "backend_hardening", "--replacement", "frontend"]
        )
        assert result.exit_code == 1
        assert "not a valid replacement" in result.output

    def test_conflicting_options(self, plan: Path) -> None:
        result = runner.invoke(
            app, ["delete", str(plan), "backend", "--no-replacement", "--accept-suggestion"]
        )
        assert result.exit_code == 1
        assert "Use only one of" in result.output
