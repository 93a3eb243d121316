"""Tests for configuration loading and discovery."""

from pathlib import Path

import pytest

from critpath import context
from critpath.config import DEFAULT_CONFIG_FILENAME, discover_config, load_config
from critpath.exceptions import ValidationError
from critpath.scheduler import AnchorFallback, SinkAnchor


def test_load_config(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        """
scheduler:
  critical_slack_threshold: 2
  anchor_fallback: error
  sink_anchor: project_end
""",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.scheduler.critical_slack_threshold == 2
    assert config.scheduler.anchor_fallback == AnchorFallback.ERROR
    assert config.scheduler.sink_anchor == SinkAnchor.PROJECT_END


def test_empty_config_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    config = load_config(path)
    assert config.scheduler.critical_slack_threshold == 0.5
    assert config.scheduler.anchor_fallback == AnchorFallback.TODAY
    assert config.scheduler.sink_anchor == SinkAnchor.OWN_FINISH


def test_missing_config(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "content",
    [
        "- not\n- a mapping\n",
        "scheduler:\n  critical_slack_threshold: -1\n",
        "scheduler:\n  anchor_fallback: sometimes\n",
    ],
)
def test_invalid_config(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(path)


class TestDiscoverConfig:
    """Test the config search order."""

    def test_defaults_when_nothing_found(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        config = discover_config(tmp_path / "plan.yaml")
        assert config.scheduler.critical_slack_threshold == 0.5

    def test_next_to_project_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        project_dir = tmp_path / "project"
        project_dir.mkdir()
        (project_dir / DEFAULT_CONFIG_FILENAME).write_text(
            "scheduler:\n  critical_slack_threshold: 3\n", encoding="utf-8"
        )
        config = discover_config(project_dir / "plan.yaml")
        assert config.scheduler.critical_slack_threshold == 3

    def test_current_directory(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / DEFAULT_CONFIG_FILENAME).write_text(
            "scheduler:\n  critical_slack_threshold: 4\n", encoding="utf-8"
        )
        assert discover_config().scheduler.critical_slack_threshold == 4

    def test_context_overrides_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / DEFAULT_CONFIG_FILENAME).write_text(
            "scheduler:\n  critical_slack_threshold: 4\n", encoding="utf-8"
        )
        explicit = tmp_path / "other.yaml"
        explicit.write_text("scheduler:\n  critical_slack_threshold: 7\n", encoding="utf-8")
        context.set_config_path(explicit)
        assert discover_config(tmp_path / "plan.yaml").scheduler.critical_slack_threshold == 7

    def test_explicit_path_wins(self, tmp_path: Path) -> None:
        context_file = tmp_path / "context.yaml"
        context_file.write_text("scheduler:\n  critical_slack_threshold: 7\n", encoding="utf-8")
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text("scheduler:\n  critical_slack_threshold: 8\n", encoding="utf-8")
        context.set_config_path(context_file)
        assert discover_config(config_path=explicit).scheduler.critical_slack_threshold == 8
