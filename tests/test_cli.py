"""
Tests for the operator CLI.
"""
import json
import pytest
from datetime import date

from click.testing import CliRunner

from app.config import get_config
from app.models import (
    Activity as ActivityModel,
    Project as ProjectModel,
    ProgressRecord as ProgressRecordModel,
    create_session_factory,
)
from cli import cli


@pytest.fixture
def config_path(tmp_path):
    db_url = f"sqlite:///{tmp_path / 'status.db'}"
    path = tmp_path / "config.yaml"
    path.write_text(
        f"version: '1.0.0'\n"
        f"database:\n  url: '{db_url}'\n"
        f"recompute:\n  max_workers: 1\n  write_delay_seconds: 0\n"
        f"cache:\n  enabled: false\n"
        f"scheduler:\n  enabled: false\n"
    )
    session = create_session_factory(db_url, create_tables=True)()
    going = ProjectModel(code="P-GOING", name="Going")
    session.add(going)
    session.add(ActivityModel(project_code="P-GOING", name="Foundation Pour",
                              timing="post-commencement"))
    session.add(ProgressRecordModel(project_code="P-GOING", activity_name="Foundation Pour",
                                    input_type="actual", quantity=12,
                                    activity_date=date(2026, 10, 1)))
    session.commit()
    session.close()
    yield str(path)
    get_config.cache_clear()


@pytest.fixture
def runner():
    return CliRunner()


class TestCli:

    def test_recompute_json(self, runner, config_path):
        result = runner.invoke(cli, ["--config", config_path, "recompute", "1", "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["new_status"] == "on-going"
        assert payload["changed"] is True
        assert payload["result"]["phases"]["post-commencement"]["started_count"] == 1

    def test_recompute_missing_project_fails(self, runner, config_path):
        result = runner.invoke(cli, ["--config", config_path, "recompute", "99"])

        assert result.exit_code == 1

    def test_recompute_all(self, runner, config_path):
        result = runner.invoke(cli, ["--config", config_path, "recompute-all"])

        assert result.exit_code == 0, result.output
        assert "1 changed, 0 failed, 1 total" in result.output

    def test_set_status_and_summary(self, runner, config_path):
        result = runner.invoke(
            cli, ["--config", config_path, "set-status", "1", "on-hold", "--reason", "Client instruction"]
        )
        assert result.exit_code == 0, result.output
        assert "upcoming -> on-hold" in result.output

        result = runner.invoke(cli, ["--config", config_path, "summary"])
        assert result.exit_code == 0, result.output
        assert "Total projects: 1" in result.output
        assert "Problematic: 1" in result.output

    def test_invalid_transition_aborts(self, runner, config_path):
        result = runner.invoke(cli, ["--config", config_path, "set-status", "1", "contract-completed"])

        assert result.exit_code != 0
        assert "No such transition" in result.output

    def test_schedule_disabled(self, runner, config_path):
        result = runner.invoke(cli, ["--config", config_path, "schedule"])

        assert result.exit_code == 0
        assert "disabled" in result.output


class TestCliStatusFilter:
    """Tests for --status validation on recompute-all."""

    def test_unknown_status_is_rejected(self, runner, config_path):
        result = runner.invoke(cli, ["--config", config_path, "recompute-all", "--status", "bogus"])

        assert result.exit_code == 2
        assert not isinstance(result.exception, ValueError)
        assert "unknown project status 'bogus'" in result.output

    def test_legacy_status_is_accepted(self, runner, config_path):
        runner.invoke(cli, ["--config", config_path, "recompute", "1"])

        result = runner.invoke(
            cli, ["--config", config_path, "recompute-all", "--status", "active", "--json"]
        )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert [r["project_code"] for r in payload] == ["P-GOING"]
        assert payload[0]["changed"] is False


class TestCliConfigPath:
    """--config must be usable without the packaged default file."""

    def test_commands_run_without_default_config(self, runner, config_path, monkeypatch, tmp_path):
        monkeypatch.setattr("app.config.DEFAULT_CONFIG_PATH", tmp_path / "missing.yaml")
        get_config.cache_clear()

        result = runner.invoke(cli, ["--config", config_path, "summary"])

        assert result.exit_code == 0, result.output
        assert "Total projects: 1" in result.output
