"""Tests for the bmad CLI."""
import json

import pytest
from typer.testing import CliRunner

from bmad_installer.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def sources_env(monkeypatch, core_source, packs_source, common_source):
    """Point the CLI at the throwaway source trees."""
    monkeypatch.setenv("BMAD_CORE_SOURCE", str(core_source))
    monkeypatch.setenv("BMAD_PACKS_SOURCE", str(packs_source))
    monkeypatch.setenv("BMAD_COMMON_SOURCE", str(common_source))
    monkeypatch.setenv("BMAD_CORE_VERSION", "1.0.0")
    monkeypatch.setenv("BMAD_MAX_WORKERS", "1")


@pytest.fixture
def log_args(tmp_path):
    return ["--log-file", str(tmp_path / "installer.log")]


def test_help_lists_commands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("install", "update", "repair", "status", "verify", "packs"):
        assert command in result.stdout


def test_install_core_and_pack(project_dir, log_args):
    """Install command writes core and pack folders."""
    result = runner.invoke(app, ["install", str(project_dir), "--pack", "game-dev", *log_args])

    assert result.exit_code == 0, result.stdout
    assert (project_dir / ".bmad-core" / "install-manifest.yaml").exists()
    assert (project_dir / ".game-dev" / "agents" / "game-designer.md").exists()
    assert "installed" in result.stdout


def test_install_full_includes_all_packs(project_dir, log_args):
    result = runner.invoke(app, ["install", str(project_dir), "--full", *log_args])

    assert result.exit_code == 0, result.stdout
    assert (project_dir / ".game-dev").is_dir()


def test_install_twice_reports_already_installed(project_dir, log_args):
    runner.invoke(app, ["install", str(project_dir), *log_args])
    result = runner.invoke(app, ["install", str(project_dir), *log_args])

    assert result.exit_code == 0
    assert "already installed" in result.stdout


def test_install_missing_core_source_fails(project_dir, log_args, monkeypatch, tmp_path):
    monkeypatch.setenv("BMAD_CORE_SOURCE", str(tmp_path / "missing"))

    result = runner.invoke(app, ["install", str(project_dir), *log_args])

    assert result.exit_code == 1
    assert "Error:" in result.stdout


def test_update_without_installation_fails(project_dir, log_args):
    result = runner.invoke(app, ["update", str(project_dir), *log_args])

    assert result.exit_code == 1
    assert "No installation found" in result.stdout


def test_update_newer_core(project_dir, log_args, monkeypatch):
    runner.invoke(app, ["install", str(project_dir), *log_args])
    monkeypatch.setenv("BMAD_CORE_VERSION", "1.1.0")

    result = runner.invoke(app, ["update", str(project_dir), *log_args])

    assert result.exit_code == 0, result.stdout
    assert "updated" in result.stdout


def test_repair_restores_deleted_file(project_dir, log_args):
    runner.invoke(app, ["install", str(project_dir), *log_args])
    (project_dir / ".bmad-core" / "user-guide.md").unlink()

    result = runner.invoke(app, ["repair", str(project_dir), *log_args])

    assert result.exit_code == 0, result.stdout
    assert (project_dir / ".bmad-core" / "user-guide.md").exists()


def test_status_json(project_dir, log_args):
    runner.invoke(app, ["install", str(project_dir), *log_args])

    result = runner.invoke(app, ["status", str(project_dir), "--json"])

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["type"] == "v5_existing"
    assert data["coreInstalled"] is True
    assert data["coreVersion"] == "1.0.0"


def test_status_table_for_empty_directory(project_dir):
    result = runner.invoke(app, ["status", str(project_dir)])

    assert result.exit_code == 0
    assert "fresh" in result.stdout


def test_verify_reports_missing_files(project_dir, log_args):
    runner.invoke(app, ["install", str(project_dir), *log_args])
    (project_dir / ".bmad-core" / "user-guide.md").unlink()

    result = runner.invoke(app, ["verify", str(project_dir)])

    assert result.exit_code == 1
    assert "user-guide.md" in result.stdout


def test_verify_clean_install(project_dir, log_args):
    runner.invoke(app, ["install", str(project_dir), *log_args])

    result = runner.invoke(app, ["verify", str(project_dir)])

    assert result.exit_code == 0
    assert "intact" in result.stdout


def test_packs_table():
    result = runner.invoke(app, ["packs"])

    assert result.exit_code == 0
    assert "game-dev" in result.stdout
