"""Tests for installation state detection."""
import logging

import pytest

from bmad_installer.core.manifest import ManifestStore
from bmad_installer.core.resource_locator import ResourceLocator
from bmad_installer.core.state_detector import StateDetector
from bmad_installer.models.manifest import InstallationManifest
from bmad_installer.models.state import (
    ExistingKnownVersion,
    ExistingUnknownVersion,
    Fresh,
    StateType,
)


@pytest.fixture
def detector(config):
    store = ManifestStore(config)
    return StateDetector(config, store, ResourceLocator(config))


def _write_manifest(detector, project_dir, version="1.0.0"):
    manifest = InstallationManifest.create(version=version, components={"core": True})
    detector.manifest_store.save(project_dir, manifest)


class TestDetect:
    """Classification from the manifest and core folder."""

    def test_empty_directory_is_fresh(self, detector, project_dir):
        state = detector.detect(project_dir)
        assert isinstance(state, Fresh)
        assert state.type == StateType.FRESH

    def test_missing_directory_is_fresh(self, detector, tmp_path):
        assert isinstance(detector.detect(tmp_path / "nowhere"), Fresh)

    def test_manifest_gives_known_version(self, detector, project_dir):
        _write_manifest(detector, project_dir, version="1.0.0")

        state = detector.detect(project_dir)

        assert isinstance(state, ExistingKnownVersion)
        assert state.type.value == "v5_existing"
        assert state.manifest.version == "1.0.0"

    def test_core_folder_without_manifest_is_unknown(self, detector, project_dir):
        (project_dir / ".bmad-core").mkdir()
        state = detector.detect(project_dir)
        assert isinstance(state, ExistingUnknownVersion)
        assert state.type.value == "unknown_existing"

    def test_corrupt_manifest_is_unknown(self, detector, project_dir):
        manifest_path = project_dir / ".bmad-core" / "install-manifest.yaml"
        manifest_path.parent.mkdir()
        manifest_path.write_text("version: [unclosed\n")

        assert isinstance(detector.detect(project_dir), ExistingUnknownVersion)

    def test_numeric_version_and_timestamp_are_coerced(self, detector, project_dir):
        manifest_path = project_dir / ".bmad-core" / "install-manifest.yaml"
        manifest_path.parent.mkdir()
        manifest_path.write_text(
            "version: 1.0\ninstalledAt: 2025-01-02T03:04:05Z\ntype: v5\ncomponents:\n  core: true\n"
        )

        state = detector.detect(project_dir)

        assert state.manifest.version == "1.0"
        assert state.manifest.installed_at.startswith("2025-01-02")


class TestDetectPacks:
    """Dot-folder scan for installed packs."""

    def test_packs_found_by_config(self, detector, project_dir):
        _write_manifest(detector, project_dir)
        pack_dir = project_dir / ".game-dev"
        pack_dir.mkdir()
        (pack_dir / "config.yaml").write_text("id: game-dev\nversion: 1.2.0\n")
        (project_dir / ".git").mkdir()

        state = detector.detect(project_dir)

        assert list(state.detected_packs) == ["game-dev"]
        detected = state.detected_packs["game-dev"]
        assert detected.manifest.version == "1.2.0"
        assert detected.path == pack_dir

    def test_malformed_pack_config_skipped(self, detector, project_dir, caplog):
        (project_dir / ".bmad-core").mkdir()
        broken = project_dir / ".broken"
        broken.mkdir()
        (broken / "config.yaml").write_text("id: [oops\n")

        with caplog.at_level(logging.WARNING):
            state = detector.detect(project_dir)

        assert state.detected_packs == {}
        assert "Skipping pack .broken" in caplog.text

    def test_fresh_state_carries_no_packs(self, detector, project_dir):
        pack_dir = project_dir / ".game-dev"
        pack_dir.mkdir()
        (pack_dir / "config.yaml").write_text("id: game-dev\n")

        state = detector.detect(project_dir)

        assert isinstance(state, Fresh)
        assert state.detected_packs == {}
