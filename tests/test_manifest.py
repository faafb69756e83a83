"""Tests for the install manifest model and store."""
import pytest
import yaml

from bmad_installer.core.config import InstallerConfig
from bmad_installer.core.errors import ParseError
from bmad_installer.core.manifest import ManifestStore
from bmad_installer.models.manifest import InstallationManifest


@pytest.fixture
def store():
    return ManifestStore(InstallerConfig())


class TestInstallationManifest:
    """Model defaults and coercion."""

    def test_create_stamps_time(self):
        manifest = InstallationManifest.create(version="1.0.0", components={"core": True})
        assert manifest.type == "v5"
        assert manifest.installed_at
        assert manifest.files is None

    def test_yaml_dict_uses_camel_case_and_skips_none(self):
        data = InstallationManifest.create(version="1.0.0", components={"core": True}).to_yaml_dict()
        assert "installedAt" in data
        assert "installed_at" not in data
        assert "files" not in data

    def test_missing_version_is_unknown(self):
        assert InstallationManifest.model_validate({}).version_or_unknown == "unknown"

    def test_extra_keys_preserved(self):
        manifest = InstallationManifest.model_validate({"version": "1", "ide_setup": ["cursor"]})
        assert manifest.to_yaml_dict()["ide_setup"] == ["cursor"]


class TestManifestStore:
    """Load/save at <root>/.bmad-core/install-manifest.yaml."""

    def test_missing_manifest_loads_none(self, store, tmp_path):
        assert store.load(tmp_path) is None
        assert not store.exists(tmp_path)

    def test_save_and_load(self, store, tmp_path):
        manifest = InstallationManifest.create(
            version="1.2.0",
            components={"core": True},
            files=[".bmad-core/a.md"],
            integrity={".bmad-core/a.md": "abc"},
        )

        path = store.save(tmp_path, manifest)
        loaded = store.load(tmp_path)

        assert path == tmp_path / ".bmad-core" / "install-manifest.yaml"
        assert loaded.version == "1.2.0"
        assert loaded.integrity == {".bmad-core/a.md": "abc"}
        assert not path.with_name(path.name + ".tmp").exists()
        assert yaml.safe_load(path.read_text())["type"] == "v5"

    def test_invalid_yaml_raises_parse_error(self, store, tmp_path):
        path = store.path(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text("version: [1\n")

        with pytest.raises(ParseError):
            store.load(tmp_path)

    def test_non_mapping_raises_parse_error(self, store, tmp_path):
        path = store.path(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text("- just\n- a list\n")

        with pytest.raises(ParseError) as exc_info:
            store.load(tmp_path)

        assert "Expected a mapping" in str(exc_info.value)

    def test_invalid_field_raises_parse_error(self, store, tmp_path):
        path = store.path(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text("version: 1.0\ncomponents: not-a-map\n")

        with pytest.raises(ParseError):
            store.load(tmp_path)
