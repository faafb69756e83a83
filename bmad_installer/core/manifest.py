"""Read and write the install manifest."""
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from bmad_installer.core.codec import YamlCodec
from bmad_installer.core.config import InstallerConfig
from bmad_installer.core.errors import ParseError
from bmad_installer.core.filesystem import LocalFileSystem
from bmad_installer.core.logger import get_logger
from bmad_installer.models.manifest import InstallationManifest

logger = get_logger(__name__)


class ManifestStore:
    """Load and save ``<root>/<core>/install-manifest.yaml``."""

    def __init__(
        self,
        config: InstallerConfig,
        fs: Optional[LocalFileSystem] = None,
        codec: Optional[YamlCodec] = None,
    ):
        self.config = config
        self.fs = fs or LocalFileSystem()
        self.codec = codec or YamlCodec()

    def path(self, install_dir: Path) -> Path:
        return self.config.manifest_path(install_dir)

    def exists(self, install_dir: Path) -> bool:
        return self.fs.is_file(self.path(install_dir))

    def load(self, install_dir: Path) -> Optional[InstallationManifest]:
        """Load the manifest.

        Returns:
            The manifest, or None when the file does not exist

        Raises:
            ParseError: File exists but is not a valid manifest
        """
        manifest_path = self.path(install_dir)
        if not self.fs.is_file(manifest_path):
            return None

        try:
            text = self.fs.read_text(manifest_path)
        except OSError as e:
            raise ParseError("Cannot read manifest", operation="load_manifest", path=manifest_path, cause=e) from e

        data = self.codec.load_mapping(text, source=str(manifest_path))
        try:
            return InstallationManifest.model_validate(data)
        except ValidationError as e:
            raise ParseError("Invalid manifest", operation="load_manifest", path=manifest_path, cause=e) from e

    def save(self, install_dir: Path, manifest: InstallationManifest) -> Path:
        """Write the manifest atomically (temp file, then rename)."""
        manifest_path = self.path(install_dir)
        self.fs.write_text(manifest_path, self.codec.dump(manifest.to_yaml_dict()), atomic=True)
        logger.debug(f"Saved manifest to {manifest_path}")
        return manifest_path
