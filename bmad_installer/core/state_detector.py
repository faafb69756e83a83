"""Classify what is already installed in a target directory."""
from pathlib import Path
from typing import Dict, Optional

from bmad_installer.core.config import InstallerConfig
from bmad_installer.core.errors import ParseError
from bmad_installer.core.filesystem import LocalFileSystem
from bmad_installer.core.logger import get_logger
from bmad_installer.core.manifest import ManifestStore
from bmad_installer.core.resource_locator import PACK_CONFIG, ResourceLocator
from bmad_installer.models.state import (
    DetectedPack,
    ExistingKnownVersion,
    ExistingUnknownVersion,
    Fresh,
    InstallationState,
)

logger = get_logger(__name__)


class StateDetector:
    """Derive the installation state from the manifest and dot folders.

    Nothing is cached: every call re-reads the filesystem.
    """

    def __init__(
        self,
        config: InstallerConfig,
        manifest_store: ManifestStore,
        resource_locator: ResourceLocator,
        fs: Optional[LocalFileSystem] = None,
    ):
        self.config = config
        self.manifest_store = manifest_store
        self.resource_locator = resource_locator
        self.fs = fs or manifest_store.fs

    def detect(self, install_dir: Path) -> InstallationState:
        """Classify install_dir as Fresh, ExistingKnownVersion or ExistingUnknownVersion."""
        install_dir = Path(install_dir)
        if not self.fs.is_dir(install_dir):
            return Fresh()
        try:
            self.fs.list_dir(install_dir)
        except OSError as e:
            logger.warning(f"Cannot read {install_dir}, treating as fresh: {e}")
            return Fresh()

        detected_packs = self.detect_packs(install_dir)

        try:
            manifest = self.manifest_store.load(install_dir)
        except ParseError as e:
            logger.warning(f"Install manifest is unreadable, treating version as unknown: {e}")
            return ExistingUnknownVersion(detected_packs=detected_packs)

        if manifest is not None:
            return ExistingKnownVersion(manifest=manifest, detected_packs=detected_packs)

        if self.fs.is_dir(self.config.core_dir(install_dir)):
            return ExistingUnknownVersion(detected_packs=detected_packs)

        return Fresh()

    def detect_packs(self, install_dir: Path) -> Dict[str, DetectedPack]:
        """Find installed packs: dot folders (other than core) with a config.yaml."""
        packs: Dict[str, DetectedPack] = {}
        try:
            entries = self.fs.list_dir(install_dir)
        except OSError as e:
            logger.warning(f"Cannot read {install_dir}: {e}")
            return packs

        for entry in entries:
            if not entry.is_dir or not entry.name.startswith("."):
                continue
            if entry.name == self.config.core_dir_name:
                continue

            config_path = entry.path / PACK_CONFIG
            if not self.fs.is_file(config_path):
                continue

            pack_id = entry.name[1:]
            try:
                manifest = self.resource_locator.parse_pack_config(config_path, pack_id)
            except ParseError as e:
                logger.warning(f"Skipping pack {entry.name}: {e}")
                continue

            packs[pack_id] = DetectedPack(pack_id=pack_id, manifest=manifest, path=entry.path)

        return packs
