"""Installer runtime configuration and settings."""
import os
from dataclasses import dataclass, field
from pathlib import Path

from bmad_installer import __version__

RESOURCES_DIR = Path(__file__).parent.parent / "resources"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class InstallerConfig:
    """Runtime configuration for installer operations.

    Built once at process start and handed to every component; nothing
    reads paths from the working directory on its own.

    Attributes:
        core_source: Source tree of the core assets (tasks, templates, agent-configs...)
        packs_source: Directory holding one subdirectory per expansion pack
        common_source: Optional tree copied into every installed pack
        core_dir_name: Name of the installed core folder (default: .bmad-core)
        manifest_name: Manifest filename inside the core folder
        core_version: Version of the core assets being installed
        max_workers: Worker threads for dependency copies (1 = sequential)
        validate_checksums: Compare stored checksums when checking integrity
    """

    core_source: Path = field(default_factory=lambda: RESOURCES_DIR / "bmad-core")
    packs_source: Path = field(default_factory=lambda: RESOURCES_DIR / "expansion-packs")
    common_source: Path = field(default_factory=lambda: RESOURCES_DIR / "common")
    core_dir_name: str = ".bmad-core"
    manifest_name: str = "install-manifest.yaml"
    core_version: str = __version__
    max_workers: int = 4
    validate_checksums: bool = True

    def __post_init__(self):
        self.core_source = Path(self.core_source)
        self.packs_source = Path(self.packs_source)
        self.common_source = Path(self.common_source)
        if self.max_workers < 1:
            self.max_workers = 1

    @property
    def core_pack_id(self) -> str:
        """Core folder name without its leading dot."""
        return self.core_dir_name.lstrip(".")

    def core_dir(self, install_dir: Path) -> Path:
        return Path(install_dir) / self.core_dir_name

    def manifest_path(self, install_dir: Path) -> Path:
        return self.core_dir(install_dir) / self.manifest_name

    @classmethod
    def from_env(cls) -> "InstallerConfig":
        """Create config from environment variables.

        Environment variables:
            BMAD_CORE_SOURCE: Core asset source directory
            BMAD_PACKS_SOURCE: Expansion pack source directory
            BMAD_COMMON_SOURCE: Common items source directory
            BMAD_CORE_VERSION: Override the available core version
            BMAD_MAX_WORKERS: Dependency copy worker count
            BMAD_VALIDATE_CHECKSUMS: 0/1 toggle for checksum validation

        Returns:
            InstallerConfig instance with values from environment or defaults
        """
        defaults = cls()
        return cls(
            core_source=Path(os.getenv("BMAD_CORE_SOURCE", defaults.core_source)),
            packs_source=Path(os.getenv("BMAD_PACKS_SOURCE", defaults.packs_source)),
            common_source=Path(os.getenv("BMAD_COMMON_SOURCE", defaults.common_source)),
            core_version=os.getenv("BMAD_CORE_VERSION", defaults.core_version),
            max_workers=int(os.getenv("BMAD_MAX_WORKERS", defaults.max_workers)),
            validate_checksums=_env_flag("BMAD_VALIDATE_CHECKSUMS", defaults.validate_checksums),
        )
