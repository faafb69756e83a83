"""Per-operation options and results for install, update and repair."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from bmad_installer.models.agent import DependencyOutcome, ResolutionStatus
from bmad_installer.models.manifest import InstallationManifest
from bmad_installer.models.state import StateType


@dataclass
class InstallOptions:
    """What to install and where.

    Attributes:
        directory: Target project directory
        include_core: Install the core asset set
        full: Install everything available (implies include_core)
        packs: Content pack ids to install into their dot folders
        ides: IDE names to write rule files for
    """
    directory: Path
    include_core: bool = True
    full: bool = False
    packs: List[str] = field(default_factory=list)
    ides: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.directory = Path(self.directory)

    @property
    def wants_core(self) -> bool:
        return self.include_core or self.full


@dataclass
class UpdateOptions:
    """Update an existing installation (found from cwd when directory is None)."""
    directory: Optional[Path] = None
    packs: List[str] = field(default_factory=list)
    ides: List[str] = field(default_factory=list)


@dataclass
class RepairOptions:
    """Repair missing core files of an existing installation."""
    directory: Path
    validate_checksums: bool = True

    def __post_init__(self):
        self.directory = Path(self.directory)


class InstallAction(str, Enum):
    """What an install call ended up doing to the core."""
    FRESH_INSTALL = "fresh_install"
    UPDATED = "updated"
    REPAIRED = "repaired"
    ALREADY_INSTALLED = "already_installed"
    NEWER_INSTALLED = "newer_installed"
    PACKS_ONLY = "packs_only"


@dataclass
class InstallResult:
    """Outcome of an install/update/repair call."""
    action: InstallAction
    state_type: StateType
    message: str = ""
    manifest: Optional[InstallationManifest] = None
    packs_installed: List[str] = field(default_factory=list)
    dependency_outcomes: List[DependencyOutcome] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def unresolved(self) -> List[DependencyOutcome]:
        return [o for o in self.dependency_outcomes if o.status == ResolutionStatus.UNRESOLVED]


@dataclass
class InstallationStatus:
    """Summary of an installation for status displays."""
    type: StateType
    core_installed: bool
    core_version: Optional[str]
    expansion_packs: List[str]
    directory: Path

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "coreInstalled": self.core_installed,
            "coreVersion": self.core_version,
            "expansionPacks": list(self.expansion_packs),
            "directory": str(self.directory),
        }
