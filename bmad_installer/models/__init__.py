"""Data models for the installer."""
from bmad_installer.models.agent import (
    DEPENDENCY_CATEGORIES,
    AgentDefinition,
    AgentDependencies,
    DependencyOutcome,
    ResolutionStatus,
)
from bmad_installer.models.install import (
    InstallAction,
    InstallationStatus,
    InstallOptions,
    InstallResult,
    RepairOptions,
    UpdateOptions,
)
from bmad_installer.models.manifest import InstallationManifest
from bmad_installer.models.pack import ContentPack
from bmad_installer.models.state import (
    DetectedPack,
    ExistingKnownVersion,
    ExistingUnknownVersion,
    Fresh,
    InstallationState,
    StateType,
)

__all__ = [
    'DEPENDENCY_CATEGORIES',
    'AgentDefinition',
    'AgentDependencies',
    'ContentPack',
    'DependencyOutcome',
    'DetectedPack',
    'ExistingKnownVersion',
    'ExistingUnknownVersion',
    'Fresh',
    'InstallAction',
    'InstallationManifest',
    'InstallationState',
    'InstallationStatus',
    'InstallOptions',
    'InstallResult',
    'RepairOptions',
    'ResolutionStatus',
    'StateType',
    'UpdateOptions',
]
