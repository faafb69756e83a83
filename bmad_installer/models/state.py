"""Installation state of a target directory.

A closed set of variants; each carries only the data that state has.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Union

from bmad_installer.models.manifest import InstallationManifest
from bmad_installer.models.pack import ContentPack


class StateType(str, Enum):
    """Tag of an installation state."""
    FRESH = "fresh"
    EXISTING_KNOWN = "v5_existing"
    EXISTING_UNKNOWN = "unknown_existing"


@dataclass(frozen=True)
class DetectedPack:
    """A content pack found installed in the target directory."""
    pack_id: str
    manifest: ContentPack
    path: Path


@dataclass(frozen=True)
class Fresh:
    """Nothing installed yet."""
    type: StateType = field(default=StateType.FRESH, init=False)

    @property
    def detected_packs(self) -> Dict[str, DetectedPack]:
        return {}


@dataclass(frozen=True)
class ExistingKnownVersion:
    """Core installed with a readable manifest."""
    manifest: InstallationManifest
    detected_packs: Dict[str, DetectedPack] = field(default_factory=dict)
    type: StateType = field(default=StateType.EXISTING_KNOWN, init=False)


@dataclass(frozen=True)
class ExistingUnknownVersion:
    """Core folder present but the manifest is missing or unreadable."""
    detected_packs: Dict[str, DetectedPack] = field(default_factory=dict)
    type: StateType = field(default=StateType.EXISTING_UNKNOWN, init=False)


InstallationState = Union[Fresh, ExistingKnownVersion, ExistingUnknownVersion]
