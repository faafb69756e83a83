"""Install manifest written to <root>/.bmad-core/install-manifest.yaml."""
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MANIFEST_TYPE = "v5"


class InstallationManifest(BaseModel):
    """Record of what was installed, when, and at what version.

    ``files`` are POSIX paths relative to the install root and ``integrity``
    maps those same paths to content checksums.
    """

    model_config = ConfigDict(populate_by_name=True, extra='allow')

    version: Optional[str] = None
    installed_at: Optional[str] = Field(None, alias="installedAt")
    type: str = MANIFEST_TYPE
    components: Dict[str, bool] = Field(default_factory=dict)
    files: Optional[List[str]] = None
    integrity: Optional[Dict[str, str]] = None

    @field_validator('version', mode='before')
    @classmethod
    def coerce_version(cls, v):
        """YAML reads `version: 1.0` as a float."""
        if v is None:
            return None
        return str(v)

    @field_validator('installed_at', mode='before')
    @classmethod
    def coerce_timestamp(cls, v):
        """YAML reads unquoted ISO timestamps as datetime objects."""
        if isinstance(v, (datetime, date)):
            return v.isoformat()
        return v

    @field_validator('components', mode='before')
    @classmethod
    def default_components(cls, v):
        return v or {}

    @classmethod
    def create(
        cls,
        version: str,
        components: Dict[str, bool],
        files: Optional[List[str]] = None,
        integrity: Optional[Dict[str, str]] = None,
    ) -> "InstallationManifest":
        """Build a manifest stamped with the current UTC time."""
        return cls(
            version=version,
            installed_at=datetime.now(timezone.utc).isoformat(),
            type=MANIFEST_TYPE,
            components=components,
            files=files,
            integrity=integrity,
        )

    @property
    def version_or_unknown(self) -> str:
        return self.version or "unknown"

    def to_yaml_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
