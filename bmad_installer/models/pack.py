"""Content (expansion) pack definition read from a pack's config.yaml."""
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContentPack(BaseModel):
    """Optional bundle of agents/tasks/templates installed into ``.<id>``."""

    model_config = ConfigDict(populate_by_name=True, extra='allow')

    id: str
    short_title: Optional[str] = Field(None, alias="short-title")
    version: Optional[str] = None
    description: str = ""
    dependencies: List[str] = Field(default_factory=list, description="Pack ids this pack builds on")
    path: Optional[Path] = Field(None, exclude=True, description="Source or installed directory")

    @field_validator('id')
    @classmethod
    def validate_id(cls, v):
        """Pack ids become folder names, so no separators or leading dots."""
        v = str(v).strip()
        if not v or '/' in v or '\\' in v or v.startswith('.'):
            raise ValueError(f"Invalid pack id: {v!r}")
        return v

    @field_validator('version', mode='before')
    @classmethod
    def coerce_version(cls, v):
        if v is None:
            return None
        return str(v)

    @field_validator('description', mode='before')
    @classmethod
    def default_description(cls, v):
        return v or ""

    @field_validator('dependencies', mode='before')
    @classmethod
    def normalize_dependencies(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(dep) for dep in v]

    @property
    def dot_folder(self) -> str:
        """Name of the installed folder, e.g. ``.game-dev``."""
        return f".{self.id}"

    @property
    def title(self) -> str:
        return self.short_title or self.id
