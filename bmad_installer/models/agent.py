"""Agent definitions parsed from the front matter of agents/*.md files."""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Closed set of dependency categories; each maps to a folder of the same name.
DEPENDENCY_CATEGORIES = ("tasks", "templates", "checklists", "workflows", "utils", "data")


class ResolutionStatus(str, Enum):
    """How a declared dependency ended up present (or not)."""
    SATISFIED = "satisfied"
    COPIED_FROM_PACK = "copied_from_pack"
    COPIED_FROM_CORE = "copied_from_core"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class DependencyOutcome:
    """Resolution result for one (category, name) declared by an agent."""
    agent_id: str
    category: str
    name: str
    filename: str
    status: ResolutionStatus
    destination: Path

    @property
    def relative_path(self) -> str:
        return f"{self.category}/{self.filename}"


class AgentDependencies(BaseModel):
    """Bare dependency names grouped by category. Unknown categories are ignored."""

    model_config = ConfigDict(extra='ignore')

    tasks: List[str] = Field(default_factory=list)
    templates: List[str] = Field(default_factory=list)
    checklists: List[str] = Field(default_factory=list)
    workflows: List[str] = Field(default_factory=list)
    utils: List[str] = Field(default_factory=list)
    data: List[str] = Field(default_factory=list)

    @field_validator(*DEPENDENCY_CATEGORIES, mode='before')
    @classmethod
    def normalize_names(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(name).strip() for name in v if str(name).strip()]

    def items(self) -> Iterator[Tuple[str, str]]:
        """Yield (category, name) pairs in category order."""
        for category in DEPENDENCY_CATEGORIES:
            for name in getattr(self, category):
                yield category, name


class AgentDefinition(BaseModel):
    """An agent's id and the files it depends on."""

    id: str
    dependencies: AgentDependencies = Field(default_factory=AgentDependencies)

    @field_validator('dependencies', mode='before')
    @classmethod
    def default_dependencies(cls, v):
        return v or {}

    @classmethod
    def from_metadata(cls, metadata: dict, fallback_id: str) -> "AgentDefinition":
        """Build from front-matter metadata.

        The id is read from ``id`` or ``agent.id``, falling back to the file stem.
        """
        agent_block = metadata.get("agent")
        agent_id: Optional[str] = metadata.get("id")
        if not agent_id and isinstance(agent_block, dict):
            agent_id = agent_block.get("id")
        return cls(
            id=str(agent_id or fallback_id),
            dependencies=metadata.get("dependencies") or {},
        )
