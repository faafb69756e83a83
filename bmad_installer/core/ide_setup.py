"""Write IDE rule files that point at installed agents."""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import frontmatter
from jinja2 import BaseLoader, Environment

from bmad_installer.core.config import InstallerConfig
from bmad_installer.core.filesystem import LocalFileSystem
from bmad_installer.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class IdeTarget:
    """Where an IDE expects its rule files."""
    name: str
    rules_dir: str
    extension: str
    front_matter: bool = False


IDE_TARGETS: Dict[str, IdeTarget] = {
    "cursor": IdeTarget("cursor", ".cursor/rules", ".mdc", front_matter=True),
    "claude-code": IdeTarget("claude-code", ".claude/commands/BMad", ".md"),
    "windsurf": IdeTarget("windsurf", ".windsurf/rules", ".md"),
    "trae": IdeTarget("trae", ".trae/rules", ".md"),
}

RULE_TEMPLATE = """\
{% if front_matter %}
---
description: "{{ description | replace('"', "'") }}"
globs: []
alwaysApply: false
---

{% endif %}
# {{ agent_id | upper }} Agent Rule

This rule is triggered when the user types `@{{ agent_id }}` and activates the {{ title }} agent persona.

## Agent Activation

Read the complete agent definition in [{{ agent_path }}]({{ agent_path }}) and follow its activation instructions.
Stay in this persona until told to exit.

## File Reference

The complete agent definition is available in [{{ agent_path }}]({{ agent_path }}).
"""


@dataclass(frozen=True)
class InstalledAgent:
    """An agent file found in the install root."""
    agent_id: str
    title: str
    description: str
    relative_path: str


class IdeSetup:
    """Generate per-agent rule files for supported IDEs."""

    def __init__(self, config: InstallerConfig, fs: Optional[LocalFileSystem] = None):
        self.config = config
        self.fs = fs or LocalFileSystem()
        self.jinja_env = Environment(
            loader=BaseLoader(),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.jinja_env.from_string(RULE_TEMPLATE)

    @staticmethod
    def supported_ides() -> List[str]:
        return list(IDE_TARGETS)

    def agent_folders(self, install_dir: Path) -> List[Path]:
        """Core folder first, then every other dot folder, sorted."""
        install_dir = Path(install_dir)
        folders = [self.config.core_dir(install_dir)]
        try:
            entries = self.fs.list_dir(install_dir)
        except OSError as e:
            logger.warning(f"Cannot read {install_dir}: {e}")
            return folders
        folders.extend(
            entry.path
            for entry in entries
            if entry.is_dir
            and entry.name.startswith(".")
            and entry.name != self.config.core_dir_name
            and self.fs.is_dir(entry.path / "agents")
        )
        return folders

    def find_agents(self, install_dir: Path) -> List[InstalledAgent]:
        """All installed agents; an id seen in core hides the same id in a pack."""
        install_dir = Path(install_dir)
        agents: Dict[str, InstalledAgent] = {}
        for folder in self.agent_folders(install_dir):
            agents_dir = folder / "agents"
            if not self.fs.is_dir(agents_dir):
                continue
            for entry in self.fs.list_dir(agents_dir):
                if not entry.is_file or not entry.name.endswith(".md"):
                    continue
                agent_id = entry.path.stem
                if agent_id in agents:
                    continue
                agents[agent_id] = self._describe(install_dir, entry.path, agent_id)
        return list(agents.values())

    def _describe(self, install_dir: Path, agent_path: Path, agent_id: str) -> InstalledAgent:
        metadata = {}
        try:
            metadata = frontmatter.loads(self.fs.read_text(agent_path)).metadata or {}
        except Exception as e:
            logger.warning(f"Could not read agent metadata from {agent_path}: {e}")
        return InstalledAgent(
            agent_id=agent_id,
            title=str(metadata.get("title") or agent_id),
            description=str(metadata.get("description") or f"Agent: {agent_id}"),
            relative_path=agent_path.relative_to(install_dir).as_posix(),
        )

    def render_rule(self, target: IdeTarget, agent: InstalledAgent) -> str:
        return self.template.render(
            front_matter=target.front_matter,
            description=agent.description,
            agent_id=agent.agent_id,
            title=agent.title,
            agent_path=agent.relative_path,
        )

    def setup(self, install_dir: Path, ides: Sequence[str]) -> Dict[str, List[str]]:
        """Write rule files for each requested IDE.

        Args:
            install_dir: Installation root
            ides: IDE names; unknown names are skipped with a warning

        Returns:
            Map of IDE name to rule files written (relative to install_dir)
        """
        install_dir = Path(install_dir)
        written: Dict[str, List[str]] = {}
        agents = None

        for ide in ides:
            target = IDE_TARGETS.get(ide)
            if target is None:
                logger.warning(f"Unsupported IDE '{ide}', skipping (supported: {', '.join(IDE_TARGETS)})")
                continue

            if agents is None:
                agents = self.find_agents(install_dir)
            if not agents:
                logger.warning(f"No installed agents found for {ide} configuration")

            rules_dir = install_dir / target.rules_dir
            files = []
            for agent in agents:
                rule_path = rules_dir / f"{agent.agent_id}{target.extension}"
                self.fs.write_text(rule_path, self.render_rule(target, agent))
                files.append(rule_path.relative_to(install_dir).as_posix())

            written[ide] = files
            logger.info(f"✓ {ide} configuration set up ({len(files)} agents)")

        return written
