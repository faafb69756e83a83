"""Make sure every file a pack's agents depend on is present in the pack folder.

Agents declare dependencies in their front matter:

    ---
    id: game-designer
    dependencies:
      tasks: [create-doc]
      templates: [game-design-doc-tmpl]
    ---

Each declared file must end up at ``<pack folder>/<category>/<file>``. Missing
files are copied from the pack's own source first, then from the core source.
Only the agents' direct dependencies are resolved; files referenced by the
copied files are not followed.
"""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import frontmatter

from bmad_installer.core.config import InstallerConfig
from bmad_installer.core.filesystem import LocalFileSystem
from bmad_installer.core.logger import get_logger
from bmad_installer.models.agent import (
    AgentDefinition,
    DependencyOutcome,
    ResolutionStatus,
)
from bmad_installer.models.pack import ContentPack

logger = get_logger(__name__)

ROOT_TOKEN = "{root}"
KNOWN_EXTENSIONS = (".md", ".yaml", ".yml")


def canonical_filename(category: str, name: str) -> str:
    """File name a dependency is stored under.

    Names with a known extension are kept; templates default to .yaml and
    everything else to .md.
    """
    if name.endswith(KNOWN_EXTENSIONS):
        return name
    if category == "templates":
        return f"{name}.yaml"
    return f"{name}.md"


@dataclass(frozen=True)
class _PendingCopy:
    source: Path
    destination: Path
    status: ResolutionStatus


class DependencyResolver:
    """Resolve one level of agent dependencies for an installed pack."""

    def __init__(self, config: InstallerConfig, fs: Optional[LocalFileSystem] = None):
        self.config = config
        self.fs = fs or LocalFileSystem()

    def load_agents(self, installed_folder: Path) -> List[AgentDefinition]:
        """Parse agents/*.md under the installed folder.

        Files with broken front matter are skipped with a warning.
        """
        agents_dir = Path(installed_folder) / "agents"
        if not self.fs.is_dir(agents_dir):
            return []

        agents = []
        for entry in self.fs.list_dir(agents_dir):
            if not entry.is_file or not entry.name.endswith(".md"):
                continue
            try:
                post = frontmatter.loads(self.fs.read_text(entry.path))
                agents.append(AgentDefinition.from_metadata(post.metadata or {}, entry.path.stem))
            except Exception as e:
                logger.warning(f"Could not parse front matter in {entry.path}: {e}")
        return agents

    def copy_with_root_replacement(self, source: Path, destination: Path, dot_folder: str) -> None:
        """Copy a text file, replacing every {root} token with the pack's dot folder."""
        content = self.fs.read_text(source)
        self.fs.write_text(destination, content.replace(ROOT_TOKEN, dot_folder))

    def resolve(self, installed_folder: Path, pack: ContentPack) -> List[DependencyOutcome]:
        """Ensure all dependencies of the pack's agents exist in installed_folder.

        Args:
            installed_folder: The pack's dot folder inside the install root
            pack: Pack definition; ``pack.path`` is its source directory

        Returns:
            One outcome per distinct (category, file) declared by the agents
        """
        installed_folder = Path(installed_folder)
        dot_folder = pack.dot_folder
        outcomes: Dict[Path, DependencyOutcome] = {}
        pending: List[_PendingCopy] = []

        for agent in self.load_agents(installed_folder):
            for category, name in agent.dependencies.items():
                filename = canonical_filename(category, name)
                destination = installed_folder / category / filename
                if destination in outcomes:
                    continue

                status = self._locate(category, filename, destination, pack, pending)
                outcomes[destination] = DependencyOutcome(
                    agent_id=agent.id,
                    category=category,
                    name=name,
                    filename=filename,
                    status=status,
                    destination=destination,
                )
                if status == ResolutionStatus.UNRESOLVED:
                    logger.warning(
                        f"Dependency {category}/{filename} not found for {pack.id} "
                        f"(agent {agent.id})"
                    )

        self._run_copies(pending, dot_folder)

        for copy in pending:
            origin = "core" if copy.status == ResolutionStatus.COPIED_FROM_CORE else pack.id
            logger.info(f"  Added {origin} dependency: {copy.destination.relative_to(installed_folder).as_posix()}")

        return list(outcomes.values())

    def _locate(
        self,
        category: str,
        filename: str,
        destination: Path,
        pack: ContentPack,
        pending: List[_PendingCopy],
    ) -> ResolutionStatus:
        if self.fs.is_file(destination):
            return ResolutionStatus.SATISFIED

        if pack.path is not None:
            pack_source = Path(pack.path) / category / filename
            if self.fs.is_file(pack_source):
                pending.append(_PendingCopy(pack_source, destination, ResolutionStatus.COPIED_FROM_PACK))
                return ResolutionStatus.COPIED_FROM_PACK

        core_source = self.config.core_source / category / filename
        if self.fs.is_file(core_source):
            pending.append(_PendingCopy(core_source, destination, ResolutionStatus.COPIED_FROM_CORE))
            return ResolutionStatus.COPIED_FROM_CORE

        return ResolutionStatus.UNRESOLVED

    def _run_copies(self, pending: List[_PendingCopy], dot_folder: str) -> None:
        # Destinations are unique (deduplicated in resolve), so copies never collide.
        if self.config.max_workers <= 1 or len(pending) <= 1:
            for copy in pending:
                self.copy_with_root_replacement(copy.source, copy.destination, dot_folder)
            return

        with ThreadPoolExecutor(max_workers=min(self.config.max_workers, len(pending))) as executor:
            futures = [
                executor.submit(self.copy_with_root_replacement, copy.source, copy.destination, dot_folder)
                for copy in pending
            ]
            for future in futures:
                future.result()
