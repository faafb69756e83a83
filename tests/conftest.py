"""Shared test fixtures for installer tests."""
from pathlib import Path
from typing import Dict

import pytest

from bmad_installer.core.config import InstallerConfig
from bmad_installer.core.orchestrator import LifecycleOrchestrator

BASE_TEMPLATE = """\
activation_notice: Read this whole file before doing anything else.
config:
  files:
    - "Resolve dependencies as {root}/{type}/{name}"
  activation:
    - Adopt the persona below
    - Greet the user
standard_commands:
  help: Show numbered list of commands
  exit: Leave the persona
"""

DEV_CONFIG = """\
id: dev
agent:
  name: James
  title: Developer
  icon: "*"
  whenToUse: Implementing stories
persona:
  role: Senior engineer
  style: Concise
  core_principles:
    - Tests first
    - Small commits
include_standard_commands:
  - help
commands:
  run-tests: Execute the test suite
dependencies:
  tasks:
    - create-doc
  templates:
    - prd-tmpl
"""

CORE_FILES = {
    "core-config.yaml": "devStoryLocation: docs/stories\n",
    "user-guide.md": "# Guide\n",
    "install.sh": "echo not copied\n",
    "agent-configs/agent-base-tmpl.yaml": BASE_TEMPLATE,
    "agent-configs/dev-config.yaml": DEV_CONFIG,
    "tasks/create-doc.md": "# Create doc\nTemplates live in {root}/templates\n",
    "tasks/helper.ts": "export {}\n",
    "templates/prd-tmpl.yaml": "template:\n  id: prd\n",
    "checklists/story-dod-checklist.md": "# DoD\n",
    "workflows/greenfield.yaml": "workflow:\n  id: greenfield\n",
    "utils/workflow-management.md": "# Workflows\n",
    "data/prefs.md": "None\n",
}

PACK_FILES = {
    "config.yaml": (
        "id: game-dev\n"
        "short-title: Game Dev\n"
        "version: 1.2\n"
        "description: Game design agents\n"
        "dependencies:\n"
        "  - bmad-core\n"
    ),
    "agents/game-designer.md": (
        "---\n"
        "id: game-designer\n"
        "title: Game Designer\n"
        "dependencies:\n"
        "  tasks:\n"
        "    - create-doc\n"
        "  templates:\n"
        "    - game-doc-tmpl\n"
        "---\n"
        "# Game designer\n"
    ),
    "templates/game-doc-tmpl.yaml": "template:\n  id: game-doc\n",
}

COMMON_FILES = {
    "utils/bmad-doc-template.md": "Templates: {root}/templates\n",
}


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Write relative path -> content pairs under root."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def core_source(tmp_path):
    """Core asset tree with one agent config."""
    return write_tree(tmp_path / "sources" / "bmad-core", CORE_FILES)


@pytest.fixture
def packs_source(tmp_path):
    """Expansion pack tree holding the game-dev pack."""
    root = tmp_path / "sources" / "expansion-packs"
    write_tree(root / "game-dev", PACK_FILES)
    return root


@pytest.fixture
def common_source(tmp_path):
    return write_tree(tmp_path / "sources" / "common", COMMON_FILES)


@pytest.fixture
def config(core_source, packs_source, common_source):
    """Config pointing at the throwaway source trees."""
    return InstallerConfig(
        core_source=core_source,
        packs_source=packs_source,
        common_source=common_source,
        core_version="1.0.0",
        max_workers=1,
    )


@pytest.fixture
def project_dir(tmp_path):
    """Empty target project directory."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def orchestrator(config):
    return LifecycleOrchestrator(config)
