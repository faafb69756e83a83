"""Generate agent markdown files from YAML agent configs."""
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import BaseLoader, Environment, TemplateError

from bmad_installer.core.codec import YamlCodec
from bmad_installer.core.errors import ParseError
from bmad_installer.core.filesystem import LocalFileSystem
from bmad_installer.core.logger import get_logger
from bmad_installer.models.agent import DEPENDENCY_CATEGORIES

logger = get_logger(__name__)

AGENT_CONFIGS_DIR = "agent-configs"
BASE_TEMPLATE = "agent-base-tmpl.yaml"
CONFIG_SUFFIX = "-config.yaml"

AGENT_TEMPLATE = """\
---
{{ front_matter }}---

# {{ heading }}

{% if activation_notice %}
{{ activation_notice }}
---

{% endif %}
## Config

{% if files %}
**Files:**

{% for item in files %}
* {{ item }}
{% endfor %}

{% endif %}
{% if requests %}
**Requests:**

{% for item in requests %}
* {{ item }}
{% endfor %}

{% endif %}
{% if activation %}
**Activation:**

{% for item in activation %}
{{ loop.index }}. {{ item }}
{% endfor %}

{% endif %}
{% if additional_activation %}
**Additional Activation:**

{% for item in additional_activation %}
* {{ item }}
{% endfor %}

{% endif %}
## Persona

**Agent:**

{% if agent.name %}
* **Name:** {{ agent.name }}
{% endif %}
{% if agent.title %}
* **Title:** {{ agent.title }}{% if agent.icon %} {{ agent.icon }}{% endif %}

{% endif %}
{% if agent.whenToUse %}
* **Use:** {{ agent.whenToUse }}
{% endif %}

**Persona:**

{% for label, key in persona_fields %}
{% if persona[key] %}
* **{{ label }}:** {{ persona[key] }}
{% endif %}
{% endfor %}
{% if persona.core_principles %}
* **Principles:** {{ persona.core_principles | join(', ') }}
{% endif %}

{% for permission in permissions %}
* **Permissions:** {{ permission }}
{% endfor %}

## Commands & Dependencies

*`*` prefix on all commands*

{% if commands %}
**Commands:**

{% for command in commands %}
{% if command.details %}
* **{{ command.name }}:**
{% for key, value in command.details %}
  * **{{ key }}:** {{ value }}
{% endfor %}
{% else %}
* **{{ command.name }}:** {{ command.description }}
{% endif %}
{% endfor %}

{% endif %}
{% if dependencies %}
**Dependencies:**

{% for category, names in dependencies %}
* **{{ category | capitalize }}:** {% for name in names %}`{{ name }}`{% if not loop.last %}, {% endif %}{% endfor %}

{% endfor %}
{% endif %}
"""


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


class AgentGenerator:
    """Render ``agents/<name>.md`` from ``agent-configs/<name>-config.yaml``."""

    def __init__(self, fs: Optional[LocalFileSystem] = None, codec: Optional[YamlCodec] = None):
        self.fs = fs or LocalFileSystem()
        self.codec = codec or YamlCodec()
        self.jinja_env = Environment(
            loader=BaseLoader(),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.template = self.jinja_env.from_string(AGENT_TEMPLATE)

    def _load_yaml(self, path: Path) -> dict:
        try:
            text = self.fs.read_text(path)
        except OSError as e:
            raise ParseError("Cannot read agent config", operation="generate_agents", path=path, cause=e) from e
        return self.codec.load_mapping(text, source=str(path))

    def list_agent_configs(self, core_source: Path) -> List[Path]:
        configs_dir = Path(core_source) / AGENT_CONFIGS_DIR
        if not self.fs.is_dir(configs_dir):
            return []
        return [
            entry.path
            for entry in self.fs.list_dir(configs_dir)
            if entry.is_file and entry.name.endswith(CONFIG_SUFFIX) and entry.name != BASE_TEMPLATE
        ]

    def agent_files(self, core_source: Path) -> List[str]:
        """Relative paths generate() produces for this source, written or not."""
        return [
            f"agents/{path.name[: -len(CONFIG_SUFFIX)]}.md"
            for path in self.list_agent_configs(core_source)
        ]

    def generate(self, core_source: Path, core_dest: Path, overwrite: bool = True) -> List[str]:
        """Generate agent files for every agent config.

        Args:
            core_source: Core source tree containing agent-configs/
            core_dest: Installed core folder; files go to core_dest/agents/
            overwrite: Replace agent files that already exist

        Returns:
            Paths written, relative to core_dest (e.g. "agents/dev.md")

        Raises:
            ParseError: Base template or an agent config cannot be loaded
        """
        config_paths = self.list_agent_configs(core_source)
        if not config_paths:
            logger.debug(f"No agent configs under {core_source}")
            return []

        base_template_path = Path(core_source) / AGENT_CONFIGS_DIR / BASE_TEMPLATE
        if not self.fs.is_file(base_template_path):
            raise ParseError(
                "Agent base template not found",
                operation="generate_agents",
                path=base_template_path,
            )
        base_template = self._load_yaml(base_template_path)

        agents_dir = Path(core_dest) / "agents"
        self.fs.ensure_dir(agents_dir)

        generated = []
        for config_path in config_paths:
            agent_name = config_path.name[: -len(CONFIG_SUFFIX)]
            output_path = agents_dir / f"{agent_name}.md"
            if not overwrite and self.fs.exists(output_path):
                continue

            agent_config = self._load_yaml(config_path)
            logger.debug(f"Generating {agent_name} agent...")
            self.fs.write_text(output_path, self.render(agent_name, base_template, agent_config))
            generated.append(f"agents/{agent_name}.md")

        return generated

    def render(self, agent_name: str, base_template: Dict[str, Any], agent_config: Dict[str, Any]) -> str:
        """Render one agent file.

        Raises:
            ParseError: The template fails to render with this config
        """
        agent = agent_config.get("agent") or {}
        persona = agent_config.get("persona") or {}
        config_section = base_template.get("config") or {}
        agent_id = agent_config.get("id") or agent.get("id") or agent_name

        dependencies = [
            (category, _as_list((agent_config.get("dependencies") or {}).get(category)))
            for category in DEPENDENCY_CATEGORIES
        ]
        dependencies = [(category, names) for category, names in dependencies if names]

        front_matter = {
            "id": agent_id,
            "title": agent.get("title") or agent.get("name") or agent_id,
            "dependencies": dict(dependencies),
        }

        try:
            content = self.template.render(
                front_matter=self.codec.dump(front_matter),
                heading=str(agent_id).upper(),
                activation_notice=base_template.get("activation_notice"),
                files=_as_list(config_section.get("files")),
                requests=_as_list(config_section.get("requests")),
                activation=_as_list(config_section.get("activation")),
                additional_activation=_as_list(agent_config.get("additional_activation_instructions")),
                agent=agent,
                persona=persona,
                persona_fields=[
                    ("Role", "role"),
                    ("Style", "style"),
                    ("Identity", "identity"),
                    ("Focus", "focus"),
                ],
                permissions=_as_list(agent_config.get("additional_permissions")),
                commands=self._commands(base_template, agent_config),
                dependencies=dependencies,
            )
        except TemplateError as e:
            raise ParseError(f"Failed to render agent {agent_name}", operation="generate_agents", cause=e) from e

        return content.rstrip() + "\n"

    @staticmethod
    def _commands(base_template: Dict[str, Any], agent_config: Dict[str, Any]) -> List[dict]:
        """Agent commands plus the standard commands it opts into."""
        all_commands = dict(agent_config.get("commands") or {})
        standard = base_template.get("standard_commands") or {}
        for name in _as_list(agent_config.get("include_standard_commands")):
            if name in standard:
                all_commands[name] = standard[name]

        commands = []
        for name, description in all_commands.items():
            details = []
            text = str(description)
            # Multi-line or "key: value" descriptions render as a nested list.
            if "\n" in text or ":" in text:
                for line in text.splitlines():
                    key, sep, value = line.strip().partition(":")
                    if sep and key:
                        details.append((key.strip(), value.strip()))
            commands.append({"name": name, "description": text, "details": details})
        return commands
