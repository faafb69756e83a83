"""Tests for agent file generation."""
import frontmatter
import pytest

from bmad_installer.core.agent_generator import AgentGenerator
from bmad_installer.core.errors import ParseError


@pytest.fixture
def generator():
    return AgentGenerator()


class TestGenerate:
    """agents/<name>.md from agent-configs/<name>-config.yaml."""

    def test_generates_one_file_per_config(self, generator, core_source, tmp_path):
        dest = tmp_path / ".bmad-core"

        written = generator.generate(core_source, dest)

        assert written == ["agents/dev.md"]
        assert (dest / "agents" / "dev.md").exists()
        assert generator.agent_files(core_source) == ["agents/dev.md"]

    def test_front_matter_lists_dependencies(self, generator, core_source, tmp_path):
        dest = tmp_path / ".bmad-core"
        generator.generate(core_source, dest)

        post = frontmatter.loads((dest / "agents" / "dev.md").read_text())

        assert post.metadata["id"] == "dev"
        assert post.metadata["title"] == "Developer"
        assert post.metadata["dependencies"] == {"tasks": ["create-doc"], "templates": ["prd-tmpl"]}

    def test_sections_rendered(self, generator, core_source, tmp_path):
        dest = tmp_path / ".bmad-core"
        generator.generate(core_source, dest)

        content = (dest / "agents" / "dev.md").read_text()

        assert "# DEV" in content
        assert "## Config" in content
        assert "1. Adopt the persona below" in content
        assert "* **Title:** Developer *" in content
        assert "* **Principles:** Tests first, Small commits" in content
        assert "* **help:** Show numbered list of commands" in content
        assert "* **run-tests:** Execute the test suite" in content
        assert "* **exit:**" not in content
        assert "* **Tasks:** `create-doc`" in content

    def test_multiline_command_rendered_as_list(self, generator):
        content = generator.render(
            "dev",
            {},
            {"commands": {"develop-story": "order: read, implement\nblocking: ambiguity\n"}},
        )
        assert "* **develop-story:**" in content
        assert "  * **order:** read, implement" in content
        assert "  * **blocking:** ambiguity" in content

    def test_overwrite_false_keeps_existing(self, generator, core_source, tmp_path):
        dest = tmp_path / ".bmad-core"
        (dest / "agents").mkdir(parents=True)
        (dest / "agents" / "dev.md").write_text("customized")

        written = generator.generate(core_source, dest, overwrite=False)

        assert written == []
        assert (dest / "agents" / "dev.md").read_text() == "customized"

    def test_missing_base_template_raises(self, generator, core_source, tmp_path):
        (core_source / "agent-configs" / "agent-base-tmpl.yaml").unlink()

        with pytest.raises(ParseError) as exc_info:
            generator.generate(core_source, tmp_path / ".bmad-core")

        assert "base template" in str(exc_info.value)

    def test_no_configs_generates_nothing(self, generator, tmp_path):
        assert generator.generate(tmp_path / "empty-core", tmp_path / ".bmad-core") == []
