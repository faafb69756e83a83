"""YAML encode/decode pair shared by manifest, pack and agent-config loading."""
from typing import Any

import yaml

from bmad_installer.core.errors import ParseError


class YamlCodec:
    """Safe YAML loading and dumping with installer-specific errors."""

    def load(self, text: str, source: str = None) -> Any:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ParseError("Invalid YAML", operation="parse", path=source, cause=e) from e

    def load_mapping(self, text: str, source: str = None) -> dict:
        """Load YAML that must be a mapping. Empty documents load as {}."""
        data = self.load(text, source=source)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ParseError(
                f"Expected a mapping, got {type(data).__name__}",
                operation="parse",
                path=source,
            )
        return data

    def dump(self, data: Any) -> str:
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)
