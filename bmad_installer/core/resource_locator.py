"""Locate source assets: core tree, expansion packs and common items."""
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from bmad_installer.core.codec import YamlCodec
from bmad_installer.core.config import InstallerConfig
from bmad_installer.core.errors import ParseError
from bmad_installer.core.filesystem import LocalFileSystem
from bmad_installer.core.logger import get_logger
from bmad_installer.models.pack import ContentPack

logger = get_logger(__name__)

PACK_CONFIG = "config.yaml"


class ResourceLocator:
    """Resolves where installable assets come from."""

    def __init__(
        self,
        config: InstallerConfig,
        fs: Optional[LocalFileSystem] = None,
        codec: Optional[YamlCodec] = None,
    ):
        self.config = config
        self.fs = fs or LocalFileSystem()
        self.codec = codec or YamlCodec()

    @property
    def core_path(self) -> Path:
        return self.config.core_source

    @property
    def packs_path(self) -> Path:
        return self.config.packs_source

    @property
    def common_path(self) -> Path:
        return self.config.common_source

    def pack_path(self, pack_id: str) -> Path:
        return self.packs_path / pack_id

    def core_version(self) -> str:
        return self.config.core_version

    def parse_pack_config(self, config_path: Path, fallback_id: str) -> ContentPack:
        """Parse a pack's config.yaml.

        Raises:
            ParseError: Unreadable, invalid YAML or invalid pack definition
        """
        try:
            text = self.fs.read_text(config_path)
        except OSError as e:
            raise ParseError("Cannot read pack config", operation="load_pack", path=config_path, cause=e) from e

        data = self.codec.load_mapping(text, source=str(config_path))
        data.setdefault("id", fallback_id)
        try:
            pack = ContentPack.model_validate(data)
        except ValidationError as e:
            raise ParseError("Invalid pack config", operation="load_pack", path=config_path, cause=e) from e
        if pack.id != fallback_id:
            # The folder name is the pack id; the config cannot relocate it.
            logger.warning(f"Pack config {config_path} declares id '{pack.id}', using '{fallback_id}'")
            pack = pack.model_copy(update={"id": fallback_id})
        pack.path = config_path.parent
        return pack

    def load_pack(self, pack_id: str) -> Optional[ContentPack]:
        """Load an available pack by id.

        Returns:
            ContentPack, or None when no source directory exists for it

        Raises:
            ParseError: The pack's config.yaml exists but is invalid
        """
        source = self.pack_path(pack_id)
        if not self.fs.is_dir(source):
            return None

        config_path = source / PACK_CONFIG
        if not self.fs.is_file(config_path):
            # Packs without a config still install; they just carry no metadata.
            return ContentPack(id=pack_id, path=source)
        return self.parse_pack_config(config_path, pack_id)

    def list_packs(self) -> List[ContentPack]:
        """List available packs sorted by id. Broken configs are skipped."""
        packs = []
        if not self.fs.is_dir(self.packs_path):
            logger.warning(f"Expansion pack directory not found: {self.packs_path}")
            return packs

        for entry in self.fs.list_dir(self.packs_path):
            if not entry.is_dir or entry.name.startswith("."):
                continue
            try:
                pack = self.load_pack(entry.name)
            except ParseError as e:
                logger.warning(f"Failed to load pack {entry.name}: {e}")
                continue
            if pack is not None:
                packs.append(pack)

        return sorted(packs, key=lambda p: p.id)
