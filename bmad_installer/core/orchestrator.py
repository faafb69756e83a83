"""Install, update and repair lifecycle for a target directory.

The orchestrator classifies the target, picks one core action (fresh install,
update, repair or nothing), then installs requested content packs and IDE
rule files. It keeps no state between calls.
"""
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from bmad_installer.core.agent_generator import AGENT_CONFIGS_DIR, AgentGenerator
from bmad_installer.core.codec import YamlCodec
from bmad_installer.core.config import InstallerConfig
from bmad_installer.core.dependency_resolver import DependencyResolver
from bmad_installer.core.errors import CopyError, InstallationNotFoundError, IntegrityCheckFailedError, ParseError
from bmad_installer.core.filesystem import LocalFileSystem
from bmad_installer.core.ide_setup import IdeSetup
from bmad_installer.core.integrity import IntegrityChecker, IntegrityCheckOptions, IntegrityReport
from bmad_installer.core.logger import get_logger
from bmad_installer.core.manifest import ManifestStore
from bmad_installer.core.recovery import BackupManager
from bmad_installer.core.resource_locator import ResourceLocator
from bmad_installer.core.state_detector import StateDetector
from bmad_installer.core.version import VersionComparator
from bmad_installer.models.agent import DependencyOutcome, ResolutionStatus
from bmad_installer.models.install import (
    InstallAction,
    InstallationStatus,
    InstallOptions,
    InstallResult,
    RepairOptions,
    UpdateOptions,
)
from bmad_installer.models.manifest import InstallationManifest
from bmad_installer.models.pack import ContentPack
from bmad_installer.models.state import (
    ExistingKnownVersion,
    ExistingUnknownVersion,
    Fresh,
    InstallationState,
)

logger = get_logger(__name__)

# Core files with these extensions are copied; everything else stays behind.
CONFIG_EXTENSIONS = (".yaml", ".yml", ".md", ".json", ".txt")
EXCLUDED_CORE_DIRS = (AGENT_CONFIGS_DIR,)


class LifecycleOrchestrator:
    """Sequence state detection, integrity checks, backups and pack installs."""

    def __init__(
        self,
        config: InstallerConfig,
        fs: Optional[LocalFileSystem] = None,
        codec: Optional[YamlCodec] = None,
    ):
        self.config = config
        self.fs = fs or LocalFileSystem()
        self.codec = codec or YamlCodec()

        self.manifest_store = ManifestStore(config, self.fs, self.codec)
        self.resource_locator = ResourceLocator(config, self.fs, self.codec)
        self.state_detector = StateDetector(config, self.manifest_store, self.resource_locator, self.fs)
        self.integrity_checker = IntegrityChecker(self.manifest_store, self.fs)
        self.backup_manager = BackupManager(self.fs)
        self.dependency_resolver = DependencyResolver(config, self.fs)
        self.agent_generator = AgentGenerator(self.fs, self.codec)
        self.ide_setup = IdeSetup(config, self.fs)
        self.versions = VersionComparator()

    # ==================== Entry points ====================

    def install(self, options: InstallOptions) -> InstallResult:
        """Install into options.directory, choosing the action from its state."""
        install_dir = Path(options.directory).resolve()
        logger.info(f"Installing to: {install_dir}")

        state = self.state_detector.detect(install_dir)
        logger.debug(f"Detected installation state: {state.type.value}")

        if isinstance(state, ExistingKnownVersion):
            return self.handle_existing_known(options, install_dir, state)
        if isinstance(state, ExistingUnknownVersion):
            logger.info("Found existing installation without a readable manifest, reinstalling")
        return self.perform_fresh_install(options, install_dir, state)

    def update(self, options: UpdateOptions) -> InstallResult:
        """Update an existing installation to the available core version.

        Raises:
            InstallationNotFoundError: Nothing is installed at the target
        """
        install_dir = options.directory or self.find_installation()
        if install_dir is None:
            raise InstallationNotFoundError("No installation found", operation="update", path=Path.cwd())

        install_dir = Path(install_dir).resolve()
        state = self.state_detector.detect(install_dir)
        if isinstance(state, Fresh):
            raise InstallationNotFoundError("No installation found", operation="update", path=install_dir)

        logger.info(f"Updating installation in {install_dir}")
        return self.install(InstallOptions(
            directory=install_dir,
            include_core=True,
            packs=list(options.packs),
            ides=list(options.ides),
        ))

    def repair(self, options: RepairOptions) -> InstallResult:
        """Restore missing core files without touching anything else.

        Raises:
            InstallationNotFoundError: Nothing is installed at the target
        """
        install_dir = Path(options.directory).resolve()
        state = self.state_detector.detect(install_dir)

        if isinstance(state, Fresh):
            raise InstallationNotFoundError("No installation found", operation="repair", path=install_dir)

        if isinstance(state, ExistingUnknownVersion):
            logger.info("Installed version unknown, restoring missing core files")
            with self.backup_manager.protect(self.config.core_dir(install_dir), operation="repair"):
                manifest = self.install_core(install_dir, overwrite=False)
            return InstallResult(
                action=InstallAction.REPAIRED,
                state_type=state.type,
                message="Missing core files restored",
                manifest=manifest,
            )

        report = self.check_integrity(install_dir, state.manifest, options.validate_checksums)
        if report.is_clean:
            return InstallResult(
                action=InstallAction.ALREADY_INSTALLED,
                state_type=state.type,
                message="No integrity issues found",
                manifest=state.manifest,
            )

        self._log_integrity_issues(report)
        manifest = self.perform_repair(install_dir, state.manifest, report)
        result = InstallResult(
            action=InstallAction.REPAIRED,
            state_type=state.type,
            message="Installation repaired",
            manifest=manifest,
        )
        if report.modified:
            result.warnings.append(f"{len(report.modified)} modified file(s) left untouched")
        return result

    def verify(self, directory: Path, validate_checksums: Optional[bool] = None, strict: bool = False) -> IntegrityReport:
        """Integrity report for an installation.

        Raises:
            InstallationNotFoundError: Nothing is installed at the target
            IntegrityCheckFailedError: strict is set and issues were found
        """
        install_dir = Path(directory).resolve()
        state = self.state_detector.detect(install_dir)
        if isinstance(state, Fresh):
            raise InstallationNotFoundError("No installation found", operation="verify", path=install_dir)

        manifest = state.manifest if isinstance(state, ExistingKnownVersion) else None
        report = self.check_integrity(install_dir, manifest, validate_checksums)
        if strict and report.has_issues:
            raise IntegrityCheckFailedError(install_dir, report.missing, report.modified)
        return report

    def get_installation_status(self, directory: Path) -> InstallationStatus:
        install_dir = Path(directory).resolve()
        state = self.state_detector.detect(install_dir)
        known = isinstance(state, ExistingKnownVersion)
        return InstallationStatus(
            type=state.type,
            core_installed=known,
            core_version=state.manifest.version if known else None,
            expansion_packs=sorted(state.detected_packs),
            directory=install_dir,
        )

    def find_installation(self, start: Optional[Path] = None) -> Optional[Path]:
        """Return start (default: cwd) if it holds an installation, else None."""
        candidate = Path(start) if start is not None else Path.cwd()
        state = self.state_detector.detect(candidate)
        if isinstance(state, Fresh):
            return None
        return candidate

    def available_packs(self) -> List[ContentPack]:
        return self.resource_locator.list_packs()

    # ==================== State handlers ====================

    def perform_fresh_install(
        self,
        options: InstallOptions,
        install_dir: Path,
        state: InstallationState,
    ) -> InstallResult:
        """Install core and packs without removing anything already present."""
        self.fs.ensure_dir(install_dir)

        manifest = None
        if options.wants_core:
            logger.info("Installing core...")
            manifest = self.install_core(install_dir)
            action = InstallAction.FRESH_INSTALL
            message = f"Core {manifest.version} installed"
        else:
            action = InstallAction.PACKS_ONLY
            message = "Core not requested"

        result = InstallResult(action=action, state_type=state.type, message=message, manifest=manifest)
        self._finish(options, install_dir, result)
        return result

    def handle_existing_known(
        self,
        options: InstallOptions,
        install_dir: Path,
        state: ExistingKnownVersion,
    ) -> InstallResult:
        """Update, repair or leave the core alone based on versions and integrity."""
        manifest = state.manifest
        current_version = manifest.version_or_unknown
        new_version = self.config.core_version

        logger.info("Found existing installation")
        logger.info(f"  Current version: {current_version}")
        logger.info(f"  Available version: {new_version}")
        for pack_id, pack in state.detected_packs.items():
            logger.info(f"  Installed pack: {pack_id} (v{pack.manifest.version or 'unknown'})")

        result = InstallResult(
            action=InstallAction.PACKS_ONLY,
            state_type=state.type,
            message="Core not requested",
            manifest=manifest,
        )

        if options.wants_core:
            comparison = self.versions.compare(current_version, new_version)
            if comparison < 0:
                logger.info("Upgrade available for core")
                result.manifest = self.perform_update(install_dir, manifest)
                result.action = InstallAction.UPDATED
                result.message = f"Core updated from {current_version} to {new_version}"
            elif comparison == 0:
                report = self.check_integrity(install_dir, manifest)
                if report.has_issues:
                    self._log_integrity_issues(report)
                    result.manifest = self.perform_repair(install_dir, manifest, report)
                    result.action = InstallAction.REPAIRED
                    result.message = "Installation repaired"
                    if report.modified:
                        result.warnings.append(f"{len(report.modified)} modified file(s) left untouched")
                else:
                    logger.info("Same version already installed, skipping core")
                    result.action = InstallAction.ALREADY_INSTALLED
                    result.message = f"Core {current_version} already installed"
            else:
                warning = f"Installed version {current_version} is newer than available {new_version}, skipping core"
                logger.warning(warning)
                result.action = InstallAction.NEWER_INSTALLED
                result.message = warning
                result.warnings.append(warning)

        self._finish(options, install_dir, result)
        return result

    def perform_update(self, install_dir: Path, manifest: InstallationManifest) -> InstallationManifest:
        """Reinstall core over the existing one, restoring it if anything fails."""
        with self.backup_manager.protect(self.config.core_dir(install_dir), operation="update"):
            new_manifest = self.install_core(install_dir, previous=manifest)
        logger.info("✓ Core updated successfully")
        return new_manifest

    def perform_repair(
        self,
        install_dir: Path,
        manifest: InstallationManifest,
        report: IntegrityReport,
    ) -> InstallationManifest:
        """Copy back missing core files. Modified files are reported, not overwritten."""
        if not report.missing:
            logger.info("No missing files, modified files left as they are")
            return manifest

        with self.backup_manager.protect(self.config.core_dir(install_dir), operation="repair"):
            new_manifest = self.install_core(install_dir, overwrite=False, previous=manifest)
        logger.info("✓ Installation repaired")
        return new_manifest

    # ==================== Building blocks ====================

    def core_asset_files(self, core_source: Path) -> List[str]:
        """Relative paths of the core files that get installed as-is."""
        return [
            relative
            for relative in self.fs.walk_files(core_source)
            if relative.split("/", 1)[0] not in EXCLUDED_CORE_DIRS
            and relative.endswith(CONFIG_EXTENSIONS)
        ]

    def install_core(
        self,
        install_dir: Path,
        overwrite: bool = True,
        previous: Optional[InstallationManifest] = None,
    ) -> InstallationManifest:
        """Copy core assets, generate agents and write the manifest.

        Args:
            install_dir: Installation root
            overwrite: Replace files that already exist (False restores only missing ones)
            previous: Manifest being replaced; its checksums are kept for files
                that this call did not write

        Returns:
            The manifest written to disk

        Raises:
            CopyError: Core source is missing or a copy fails
            ParseError: Agent configs cannot be read
        """
        core_source = self.config.core_source
        if not self.fs.is_dir(core_source):
            raise CopyError("Core source not found", operation="install_core", path=core_source)

        core_dest = self.config.core_dir(install_dir)
        self.fs.ensure_dir(core_dest)

        for entry in self.fs.list_dir(core_source):
            if entry.is_dir and entry.name not in EXCLUDED_CORE_DIRS:
                self.fs.ensure_dir(core_dest / entry.name)
        self.fs.ensure_dir(core_dest / "agents")

        asset_files = self.core_asset_files(core_source)
        written = [
            relative
            for relative in asset_files
            if self.fs.copy_file(core_source / relative, core_dest / relative, overwrite=overwrite)
        ]
        written.extend(self.agent_generator.generate(core_source, core_dest, overwrite=overwrite))
        logger.debug(f"Wrote {len(written)} core files to {core_dest}")

        core_files = asset_files + self.agent_generator.agent_files(core_source)
        prefix = self.config.core_dir_name
        files = [f"{prefix}/{relative}" for relative in core_files]
        written_files = {f"{prefix}/{relative}" for relative in written}

        integrity = self.integrity_checker.generate_checksums(install_dir, files)
        if previous is not None and previous.integrity:
            for path in files:
                if path not in written_files and path in previous.integrity:
                    integrity[path] = previous.integrity[path]

        components = dict(previous.components) if previous is not None else {}
        components["core"] = True

        manifest = InstallationManifest.create(
            version=self.config.core_version,
            components=components,
            files=files,
            integrity=integrity,
        )
        self.manifest_store.save(install_dir, manifest)
        return manifest

    def check_integrity(
        self,
        install_dir: Path,
        manifest: Optional[InstallationManifest] = None,
        validate_checksums: Optional[bool] = None,
    ) -> IntegrityReport:
        """Manifest file check merged with the required core directory check."""
        if validate_checksums is None:
            validate_checksums = self.config.validate_checksums
        report = self.integrity_checker.check_file_integrity(
            install_dir,
            manifest,
            IntegrityCheckOptions(validate_checksums=validate_checksums),
        )
        return report.merge(
            self.integrity_checker.check_required_directories(install_dir, self.config.core_dir_name)
        )

    def install_packs(
        self,
        install_dir: Path,
        pack_ids: Iterable[str],
    ) -> Tuple[List[str], List[DependencyOutcome], List[str]]:
        """Install content packs into their dot folders.

        Returns:
            (installed pack ids, dependency outcomes, warnings)
        """
        installed: List[str] = []
        outcomes: List[DependencyOutcome] = []
        warnings: List[str] = []
        requested = self._unique_pack_ids(pack_ids)

        for pack_id in requested:
            logger.info(f"Installing expansion pack: {pack_id}...")
            try:
                pack = self.resource_locator.load_pack(pack_id)
            except ParseError as e:
                warnings.append(f"Expansion pack {pack_id} has an invalid config, skipping: {e}")
                logger.warning(warnings[-1])
                continue
            if pack is None:
                warnings.append(f"Expansion pack {pack_id} not found, skipping")
                logger.warning(warnings[-1])
                continue

            pack_dest = install_dir / pack.dot_folder
            self.fs.copy(pack.path, pack_dest, overwrite=True)
            self.copy_common_items(install_dir, pack.dot_folder)

            pack_outcomes = self.dependency_resolver.resolve(pack_dest, pack)
            outcomes.extend(pack_outcomes)
            for outcome in pack_outcomes:
                if outcome.status == ResolutionStatus.UNRESOLVED:
                    warnings.append(f"Unresolved dependency {outcome.relative_path} in {pack.id}")

            for dependency in pack.dependencies:
                if not self._pack_present(install_dir, dependency, requested):
                    warnings.append(f"Expansion pack {pack.id} depends on {dependency}, which is not installed")
                    logger.warning(warnings[-1])

            installed.append(pack.id)
            logger.info(f"  {pack.id} → {pack.dot_folder}/")

        return installed, outcomes, warnings

    def copy_common_items(self, install_dir: Path, dot_folder: str) -> List[str]:
        """Copy the common/ tree into a pack folder, rewriting {root}."""
        common_path = self.resource_locator.common_path
        if not self.fs.is_dir(common_path):
            logger.warning(f"common/ folder not found at {common_path}")
            return []

        target = Path(install_dir) / dot_folder
        copied = []
        for relative in self.fs.walk_files(common_path):
            self.dependency_resolver.copy_with_root_replacement(
                common_path / relative, target / relative, dot_folder
            )
            copied.append(f"{dot_folder}/{relative}")

        logger.info(f"  Added {len(copied)} common utilities")
        return copied

    def _finish(self, options: InstallOptions, install_dir: Path, result: InstallResult) -> None:
        """Packs and IDE rules run after the core action, whatever it was."""
        if options.packs:
            installed, outcomes, warnings = self.install_packs(install_dir, options.packs)
            result.packs_installed.extend(installed)
            result.dependency_outcomes.extend(outcomes)
            result.warnings.extend(warnings)

        if options.ides:
            logger.info("Setting up IDE configurations...")
            self.ide_setup.setup(install_dir, options.ides)

    def _unique_pack_ids(self, pack_ids: Iterable[str]) -> List[str]:
        seen: Dict[str, None] = {}
        for pack_id in pack_ids:
            pack_id = pack_id.strip().lstrip(".")
            if not pack_id or pack_id == self.config.core_pack_id:
                continue
            seen.setdefault(pack_id, None)
        return list(seen)

    def _pack_present(self, install_dir: Path, pack_id: str, requested: List[str]) -> bool:
        pack_id = pack_id.lstrip(".")
        if pack_id == self.config.core_pack_id:
            return self.fs.is_dir(self.config.core_dir(install_dir))
        return pack_id in requested or self.fs.is_dir(install_dir / f".{pack_id}")

    @staticmethod
    def _log_integrity_issues(report: IntegrityReport) -> None:
        logger.warning("Installation issues detected:")
        if report.missing:
            logger.warning(f"  Missing files: {len(report.missing)}")
            for path in report.missing[:5]:
                logger.warning(f"    - {path}")
        if report.modified:
            logger.warning(f"  Modified files: {len(report.modified)}")
            for path in report.modified[:5]:
                logger.warning(f"    - {path}")
