"""File integrity checks for installed assets.

Compares the files a manifest says were installed against what is on disk,
and optionally recomputes content checksums to spot local edits.
"""
import fnmatch
import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from bmad_installer.core.errors import IntegrityCheckFailedError
from bmad_installer.core.filesystem import LocalFileSystem
from bmad_installer.core.logger import get_logger
from bmad_installer.core.manifest import ManifestStore
from bmad_installer.models.manifest import InstallationManifest

logger = get_logger(__name__)

# Directories every core installation is expected to have.
CORE_DIRECTORIES = ("agents", "tasks", "templates", "workflows", "utils")


@dataclass
class IntegrityCheckOptions:
    """Options for check_file_integrity.

    Attributes:
        validate_checksums: Recompute checksums and report mismatches as modified
        include_patterns: Only consider files matching one of these globs
        exclude_patterns: Ignore files matching any of these globs
    """
    validate_checksums: bool = False
    include_patterns: List[str] = field(default_factory=list)
    exclude_patterns: List[str] = field(default_factory=list)


@dataclass
class IntegrityReport:
    """Relative paths expected but absent, and present but changed."""
    missing: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.missing or self.modified)

    @property
    def is_clean(self) -> bool:
        return not self.has_issues

    def merge(self, other: "IntegrityReport") -> "IntegrityReport":
        return IntegrityReport(
            missing=sorted(set(self.missing) | set(other.missing)),
            modified=sorted(set(self.modified) | set(other.modified)),
        )


def file_checksum(data: bytes) -> str:
    """SHA-256 hex digest of file content."""
    return hashlib.sha256(data).hexdigest()


def _matches(path: str, patterns: Sequence[str]) -> bool:
    return any(fnmatch.fnmatch(path, pattern) for pattern in patterns)


class IntegrityChecker:
    """Diff expected vs. actual files and validate checksums."""

    def __init__(self, manifest_store: ManifestStore, fs: Optional[LocalFileSystem] = None):
        self.manifest_store = manifest_store
        self.fs = fs or manifest_store.fs

    def checksum(self, path: Path) -> Optional[str]:
        """Checksum of a file, or None if it cannot be read."""
        try:
            return file_checksum(self.fs.read_bytes(path))
        except OSError as e:
            logger.debug(f"Cannot checksum {path}: {e}")
            return None

    def generate_checksums(self, root: Path, relative_paths: Iterable[str]) -> Dict[str, str]:
        """Checksums for files under root, keyed by their relative path.

        Files that cannot be read are left out.
        """
        checksums = {}
        for relative in relative_paths:
            value = self.checksum(Path(root) / relative)
            if value is None:
                logger.warning(f"File not found during checksum generation: {relative}")
                continue
            checksums[relative] = value
        return checksums

    def _actual_files(self, install_dir: Path, options: IntegrityCheckOptions) -> List[str]:
        files = self.fs.walk_files(install_dir)
        if options.include_patterns:
            files = [f for f in files if _matches(f, options.include_patterns)]
        if options.exclude_patterns:
            files = [f for f in files if not _matches(f, options.exclude_patterns)]
        return files

    def check_file_integrity(
        self,
        install_dir: Path,
        manifest: Optional[InstallationManifest] = None,
        options: Optional[IntegrityCheckOptions] = None,
    ) -> IntegrityReport:
        """Compare the manifest's file list against the directory contents.

        Without a file list in the manifest the current directory listing is
        taken as the baseline, so nothing can be reported missing.

        Args:
            install_dir: Installation root the manifest paths are relative to
            manifest: Parsed install manifest, if any
            options: Checksum and filtering options

        Returns:
            IntegrityReport with missing and modified relative paths
        """
        options = options or IntegrityCheckOptions()
        install_dir = Path(install_dir)

        if manifest is not None and manifest.files is not None:
            expected = list(manifest.files)
        else:
            expected = self.fs.walk_files(install_dir)
        actual = set(self._actual_files(install_dir, options))

        missing = [f for f in expected if f not in actual]

        modified = []
        if options.validate_checksums and manifest is not None and manifest.integrity:
            missing_set = set(missing)
            for relative in expected:
                stored = manifest.integrity.get(relative)
                if stored is None or relative in missing_set:
                    continue
                if self.checksum(install_dir / relative) != stored:
                    modified.append(relative)

        logger.debug(
            f"Integrity of {install_dir}: {len(expected)} expected, {len(actual)} present, "
            f"{len(missing)} missing, {len(modified)} modified"
        )
        return IntegrityReport(missing=missing, modified=modified)

    def check_required_directories(
        self,
        install_dir: Path,
        core_dir_name: str,
        names: Sequence[str] = CORE_DIRECTORIES,
    ) -> IntegrityReport:
        """Report core subdirectories that do not exist as missing ``<core>/<dir>/``."""
        core_dir = Path(install_dir) / core_dir_name
        missing = [
            f"{core_dir_name}/{name}/"
            for name in names
            if not self.fs.is_dir(core_dir / name)
        ]
        return IntegrityReport(missing=missing)

    def validate_installation_integrity(
        self,
        install_dir: Path,
        manifest: Optional[InstallationManifest] = None,
        validate_checksums: bool = True,
    ) -> bool:
        """True when nothing is missing and nothing is modified."""
        report = self._full_report(install_dir, manifest, validate_checksums)
        return report.is_clean

    def require_integrity(
        self,
        install_dir: Path,
        manifest: Optional[InstallationManifest] = None,
        validate_checksums: bool = True,
    ) -> IntegrityReport:
        """Like validate_installation_integrity but raises on problems.

        Raises:
            IntegrityCheckFailedError: Files are missing or modified
        """
        report = self._full_report(install_dir, manifest, validate_checksums)
        if report.has_issues:
            raise IntegrityCheckFailedError(install_dir, report.missing, report.modified)
        return report

    def _full_report(
        self,
        install_dir: Path,
        manifest: Optional[InstallationManifest],
        validate_checksums: bool,
    ) -> IntegrityReport:
        if manifest is None:
            manifest = self.manifest_store.load(install_dir)
        return self.check_file_integrity(
            install_dir,
            manifest,
            IntegrityCheckOptions(validate_checksums=validate_checksums),
        )
