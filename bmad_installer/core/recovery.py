"""Backup and restore around mutating steps."""
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, Optional, TypeVar

from bmad_installer.core.errors import RestoreError
from bmad_installer.core.filesystem import LocalFileSystem
from bmad_installer.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class BackupManager:
    """Rollback capability for when a core install goes wrong.

    The target is copied to a timestamped sibling before the step runs. The
    backup never outlives the step: it is deleted on success, and on failure
    it is deleted after the restore attempt, whatever that attempt's outcome.
    """

    def __init__(self, fs: Optional[LocalFileSystem] = None):
        self.fs = fs or LocalFileSystem()

    def backup_path(self, target: Path) -> Path:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
        candidate = target.with_name(f"{target.name}.backup-{timestamp}")
        suffix = 1
        while self.fs.exists(candidate):
            candidate = target.with_name(f"{target.name}.backup-{timestamp}-{suffix}")
            suffix += 1
        return candidate

    def create_backup(self, target: Path) -> Optional[Path]:
        """Copy target to a sibling backup directory.

        Returns:
            Backup path, or None if the target does not exist yet
        """
        target = Path(target)
        if not self.fs.exists(target):
            logger.debug(f"{target} does not exist, nothing to back up")
            return None

        backup = self.backup_path(target)
        try:
            self.fs.copy(target, backup)
        except Exception:
            logger.error(f"Backup of {target.name} failed, removing partial {backup.name}")
            self.fs.remove(backup)
            raise
        logger.info(f"Backed up {target.name} to {backup.name}")
        return backup

    def restore(self, target: Path, backup: Optional[Path]) -> None:
        """Replace target with the backup (or remove it if there was none)."""
        self.fs.remove(target)
        if backup is not None:
            self.fs.copy(backup, target)
            logger.info(f"Restored {target.name} from {backup.name}")
        else:
            logger.info(f"Removed partially created {target.name}")

    def discard(self, backup: Optional[Path]) -> None:
        if backup is not None:
            self.fs.remove(backup)
            logger.debug(f"Removed backup {backup.name}")

    @contextmanager
    def protect(self, target: Path, operation: str = "update") -> Iterator[Optional[Path]]:
        """Run the body with target backed up.

        Raises:
            RestoreError: The body raised; carries the original error and any
                error hit while restoring
        """
        target = Path(target)
        backup = self.create_backup(target)
        try:
            yield backup
        except Exception as original:
            logger.warning(f"{operation} failed, rolling back {target.name}")
            restore_error = None
            try:
                self.restore(target, backup)
            except Exception as e:
                restore_error = e
                logger.error(f"Failed to restore {target}: {e}")
            finally:
                try:
                    self.discard(backup)
                except Exception as e:
                    logger.error(f"Failed to remove backup {backup}: {e}")
                    if restore_error is None:
                        restore_error = e
            raise RestoreError(operation, target, original, restore_error) from original
        else:
            self.discard(backup)

    def run_protected(self, target: Path, step: Callable[[], T], operation: str = "update") -> T:
        """Functional form of protect()."""
        with self.protect(target, operation=operation):
            return step()
