"""Installer error hierarchy.

Every error carries the operation that failed, the path involved and the
underlying cause so callers can report it without string parsing.
"""
from pathlib import Path
from typing import List, Optional, Union


class InstallerError(Exception):
    """Base class for installer failures."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        path: Optional[Union[str, Path]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.path = str(path) if path is not None else None
        self.cause = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"(path: {self.path})")
        if self.cause is not None:
            parts.append(f"caused by: {self.cause}")
        return " ".join(parts)


class ParseError(InstallerError):
    """Raised when YAML or front matter cannot be parsed."""
    pass


class CopyError(InstallerError):
    """Raised when a filesystem mutation (copy, write, remove) fails."""
    pass


class IntegrityCheckFailedError(InstallerError):
    """Raised by strict verification when files are missing or modified."""

    def __init__(self, install_dir: Union[str, Path], missing: List[str], modified: List[str]):
        super().__init__(
            f"Integrity check failed. Missing: {len(missing)}, Modified: {len(modified)}",
            operation="verify",
            path=install_dir,
        )
        self.missing = list(missing)
        self.modified = list(modified)


class RestoreError(InstallerError):
    """A protected operation failed; carries the restore outcome too."""

    def __init__(
        self,
        operation: str,
        path: Union[str, Path],
        original: BaseException,
        restore_error: Optional[BaseException] = None,
    ):
        if restore_error is None:
            message = f"{operation} failed, previous state restored"
        else:
            message = f"{operation} failed and restore also failed: {restore_error}"
        super().__init__(message, operation=operation, path=path, cause=original)
        self.original = original
        self.restore_error = restore_error

    @property
    def restored(self) -> bool:
        return self.restore_error is None


class InstallationNotFoundError(InstallerError):
    """Raised when an operation needs an existing installation and finds none."""
    pass
