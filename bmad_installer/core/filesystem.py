"""Filesystem access used by every installer component.

Components receive a ``LocalFileSystem`` through their constructor, so tests
can swap in a subclass that fails on purpose.
"""
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from bmad_installer.core.errors import CopyError

PathLike = Union[str, Path]


@dataclass(frozen=True)
class DirEntry:
    """One entry of a directory listing."""
    name: str
    path: Path
    is_dir: bool
    is_file: bool


class LocalFileSystem:
    """Thin wrapper over pathlib/shutil that raises ``CopyError`` on I/O failures."""

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def is_dir(self, path: PathLike) -> bool:
        return Path(path).is_dir()

    def is_file(self, path: PathLike) -> bool:
        return Path(path).is_file()

    def ensure_dir(self, path: PathLike) -> Path:
        target = Path(path)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CopyError("Failed to create directory", operation="ensure_dir", path=target, cause=e) from e
        return target

    def read_text(self, path: PathLike) -> str:
        return Path(path).read_text(encoding="utf-8")

    def read_bytes(self, path: PathLike) -> bytes:
        return Path(path).read_bytes()

    def write_text(self, path: PathLike, content: str, atomic: bool = False) -> None:
        """Write text, creating parent directories.

        With ``atomic=True`` the content goes to a sibling temp file first and
        is renamed into place, so readers never see a half-written file.
        """
        target = Path(path)
        self.ensure_dir(target.parent)
        try:
            if atomic:
                temp_file = target.with_name(target.name + ".tmp")
                temp_file.write_text(content, encoding="utf-8")
                os.replace(temp_file, target)
            else:
                target.write_text(content, encoding="utf-8")
        except OSError as e:
            raise CopyError("Failed to write file", operation="write", path=target, cause=e) from e

    def copy_file(self, src: PathLike, dest: PathLike, overwrite: bool = True) -> bool:
        """Copy a single file.

        Returns:
            True if the file was written, False if skipped (exists, no overwrite)
        """
        source, target = Path(src), Path(dest)
        if target.exists() and not overwrite:
            return False
        self.ensure_dir(target.parent)
        try:
            shutil.copy2(source, target)
        except OSError as e:
            raise CopyError(f"Failed to copy {source}", operation="copy", path=target, cause=e) from e
        return True

    def copy(self, src: PathLike, dest: PathLike, overwrite: bool = True) -> List[str]:
        """Copy a file or merge a directory tree into ``dest``.

        Existing files in ``dest`` that have no counterpart in ``src`` are
        left alone.

        Returns:
            Relative paths (POSIX) of files written
        """
        source, target = Path(src), Path(dest)
        if source.is_file():
            return [source.name] if self.copy_file(source, target, overwrite=overwrite) else []
        if not source.is_dir():
            raise CopyError("Copy source does not exist", operation="copy", path=source)

        written = []
        for relative in self.walk_files(source):
            if self.copy_file(source / relative, target / relative, overwrite=overwrite):
                written.append(relative)
        self.ensure_dir(target)
        return written

    def list_dir(self, path: PathLike) -> List[DirEntry]:
        """List a directory, sorted by name. Raises OSError if unreadable."""
        entries = []
        for child in sorted(Path(path).iterdir(), key=lambda p: p.name):
            entries.append(DirEntry(
                name=child.name,
                path=child,
                is_dir=child.is_dir(),
                is_file=child.is_file(),
            ))
        return entries

    def walk_files(self, root: PathLike) -> List[str]:
        """Recursively list files under ``root`` as sorted POSIX relative paths."""
        base = Path(root)
        if not base.is_dir():
            return []
        return sorted(
            p.relative_to(base).as_posix()
            for p in base.rglob("*")
            if p.is_file()
        )

    def remove(self, path: PathLike) -> None:
        """Remove a file or directory tree. Missing paths are ignored."""
        target = Path(path)
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            elif target.exists() or target.is_symlink():
                target.unlink()
        except OSError as e:
            raise CopyError("Failed to remove path", operation="remove", path=target, cause=e) from e
