"""File walker for discovering documents under the docs root."""

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path


@dataclass
class FileInfo:
    """A discovered document file."""

    path: Path  # Absolute path
    relative_path: str  # Relative to the docs root, POSIX separators


def relative_id(root: Path, path: Path, extension: str = ".md") -> str | None:
    """
    Map an absolute path to its document id, or None if it is not eligible.

    Eligible means: inside ``root`` (after resolving symlinks), no hidden
    component, and ending with ``extension``.
    """
    if not path.name.endswith(extension):
        return None
    try:
        relative = path.relative_to(root)
    except ValueError:
        try:
            relative = path.resolve().relative_to(root.resolve())
        except (ValueError, OSError):
            return None
    if any(part.startswith(".") for part in relative.parts):
        return None
    return relative.as_posix()


def relative_prefix(root: Path, path: Path) -> str | None:
    """Map a directory path to the id prefix of the documents below it."""
    try:
        relative = path.relative_to(root)
    except ValueError:
        return None
    if any(part.startswith(".") for part in relative.parts):
        return None
    if not relative.parts:
        return ""
    return relative.as_posix() + "/"


def walk_root(root: Path, extension: str = ".md", start: Path | None = None) -> Iterator[FileInfo]:
    """
    Walk the docs root and yield a FileInfo for each eligible file.

    Files are yielded in sorted path order. Hidden files and directories are
    skipped, as are symlinks that lead outside the root.

    Args:
        root: The docs root; ids are relative to it
        extension: File extension to index, with leading dot
        start: Optional subdirectory of root to limit the walk to
    """
    base = start if start is not None else root
    if not base.is_dir():
        return

    resolved_root = root.resolve()
    for file_path in sorted(base.rglob(f"*{extension}")):
        if not file_path.is_file():
            continue

        relative_path = relative_id(root, file_path, extension)
        if relative_path is None:
            continue

        # Prevent symlinks escaping the root
        try:
            file_path.resolve().relative_to(resolved_root)
        except (ValueError, OSError):
            continue

        yield FileInfo(path=file_path, relative_path=relative_path)
