"""File utility functions."""

import os
from pathlib import Path
from typing import Callable, Optional, Set, Union

from .errors import ErrorKind, InvalidInputError, LocalFilesError

EXTENSION_TYPES = ('audio', 'video', 'photo', 'document')

PathLike = Union[str, Path]


def get_file_extension(file_path: PathLike) -> str:
    """Get file extension (including leading dot)."""
    return Path(file_path).suffix.lower()


def get_extension_types(extension: str, config) -> Optional[Set[str]]:
    """
    Look up which media types an extension belongs to.

    Args:
        extension: Extension with or without leading dot
        config: Configuration object

    Returns:
        Set of type tags (eg. {'audio'}), or None if the extension is unknown
    """
    if not extension:
        return None

    extension = extension.lower()
    if not extension.startswith('.'):
        extension = '.' + extension

    types = {
        media_type for media_type in EXTENSION_TYPES
        if extension in config.get_extensions(media_type)
    }
    return types or None


def is_not_audio(file_path: PathLike, config, include_video: bool = False) -> bool:
    """
    Check if a file is definitely not audio, judging only by its extension.

    Files without an extension or with an unknown one could be anything,
    so they are NOT rejected here.

    Args:
        file_path: Path to file
        config: Configuration object
        include_video: If True, video files count as audio

    Returns:
        True if the file is known not to be audio
    """
    types = get_extension_types(get_file_extension(file_path), config)
    if not types:
        return False
    if 'audio' in types:
        return False
    if include_video and 'video' in types:
        return False
    return True


def check_exists(path: PathLike, kind: str = 'file', raise_error: bool = False) -> bool:
    """
    Check that a path exists and is of the expected kind.

    Args:
        path: Path to check
        kind: 'file' or 'folder'
        raise_error: Raise instead of returning False

    Returns:
        True if path exists and matches kind, else False

    Raises:
        InvalidInputError: If kind is not 'file' or 'folder'
        LocalFilesError: (NOT_FOUND) if raise_error and the check fails
    """
    if kind not in ('file', 'folder'):
        raise InvalidInputError(f"kind should be 'file' or 'folder', got {kind!r}")

    target = Path(path)
    try:
        ok = target.is_file() if kind == 'file' else target.is_dir()
    except OSError:
        ok = False

    if not ok and raise_error:
        if target.exists():
            message = f"Path exists but is not a {kind}"
        else:
            message = f"No such {kind}"
        raise LocalFilesError(ErrorKind.NOT_FOUND, message, path=str(path))

    return ok


def walk_files(root: PathLike, callback: Callable[[str], object]) -> int:
    """
    Recursively visit every regular file under root.

    Unreadable subdirectories are skipped, but an inaccessible root raises.
    Symlinks to files are followed and reported under the link path.
    Symlinked directories are not descended into.

    Args:
        root: Directory to walk
        callback: Called with each file path

    Returns:
        Number of files visited

    Raises:
        FileNotFoundError, NotADirectoryError, PermissionError: If root can't be read
    """
    root = os.fspath(root)
    # Fail fast on the root itself, os.walk would silently yield nothing
    with os.scandir(root):
        pass

    visited = 0
    for dirpath, _, filenames in os.walk(root):
        for filename in sorted(filenames):
            file_path = os.path.join(dirpath, filename)
            if not os.path.isfile(file_path):
                continue
            callback(file_path)
            visited += 1
    return visited


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} PB"
