"""
Discovers the files to verify under a path.
"""
import logging
import os
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def resolve_paths(path: Path, recursive: bool = False) -> List[Path]:
    """
    List the files to verify for *path*.

    A file yields itself. A directory yields its regular files: only direct
    children unless *recursive* is set, in which case the whole tree is
    walked and unreadable sub-directories are skipped.

    Args:
        path: File or directory to verify
        recursive: Descend into sub-directories

    Returns:
        Sorted list of file paths

    Raises:
        FileNotFoundError: If *path* does not exist
        OSError: If a non-recursive directory listing fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No such file or directory: '{path}'")

    if not path.is_dir():
        return [path]

    if not recursive:
        return sorted(p for p in path.iterdir() if p.is_file())

    def _on_error(error: OSError):
        logger.warning("Skipping unreadable directory %s: %s", error.filename, error.strerror)

    files = []
    for dirpath, _dirnames, filenames in os.walk(path, onerror=_on_error):
        for name in filenames:
            candidate = Path(dirpath) / name
            if candidate.is_file():
                files.append(candidate)

    return sorted(files)
