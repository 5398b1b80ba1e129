"""
File header reader.
Extracts the declared type from a file name and reads a bounded number of
leading bytes, so that even very large files cost one small read.
"""
from pathlib import Path
from typing import Optional

from sigil.base import FileSignature
from sigil.errors import MissingExtensionError


def get_file_extension(path: Path) -> Optional[str]:
    """
    Return the extension of *path* without its dot.

    Dot-files such as '.bashrc' have no extension.

    Args:
        path: File path

    Returns:
        Extension string, or None when the name has no suffix
    """
    suffix = Path(path).suffix
    if not suffix or suffix == '.':
        return None
    return suffix[1:]


def read_header(path: Path, size: int) -> bytes:
    """
    Read at most *size* bytes from the start of a file.

    Raises:
        OSError: If the file cannot be opened or read
    """
    with open(path, 'rb') as f:
        return f.read(size)


def get_file_info(path: Path, buffer_size: int) -> FileSignature:
    """
    Gather the declared type and header bytes of a file.

    Args:
        path: File to inspect
        buffer_size: Number of leading bytes to read

    Returns:
        FileSignature with declared_type (upper-cased extension) and buffer;
        actual_type is left empty for the caller

    Raises:
        MissingExtensionError: If the file name has no extension
        OSError: If the file cannot be read
    """
    extension = get_file_extension(path)
    if extension is None:
        raise MissingExtensionError()

    return FileSignature(
        declared_type=extension.upper(),
        buffer=read_header(path, buffer_size),
    )
