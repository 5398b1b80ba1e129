"""
Exceptions raised by the verifier.

Catalog errors are fatal for a run. File errors are caught per file by the
orchestrator and turned into ERROR results.
"""


class SigilError(Exception):
    """Base class for every error raised by this package."""


class CatalogError(SigilError):
    """The signature catalog could not be used."""


class CatalogUnreadableError(CatalogError):
    """The catalog source could not be opened or decoded."""


class CatalogMalformedError(CatalogError):
    """The catalog was read but does not match the entry schema."""

    def __init__(self, message: str, index: int = None):
        self.index = index
        if index is not None:
            message = f"entry {index}: {message}"
        super().__init__(message)


class DuplicateSignatureError(CatalogMalformedError):
    """Two entries map the same signature bytes to different types."""

    def __init__(self, signature: bytes, first_type: str, second_type: str, index: int = None):
        self.signature = signature
        self.first_type = first_type
        self.second_type = second_type
        super().__init__(
            f"signature {signature.hex(' ')} declared as both "
            f"'{first_type}' and '{second_type}'",
            index,
        )


class FileError(SigilError):
    """A single file could not be verified."""


class MissingExtensionError(FileError):
    def __init__(self):
        super().__init__("File has no extension")


class NotAFileError(FileError):
    def __init__(self):
        super().__init__("The provided path is not a file.")
