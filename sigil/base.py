"""
Base types and abstract classes for the file-type verifier.
Defines the records passed between components and the interfaces
every pluggable stage implements.
"""
from abc import ABC, abstractmethod
from typing import List, Optional
from pathlib import Path
from dataclasses import dataclass, field
from enum import Enum


UNKNOWN_TYPE = "Unknown"


class VerificationStatus(Enum):
    """Outcome of verifying a single file."""
    CORRECT = "correct"
    INCORRECT = "incorrect"
    ERROR = "error"


@dataclass(frozen=True)
class SignatureEntry:
    """One catalog row: a type label and the bytes it starts with."""
    type: str
    offset: int
    signature: bytes


@dataclass
class FileSignature:
    """Declared type, detected type and header bytes of a file."""
    declared_type: str
    buffer: bytes
    actual_type: str = ""


@dataclass
class FileResult:
    """Verification result for one path."""
    path: Path
    status: VerificationStatus
    declared_type: Optional[str] = None
    actual_type: Optional[str] = None
    error_message: Optional[str] = None


@dataclass
class VerificationSummary:
    """Aggregate of every FileResult in a run. Order of results does not matter."""
    total: int = 0
    correct: int = 0
    incorrect: List[FileResult] = field(default_factory=list)
    errors: List[FileResult] = field(default_factory=list)

    def add(self, result: FileResult):
        """Fold a single result into the summary."""
        self.total += 1
        if result.status == VerificationStatus.CORRECT:
            self.correct += 1
        elif result.status == VerificationStatus.INCORRECT:
            self.incorrect.append(result)
        else:
            self.errors.append(result)

    @classmethod
    def from_results(cls, results) -> "VerificationSummary":
        summary = cls()
        for result in results:
            summary.add(result)
        summary.incorrect.sort(key=lambda r: str(r.path))
        summary.errors.sort(key=lambda r: str(r.path))
        return summary

    @property
    def all_correct(self) -> bool:
        return not self.incorrect and not self.errors


class AbstractMatcher(ABC):
    """Abstract base class for magic-number matchers."""

    @property
    @abstractmethod
    def max_buffer_size(self) -> int:
        """Number of leading bytes a caller must read for a full check."""
        pass

    @abstractmethod
    def search(self, buffer: bytes) -> Optional[str]:
        """
        Find the file type whose signature matches *buffer*.

        Args:
            buffer: Leading bytes of a file

        Returns:
            Type label, or None when nothing matches
        """
        pass


class AbstractCatalogLoader(ABC):
    """Abstract base class for signature catalog loaders."""

    @abstractmethod
    def load(self, source: Path) -> List[SignatureEntry]:
        """
        Read and validate every entry of a catalog.

        Args:
            source: Location of the catalog

        Returns:
            Parsed entries, in catalog order

        Raises:
            CatalogUnreadableError: If the catalog cannot be read
            CatalogMalformedError: If an entry does not match the schema
        """
        pass


class AbstractTypeComparator(ABC):
    """Abstract base class for declared-vs-actual type comparison."""

    name: str = ""

    @abstractmethod
    def matches(self, declared_type: str, actual_type: str) -> bool:
        """
        Decide whether a detected type is consistent with a declared one.

        Args:
            declared_type: Upper-cased file extension
            actual_type: Label returned by the matcher

        Returns:
            True if the file should be counted as correct
        """
        pass
