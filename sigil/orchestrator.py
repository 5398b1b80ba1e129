"""
Orchestrator — the single coordinator for a verification run.

Responsibilities:
  * Load the signature catalog once and build the shared trie.
  * Discover the files under the requested path.
  * For each file: read header → search trie → compare with extension.
  * Fan files out to a bounded thread pool and gather the results into
    an order-independent summary.
"""
import logging
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable, List, Optional

from tqdm import tqdm

from sigil.base import (
    AbstractMatcher, AbstractTypeComparator, FileResult, UNKNOWN_TYPE,
    VerificationStatus, VerificationSummary,
)
from sigil.catalogs.json_catalog import load_trie
from sigil.comparators.type_comparators import get_comparator
from sigil.config import get_config
from sigil.discovery.path_resolver import resolve_paths
from sigil.errors import FileError, NotAFileError
from sigil.readers.header_reader import get_file_info, read_header

logger = logging.getLogger(__name__)


class Orchestrator:
    """Wires together every component and drives verification."""

    def __init__(self, matcher: Optional[AbstractMatcher] = None,
                 comparator: Optional[AbstractTypeComparator] = None,
                 catalog_path: Optional[Path] = None,
                 max_workers: Optional[int] = None,
                 show_progress: Optional[bool] = None):
        """
        Args:
            matcher: Pre-built matcher; loaded from the catalog when omitted
            comparator: Type comparison policy; configured policy when omitted
            catalog_path: Catalog to load when no matcher is given
            max_workers: Thread pool size
            show_progress: Show a tqdm progress bar for batches

        Raises:
            CatalogError: If the catalog cannot be loaded
            ValueError: If *max_workers* is less than 1
        """
        self.config = get_config()
        self.matcher = matcher if matcher is not None else load_trie(catalog_path)
        self.comparator = comparator if comparator is not None else get_comparator(self.config.type_match_policy)
        self.max_workers = max_workers if max_workers is not None else self.config.max_workers
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1 (got {self.max_workers})")
        self.show_progress = self.config.show_progress if show_progress is None else show_progress

    # ---------------------------------------------------------- public API

    def verify_path(self, path: Path, recursive: Optional[bool] = None) -> VerificationSummary:
        """
        Verify a single file, or every file under a directory.

        Args:
            path: File or directory
            recursive: Walk sub-directories; configured default when None

        Returns:
            Summary of every file's result

        Raises:
            FileNotFoundError: If *path* does not exist
        """
        if recursive is None:
            recursive = self.config.recursive

        path = Path(path)
        if path.is_dir():
            files = resolve_paths(path, recursive)
            logger.info("Discovered %d file(s) under %s", len(files), path)
            return self.verify_files(files)

        if not path.exists():
            raise FileNotFoundError(f"No such file or directory: '{path}'")

        return VerificationSummary.from_results([self.process_file(path)])

    def verify_files(self, files: Iterable[Path]) -> VerificationSummary:
        """
        Verify many files on the worker pool.

        Per-file failures become ERROR results; the batch always completes.
        """
        files = list(files)
        results: List[FileResult] = []

        if not files:
            return VerificationSummary()

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self.process_file, f) for f in files]
            completed = as_completed(futures)

            if self.show_progress and len(files) > 1 and sys.stdout.isatty():
                completed = tqdm(completed, total=len(futures), unit='file', desc='Verifying')

            for future in completed:
                results.append(future.result())

        return VerificationSummary.from_results(results)

    def identify(self, path: Path) -> Optional[str]:
        """
        Detect the type of one file from its header, ignoring its name.

        Raises:
            NotAFileError: If *path* is not a regular file
            OSError: If the file cannot be read
        """
        path = Path(path)
        if not path.is_file():
            raise NotAFileError()

        return self.matcher.search(read_header(path, self.matcher.max_buffer_size))

    def process_file(self, path: Path) -> FileResult:
        """
        Verify one file. Never raises; failures become ERROR results.

        Args:
            path: File to verify

        Returns:
            CORRECT, INCORRECT or ERROR result for *path*
        """
        path = Path(path)
        try:
            if not path.is_file():
                raise NotAFileError()

            info = get_file_info(path, self.matcher.max_buffer_size)
        except (FileError, OSError) as e:
            logger.debug("Cannot verify %s: %s", path, e)
            return FileResult(path=path, status=VerificationStatus.ERROR, error_message=str(e))

        actual_type = self.matcher.search(info.buffer)
        if actual_type is None:
            info.actual_type = UNKNOWN_TYPE
            status = VerificationStatus.INCORRECT
        else:
            info.actual_type = actual_type
            if self.comparator.matches(info.declared_type, actual_type):
                status = VerificationStatus.CORRECT
            else:
                status = VerificationStatus.INCORRECT

        return FileResult(
            path=path,
            status=status,
            declared_type=info.declared_type,
            actual_type=info.actual_type,
        )
