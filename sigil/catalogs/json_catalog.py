"""
JSON signature catalog loader.

A catalog is a JSON array of objects:

    [{"type": "PNG", "offset": 0, "signature": [137, 80, 78, 71]}, ...]

Every entry is validated before anything is inserted into a trie, so a
malformed catalog never produces a half-built matcher.
"""
import json
import logging
from pathlib import Path
from typing import List, Optional

from sigil.base import AbstractCatalogLoader, SignatureEntry
from sigil.config import get_config
from sigil.errors import CatalogMalformedError, CatalogUnreadableError
from sigil.matchers.magic_trie import MagicNumberTrie

logger = logging.getLogger(__name__)


def _is_int(value) -> bool:
    # bool is an int subclass; true/false are not offsets or bytes
    return isinstance(value, int) and not isinstance(value, bool)


class JsonCatalogLoader(AbstractCatalogLoader):
    """Parses and validates JSON signature catalogs."""

    def load(self, source: Path) -> List[SignatureEntry]:
        """
        Read a catalog file and return its entries.

        Args:
            source: Path to the JSON catalog

        Returns:
            Parsed entries, in catalog order

        Raises:
            CatalogUnreadableError: If the file cannot be opened or decoded
            CatalogMalformedError: If the content does not match the schema
        """
        try:
            with open(source, 'r', encoding='utf-8') as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise CatalogUnreadableError(f"cannot read catalog '{source}': {e}") from e

        return self.loads(text)

    def loads(self, text: str) -> List[SignatureEntry]:
        """
        Parse catalog entries from a JSON string.

        Raises:
            CatalogMalformedError: If *text* is not valid JSON or an entry
                does not match the schema
        """
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise CatalogMalformedError(f"invalid JSON: {e}") from e

        if not isinstance(raw, list):
            raise CatalogMalformedError("catalog root must be an array of entries")

        return [self._parse_entry(item, index) for index, item in enumerate(raw)]

    @staticmethod
    def _parse_entry(item, index: int) -> SignatureEntry:
        """Validate one raw JSON object and convert it to a SignatureEntry."""
        if not isinstance(item, dict):
            raise CatalogMalformedError("entry must be an object", index)

        for key in ('type', 'offset', 'signature'):
            if key not in item:
                raise CatalogMalformedError(f"missing field '{key}'", index)

        file_type = item['type']
        if not isinstance(file_type, str) or not file_type:
            raise CatalogMalformedError("'type' must be a non-empty string", index)

        offset = item['offset']
        if not _is_int(offset) or offset < 0:
            raise CatalogMalformedError("'offset' must be a non-negative integer", index)

        signature = item['signature']
        if not isinstance(signature, list) or not signature:
            raise CatalogMalformedError("'signature' must be a non-empty array of bytes", index)
        for value in signature:
            if not _is_int(value) or not 0 <= value <= 255:
                raise CatalogMalformedError(
                    f"'signature' values must be integers in 0-255 (got {value!r})", index
                )

        return SignatureEntry(type=file_type, offset=offset, signature=bytes(signature))


def load_trie(source: Optional[Path] = None, duplicate_policy: Optional[str] = None) -> MagicNumberTrie:
    """
    Load a catalog and build the trie used for every search in a run.

    Args:
        source: Catalog path; defaults to the configured catalog
        duplicate_policy: Overrides the configured duplicate policy

    Returns:
        Built MagicNumberTrie

    Raises:
        CatalogError: If the catalog is unreadable, malformed, or (under the
            'reject' policy) declares conflicting duplicates
    """
    config = get_config()
    source = source or config.catalog_path
    duplicate_policy = duplicate_policy or config.duplicate_policy

    entries = JsonCatalogLoader().load(source)
    logger.info("Loaded %d signature entries from %s", len(entries), source)

    return MagicNumberTrie.from_entries(entries, duplicate_policy=duplicate_policy)
