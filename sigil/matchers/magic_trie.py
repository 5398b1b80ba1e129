"""
Magic-number trie.

Stores every catalog signature in a single byte-keyed prefix tree. A search
walks the tree once per distinct catalog offset, starting at that offset in
the file header, so the cost of a lookup depends on the header length and
the number of offsets, not on the number of signatures.
"""
import bisect
import logging
from typing import Dict, Iterable, List, Optional

from sigil.base import AbstractMatcher, SignatureEntry
from sigil.errors import DuplicateSignatureError

logger = logging.getLogger(__name__)


class TrieNode:
    """One byte position in the tree. `label` is set where a signature ends."""

    __slots__ = ('label', 'children')

    def __init__(self):
        self.label: Optional[str] = None
        self.children: Dict[int, 'TrieNode'] = {}


class MagicNumberTrie(AbstractMatcher):
    """
    Prefix tree of file signatures with offset-aware search.

    Build it once with from_entries() (or a catalog loader) and share it
    between threads afterwards: search() never mutates the tree.
    """

    def __init__(self, duplicate_policy: str = 'last-write-wins'):
        self.root = TrieNode()
        self.duplicate_policy = duplicate_policy
        self.max_offset_len = 0
        self.max_signature_len = 0
        self.entry_count = 0
        self._offsets: List[int] = []
        self._types = set()

    # ---------------------------------------------------------- construction

    @classmethod
    def from_entries(cls, entries: Iterable[SignatureEntry],
                     duplicate_policy: str = 'last-write-wins') -> 'MagicNumberTrie':
        """
        Build a trie from catalog entries.

        Args:
            entries: Parsed catalog rows
            duplicate_policy: 'last-write-wins' or 'reject'

        Returns:
            Fully built trie

        Raises:
            DuplicateSignatureError: Under the 'reject' policy, when two
                entries share signature bytes but not their type
        """
        trie = cls(duplicate_policy=duplicate_policy)
        for index, entry in enumerate(entries):
            trie.add_entry(entry, index=index)

        logger.info(
            "Trie built from %d entries: %d offsets, max buffer size %d bytes",
            trie.entry_count, len(trie._offsets), trie.max_buffer_size,
        )
        return trie

    def add_entry(self, entry: SignatureEntry, index: Optional[int] = None):
        """Insert one catalog entry and grow the offset/buffer bookkeeping."""
        previous = self._label_at(entry.signature)
        if previous is not None and previous != entry.type:
            if self.duplicate_policy == 'reject':
                raise DuplicateSignatureError(entry.signature, previous, entry.type, index)
            logger.warning(
                "Signature %s re-declared: '%s' replaces '%s'",
                entry.signature.hex(' '), entry.type, previous,
            )

        self.insert(entry.signature, entry.type)

        self.entry_count += 1
        if entry.offset not in self._offsets:
            bisect.insort(self._offsets, entry.offset)
        self._types.add(entry.type)
        if self.max_offset_len < entry.offset:
            self.max_offset_len = entry.offset
        if self.max_signature_len < len(entry.signature):
            self.max_signature_len = len(entry.signature)

    def insert(self, signature: bytes, label: str):
        """
        Insert a signature, creating missing nodes, and label its last node.

        Re-inserting an existing signature reuses its nodes; the label is
        replaced by the newest one.

        Raises:
            ValueError: If *signature* is empty
        """
        if not signature:
            raise ValueError("cannot insert an empty signature")

        node = self.root
        for byte in signature:
            child = node.children.get(byte)
            if child is None:
                child = TrieNode()
                node.children[byte] = child
            node = child
        node.label = label

    def _label_at(self, signature: bytes) -> Optional[str]:
        node = self.root
        for byte in signature:
            node = node.children.get(byte)
            if node is None:
                return None
        return node.label

    # ---------------------------------------------------------- properties

    @property
    def max_buffer_size(self) -> int:
        """Largest offset plus longest signature seen during construction."""
        return self.max_offset_len + self.max_signature_len

    @property
    def possible_offsets(self) -> List[int]:
        """Distinct catalog offsets, ascending."""
        return list(self._offsets)

    @property
    def types(self) -> List[str]:
        """Distinct type labels in the catalog, sorted."""
        return sorted(self._types)

    # ---------------------------------------------------------- search

    def search(self, buffer: bytes) -> Optional[str]:
        """
        Return the type of the longest signature found at the lowest offset.

        Offsets are tried in ascending order and the first one that yields
        a match wins. Offsets past the end of *buffer* are skipped.

        Args:
            buffer: Leading bytes of a file (may be shorter than
                max_buffer_size)

        Returns:
            Type label, or None when no signature matches
        """
        for offset in self._offsets:
            if len(buffer) < offset:
                continue

            file_type = self._match(memoryview(buffer)[offset:])
            if file_type is not None:
                return file_type

        return None

    def _match(self, header) -> Optional[str]:
        """Walk the tree along *header*; the deepest labelled node wins."""
        node = self.root
        best_match = None

        for byte in header:
            node = node.children.get(byte)
            if node is None:
                break
            if node.label is not None:
                best_match = node.label

        return best_match

    def __len__(self) -> int:
        return self.entry_count

    def __repr__(self) -> str:
        return (
            f"MagicNumberTrie(entries={self.entry_count}, "
            f"offsets={self.possible_offsets}, "
            f"max_buffer_size={self.max_buffer_size})"
        )
