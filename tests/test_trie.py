"""
Tests for MagicNumberTrie.

Tries are built from in-memory SignatureEntry lists; nothing touches disk.
"""
import logging
import threading

import pytest

from sigil.base import SignatureEntry
from sigil.errors import DuplicateSignatureError
from sigil.matchers.magic_trie import MagicNumberTrie


PNG = SignatureEntry(type="PNG", offset=0, signature=bytes([0x89, 0x50, 0x4E, 0x47]))


def _trie(*entries, policy='last-write-wins'):
    return MagicNumberTrie.from_entries(entries, duplicate_policy=policy)


# ------------------------------------------------------------ round trip

def test_png_header_is_found():
    trie = _trie(PNG)
    assert trie.search(bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A])) == "PNG"


def test_unrelated_bytes_do_not_match():
    trie = _trie(PNG)
    assert trie.search(bytes([0x00, 0x00])) is None


def test_truncated_signature_does_not_match():
    trie = _trie(PNG)
    assert trie.search(bytes([0x89, 0x50, 0x4E])) is None


def test_empty_buffer_does_not_match():
    assert _trie(PNG).search(b"") is None


def test_empty_trie_never_matches():
    trie = MagicNumberTrie.from_entries([])
    assert trie.search(b"\x89PNG") is None
    assert trie.max_buffer_size == 0
    assert trie.possible_offsets == []


# ------------------------------------------------------------ longest match

def test_longest_prefix_wins():
    trie = _trie(
        SignatureEntry("AR", 0, b"!<arch>\n"),
        SignatureEntry("DEB", 0, b"!<arch>\ndebian-binary"),
    )
    assert trie.search(b"!<arch>\ndebian-binary   ") == "DEB"


def test_shorter_prefix_used_when_longer_diverges():
    trie = _trie(
        SignatureEntry("AR", 0, b"!<arch>\n"),
        SignatureEntry("DEB", 0, b"!<arch>\ndebian-binary"),
    )
    assert trie.search(b"!<arch>\ndebXXX") == "AR"


def test_longest_match_independent_of_insertion_order():
    trie = _trie(
        SignatureEntry("DEB", 0, b"!<arch>\ndebian-binary"),
        SignatureEntry("AR", 0, b"!<arch>\n"),
    )
    assert trie.search(b"!<arch>\ndebian-binary") == "DEB"


# ------------------------------------------------------------ offsets

def test_lower_offset_takes_precedence():
    trie = _trie(
        SignatureEntry("ZERO", 0, b"ABCD"),
        SignatureEntry("FOUR", 4, b"EFGH"),
    )
    assert trie.search(b"ABCDEFGH") == "ZERO"


def test_signature_found_at_its_offset():
    trie = _trie(
        SignatureEntry("PNG", 0, b"\x89PNG"),
        SignatureEntry("MP4", 4, b"ftyp"),
    )
    assert trie.search(b"\x00\x00\x00\x18ftypisom") == "MP4"


def test_buffer_shorter_than_every_offset_never_matches():
    trie = _trie(
        SignatureEntry("TAR", 257, b"ustar"),
        SignatureEntry("ISO", 32769, b"CD001"),
    )
    assert trie.search(b"ustar") is None
    assert trie.search(b"\x00" * 200) is None


def test_offsets_sorted_and_unique():
    trie = _trie(
        SignatureEntry("B", 8, b"b"),
        SignatureEntry("A", 0, b"a"),
        SignatureEntry("C", 8, b"c"),
        SignatureEntry("D", 2, b"d"),
    )
    assert trie.possible_offsets == [0, 2, 8]


# ------------------------------------------------------------ buffer sizing

def test_max_buffer_size_is_sum_of_maxima():
    trie = _trie(
        SignatureEntry("X", 2, b"\x01\x02\x03\x04"),
        SignatureEntry("Y", 0, b"\x05\x06\x07"),
    )
    assert trie.max_buffer_size == 6


def test_max_buffer_size_covers_every_entry():
    entries = [
        SignatureEntry("A", 10, b"\x01"),
        SignatureEntry("B", 0, b"\x02" * 12),
        SignatureEntry("C", 3, b"\x03" * 5),
    ]
    trie = _trie(*entries)
    assert all(trie.max_buffer_size >= e.offset + len(e.signature) for e in entries)
    assert trie.max_buffer_size == 22


# ------------------------------------------------------------ insertion

def test_repeated_insert_is_idempotent():
    once = _trie(PNG)
    twice = _trie(PNG, PNG)
    for buffer in (b"\x89PNG\r\n", b"\x89PN", b"", b"\x00\x89PNG"):
        assert once.search(buffer) == twice.search(buffer)
    assert once.max_buffer_size == twice.max_buffer_size


def test_insert_rejects_empty_signature():
    with pytest.raises(ValueError):
        MagicNumberTrie().insert(b"", "EMPTY")


def test_conflicting_duplicate_last_write_wins():
    trie = _trie(
        SignatureEntry("WAV", 0, b"RIFF"),
        SignatureEntry("AVI", 0, b"RIFF"),
    )
    assert trie.search(b"RIFF\x00\x00") == "AVI"


def test_conflicting_duplicate_logs_both_types(caplog):
    with caplog.at_level(logging.WARNING, logger="sigil.matchers.magic_trie"):
        _trie(
            SignatureEntry("WAV", 0, b"RIFF"),
            SignatureEntry("AVI", 0, b"RIFF"),
        )

    assert len(caplog.records) == 1
    message = caplog.records[0].getMessage()
    assert "'AVI' replaces 'WAV'" in message
    assert "52 49 46 46" in message


def test_identical_duplicate_is_silent(caplog):
    with caplog.at_level(logging.WARNING, logger="sigil.matchers.magic_trie"):
        _trie(PNG, PNG)
    assert caplog.records == []


def test_conflicting_duplicate_rejected_under_reject_policy():
    with pytest.raises(DuplicateSignatureError) as exc:
        _trie(
            SignatureEntry("WAV", 0, b"RIFF"),
            SignatureEntry("AVI", 0, b"RIFF"),
            policy='reject',
        )
    assert exc.value.first_type == "WAV"
    assert exc.value.second_type == "AVI"
    assert exc.value.index == 1


def test_identical_duplicate_allowed_under_reject_policy():
    trie = _trie(PNG, PNG, policy='reject')
    assert trie.search(b"\x89PNG") == "PNG"


def test_types_and_len():
    trie = _trie(PNG, SignatureEntry("GIF", 0, b"GIF89a"), PNG)
    assert trie.types == ["GIF", "PNG"]
    assert len(trie) == 3


# ------------------------------------------------------------ concurrency

def test_concurrent_searches_agree():
    trie = _trie(
        PNG,
        SignatureEntry("GIF", 0, b"GIF89a"),
        SignatureEntry("MP4", 4, b"ftyp"),
    )
    buffers = [b"\x89PNG....", b"GIF89a..", b"\x00\x00\x00\x18ftyp", b"nothing!"]
    expected = [trie.search(b) for b in buffers]
    failures = []

    def worker():
        for _ in range(200):
            if [trie.search(b) for b in buffers] != expected:
                failures.append(1)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not failures
