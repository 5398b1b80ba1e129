"""
Declared-vs-actual type comparison policies.

Catalog labels are often compound ("JPEG JPG", "ZIP DOCX XLSX") while
extensions are short, so the default policy accepts a label that merely
contains the declared type.
"""
import re

from sigil.base import AbstractTypeComparator

_TOKEN_SPLIT = re.compile(r'[\s,/\-]+')


class SubstringComparator(AbstractTypeComparator):
    """Correct when the label contains the declared type (case-sensitive)."""

    name = 'substring'

    def matches(self, declared_type: str, actual_type: str) -> bool:
        return declared_type in actual_type


class ExactComparator(AbstractTypeComparator):
    """Correct only when the label equals the declared type."""

    name = 'exact'

    def matches(self, declared_type: str, actual_type: str) -> bool:
        return declared_type == actual_type


class TokenComparator(AbstractTypeComparator):
    """
    Correct when the declared type is one of the label's words.

    Words are split on whitespace, commas, slashes and hyphens, so
    "ZIP-BASED OOXML" accepts "ZIP" and "OOXML" but not "BASE".
    """

    name = 'token'

    def matches(self, declared_type: str, actual_type: str) -> bool:
        return declared_type in _TOKEN_SPLIT.split(actual_type)


COMPARATORS = {
    SubstringComparator.name: SubstringComparator,
    ExactComparator.name: ExactComparator,
    TokenComparator.name: TokenComparator,
}


def get_comparator(name: str) -> AbstractTypeComparator:
    """
    Instantiate the comparison policy called *name*.

    Raises:
        ValueError: If no policy has that name
    """
    try:
        return COMPARATORS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown type match policy '{name}' (expected one of {', '.join(COMPARATORS)})"
        ) from None
