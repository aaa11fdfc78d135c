"""
Classification predicates for lazy sequences.

These decide whether a runtime value is treated as a nested sequence
(and expanded by ``flatten``) or as an atomic element.
"""

from collections.abc import Hashable, Iterable, Iterator
from typing import Any

STRING_TYPES = (str, bytes, bytearray)


def is_string_like(value: Any) -> bool:
    """Return True for text and byte strings"""
    return isinstance(value, STRING_TYPES)


def is_iterable(value: Any, flatten_strings: bool = False) -> bool:
    """
    Return True if ``value`` should be treated as a nested sequence.

    ``None`` and non-iterables are atomic. Strings are atomic unless
    ``flatten_strings`` is set, and even then only strings longer than one
    character are expanded (a one-character string iterates to itself).
    """
    if value is None or not isinstance(value, Iterable):
        return False
    if is_string_like(value):
        return flatten_strings and len(value) > 1
    return True


def is_iterator(value: Any) -> bool:
    """Return True for single-pass iterators (as opposed to re-iterable collections)"""
    return isinstance(value, Iterator)


def is_pair_like(value: Any) -> bool:
    """Return True for a 2-item list or tuple usable as a key/value pair"""
    return isinstance(value, (list, tuple)) and len(value) == 2


def is_hashable(value: Any) -> bool:
    if not isinstance(value, Hashable):
        return False
    # tuples report Hashable even when they hold lists
    try:
        hash(value)
    except TypeError:
        return False
    return True
