"""Exact-match exclusion of top-level scan entries.

Exclusions are literal strings: either a bare entry name (``node_modules``)
or a full path (``/data/backups``). There is no glob or partial matching.
"""

import os
from collections.abc import Iterable

from disk_scan.core.errors import ExclusionError
from disk_scan.types.aliases import ExclusionSet
from disk_scan.types.models import RootEntry

_SEPARATORS: str = os.sep + (os.altsep or "")


def normalize_exclusion(value: str) -> str | None:
    """Normalize one caller-supplied exclusion string.

    Whitespace around the value and trailing path separators are removed.
    Values containing a path separator are treated as paths and made
    absolute against the current working directory, so that ``./data/c``
    and ``/abs/data/c/`` both compare equal to the entry's absolute path.

    Args:
        value: Raw exclusion string

    Returns:
        Normalized exclusion, or None if the value is empty

    Raises:
        ExclusionError: If the value contains a NUL character

    Examples:
        >>> normalize_exclusion(" node_modules ")
        'node_modules'
        >>> normalize_exclusion("c/")
        'c'
        >>> normalize_exclusion("")
    """
    if "\x00" in value:
        msg = f"Exclusion contains a NUL character: {value!r}"
        raise ExclusionError(msg)

    stripped = value.strip()
    if not stripped:
        return None

    # Keep a bare separator ("/") intact, it names the filesystem root
    trimmed = stripped.rstrip(_SEPARATORS) or stripped

    if any(separator in trimmed for separator in _SEPARATORS):
        return os.path.abspath(trimmed)

    return trimmed


def build_exclusion_set(values: Iterable[str]) -> ExclusionSet:
    """Build the immutable exclusion set shared by all filtering decisions.

    Args:
        values: Raw exclusion strings (names or paths)

    Returns:
        Frozen set of normalized exclusions

    Raises:
        ExclusionError: If any value is malformed
    """
    normalized = (normalize_exclusion(value) for value in values)
    return frozenset(value for value in normalized if value is not None)


def should_exclude(entry: RootEntry, exclusion_set: ExclusionSet) -> bool:
    """Check if a root entry should be skipped.

    An entry is excluded when the set is non-empty and contains either the
    entry's bare name or its full path string.

    Args:
        entry: Root entry to check
        exclusion_set: Normalized exclusion set

    Returns:
        True if the entry should be excluded, False otherwise

    Examples:
        >>> entry = RootEntry(path=Path("/data/c"), name="c")
        >>> should_exclude(entry, frozenset({"c"}))
        True
        >>> should_exclude(entry, frozenset({"/data/c"}))
        True
        >>> should_exclude(entry, frozenset({"cc"}))
        False
    """
    if not exclusion_set:
        return False

    return entry.name in exclusion_set or str(entry.path) in exclusion_set
