"""Team name normalization and cross-source matching.

Providers disagree on club names ("FK Crvena Zvezda" vs "Crvena Zvezda",
"Olympiakos Piraeus" vs "Olympiacos"). Names are compared in a
normalized form; the coefficient join additionally accepts configured
aliases and an unambiguous whole-word containment match.
"""

import re
import unicodedata
from typing import Generic, Iterable, Optional, TypeVar

T = TypeVar('T')

_NON_ALNUM = re.compile(r'[^a-z0-9]+', re.IGNORECASE)


def normalize_name(value: object) -> str:
    """
    Normalize a team name for matching.

    Decomposes the string and drops combining marks, collapses every
    run of non-alphanumeric characters to one space, trims and lowercases.

    Example:
        >>> normalize_name('Beşiktaş J.K.')
        'besiktas j k'
    """
    if value is None:
        return ''
    decomposed = unicodedata.normalize('NFKD', str(value))
    stripped = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub(' ', stripped).strip().lower()


def names_match(left: object, right: object) -> bool:
    """Exact match on normalized names; empty names never match."""
    a = normalize_name(left)
    return bool(a) and a == normalize_name(right)


class TeamNameIndex(Generic[T]):
    """Lookup of records by provider id first, then by normalized name."""

    def __init__(self):
        self._by_id: dict[int, T] = {}
        self._by_name: dict[str, T] = {}

    def add(self, record: T, team_id: Optional[int], name: Optional[str]) -> None:
        if team_id is not None:
            self._by_id.setdefault(team_id, record)
        key = normalize_name(name)
        if key:
            self._by_name.setdefault(key, record)

    def find(self, team_id: Optional[int], name: Optional[str]) -> Optional[T]:
        if team_id is not None and team_id in self._by_id:
            return self._by_id[team_id]
        key = normalize_name(name)
        return self._by_name.get(key) if key else None


class CoefficientMatcher(Generic[T]):
    """
    Match team names against coefficient-table names.

    Order of attempts:
    1. exact normalized name
    2. configured aliases of the team name
    3. whole-word containment in either direction, only if exactly one
       candidate qualifies
    """

    def __init__(self, entries: Iterable[tuple[Optional[str], T]], aliases: Optional[dict[str, list[str]]] = None):
        self._entries: list[tuple[str, T]] = []
        self._by_name: dict[str, T] = {}
        for name, record in entries:
            key = normalize_name(name)
            if not key:
                continue
            self._entries.append((key, record))
            self._by_name.setdefault(key, record)

        self._aliases: dict[str, list[str]] = {}
        for canonical, alternates in (aliases or {}).items():
            names = [normalize_name(canonical)] + [normalize_name(alt) for alt in alternates]
            names = [n for n in names if n]
            # Every member of an alias group points at the whole group
            for n in names:
                self._aliases.setdefault(n, [])
                self._aliases[n].extend(other for other in names if other != n and other not in self._aliases[n])

    def match(self, name: Optional[str]) -> Optional[T]:
        key = normalize_name(name)
        if not key:
            return None

        if key in self._by_name:
            return self._by_name[key]

        for alias in self._aliases.get(key, []):
            if alias in self._by_name:
                return self._by_name[alias]

        padded = f' {key} '
        candidates = [
            record
            for entry_key, record in self._entries
            if padded in f' {entry_key} ' or f' {entry_key} ' in padded
        ]
        if len(candidates) == 1:
            return candidates[0]
        return None
