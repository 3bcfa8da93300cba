"""Environment snapshot: one consistent read of the environment per load.

INVARIANT: The source is read exactly once, at construction. Later
mutations of ``os.environ`` are invisible to an existing snapshot.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping


class EnvironmentSnapshot(Mapping[str, str]):
    """Immutable, optionally case-folded copy of an environment source.

    With ``case_insensitive=True`` every key is stored upper-cased. When
    several source keys fold to the same name (``app_a`` and ``APP_A``),
    the exact upper-case key wins and the name is reported by
    :attr:`ambiguous_keys`.

    Usage::

        snapshot = EnvironmentSnapshot({"app_port": "8080"})
        snapshot.lookup("APP_PORT")  # "8080"
    """

    def __init__(
        self,
        source: Mapping[str, str] | None = None,
        *,
        case_insensitive: bool = True,
    ) -> None:
        entries = dict(os.environ if source is None else source)
        self._case_insensitive = case_insensitive
        self._ambiguous: set[str] = set()
        if not case_insensitive:
            self._data = entries
            return

        folded: dict[str, str] = {}
        exact: set[str] = set()
        for key, value in entries.items():
            upper = key.upper()
            if upper in folded:
                self._ambiguous.add(upper)
                if upper in exact or key != upper:
                    continue
            folded[upper] = value
            if key == upper:
                exact.add(upper)
        self._data = folded

    @property
    def case_insensitive(self) -> bool:
        return self._case_insensitive

    @property
    def ambiguous_keys(self) -> frozenset[str]:
        """Upper-case names that more than one source key folded into."""
        return frozenset(self._ambiguous)

    def lookup(self, key: str) -> str | None:
        """Return the value for *key*, or None when absent."""
        if self._case_insensitive:
            key = key.upper()
        return self._data.get(key)

    def __getitem__(self, key: str) -> str:
        value = self.lookup(key)
        if value is None:
            raise KeyError(key)
        return value

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)
