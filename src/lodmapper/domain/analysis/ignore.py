"""Rules deciding which source keys skip the mapping step entirely."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(slots=True, frozen=True)
class IgnoreRules:
    """Prefix rules end with ``:``, everything else is an exact key."""

    prefixes: tuple[str, ...] = ()
    exact: frozenset[str] = frozenset()

    @classmethod
    def from_patterns(cls, patterns: Iterable[str]) -> IgnoreRules:
        prefixes: list[str] = []
        exact: set[str] = set()
        for raw in patterns:
            pattern = raw.strip()
            if not pattern:
                continue
            if pattern.endswith(":"):
                prefixes.append(pattern)
            else:
                exact.add(pattern)
        return cls(prefixes=tuple(prefixes), exact=frozenset(exact))

    def matches(self, key: str) -> bool:
        return key in self.exact or key.startswith(self.prefixes)
