"""Island discovery over rendered markup."""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable, Set

from ..models import UsedComponentSet

ISLAND_ATTRIBUTE = "data-island"

# Markup comes from our own renderer, so the attribute is always double-quoted.
_ISLAND_PATTERN = re.compile(r'(?<![\w-])data-island="([^"]+)"')


def count(markup: str) -> Counter:
    """Return how many island markers reference each component on one page."""
    return Counter(match.group(1) for match in _ISLAND_PATTERN.finditer(markup))


def discover(markup: str) -> Set[str]:
    """Return the distinct component identifiers referenced by a page."""
    return set(count(markup))


def combine(pages: Iterable[str]) -> UsedComponentSet:
    """Merge discoveries across pages; counts are pages referencing each id."""
    used = UsedComponentSet()
    for markup in pages:
        for identifier in discover(markup):
            used.add(identifier)
    return used


__all__ = ["ISLAND_ATTRIBUTE", "combine", "count", "discover"]
