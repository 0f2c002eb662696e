"""Order-preserving deduplication of URL lists."""

from __future__ import annotations

from typing import Iterable, List


def dedupe(urls: Iterable[str]) -> List[str]:
    """Return `urls` without repeats, keeping first occurrences in order.

    Strings are compared exactly; no case folding or query sorting.
    """
    seen = set()
    uniq: List[str] = []
    for u in urls:
        if u not in seen:
            seen.add(u)
            uniq.append(u)
    return uniq
