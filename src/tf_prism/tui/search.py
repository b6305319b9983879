"""Fuzzy resource search.

Every whitespace-separated query term must appear, in order but not
necessarily contiguously, in the resource's searchable text. Matching is
case-insensitive and an empty query matches everything.

Match positions are indices into the list being searched (the filtered and
sorted view), never raw resource indices.
"""

from __future__ import annotations

from collections.abc import Sequence

from tf_prism.core.plan import Resource


def query_terms(query: str) -> list[str]:
    return query.lower().split()


def is_subsequence(term: str, text: str) -> bool:
    """True when the characters of term appear in text in order."""
    it = iter(text)
    return all(ch in it for ch in term)


def fuzzy_match(text: str, query: str) -> bool:
    terms = query_terms(query)
    if not terms:
        return True
    lowered = text.lower()
    return all(is_subsequence(term, lowered) for term in terms)


def searchable_text(resource: Resource) -> str:
    return f"{resource.address} {resource.type} {resource.name}"


def find_matches(
    resources: Sequence[Resource], base: Sequence[int], query: str
) -> tuple[int, ...]:
    """Positions in base whose resource matches query."""
    return tuple(
        pos
        for pos, resource_idx in enumerate(base)
        if fuzzy_match(searchable_text(resources[resource_idx]), query)
    )


def highlight_spans(text: str, query: str) -> list[tuple[int, int]]:
    """Character spans of text to highlight for query.

    Each term claims the first contiguous occurrence when there is one,
    otherwise its greedy subsequence characters. Returned spans are
    (start, end) pairs, sorted and non-overlapping.
    """
    lowered = text.lower()
    marked = [False] * len(text)
    for term in query_terms(query):
        start = lowered.find(term)
        if start >= 0:
            for k in range(start, start + len(term)):
                marked[k] = True
            continue
        pos = 0
        hits: list[int] = []
        for ch in term:
            found = lowered.find(ch, pos)
            if found < 0:
                hits = []
                break
            hits.append(found)
            pos = found + 1
        for k in hits:
            marked[k] = True

    spans: list[tuple[int, int]] = []
    k = 0
    while k < len(marked):
        if not marked[k]:
            k += 1
            continue
        start = k
        while k < len(marked) and marked[k]:
            k += 1
        spans.append((start, k))
    return spans
