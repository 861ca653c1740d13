"""
Search matching for the atlas.

A map matches when every whitespace-separated token of the query occurs,
case-insensitively, somewhere in its precomputed search text.  A blank query
matches everything.  Matching looks at the map's own search text only, never
at its neighbours.
"""

from typing import Iterable, Optional, Tuple

from atlas_core.types import MapEntity, MapName


def query_tokens(query: Optional[str]) -> Tuple[str, ...]:
    return tuple((query or "").lower().split())


def is_blank(query: Optional[str]) -> bool:
    return not query_tokens(query)


def matches(query: Optional[str], search_text: Optional[str]) -> bool:
    """
    Whether a map with *search_text* satisfies *query*.

    Args:
        query: Free-text query, may be empty or None.
        search_text: The map's precomputed search text.

    Returns:
        True for a blank query; otherwise True iff all tokens are substrings
        of the lowercased search text.
    """
    tokens = query_tokens(query)
    if not tokens:
        return True
    if search_text is None:
        return False
    haystack = str(search_text).lower()
    return all(token in haystack for token in tokens)


def matching_names(entities: Iterable[MapEntity], query: Optional[str]) -> Tuple[MapName, ...]:
    """Names of matching entities, in input order."""
    return tuple(e.name for e in entities if matches(query, e.search_text))
