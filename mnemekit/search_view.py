"""Request parsing and result shaping for the search endpoint."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from mnemekit.ranking import Hit

DEFAULT_K = 5
UNKNOWN_MEMORY = "<unknown memory>"

_UNSIGNED = re.compile(r"\+?[0-9]+")


@dataclass(frozen=True)
class SearchParams:
    """A validated search request; ``k`` is always at least 1."""

    q: str
    k: int = DEFAULT_K


@dataclass
class MemoryRow:
    """What the search view needs to know about one memory."""

    content: str
    tags: list[str] = field(default_factory=list)
    invalidated: bool = False
    source: str | None = None
    position: int | None = None


@dataclass
class HitView:
    """A hit resolved against the memory table for display."""

    memory_id: str
    score: float
    breakdown: list[tuple[str, float]]
    content: str
    tags: list[str]
    is_invalidated: bool
    source_id: str | None
    source_title: str | None
    position: int | None


def parse_search_params(params: Mapping[str, str]) -> SearchParams:
    """Validate raw query parameters.

    Raises :class:`ValueError` when ``q`` is missing or blank, or when ``k``
    is not a non-negative integer. A ``k`` of 0 is raised to 1.
    """
    q = params.get("q")
    if q is None or not q.strip():
        raise ValueError("query 'q' is required")
    raw_k = params.get("k")
    if raw_k is None:
        k = DEFAULT_K
    elif _UNSIGNED.fullmatch(raw_k):
        k = int(raw_k)
    else:
        raise ValueError(f"invalid value for 'k': {raw_k!r}")
    return SearchParams(q=q, k=max(1, k))


def short_id(identifier: str) -> str:
    """The last eight characters of an identifier."""
    return identifier[-8:]


def truncate_chars(text: str, limit: int) -> str:
    """The first ``limit`` characters of ``text``."""
    return text[: max(0, limit)]


def to_hit_view(
    hit: Hit, rows: Mapping[str, MemoryRow], source_titles: Mapping[str, str]
) -> HitView:
    """Join a hit with its memory row and source title."""
    row = rows.get(hit.memory)
    if row is None:
        content, tags, invalidated, source, position = UNKNOWN_MEMORY, [], False, None, None
    else:
        content = row.content
        tags = list(row.tags)
        invalidated = row.invalidated
        source = row.source
        position = row.position
    return HitView(
        memory_id=hit.memory,
        score=hit.score,
        breakdown=list(hit.breakdown),
        content=content,
        tags=tags,
        is_invalidated=invalidated,
        source_id=source,
        source_title=source_titles.get(source) if source is not None else None,
        position=position,
    )