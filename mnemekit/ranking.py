"""Retrieval hits, source-aware re-ranking and score envelopes."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from mnemekit.metrics_types import ScoreEnvelope

# Multiplicative lift for hits that belong to an ingested source document.
SOURCE_BOOST = 0.05


@dataclass
class Hit:
    """A scored memory reference with a per-signal score breakdown."""

    memory: str
    score: float
    breakdown: list[tuple[str, float]] = field(default_factory=list)


def boost_sourced_hits(
    hits: Iterable[Hit], is_sourced: Callable[[str], bool]
) -> list[Hit]:
    """Lift sourced hits by :data:`SOURCE_BOOST` and re-sort by score, highest first.

    The sort is stable, so equal scores keep their original order.
    """
    boosted = [
        dataclasses.replace(h, score=h.score * (1.0 + SOURCE_BOOST))
        if is_sourced(h.memory)
        else dataclasses.replace(h)
        for h in hits
    ]
    boosted.sort(key=lambda h: h.score, reverse=True)
    return boosted


def min_max_score(hits: Sequence[Hit]) -> tuple[float, float]:
    """Return ``(min, max)`` of the hits' scores, or ``(0.0, 0.0)`` when empty."""
    if not hits:
        return 0.0, 0.0
    scores = [h.score for h in hits]
    return min(scores), max(scores)


def _rrf_range(hits: Sequence[Hit]) -> tuple[float, float]:
    values = [
        next(value for name, value in h.breakdown if name == "rrf")
        for h in hits
        if any(name == "rrf" for name, _ in h.breakdown)
    ]
    if not values:
        return 0.0, 0.0
    return min(values), max(values)


def compute_score_envelope(
    vector_hits: Sequence[Hit],
    bm25_hits: Sequence[Hit],
    hybrid_hits: Sequence[Hit],
) -> ScoreEnvelope:
    """Score envelope across the three signal lists.

    The RRF range comes from the ``"rrf"`` entry of each hybrid hit's breakdown.
    """
    vector_min, vector_max = min_max_score(vector_hits)
    bm25_min, bm25_max = min_max_score(bm25_hits)
    rrf_min, rrf_max = _rrf_range(hybrid_hits)
    return ScoreEnvelope(
        bm25_max=bm25_max,
        bm25_min=bm25_min,
        vector_max=vector_max,
        vector_min=vector_min,
        rrf_max=rrf_max,
        rrf_min=rrf_min,
    )