"""Aggregates for memory-evolution telemetry derived from the event log."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

T = TypeVar("T")


@dataclass
class EvolveTotals:
    """Counts of evolution-related events seen in the log."""

    memories_written: int = 0
    notes_enriched: int = 0
    links_updated: int = 0
    links_total: int = 0
    evolutions_committed: int = 0
    invalidated_by_evolution: int = 0
    tag_additions: int = 0
    keyword_additions: int = 0


@dataclass
class EvolveChainEvent:
    """One committed evolution from a parent memory to its successor."""

    from_id: str
    to_id: str
    timestamp_ms: int
    tags_added: list[str] = field(default_factory=list)
    keywords_added: list[str] = field(default_factory=list)


@dataclass
class EvolveMemoryState:
    """Chain depth and last evolution time of one memory."""

    memory_id: str
    chain_depth: int
    last_evolved_at_ms: int


def is_evolution_invalidation(reason: str) -> bool:
    """True when an invalidation reason mentions evolution."""
    return "evolution" in reason


def order_worker_state(states: Iterable[EvolveMemoryState]) -> list[EvolveMemoryState]:
    """Most recently evolved first; ties keep their original order."""
    return sorted(states, key=lambda s: s.last_evolved_at_ms, reverse=True)


def max_chain_depth(states: Iterable[EvolveMemoryState]) -> int:
    """Deepest chain among the states, or 0 when there are none."""
    return max((s.chain_depth for s in states), default=0)


def recent_events(events: Sequence[T], limit: int = 20) -> list[T]:
    """The newest ``limit`` events, newest first, from an oldest-first sequence."""
    if limit <= 0:
        return []
    return list(reversed(events[-limit:]))