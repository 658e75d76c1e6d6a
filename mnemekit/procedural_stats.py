"""Aggregates for procedural-compiler telemetry derived from the event log."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass


@dataclass
class ProceduralTotals:
    """Counts of procedural events seen in the log."""

    outcomes_recorded: int = 0
    proposals: int = 0
    commits: int = 0
    rejections: int = 0


@dataclass
class ProceduralChainEvent:
    """One commit or rejection in the procedural timeline."""

    proposal_id: str
    artifact_id: str
    timestamp_ms: int
    kind: str  # "commit" or "reject"
    objective_delta: float = 0.0
    canaries_passed: int = 0
    canaries_total: int = 0
    judges_consulted: int = 0
    reason: str | None = None


def parse_rejection_tokens(reason: str) -> list[str]:
    """Collect the comma-separated tokens inside every ``[...]`` group.

    A reason such as ``c0=[baseline,canaries] c1=[judges]`` yields
    ``["baseline", "canaries", "judges"]``. Blank tokens and text outside
    brackets are ignored; an unclosed bracket contributes nothing.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_bracket = False
    for ch in reason:
        if ch == "[":
            in_bracket = True
            current = []
        elif ch == "]":
            in_bracket = False
            tokens.extend(
                t.strip() for t in "".join(current).split(",") if t.strip()
            )
            current = []
        elif in_bracket:
            current.append(ch)
    return tokens


def top_rejection_reasons(
    counts: Mapping[str, int], limit: int = 8
) -> list[tuple[str, int]]:
    """The most frequent reasons, highest count first, at most ``limit`` of them."""
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]


def win_rate_pct(totals: ProceduralTotals) -> float:
    """Commits as a percentage of proposals; 0 when nothing was proposed."""
    if totals.proposals == 0:
        return 0.0
    return totals.commits / totals.proposals * 100.0


def mean_objective_delta(deltas: Iterable[float]) -> float:
    """Mean of the committed objective deltas; 0 when there are none."""
    values = list(deltas)
    if not values:
        return 0.0
    return sum(values) / len(values)