"""Record types for per-query search telemetry and its aggregates."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

TIER_STRICT_AND = "strict_and"
TIER_FUZZY_AND = "fuzzy_and"
TIER_OR_MERGE = "or_merge"
TIER_EMPTY = "empty"


def percentile(samples: Iterable[int], pct: int) -> int:
    """Nearest-rank style percentile: ``sorted[min(n * pct // 100, n - 1)]``.

    Returns 0 for an empty sample set.
    """
    ordered = sorted(samples)
    n = len(ordered)
    if n == 0:
        return 0
    return ordered[min(n * pct // 100, n - 1)]


@dataclass
class LatencyStats:
    """p50 / p95 / max latency in milliseconds."""

    p50: int = 0
    p95: int = 0
    max: int = 0


def latency_stats(samples: Iterable[int]) -> LatencyStats:
    """Compute p50, p95 and max over the samples; zeros when there are none."""
    ordered = sorted(samples)
    if not ordered:
        return LatencyStats()
    return LatencyStats(
        p50=percentile(ordered, 50),
        p95=percentile(ordered, 95),
        max=ordered[-1],
    )


@dataclass
class PhaseTimings:
    """Milliseconds spent in each phase of one search."""

    snapshot_replay_ms: int = 0
    embed_query_ms: int = 0
    vector_search_ms: int = 0
    bm25_search_ms: int = 0
    hybrid_fuse_ms: int = 0
    source_boost_ms: int = 0
    synthesize_ms: int = 0


@dataclass
class RetrievalCounts:
    """How many hits each signal produced, and which BM25 tier fired."""

    vector_hits: int = 0
    bm25_hits: int = 0
    hybrid_hits: int = 0
    bm25_tier: str = ""
    source_boost_changed_top: bool = False
    source_boost_lifts: int = 0


@dataclass
class ScoreEnvelope:
    """Minimum and maximum score seen per signal."""

    bm25_max: float = 0.0
    bm25_min: float = 0.0
    vector_max: float = 0.0
    vector_min: float = 0.0
    rrf_max: float = 0.0
    rrf_min: float = 0.0


@dataclass
class SearchMetrics:
    """Telemetry for one completed search."""

    timestamp_ms: int
    query_text: str
    total_ms: int
    phases: PhaseTimings = field(default_factory=PhaseTimings)
    retrieval: RetrievalCounts = field(default_factory=RetrievalCounts)
    scores: ScoreEnvelope = field(default_factory=ScoreEnvelope)


@dataclass
class PhaseShare:
    """Per-phase share of total time, in whole percent."""

    snapshot_replay: int = 0
    embed: int = 0
    vector: int = 0
    bm25: int = 0
    hybrid_fuse: int = 0
    source_boost: int = 0
    synthesize: int = 0


@dataclass
class FallbackDistribution:
    """How often each BM25 fallback tier fired."""

    strict_and: int = 0
    fuzzy_and: int = 0
    or_merge: int = 0
    empty: int = 0

    def count(self, tier: str) -> None:
        """Tally one occurrence of ``tier``; unknown tiers count as ``empty``."""
        if tier == TIER_STRICT_AND:
            self.strict_and += 1
        elif tier == TIER_FUZZY_AND:
            self.fuzzy_and += 1
        elif tier == TIER_OR_MERGE:
            self.or_merge += 1
        else:
            self.empty += 1


@dataclass
class AvgHits:
    """Average number of hits per signal."""

    vector: float = 0.0
    bm25: float = 0.0
    hybrid: float = 0.0


@dataclass
class MetricsRollup:
    """Aggregate over the most recent searches."""

    window_size: int
    queries_in_window: int
    queries_total: int
    latency_ms: LatencyStats = field(default_factory=LatencyStats)
    phase_share_pct: PhaseShare = field(default_factory=PhaseShare)
    fallback_distribution: FallbackDistribution = field(
        default_factory=FallbackDistribution
    )
    source_boost_change_rate_pct: int = 0
    avg_hits: AvgHits = field(default_factory=AvgHits)


@dataclass
class PhaseMeansMs:
    """Mean milliseconds per phase within a bucket."""

    snapshot_replay: float = 0.0
    embed: float = 0.0
    vector: float = 0.0
    bm25: float = 0.0
    hybrid_fuse: float = 0.0
    source_boost: float = 0.0
    synthesize: float = 0.0


@dataclass
class MeanScores:
    """Mean of the per-query maximum scores within a bucket."""

    bm25_max: float = 0.0
    vector_max: float = 0.0
    rrf_max: float = 0.0


@dataclass
class TimeBucket:
    """One fixed-width slice of the metrics history.

    ``latency_samples`` is internal bookkeeping for percentiles and is not
    part of the published shape.
    """

    start_ms: int
    width_ms: int
    query_count: int = 0
    latency_ms: LatencyStats = field(default_factory=LatencyStats)
    mean_latency_ms: float = 0.0
    phase_means_ms: PhaseMeansMs = field(default_factory=PhaseMeansMs)
    fallback_distribution: FallbackDistribution = field(
        default_factory=FallbackDistribution
    )
    boost_flips: int = 0
    mean_hits: AvgHits = field(default_factory=AvgHits)
    mean_scores: MeanScores = field(default_factory=MeanScores)
    latency_samples: list[int] = field(default_factory=list, repr=False, compare=False)


@dataclass
class LifetimeStats:
    """Summary over every query since start-up."""

    queries: int = 0
    mean_latency_ms: float = 0.0
    p50_latency_ms: int = 0
    p95_latency_ms: int = 0
    max_latency_ms: int = 0
    fallback_distribution: FallbackDistribution = field(
        default_factory=FallbackDistribution
    )
    boost_flip_rate_pct: int = 0


@dataclass
class RecentQuery:
    """One row of the recent-queries table."""

    timestamp_ms: int
    query_text: str
    total_ms: int
    bm25_tier: str
    hybrid_hits: int
    boost_flipped_top: bool


@dataclass
class MetricsHistory:
    """Time-bucketed history, lifetime summary and recent queries."""

    server_start_ms: int
    server_uptime_ms: int
    queries_total: int
    buckets: list[TimeBucket]
    bucket_width_ms: int
    lifetime: LifetimeStats
    recent_queries: list[RecentQuery]