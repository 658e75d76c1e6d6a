"""Time-bucketed and lifetime accumulation of search telemetry."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from mnemekit.metrics_types import (
    FallbackDistribution,
    LifetimeStats,
    SearchMetrics,
    TimeBucket,
    latency_stats,
    percentile,
)

# Width of each history bucket: one minute.
BUCKET_WIDTH_MS = 60_000

# Latency samples kept per bucket for percentile computation.
BUCKET_SAMPLE_CAP = 1000

# Latency samples kept over the whole lifetime of the collector.
LIFETIME_SAMPLE_CAP = 10_000

_RESERVOIR_MULTIPLIER = 2_654_435_761
_WORD_MASK = (1 << 64) - 1


def bucket_start(timestamp_ms: int) -> int:
    """Start of the bucket containing ``timestamp_ms``."""
    return (timestamp_ms // BUCKET_WIDTH_MS) * BUCKET_WIDTH_MS


def empty_bucket(start_ms: int) -> TimeBucket:
    """A bucket with no queries starting at ``start_ms``."""
    return TimeBucket(start_ms=start_ms, width_ms=BUCKET_WIDTH_MS)


def accumulate_into_bucket(bucket: TimeBucket, m: SearchMetrics) -> None:
    """Add one search to a bucket.

    The mean fields hold running sums until :func:`finalize_bucket` divides
    them by the query count.
    """
    bucket.query_count += 1
    if len(bucket.latency_samples) < BUCKET_SAMPLE_CAP:
        bucket.latency_samples.append(m.total_ms)
    bucket.mean_latency_ms += float(m.total_ms)

    phases = bucket.phase_means_ms
    phases.snapshot_replay += float(m.phases.snapshot_replay_ms)
    phases.embed += float(m.phases.embed_query_ms)
    phases.vector += float(m.phases.vector_search_ms)
    phases.bm25 += float(m.phases.bm25_search_ms)
    phases.hybrid_fuse += float(m.phases.hybrid_fuse_ms)
    phases.source_boost += float(m.phases.source_boost_ms)
    phases.synthesize += float(m.phases.synthesize_ms)

    bucket.fallback_distribution.count(m.retrieval.bm25_tier)
    if m.retrieval.source_boost_changed_top:
        bucket.boost_flips += 1

    bucket.mean_hits.vector += float(m.retrieval.vector_hits)
    bucket.mean_hits.bm25 += float(m.retrieval.bm25_hits)
    bucket.mean_hits.hybrid += float(m.retrieval.hybrid_hits)

    bucket.mean_scores.bm25_max += m.scores.bm25_max
    bucket.mean_scores.vector_max += m.scores.vector_max
    bucket.mean_scores.rrf_max += m.scores.rrf_max


def finalize_bucket(bucket: TimeBucket) -> TimeBucket:
    """Return a copy with running sums turned into means and percentiles filled in.

    The input bucket is left untouched; the copy carries no latency samples.
    """
    out = copy.deepcopy(bucket)
    out.latency_samples = []
    if bucket.query_count == 0:
        return out

    n = float(bucket.query_count)
    out.mean_latency_ms /= n
    phases = out.phase_means_ms
    phases.snapshot_replay /= n
    phases.embed /= n
    phases.vector /= n
    phases.bm25 /= n
    phases.hybrid_fuse /= n
    phases.source_boost /= n
    phases.synthesize /= n
    out.mean_hits.vector /= n
    out.mean_hits.bm25 /= n
    out.mean_hits.hybrid /= n
    out.mean_scores.bm25_max /= n
    out.mean_scores.vector_max /= n
    out.mean_scores.rrf_max /= n

    if bucket.latency_samples:
        out.latency_ms = latency_stats(bucket.latency_samples)
    return out


@dataclass
class LifetimeAccumulator:
    """Aggregates that cover every query since start-up."""

    queries: int = 0
    latency_sum_ms: int = 0
    latency_samples: list[int] = field(default_factory=list)
    fallback: FallbackDistribution = field(default_factory=FallbackDistribution)
    boost_flips: int = 0

    def record(self, m: SearchMetrics) -> None:
        """Fold one search into the lifetime totals."""
        self.queries += 1
        self.latency_sum_ms += m.total_ms
        if len(self.latency_samples) < LIFETIME_SAMPLE_CAP:
            self.latency_samples.append(m.total_ms)
        else:
            # Overwrite a pseudo-random slot so old samples slowly age out.
            slot = ((m.timestamp_ms * _RESERVOIR_MULTIPLIER) & _WORD_MASK) % LIFETIME_SAMPLE_CAP
            self.latency_samples[slot] = m.total_ms
        self.fallback.count(m.retrieval.bm25_tier)
        if m.retrieval.source_boost_changed_top:
            self.boost_flips += 1

    def stats(self) -> LifetimeStats:
        """Summarise the lifetime totals; all zeros before the first query."""
        if self.queries == 0:
            return LifetimeStats()
        samples = sorted(self.latency_samples)
        return LifetimeStats(
            queries=self.queries,
            mean_latency_ms=self.latency_sum_ms / self.queries,
            p50_latency_ms=percentile(samples, 50),
            p95_latency_ms=percentile(samples, 95),
            max_latency_ms=samples[-1] if samples else 0,
            fallback_distribution=copy.copy(self.fallback),
            boost_flip_rate_pct=min(100, self.boost_flips * 100 // self.queries),
        )