"""Rolling, time-bucketed and lifetime aggregation of search telemetry."""

from __future__ import annotations

import threading
import time
from collections import deque

from mnemekit.buckets import (
    BUCKET_WIDTH_MS,
    LifetimeAccumulator,
    accumulate_into_bucket,
    bucket_start,
    empty_bucket,
    finalize_bucket,
)
from mnemekit.metrics_types import (
    AvgHits,
    FallbackDistribution,
    MetricsHistory,
    MetricsRollup,
    PhaseShare,
    RecentQuery,
    SearchMetrics,
    TimeBucket,
    latency_stats,
)

# How many recent searches the rolling window keeps.
WINDOW_CAPACITY = 200

# How many one-minute history buckets are kept (one hour).
HISTORY_CAPACITY = 60


def now_ms() -> int:
    """Wall-clock time in unix milliseconds; 0 if the clock is before the epoch."""
    return max(0, time.time_ns() // 1_000_000)


class MetricsCollector:
    """In-memory window of recent searches plus a bucketed history.

    Safe to use from several threads at once.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._window: deque[SearchMetrics] = deque(maxlen=WINDOW_CAPACITY)
        self._history: deque[TimeBucket] = deque(maxlen=HISTORY_CAPACITY)
        self._total = 0
        self._lifetime = LifetimeAccumulator()
        self.server_start_ms = now_ms()

    def record(self, m: SearchMetrics) -> None:
        """Add one completed search, dropping the oldest when the window is full."""
        with self._lock:
            self._push_to_history(m)
            self._lifetime.record(m)
            self._window.append(m)
            self._total += 1

    def _push_to_history(self, m: SearchMetrics) -> None:
        start = bucket_start(m.timestamp_ms)
        if self._history:
            last = self._history[-1]
            if last.start_ms == start:
                accumulate_into_bucket(last, m)
                return
            if start < last.start_ms:
                # Out-of-order timestamp: ignored.
                return
            # Fill gaps so the series has no missing x-values.
            for gap_start in range(last.start_ms + BUCKET_WIDTH_MS, start, BUCKET_WIDTH_MS):
                self._history.append(empty_bucket(gap_start))
        fresh = empty_bucket(start)
        accumulate_into_bucket(fresh, m)
        self._history.append(fresh)

    def rollup(self) -> MetricsRollup:
        """Aggregate over the current window."""
        with self._lock:
            window = list(self._window)
            total = self._total
        n = len(window)
        if n == 0:
            return MetricsRollup(
                window_size=WINDOW_CAPACITY, queries_in_window=0, queries_total=total
            )

        latency = latency_stats(m.total_ms for m in window)

        sums = {
            "snapshot_replay": sum(m.phases.snapshot_replay_ms for m in window),
            "embed": sum(m.phases.embed_query_ms for m in window),
            "vector": sum(m.phases.vector_search_ms for m in window),
            "bm25": sum(m.phases.bm25_search_ms for m in window),
            "hybrid_fuse": sum(m.phases.hybrid_fuse_ms for m in window),
            "source_boost": sum(m.phases.source_boost_ms for m in window),
            "synthesize": sum(m.phases.synthesize_ms for m in window),
        }
        phase_total = max(1, sum(sums.values()))
        share = PhaseShare(
            **{name: min(100, value * 100 // phase_total) for name, value in sums.items()}
        )

        tiers = FallbackDistribution()
        for m in window:
            tiers.count(m.retrieval.bm25_tier)
        boost_changes = sum(1 for m in window if m.retrieval.source_boost_changed_top)
        avg_hits = AvgHits(
            vector=sum(m.retrieval.vector_hits for m in window) / n,
            bm25=sum(m.retrieval.bm25_hits for m in window) / n,
            hybrid=sum(m.retrieval.hybrid_hits for m in window) / n,
        )

        return MetricsRollup(
            window_size=WINDOW_CAPACITY,
            queries_in_window=n,
            queries_total=total,
            latency_ms=latency,
            phase_share_pct=share,
            fallback_distribution=tiers,
            source_boost_change_rate_pct=boost_changes * 100 // n,
            avg_hits=avg_hits,
        )

    def history(self) -> MetricsHistory:
        """Bucketed history (oldest first), lifetime stats and recent queries (newest first)."""
        now = now_ms()
        with self._lock:
            buckets = [finalize_bucket(b) for b in self._history]
            lifetime = self._lifetime.stats()
            recent = [
                RecentQuery(
                    timestamp_ms=m.timestamp_ms,
                    query_text=m.query_text,
                    total_ms=m.total_ms,
                    bm25_tier=m.retrieval.bm25_tier,
                    hybrid_hits=m.retrieval.hybrid_hits,
                    boost_flipped_top=m.retrieval.source_boost_changed_top,
                )
                for m in reversed(self._window)
            ]
            total = self._total
        return MetricsHistory(
            server_start_ms=self.server_start_ms,
            server_uptime_ms=max(0, now - self.server_start_ms),
            queries_total=total,
            buckets=buckets,
            bucket_width_ms=BUCKET_WIDTH_MS,
            lifetime=lifetime,
            recent_queries=recent,
        )