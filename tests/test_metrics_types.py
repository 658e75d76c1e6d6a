import pytest

from mnemekit.metrics_types import (
    FallbackDistribution,
    LatencyStats,
    SearchMetrics,
    TimeBucket,
    latency_stats,
    percentile,
)


def test_percentile_matches_rollup_example():
    samples = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]
    assert percentile(samples, 50) == 6
    assert percentile(samples, 95) == 10


def test_percentile_sorts_input():
    assert percentile([10, 3, 7, 1, 9, 2, 8, 4, 6, 5], 50) == 6


def test_percentile_empty_is_zero():
    assert percentile([], 50) == 0


def test_percentile_single_sample():
    assert percentile([42], 95) == 42


def test_latency_stats_example():
    stats = latency_stats([1, 2, 3, 4, 5, 6, 7, 8, 9, 10])
    assert stats == LatencyStats(p50=6, p95=10, max=10)


def test_latency_stats_empty_is_default():
    assert latency_stats([]) == LatencyStats()


@pytest.mark.parametrize("samples", [[5], [3, 1, 2], list(range(50, 0, -1))])
def test_latency_stats_ordering_invariant(samples):
    stats = latency_stats(samples)
    assert stats.p50 <= stats.p95 <= stats.max
    assert stats.max == max(samples)


def test_fallback_distribution_counts_tiers():
    dist = FallbackDistribution()
    for tier in ["strict_and", "strict_and", "fuzzy_and", "or_merge"]:
        dist.count(tier)
    assert dist == FallbackDistribution(strict_and=2, fuzzy_and=1, or_merge=1, empty=0)


def test_fallback_distribution_unknown_tier_counts_as_empty():
    dist = FallbackDistribution()
    dist.count("empty")
    dist.count("something-else")
    assert dist.empty == 2
    assert dist.strict_and == dist.fuzzy_and == dist.or_merge == 0


def test_search_metrics_defaults_are_independent():
    a = SearchMetrics(timestamp_ms=1, query_text="a", total_ms=1)
    b = SearchMetrics(timestamp_ms=2, query_text="b", total_ms=2)
    a.retrieval.vector_hits = 5
    assert b.retrieval.vector_hits == 0


def test_time_bucket_samples_do_not_affect_equality():
    a = TimeBucket(start_ms=60_000, width_ms=60_000, latency_samples=[1, 2])
    b = TimeBucket(start_ms=60_000, width_ms=60_000)
    assert a == b
    assert a.latency_samples == [1, 2]