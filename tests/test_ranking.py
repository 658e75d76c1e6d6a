from mnemekit.eventlog import new_id
from mnemekit.metrics_types import ScoreEnvelope
from mnemekit.ranking import (
    Hit,
    boost_sourced_hits,
    compute_score_envelope,
    min_max_score,
)


def hit(memory, score, breakdown=None):
    return Hit(memory=memory, score=score, breakdown=breakdown or [])


def test_source_boost_flips_near_ties_in_favor_of_chunks():
    standalone = new_id()
    article_chunk = new_id()
    hits = [hit(standalone, 0.0328), hit(article_chunk, 0.0318)]
    boosted = boost_sourced_hits(hits, lambda m: m == article_chunk)
    assert boosted[0].memory == article_chunk
    assert boosted[1].memory == standalone


def test_source_boost_doesnt_flip_clearly_stronger_standalone():
    standalone = new_id()
    article_chunk = new_id()
    hits = [hit(standalone, 0.04), hit(article_chunk, 0.02)]
    boosted = boost_sourced_hits(hits, lambda m: m == article_chunk)
    assert boosted[0].memory == standalone


def test_source_boost_is_noop_when_no_hits_are_sourced():
    m1 = new_id()
    m2 = new_id()
    hits = [hit(m1, 0.05), hit(m2, 0.03)]
    boosted = boost_sourced_hits(hits, lambda _: False)
    assert boosted[0].memory == m1
    assert boosted[0].score == 0.05


def test_source_boost_is_stable_for_already_top_chunks():
    chunk = new_id()
    standalone = new_id()
    hits = [hit(chunk, 0.05), hit(standalone, 0.03)]
    boosted = boost_sourced_hits(hits, lambda m: m == chunk)
    assert boosted[0].memory == chunk
    assert boosted[0].score > 0.05


def test_source_boost_leaves_input_untouched():
    chunk = new_id()
    hits = [hit(chunk, 0.05)]
    boost_sourced_hits(hits, lambda _: True)
    assert hits[0].score == 0.05


def test_source_boost_sorts_unsorted_input_descending():
    ids = [new_id() for _ in range(3)]
    hits = [hit(ids[0], 0.01), hit(ids[1], 0.03), hit(ids[2], 0.02)]
    boosted = boost_sourced_hits(hits, lambda _: False)
    assert [h.memory for h in boosted] == [ids[1], ids[2], ids[0]]


def test_min_max_score_empty():
    assert min_max_score([]) == (0.0, 0.0)


def test_min_max_score_values():
    hits = [hit("a", 0.5), hit("b", 0.1), hit("c", 0.9)]
    assert min_max_score(hits) == (0.1, 0.9)


def test_score_envelope_uses_rrf_breakdown():
    vector = [hit("a", 0.8), hit("b", 0.4)]
    bm25 = [hit("a", 3.5), hit("c", 1.25)]
    hybrid = [
        hit("a", 0.03, [("vector", 0.8), ("rrf", 0.032)]),
        hit("c", 0.02, [("bm25", 1.25), ("rrf", 0.016)]),
    ]
    env = compute_score_envelope(vector, bm25, hybrid)
    assert env == ScoreEnvelope(
        bm25_max=3.5,
        bm25_min=1.25,
        vector_max=0.8,
        vector_min=0.4,
        rrf_max=0.032,
        rrf_min=0.016,
    )


def test_score_envelope_without_rrf_entries_is_zero():
    hybrid = [hit("a", 0.03, [("vector", 0.8)])]
    env = compute_score_envelope([], [], hybrid)
    assert (env.rrf_min, env.rrf_max) == (0.0, 0.0)
    assert env == ScoreEnvelope()


def test_score_envelope_empty_inputs():
    assert compute_score_envelope([], [], []) == ScoreEnvelope()