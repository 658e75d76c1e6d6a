from mnemekit.evolve_stats import (
    EvolveChainEvent,
    EvolveMemoryState,
    is_evolution_invalidation,
    max_chain_depth,
    order_worker_state,
    recent_events,
)


def test_invalidation_reason_detection():
    assert is_evolution_invalidation("superseded by evolution of memory")
    assert not is_evolution_invalidation("superseded by audited Q3 revenue figure")


def test_order_worker_state_newest_first_and_stable():
    a = EvolveMemoryState("a", 1, 100)
    b = EvolveMemoryState("b", 2, 300)
    c = EvolveMemoryState("c", 1, 100)
    d = EvolveMemoryState("d", 3, 200)
    ordered = order_worker_state([a, b, c, d])
    assert [s.memory_id for s in ordered] == ["b", "d", "a", "c"]


def test_order_worker_state_is_a_permutation():
    states = [EvolveMemoryState(str(i), i, (i * 7) % 5) for i in range(10)]
    ordered = order_worker_state(states)
    assert sorted(s.memory_id for s in ordered) == sorted(s.memory_id for s in states)
    times = [s.last_evolved_at_ms for s in ordered]
    assert times == sorted(times, reverse=True)


def test_max_chain_depth():
    states = [EvolveMemoryState("a", 2, 1), EvolveMemoryState("b", 5, 2)]
    assert max_chain_depth(states) == 5
    assert max_chain_depth([]) == 0


def test_recent_events_takes_newest_first():
    events = [EvolveChainEvent(f"f{i}", f"t{i}", i) for i in range(25)]
    recent = recent_events(events, 20)
    assert len(recent) == 20
    assert recent[0] is events[24]
    assert recent[-1] is events[5]


def test_recent_events_short_list_and_zero_limit():
    events = [EvolveChainEvent("x", "y", 1), EvolveChainEvent("y", "z", 2)]
    assert recent_events(events) == [events[1], events[0]]
    assert recent_events(events, 0) == []