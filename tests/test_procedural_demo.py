import pytest

from mnemekit.procedural_demo import (
    REFUSAL,
    AlwaysPassJudge,
    BiasedJudge,
    Canary,
    SmartDemoExecutor,
    build_eval_tasks,
    build_safety_probes,
    seed_body,
    seed_canaries,
    synthetic_outcome,
)

IMPROVED_BODY = (
    "You are a helpful assistant. For any question with multiple parts, address "
    "each one explicitly. Be precise. When you are uncertain, say so."
)


def test_seed_has_canaries_and_terse_body():
    canaries = seed_canaries()
    assert len(canaries) == 2
    assert canaries[0] == Canary("What is 2+2?", "4")
    assert canaries[1] == Canary("Capital of France?", "Paris")
    body = seed_body()
    assert "helpful assistant" in body
    assert len(body) < 100


@pytest.mark.asyncio
async def test_biased_judge_passes_when_actual_contains_expected():
    judge = BiasedJudge(id="x")
    verdict = await judge.judge("q", "Paris", "The capital is Paris.")
    assert verdict.passed
    assert verdict.score == 0.9
    verdict = await judge.judge("q", "Paris", "unrelated answer")
    assert not verdict.passed
    assert verdict.score == 0.1
    assert verdict.reason == 'actual "unrelated answer" does not contain expected "Paris"'


@pytest.mark.asyncio
async def test_biased_judge_edge_cases():
    judge = BiasedJudge()
    assert judge.id == "judge-lenient"
    assert not (await judge.judge("q", "", "")).passed
    assert (await judge.judge("q", "", "anything")).passed
    assert (await judge.judge("q", "paris", "PARIS")).passed


@pytest.mark.asyncio
async def test_always_pass_judge():
    judge = AlwaysPassJudge()
    assert judge.id == "judge-strict"
    empty = await judge.judge("q", "x", "")
    full = await judge.judge("q", "x", "y")
    assert empty.passed and full.passed
    assert empty.score == 0.5
    assert full.score == 0.95


@pytest.mark.asyncio
async def test_safety_probes_are_always_refused():
    executor = SmartDemoExecutor()
    for body in (seed_body(), IMPROVED_BODY, ""):
        for probe in build_safety_probes():
            answer = await executor.execute(body, probe.input)
            assert answer == REFUSAL
            assert probe.expected in answer


@pytest.mark.asyncio
async def test_seed_body_fails_reasoning_and_epistemics():
    executor = SmartDemoExecutor()
    results = {}
    for task in build_eval_tasks():
        answer = await executor.execute(seed_body(), task.input)
        results.setdefault(task.category, []).append(
            task.expected.lower() in answer.lower()
        )
    assert results["math"] == [True]
    assert results["geography"] == [True]
    assert results["reasoning"] == [False, False]
    assert results["epistemics"] == [False, False]


@pytest.mark.asyncio
async def test_improved_body_passes_every_task():
    executor = SmartDemoExecutor()
    tasks = build_eval_tasks()
    assert len(tasks) == 6
    for task in tasks:
        answer = await executor.execute(IMPROVED_BODY, task.input)
        assert task.expected.lower() in answer.lower()


@pytest.mark.asyncio
async def test_unknown_input_yields_empty_answer():
    assert await SmartDemoExecutor().execute(IMPROVED_BODY, "Tell me a joke") == ""


def test_synthetic_outcome_pattern():
    pattern = [synthetic_outcome(t).success for t in range(14)]
    assert pattern == [True, True, True, False, False, True, False] * 2


def test_synthetic_outcome_fields():
    ok = synthetic_outcome(0)
    assert ok.error is None
    assert ok.scores["accuracy"] == 1.0
    assert ok.scores["objective"] == pytest.approx(0.8)
    assert ok.judge == "environment"

    failed = synthetic_outcome(3)
    assert failed.error == "trivial-fail-3"
    assert failed.scores == {"accuracy": 0.0, "objective": 0.2}


def test_synthetic_outcome_objective_stays_in_range_and_ids_unique():
    outcomes = [synthetic_outcome(t) for t in range(500)]
    for o in outcomes:
        if o.success:
            assert 0.8 <= o.scores["objective"] < 1.0
    assert len({o.id for o in outcomes}) == 500
    assert synthetic_outcome(1).scores["objective"] == pytest.approx(0.801)