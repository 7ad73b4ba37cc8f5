import queue
import threading

import pytest

from conftest import (
    ANIMAL_TABLE,
    BrokenLoader,
    EmptySolver,
    FirstAxesProjector,
    LookupEmbedder,
    SlowLoader,
)
from semsort.backends.handles import Collaborators
from semsort.config.enums import INIT_FAILED, INIT_READY, STAGE_ORDER
from semsort.engine.errors import InitializationFailure
from semsort.protocol.messages import Error, Init, Ready, Sort, Sorted, Status
from semsort.protocol.runner import PipelineRunner

TIMEOUT = 10.0


def _drain_until_terminal(runner, run_id):
    out = []
    while True:
        msg = runner.outbox.get(timeout=TIMEOUT)
        out.append(msg)
        if isinstance(msg, (Sorted, Error)) and msg.run_id == run_id:
            return out


@pytest.fixture
def started_runner(make_collaborators):
    runners = []

    def _start(**kwargs):
        runner = PipelineRunner(make_collaborators(**kwargs))
        runner.start()
        runners.append(runner)
        assert isinstance(runner.outbox.get(timeout=TIMEOUT), Ready)
        return runner

    yield _start
    for r in runners:
        r.close(timeout=TIMEOUT)


def test_sort_emits_status_then_one_sorted(started_runner):
    runner = started_runner()
    runner.post(Sort(run_id=1, items=("Cat", "Dog", "Car")))
    messages = _drain_until_terminal(runner, 1)

    statuses = messages[:-1]
    assert all(isinstance(m, Status) and m.run_id == 1 for m in statuses)
    assert [m.stage for m in statuses] == list(STAGE_ORDER)
    final = messages[-1]
    assert isinstance(final, Sorted)
    assert sorted(final.order) == [0, 1, 2]
    assert final.items == ("Cat", "Dog", "Car")


def test_empty_tour_yields_exactly_one_error(started_runner):
    runner = started_runner(solver=EmptySolver())
    runner.post(Sort(run_id=7, items=("Cat", "Dog")))
    messages = _drain_until_terminal(runner, 7)

    assert isinstance(messages[-1], Error)
    assert messages[-1].message == "No solution found."
    assert sum(isinstance(m, Error) for m in messages) == 1
    assert not any(isinstance(m, Sorted) for m in messages)

    runner.close(timeout=TIMEOUT)
    with pytest.raises(queue.Empty):
        runner.outbox.get_nowait()


def test_runs_are_processed_in_order(started_runner):
    runner = started_runner()
    runner.post(Sort(run_id=1, items=("Cat", "Dog")))
    runner.post(Sort(run_id=2, items=("Dog", "Car")))
    first = _drain_until_terminal(runner, 1)
    second = _drain_until_terminal(runner, 2)
    assert {m.run_id for m in first} == {1}
    assert {m.run_id for m in second} == {2}


def test_reinit_after_ready_does_not_reload(started_runner):
    embedder = LookupEmbedder(ANIMAL_TABLE)
    runner = started_runner(embedder=embedder)
    runner.post(Init())
    assert isinstance(runner.outbox.get(timeout=TIMEOUT), Ready)
    assert embedder.loads == 1


def test_init_failure_is_terminal():
    collab = Collaborators(BrokenLoader("no weights"), FirstAxesProjector(), EmptySolver())
    runner = PipelineRunner(collab)
    runner.start()
    try:
        first = runner.outbox.get(timeout=TIMEOUT)
        assert isinstance(first, Error)
        assert first.run_id is None
        assert first.message == "Init error: no weights"
        assert collab.state == INIT_FAILED

        runner.post(Init())
        again = runner.outbox.get(timeout=TIMEOUT)
        assert isinstance(again, Error) and "no weights" in again.message

        runner.post(Sort(run_id=1, items=("a", "b")))
        reply = runner.outbox.get(timeout=TIMEOUT)
        assert isinstance(reply, Error)
        assert reply.run_id == 1
        assert reply.message == "Worker not ready"
    finally:
        runner.close(timeout=TIMEOUT)


def test_concurrent_init_loads_once():
    slow = SlowLoader()
    collab = Collaborators(LookupEmbedder(), FirstAxesProjector(), slow)
    errors = []

    def _init():
        try:
            collab.ensure_ready()
        except InitializationFailure as exc:
            errors.append(exc)

    threads = [threading.Thread(target=_init) for _ in range(3)]
    for t in threads:
        t.start()
    assert slow.entered.wait(TIMEOUT)
    slow.release.set()
    for t in threads:
        t.join(TIMEOUT)

    assert not errors
    assert slow.loads == 1
    assert collab.state == INIT_READY


def test_post_rejects_runner_side_messages(make_collaborators):
    runner = PipelineRunner(make_collaborators())
    with pytest.raises(TypeError):
        runner.post(Ready())


@pytest.mark.parametrize(
    "params",
    [{"location_base": 1}, {"location_max_major": "many"}],
)
def test_bad_run_config_yields_error_and_runner_survives(make_collaborators, params):
    runner = PipelineRunner(make_collaborators(), params=params)
    runner.start()
    try:
        assert isinstance(runner.outbox.get(timeout=TIMEOUT), Ready)
        runner.post(Sort(run_id=1, items=("Cat", "Dog")))
        msgs = _drain_until_terminal(runner, 1)
        assert isinstance(msgs[-1], Error)
        assert [m for m in msgs if isinstance(m, (Sorted, Error))] == msgs[-1:]
        assert runner.is_alive()

        runner.post(Sort(run_id=2, items=("Cat", "Dog")))
        assert isinstance(_drain_until_terminal(runner, 2)[-1], Error)
    finally:
        runner.close(timeout=TIMEOUT)
    assert runner.outbox.empty()
