"""
Background projection worker: latest request wins, closed workers deliver nothing.
"""

import threading

import pytest

from sparkmap.core.schema import ProjectionOutcome, ProjectionStatus
from sparkmap.vector.worker import ProjectionWorker


class GatedEngine:
    """Fake engine whose runs block until released, keyed by population size."""

    def __init__(self):
        self.gates = {}
        self.started = {}
        self.populations = []

    def gate(self, population):
        self.gates[population] = threading.Event()
        self.started[population] = threading.Event()
        return self.gates[population]

    def project(self, vectors):
        population = len(vectors)
        self.populations.append(population)
        if population in self.started:
            self.started[population].set()
        if population in self.gates:
            self.gates[population].wait(timeout=5)
        return ProjectionOutcome(status=ProjectionStatus.OK, coordinates=[[0.0, 0.0]] * population)


class RaisingEngine:
    def project(self, vectors):
        raise RuntimeError("engine crashed")


def _collector():
    delivered = []
    done = threading.Event()

    def callback(generation, outcome):
        delivered.append((generation, outcome))
        done.set()

    return delivered, done, callback


def test_single_request_is_delivered():
    """Test that a lone request delivers its outcome with its generation."""
    worker = ProjectionWorker(engine=GatedEngine())
    delivered, done, callback = _collector()

    generation = worker.submit([[1.0, 0.0]] * 3, callback)

    assert done.wait(timeout=5)
    worker.join(timeout=5)
    assert generation == 1
    assert len(delivered) == 1
    assert delivered[0][0] == 1
    assert delivered[0][1].status == ProjectionStatus.OK


def test_latest_request_wins_over_slow_earlier_one():
    """Test that a slow run superseded while in flight is discarded."""
    engine = GatedEngine()
    slow_gate = engine.gate(3)
    worker = ProjectionWorker(engine=engine)
    delivered, done, callback = _collector()

    first = worker.submit([[1.0, 0.0]] * 3, callback)
    assert engine.started[3].wait(timeout=5)
    second = worker.submit([[1.0, 0.0]] * 4, callback)
    slow_gate.set()

    assert worker.join(timeout=5)
    assert second > first
    assert [generation for generation, _ in delivered] == [second]
    assert len(delivered[0][1].coordinates) == 4


def test_burst_runs_only_latest_pending_request():
    """Test that requests queued behind a busy runner collapse to the newest one."""
    engine = GatedEngine()
    gate = engine.gate(3)
    worker = ProjectionWorker(engine=engine)
    delivered, done, callback = _collector()

    worker.submit([[1.0]] * 3, callback)
    assert engine.started[3].wait(timeout=5)
    for population in (4, 5, 6):
        worker.submit([[1.0]] * population, callback)
    gate.set()

    assert worker.join(timeout=5)
    assert engine.populations == [3, 6]
    assert [len(outcome.coordinates) for _, outcome in delivered] == [6]


def test_broken_callback_does_not_stop_runner():
    """Test that a failing callback is logged and later requests still run."""
    worker = ProjectionWorker(engine=GatedEngine())
    delivered, done, callback = _collector()

    def broken(generation, outcome):
        raise RuntimeError("listener exploded")

    worker.submit([[1.0]] * 3, broken)
    assert worker.join(timeout=5)
    worker.submit([[1.0]] * 3, callback)

    assert done.wait(timeout=5)
    assert len(delivered) == 1


def test_close_drops_in_flight_response():
    """Test that a response arriving after close is ignored."""
    engine = GatedEngine()
    gate = engine.gate(3)
    worker = ProjectionWorker(engine=engine)
    delivered, done, callback = _collector()

    worker.submit([[1.0, 0.0]] * 3, callback)
    assert engine.started[3].wait(timeout=5)
    worker.close()
    gate.set()
    worker.join(timeout=5)

    assert delivered == []
    assert worker.closed


def test_submit_after_close_raises():
    """Test that a closed worker refuses new requests."""
    worker = ProjectionWorker(engine=GatedEngine())
    worker.close()

    with pytest.raises(RuntimeError):
        worker.submit([[1.0]] * 3, lambda generation, outcome: None)


def test_engine_exception_becomes_failed_outcome():
    """Test that an engine crash is delivered as a failed outcome."""
    worker = ProjectionWorker(engine=RaisingEngine())
    delivered, done, callback = _collector()

    worker.submit([[1.0]] * 3, callback)

    assert done.wait(timeout=5)
    worker.join(timeout=5)
    assert delivered[0][1].status == ProjectionStatus.FAILED
    assert "engine crashed" in delivered[0][1].error


def test_generation_increments_per_request():
    """Test that every submission gets a fresh, increasing generation."""
    worker = ProjectionWorker(engine=GatedEngine())
    generations = [worker.submit([[1.0]] * 3, lambda g, o: None) for _ in range(3)]
    worker.join(timeout=5)

    assert generations == [1, 2, 3]
    assert worker.generation == 3
