"""Tests for PredictionAggregator accumulation, isolation and thread safety."""
from __future__ import annotations

import random
import threading

import numpy as np
import pytest

from guess_exercise.actions.aggregate import PredictionAggregator
from guess_exercise.types import ActionPrediction


def test_starts_empty():
    aggregator = PredictionAggregator()
    assert aggregator.snapshot() == {}
    assert len(aggregator) == 0
    assert aggregator.total_frames() == 0


def test_end_to_end_example():
    aggregator = PredictionAggregator()
    aggregator.record_event("squat", 30)
    aggregator.record_event("squat", 12)
    aggregator.record_event("lunge", 5)
    assert aggregator.snapshot() == {"squat": 42, "lunge": 5}


def test_record_returns_new_total():
    aggregator = PredictionAggregator()
    assert aggregator.record_event("squat", 10) == 10
    assert aggregator.record_event("squat", 5) == 15


def test_sum_per_label_regardless_of_interleaving():
    rng = random.Random(7)
    events = [(rng.choice(["a", "b", "c"]), rng.randint(0, 40)) for _ in range(300)]
    aggregator = PredictionAggregator()
    for label, count in events:
        aggregator.record_event(label, count)
    expected: dict[str, int] = {}
    for label, count in events:
        expected[label] = expected.get(label, 0) + count
    assert aggregator.snapshot() == expected


def test_snapshot_is_isolated():
    aggregator = PredictionAggregator()
    aggregator.record_event("squat", 10)
    snapshot = aggregator.snapshot()
    aggregator.record_event("squat", 10)
    aggregator.record_event("lunge", 3)
    assert snapshot == {"squat": 10}


def test_mutating_snapshot_does_not_touch_aggregator():
    aggregator = PredictionAggregator()
    aggregator.record_event("squat", 10)
    snapshot = aggregator.snapshot()
    snapshot["squat"] = 0
    assert aggregator.snapshot() == {"squat": 10}


def test_negative_frame_count_rejected():
    aggregator = PredictionAggregator()
    aggregator.record_event("squat", 3)
    with pytest.raises(ValueError):
        aggregator.record_event("squat", -1)
    assert aggregator.snapshot() == {"squat": 3}


@pytest.mark.parametrize("count", [0.5, 2.0, "3", True])
def test_non_integer_frame_count_rejected(count):
    aggregator = PredictionAggregator()
    with pytest.raises(TypeError):
        aggregator.record_event("squat", count)
    assert "squat" not in aggregator
    assert aggregator.snapshot() == {}


def test_numpy_integer_frame_count_accepted():
    aggregator = PredictionAggregator()
    assert aggregator.record_event("squat", np.int64(15)) == 15
    assert type(aggregator.snapshot()["squat"]) is int


def test_zero_frame_count_registers_label():
    aggregator = PredictionAggregator()
    aggregator.record_event("squat", 0)
    assert "squat" in aggregator
    assert aggregator.snapshot() == {"squat": 0}


class TestRecordPrediction:
    def test_model_label_is_recorded(self):
        aggregator = PredictionAggregator()
        assert aggregator.record_prediction(ActionPrediction("squat", 0.8), 15) == 15
        assert aggregator.snapshot() == {"squat": 15}

    @pytest.mark.parametrize(
        "status",
        [ActionPrediction.starting(), ActionPrediction.low_confidence(), ActionPrediction.no_person()],
    )
    def test_status_labels_never_reach_counters(self, status):
        aggregator = PredictionAggregator()
        assert aggregator.record_prediction(status, 15) is None
        assert aggregator.snapshot() == {}


def test_concurrent_producers_do_not_lose_updates():
    """8 threads x 1000 increments must add up exactly."""
    aggregator = PredictionAggregator()
    barrier = threading.Barrier(8)
    errors = []

    def _produce(label):
        try:
            barrier.wait(timeout=2)
            for _ in range(1000):
                aggregator.record_event(label, 1)
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=_produce, args=("squat" if i % 2 else "lunge",)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert not errors, f"Threads raised: {errors}"
    assert aggregator.snapshot() == {"squat": 4000, "lunge": 4000}


def test_concurrent_reader_sees_monotonic_counts():
    aggregator = PredictionAggregator()
    stop = threading.Event()
    seen: list[int] = []

    def _read():
        while not stop.is_set():
            seen.append(aggregator.snapshot().get("squat", 0))

    reader = threading.Thread(target=_read)
    reader.start()
    for _ in range(2000):
        aggregator.record_event("squat", 1)
    stop.set()
    reader.join(timeout=5)

    assert all(b >= a for a, b in zip(seen, seen[1:]))
    assert aggregator.snapshot()["squat"] == 2000
