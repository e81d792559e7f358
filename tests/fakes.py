"""Shared test doubles.

FakeObservation mimics an upstream per-person pose observation: joints can be
listed without being recognized, and the raw keypoint array can fail.
FakePoseModel mimics an Ultralytics YOLO pose model so inference can be
tested without weights.
"""
from __future__ import annotations

import numpy as np

from guess_exercise.features.skeleton import build_connections, estimate_area
from guess_exercise.types import Landmark, Pose


def make_pose(points: dict[str, tuple[float, float]], confidence: float = 0.9) -> Pose:
    """Build a Pose directly from name -> (x, y) with a uniform confidence."""
    landmarks = tuple(
        Landmark(name=name, location=location, confidence=confidence)
        for name, location in points.items()
    )
    return Pose(
        landmarks=landmarks,
        connections=build_connections(landmarks),
        area=estimate_area(landmarks),
    )


class FakeObservation:
    """Observation with controllable failures."""

    def __init__(
        self,
        points: dict[str, tuple[float, float, float]] | None = None,
        names: list[str] | None = None,
        array: np.ndarray | None = None,
        array_error: Exception | None = None,
    ):
        self._points = dict(points or {})
        self._names = list(names) if names is not None else list(self._points)
        self._array = array
        self._array_error = array_error
        self.array_calls = 0

    @property
    def available_joint_names(self) -> list[str]:
        return self._names

    def recognized_point(self, name: str) -> tuple[float, float, float]:
        if name not in self._points:
            raise KeyError(name)
        return self._points[name]

    def keypoints_array(self) -> np.ndarray:
        self.array_calls += 1
        if self._array_error is not None:
            raise self._array_error
        if self._array is None:
            return np.zeros((1, 3), dtype=np.float32)
        return self._array


class _Tensor:
    """Minimal torch-like wrapper exposing .cpu().numpy()."""

    def __init__(self, data):
        self._data = np.asarray(data, dtype=np.float32)

    def cpu(self) -> "_Tensor":
        return self

    def numpy(self) -> np.ndarray:
        return self._data


class _Boxes:
    def __init__(self, conf):
        self.conf = None if conf is None else _Tensor(conf)


class _Keypoints:
    def __init__(self, xy, conf):
        self.xy = _Tensor(xy)
        self.conf = None if conf is None else _Tensor(conf)


class FakeResult:
    def __init__(self, xy=None, kp_conf=None, scores=None):
        if xy is None:
            self.boxes = None
            self.keypoints = None
        else:
            self.boxes = _Boxes(scores)
            self.keypoints = _Keypoints(xy, kp_conf)


class FakePoseModel:
    """Mimics YOLO.predict and records the keyword arguments it received."""

    def __init__(self, result: FakeResult):
        self._result = result
        self.calls: list[dict] = []

    def predict(self, **kwargs):
        self.calls.append(kwargs)
        return [self._result]
