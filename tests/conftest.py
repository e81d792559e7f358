"""Shared fixtures for pose pipeline tests."""
from __future__ import annotations

import pytest

from guess_exercise.types import Pose
from tests.fakes import make_pose


@pytest.fixture()
def standing_points() -> dict[str, tuple[float, float]]:
    """A full upright body, roughly centred in the frame."""
    return {
        "nose": (0.50, 0.15),
        "neck": (0.50, 0.25),
        "left_shoulder": (0.58, 0.26),
        "right_shoulder": (0.42, 0.26),
        "left_elbow": (0.62, 0.40),
        "right_elbow": (0.38, 0.40),
        "left_wrist": (0.64, 0.52),
        "right_wrist": (0.36, 0.52),
        "left_hip": (0.55, 0.55),
        "right_hip": (0.45, 0.55),
        "left_knee": (0.56, 0.72),
        "right_knee": (0.44, 0.72),
        "left_ankle": (0.56, 0.90),
        "right_ankle": (0.44, 0.90),
    }


@pytest.fixture()
def standing_pose(standing_points) -> Pose:
    return make_pose(standing_points)
