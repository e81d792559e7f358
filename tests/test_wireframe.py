"""Tests for drawing scale, transforms and draw-instruction ordering."""
from __future__ import annotations

import numpy as np
import pytest

from guess_exercise.render.wireframe import (
    CONNECTION_WIDTH,
    LANDMARK_RADIUS,
    MAX_SCALE,
    MIN_CONNECTION_OPACITY,
    MIN_SCALE,
    TYPICAL_LARGE_POSE_AREA,
    CircleInstruction,
    LineInstruction,
    apply_transform,
    drawing_scale,
    scale_transform,
    wireframe_instructions,
)
from tests.fakes import make_pose


class TestDrawingScale:
    def test_typical_area_is_full_scale(self):
        assert drawing_scale(TYPICAL_LARGE_POSE_AREA) == 1.0

    def test_zero_area_is_min_scale(self):
        assert drawing_scale(0.0) == pytest.approx(0.6)

    def test_clamped_above_typical(self):
        assert drawing_scale(0.9) == MAX_SCALE
        assert drawing_scale(1.0) == MAX_SCALE

    def test_linear_between(self):
        assert drawing_scale(0.175) == pytest.approx(0.8)

    def test_monotonic(self):
        areas = np.linspace(0.0, TYPICAL_LARGE_POSE_AREA, 50)
        scales = [drawing_scale(a) for a in areas]
        assert all(b >= a for a, b in zip(scales, scales[1:]))
        assert min(scales) >= MIN_SCALE
        assert max(scales) <= MAX_SCALE


class TestTransform:
    def test_scales_to_canvas(self):
        transform = scale_transform(640, 480)
        assert apply_transform((0.5, 0.25), transform) == (320.0, 120.0)

    def test_flip_y(self):
        transform = scale_transform(640, 480, flip_y=True)
        assert apply_transform((0.0, 0.0), transform) == (0.0, 480.0)
        assert apply_transform((1.0, 1.0), transform) == (640.0, 0.0)

    def test_identity_when_none(self):
        assert apply_transform((0.3, 0.7), None) == (0.3, 0.7)


class TestWireframeInstructions:
    def test_lines_before_circles(self, standing_pose):
        instructions = wireframe_instructions(standing_pose)
        kinds = [type(i) for i in instructions]
        n_lines = len(standing_pose.connections)
        assert kinds[:n_lines] == [LineInstruction] * n_lines
        assert kinds[n_lines:] == [CircleInstruction] * len(standing_pose.landmarks)

    def test_preserves_connection_and_landmark_order(self, standing_pose):
        instructions = wireframe_instructions(standing_pose)
        lines = [i.joints for i in instructions if isinstance(i, LineInstruction)]
        circles = [i.name for i in instructions if isinstance(i, CircleInstruction)]
        assert lines == [c.joints for c in standing_pose.connections]
        assert circles == list(standing_pose.joint_names)

    def test_sizes_follow_drawing_scale(self):
        pose = make_pose({"nose": (0.5, 0.5)})
        (circle,) = wireframe_instructions(pose)
        assert circle.radius == pytest.approx(LANDMARK_RADIUS * MIN_SCALE)

    def test_full_size_for_large_pose(self):
        big = make_pose({"left_hip": (0.0, 0.0), "left_knee": (0.5, 0.5), "left_ankle": (1.0, 1.0)})
        line = next(i for i in wireframe_instructions(big) if isinstance(i, LineInstruction))
        assert line.thickness == pytest.approx(CONNECTION_WIDTH)

    def test_transform_applied(self):
        pose = make_pose({"left_hip": (0.25, 0.5), "right_hip": (0.75, 0.5)})
        instructions = wireframe_instructions(pose, scale_transform(200, 100))
        line = instructions[0]
        assert line.start == (50.0, 50.0)
        assert line.end == (150.0, 50.0)
        assert instructions[1].center == (50.0, 50.0)

    def test_low_confidence_line_is_faded_but_visible(self):
        pose = make_pose({"left_hip": (0.25, 0.5), "right_hip": (0.75, 0.5)}, confidence=0.1)
        line = wireframe_instructions(pose)[0]
        assert line.opacity == MIN_CONNECTION_OPACITY
