from __future__ import annotations

"""上游人体姿态观测的接口与通用实现。

说明：
    观测对象只需提供三项能力：可用关节名集合、按名查询关键点（可能失败）、
    以及可选的原始关键点数组。推理后端（YOLO 等）输出会被转换为
    KeypointObservation，供姿态组装器统一处理。
"""

from dataclasses import dataclass, field
from typing import Iterable, Protocol, Sequence

import numpy as np

from .skeleton import JOINT_INDEX, JOINT_NAMES


# COCO 17 点顺序（Ultralytics YOLO pose 输出）
COCO_KEYPOINTS = (
    "nose",
    "left_eye",
    "right_eye",
    "left_ear",
    "right_ear",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
)


class Observation(Protocol):
    """单人姿态观测。"""

    @property
    def available_joint_names(self) -> Iterable[str]: ...

    def recognized_point(self, name: str) -> tuple[float, float, float]:
        """返回 (x, y, conf)；关节未识别时抛出 KeyError。"""
        ...

    def keypoints_array(self) -> np.ndarray:
        """返回原始关键点数组；无法提供时可抛出异常。"""
        ...


@dataclass(frozen=True)
class KeypointObservation:
    """基于字典的观测实现。

    字段说明：
        points: 关节名 -> (x, y, conf)，x/y 为归一化坐标。
        raw: 可选的原始关键点数组（透传给下游）。
    """
    points: dict[str, tuple[float, float, float]]
    raw: np.ndarray | None = field(default=None, compare=False)

    @property
    def available_joint_names(self) -> tuple[str, ...]:
        return tuple(self.points)

    def recognized_point(self, name: str) -> tuple[float, float, float]:
        return self.points[name]

    def keypoints_array(self) -> np.ndarray:
        """返回原始数组；若无原始数组，按 JOINT_NAMES 顺序生成 (19, 3) 归一化数组。

        from_coco 构建的观测返回 (17, 3) COCO 顺序的像素数组，两者可按形状区分。

        异常:
            ValueError: 没有任何已识别的关键点。
        """
        if self.raw is not None:
            return self.raw
        if not self.points:
            raise ValueError("No recognized keypoints to build an array from.")
        array = np.zeros((len(JOINT_NAMES), 3), dtype=np.float32)
        for name, (x, y, conf) in self.points.items():
            idx = JOINT_INDEX.get(name)
            if idx is not None:
                array[idx] = (x, y, conf)
        return array

    @classmethod
    def from_coco(
        cls,
        keypoints: Sequence[tuple[float, float, float]],
        frame_size: tuple[int, int],
        min_conf: float = 0.0,
        raw: np.ndarray | None = None,
    ) -> "KeypointObservation":
        """从 COCO 17 点像素坐标构建观测。

        参数:
            keypoints: [(x, y, conf), ...]，像素坐标，顺序同 COCO_KEYPOINTS。
            frame_size: (width, height)，单位为像素。
            min_conf: 置信度低于该值的点视为未识别（置信度为 0 的点始终视为未识别）。
            raw: 可选原始数组，默认保存为 (17, 3) float32 像素数组。

        返回:
            KeypointObservation: 归一化后的观测。
        """
        width, height = frame_size
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid frame size: {frame_size}")

        points: dict[str, tuple[float, float, float]] = {}
        for name, (x, y, conf) in zip(COCO_KEYPOINTS, keypoints):
            # YOLO 对不可见点输出 (0, 0)
            if conf <= 0.0 or conf < min_conf or (x == 0 and y == 0):
                continue
            nx = min(max(float(x) / width, 0.0), 1.0)
            ny = min(max(float(y) / height, 0.0), 1.0)
            points[name] = (nx, ny, float(conf))

        if raw is None and len(keypoints) > 0:
            raw = np.asarray(keypoints, dtype=np.float32)
        return cls(points=points, raw=raw)
