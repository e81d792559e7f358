from __future__ import annotations

"""全局数据结构与类型定义。"""

from dataclasses import dataclass

import numpy as np


# Point: (x, y)，归一化坐标，范围 [0.0, 1.0]，原点在左上角
Point = tuple[float, float]
# JointPair: (joint_a, joint_b)，无序的关节连线
JointPair = tuple[str, str]


@dataclass(frozen=True)
class Landmark:
    """单个人体关键点（关节名、归一化位置、置信度）。"""
    name: str
    location: Point
    confidence: float

    def to_record(self) -> dict:
        """转换为扁平的结构化记录（用于转发/导出）。"""
        x, y = self.location
        return {
            "name": self.name,
            "x": float(x),
            "y": float(y),
            "confidence": float(self.confidence),
        }


@dataclass(frozen=True)
class Connection:
    """两个关键点之间的连线。

    confidence 取两个端点置信度的较小值，用于决定线条透明度。
    """
    joints: JointPair
    start: Point
    end: Point
    confidence: float


@dataclass(frozen=True, eq=False)
class Pose:
    """单人单帧的骨架结构。

    connections 与 area 在构造时一次性计算完成，之后不可变。
    keypoints 为上游原始关键点数组，捕获失败时为 None。布局由形状区分：
        - (17, 3)：YOLO 输出，COCO_KEYPOINTS 顺序，像素坐标 (x, y, conf)；
        - (19, 3)：无原始数组时按 JOINT_NAMES 顺序生成，归一化坐标，未识别行为 0。
    其他观测实现可能透传自有格式。
    """
    landmarks: tuple[Landmark, ...]
    connections: tuple[Connection, ...]
    area: float
    keypoints: np.ndarray | None = None

    @property
    def joint_names(self) -> tuple[str, ...]:
        return tuple(landmark.name for landmark in self.landmarks)

    def landmark(self, name: str) -> Landmark | None:
        """按关节名查找关键点，不存在时返回 None。"""
        for landmark in self.landmarks:
            if landmark.name == name:
                return landmark
        return None


@dataclass(frozen=True)
class ActionPrediction:
    """动作预测结果。

    confidence 为 None 表示这是状态标签（如 "Starting Up"），而不是模型输出。
    """
    label: str
    confidence: float | None = None

    STARTING = "Starting Up"
    LOW_CONFIDENCE = "Low Confidence"
    NO_PERSON = "No Person"

    @property
    def is_model_label(self) -> bool:
        return self.confidence is not None

    @property
    def confidence_string(self) -> str | None:
        """置信度百分比字符串，例如 "87%"；状态标签返回 None。"""
        if self.confidence is None:
            return None
        return f"{self.confidence * 100:.0f}%"

    @classmethod
    def starting(cls) -> "ActionPrediction":
        return cls(label=cls.STARTING)

    @classmethod
    def low_confidence(cls) -> "ActionPrediction":
        return cls(label=cls.LOW_CONFIDENCE)

    @classmethod
    def no_person(cls) -> "ActionPrediction":
        return cls(label=cls.NO_PERSON)
