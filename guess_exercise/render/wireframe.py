from __future__ import annotations

"""骨架线框的几何计算：绘制缩放、坐标变换与绘制指令。

说明：
    本模块只负责生成有序的绘制指令（先连线、后关键点），
    实际像素绘制由 canvas 模块完成。连线必须先画，
    否则线条会遮挡关键点标记。
"""

from dataclasses import dataclass

import numpy as np

from ..features.skeleton import body_part
from ..types import JointPair, Point, Pose


# 典型的“主体”姿态面积（经验值）
TYPICAL_LARGE_POSE_AREA = 0.35
MAX_SCALE = 1.0
MIN_SCALE = 0.6

# 以下尺寸为 scale == 1.0 时的像素值
LANDMARK_RADIUS = 14.0
CONNECTION_WIDTH = 12.0
MIN_CONNECTION_OPACITY = 0.4

# BGR 颜色
BODY_PART_COLORS = {
    "left": (196, 205, 78),
    "right": (107, 107, 255),
    "center": (109, 230, 255),
}
LANDMARK_FILL = (255, 255, 255)
LANDMARK_STROKE = (64, 64, 64)


@dataclass(frozen=True)
class LineInstruction:
    """画布坐标系下的连线指令。"""
    start: Point
    end: Point
    thickness: float
    color: tuple[int, int, int]
    opacity: float
    joints: JointPair


@dataclass(frozen=True)
class CircleInstruction:
    """画布坐标系下的关键点标记指令。"""
    center: Point
    radius: float
    fill_color: tuple[int, int, int]
    stroke_color: tuple[int, int, int]
    name: str


DrawInstruction = LineInstruction | CircleInstruction


def drawing_scale(area: float) -> float:
    """根据姿态面积计算绘制缩放比例。

    面积达到典型值时按 100% 绘制；更小（更远）的姿态线性缩小，最低 60%。

    参数:
        area: 姿态面积（>=0）。

    返回:
        float: 缩放比例，范围 [MIN_SCALE, MAX_SCALE]。
    """
    ratio = area / TYPICAL_LARGE_POSE_AREA
    if ratio >= 1.0:
        return MAX_SCALE
    return ratio * (MAX_SCALE - MIN_SCALE) + MIN_SCALE


def scale_transform(width: float, height: float, flip_y: bool = False) -> np.ndarray:
    """生成将归一化坐标映射到画布像素坐标的 2x3 仿射矩阵。

    参数:
        width: 画布宽度（像素）。
        height: 画布高度（像素）。
        flip_y: 输入坐标原点在左下角时设为 True。
    """
    if flip_y:
        return np.array([[width, 0.0, 0.0], [0.0, -height, height]], dtype=np.float64)
    return np.array([[width, 0.0, 0.0], [0.0, height, 0.0]], dtype=np.float64)


def apply_transform(point: Point, transform: np.ndarray | None) -> Point:
    """对单个点应用 2x3 仿射变换；transform 为 None 时原样返回。"""
    if transform is None:
        return (float(point[0]), float(point[1]))
    x, y = point
    out = transform @ np.array([x, y, 1.0])
    return (float(out[0]), float(out[1]))


def wireframe_instructions(
    pose: Pose,
    transform: np.ndarray | None = None,
) -> list[DrawInstruction]:
    """生成单个姿态的有序绘制指令：全部连线在前，全部关键点在后。

    参数:
        pose: 已组装的姿态。
        transform: 归一化坐标 -> 画布坐标的 2x3 仿射矩阵。

    返回:
        list[DrawInstruction]: 有序绘制指令。
    """
    scale = drawing_scale(pose.area)
    instructions: list[DrawInstruction] = []

    for connection in pose.connections:
        instructions.append(
            LineInstruction(
                start=apply_transform(connection.start, transform),
                end=apply_transform(connection.end, transform),
                thickness=CONNECTION_WIDTH * scale,
                color=BODY_PART_COLORS[body_part(connection.joints)],
                opacity=max(MIN_CONNECTION_OPACITY, min(1.0, connection.confidence)),
                joints=connection.joints,
            )
        )

    for landmark in pose.landmarks:
        instructions.append(
            CircleInstruction(
                center=apply_transform(landmark.location, transform),
                radius=LANDMARK_RADIUS * scale,
                fill_color=LANDMARK_FILL,
                stroke_color=LANDMARK_STROKE,
                name=landmark.name,
            )
        )

    return instructions
