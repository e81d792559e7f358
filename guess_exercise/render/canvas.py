from __future__ import annotations

"""基于 OpenCV 的画布绘制：背景帧 + 骨架线框 + 预测标签。"""

from typing import Iterable, Sequence

import cv2
import numpy as np

from ..types import ActionPrediction, Pose
from .wireframe import (
    CircleInstruction,
    DrawInstruction,
    LineInstruction,
    scale_transform,
    wireframe_instructions,
)


def draw_poses(frame: np.ndarray, poses: Sequence[Pose] | None, flip_y: bool = False) -> np.ndarray:
    """先绘制背景帧，再在其上绘制所有姿态线框。

    参数:
        frame: OpenCV 图像帧（BGR），不会被修改。
        poses: 当前帧的姿态列表。
        flip_y: 姿态坐标原点在左下角时设为 True。

    返回:
        np.ndarray: 绘制后的新图像。
    """
    canvas = frame.copy()
    if not poses:
        return canvas

    height, width = canvas.shape[:2]
    transform = scale_transform(width, height, flip_y=flip_y)
    for pose in poses:
        draw_instructions(canvas, wireframe_instructions(pose, transform))
    return canvas


def draw_instructions(frame: np.ndarray, instructions: Iterable[DrawInstruction]) -> None:
    """按顺序执行绘制指令（原地修改 frame）。"""
    for instruction in instructions:
        if isinstance(instruction, LineInstruction):
            _draw_line(frame, instruction)
        elif isinstance(instruction, CircleInstruction):
            _draw_circle(frame, instruction)


def draw_prediction(frame: np.ndarray, prediction: ActionPrediction) -> None:
    """在左上角绘制动作标签与置信度。"""
    confidence = prediction.confidence_string or "Observing..."
    _draw_label(
        frame,
        prediction.label,
        10,
        28,
        text_color=(20, 20, 20),
        bg_color=(255, 255, 0),
        font_scale=0.8,
        thickness=2,
    )
    _draw_label(
        frame,
        confidence,
        10,
        58,
        text_color=(20, 20, 20),
        bg_color=(210, 255, 210),
        font_scale=0.6,
        thickness=1,
    )


def _draw_line(frame: np.ndarray, line: LineInstruction) -> None:
    start = (int(round(line.start[0])), int(round(line.start[1])))
    end = (int(round(line.end[0])), int(round(line.end[1])))
    thickness = max(1, int(round(line.thickness)))
    if line.opacity >= 1.0:
        cv2.line(frame, start, end, line.color, thickness, cv2.LINE_AA)
        return

    # 半透明连线：只在线段包围盒内混合，避免整帧拷贝
    pad = thickness
    height, width = frame.shape[:2]
    x1 = max(0, min(start[0], end[0]) - pad)
    y1 = max(0, min(start[1], end[1]) - pad)
    x2 = min(width, max(start[0], end[0]) + pad + 1)
    y2 = min(height, max(start[1], end[1]) + pad + 1)
    if x1 >= x2 or y1 >= y2:
        return
    roi = frame[y1:y2, x1:x2]
    overlay = roi.copy()
    cv2.line(
        overlay,
        (start[0] - x1, start[1] - y1),
        (end[0] - x1, end[1] - y1),
        line.color,
        thickness,
        cv2.LINE_AA,
    )
    frame[y1:y2, x1:x2] = cv2.addWeighted(overlay, line.opacity, roi, 1.0 - line.opacity, 0)


def _draw_circle(frame: np.ndarray, circle: CircleInstruction) -> None:
    center = (int(round(circle.center[0])), int(round(circle.center[1])))
    radius = max(1, int(round(circle.radius)))
    cv2.circle(frame, center, radius, circle.fill_color, -1, cv2.LINE_AA)
    cv2.circle(frame, center, radius, circle.stroke_color, 2, cv2.LINE_AA)


def _draw_label(
    frame: np.ndarray,
    text: str,
    x: int,
    y: int,
    text_color: tuple[int, int, int],
    bg_color: tuple[int, int, int],
    font_scale: float,
    thickness: int,
) -> None:
    """绘制带背景底色的文本标签。"""
    font = cv2.FONT_HERSHEY_SIMPLEX
    (text_w, text_h), baseline = cv2.getTextSize(text, font, font_scale, thickness)
    height, width = frame.shape[:2]
    x = max(0, min(x, width - text_w - 4))
    y = max(text_h + 4, min(y, height - 4))
    cv2.rectangle(frame, (x, y - text_h - 4), (x + text_w + 4, y + baseline + 2), bg_color, thickness=-1)
    cv2.putText(frame, text, (x + 2, y), font, font_scale, text_color, thickness)
