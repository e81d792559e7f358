from __future__ import annotations

"""姿态估计推理与观测转换。

说明：
    通过 Ultralytics YOLO 姿态模型获取每个人的 COCO 关键点，
    按帧尺寸归一化后转换为 KeypointObservation，
    原始 (17, 3) 像素关键点数组作为附加数据透传。
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
from ultralytics import YOLO

from ..features.observation import KeypointObservation


@dataclass(frozen=True)
class PoseBatch:
    """姿态推理批次结果。"""
    observations: list[KeypointObservation]
    result: Any | None


def load_pose_model(model_arg: str | Path) -> YOLO:
    """加载姿态模型（路径或模型名，如 "yolo26n-pose.pt"）。"""
    return YOLO(model_arg)


def infer_pose(
    model: YOLO,
    frame: np.ndarray,
    conf: float,
    imgsz: int,
    device: str | None,
    return_result: bool = False,
    top_k: int | None = None,
    keypoint_conf: float = 0.0,
) -> PoseBatch:
    """执行姿态推理并返回每个人的观测。

    参数:
        model: 已加载的 YOLO 姿态模型。
        frame: OpenCV 图像帧（BGR）。
        conf: 人体检测置信度阈值，范围 [0.0, 1.0]。
        imgsz: 推理输入尺寸（正整数，如 640）。
        device: 推理设备，如 "cpu"、"0"；None 表示自动选择。
        return_result: 是否保留原始结果对象。
        top_k: 仅保留检测分数最高的前 K 人；None 或 <=0 表示保留全部。
        keypoint_conf: 关键点置信度低于该值视为未识别。

    返回:
        PoseBatch: 按检测分数降序排列的观测列表与可选原始结果。
    """
    results = model.predict(
        source=frame,
        conf=conf,
        imgsz=imgsz,
        device=device,
        verbose=False,
    )
    result = results[0]
    kept_result = result if return_result else None

    if result.boxes is None or result.keypoints is None:
        return PoseBatch(observations=[], result=kept_result)

    height, width = frame.shape[:2]
    scores = result.boxes.conf.cpu().numpy() if result.boxes.conf is not None else None
    kps_xy = result.keypoints.xy.cpu().numpy()
    kps_conf = None
    if result.keypoints.conf is not None:
        kps_conf = result.keypoints.conf.cpu().numpy()

    scored: list[tuple[float, KeypointObservation]] = []
    for idx, kp_xy in enumerate(kps_xy):
        score = float(scores[idx]) if scores is not None else 0.0
        kp_conf = kps_conf[idx] if kps_conf is not None else np.ones(kp_xy.shape[0])
        keypoints = [(float(x), float(y), float(c)) for (x, y), c in zip(kp_xy, kp_conf)]
        observation = KeypointObservation.from_coco(
            keypoints,
            frame_size=(width, height),
            min_conf=keypoint_conf,
        )
        scored.append((score, observation))

    scored.sort(key=lambda item: item[0], reverse=True)
    if top_k is not None and top_k > 0:
        scored = scored[:top_k]

    return PoseBatch(observations=[obs for _, obs in scored], result=kept_result)
