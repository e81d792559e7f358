from __future__ import annotations

"""姿态组装：将单人观测转换为不可变的 Pose。

说明：
    - 跳过合成的 root 关节与词表外的关节名；
    - 同一观测中关节名重复时保留首次出现的点；
    - 未识别的关节直接跳过（遮挡等情况很常见，不视为错误）；
    - 没有任何关键点时返回 None，由调用方过滤。
"""

from typing import Iterable, Sequence

import numpy as np

from ..types import Landmark, Pose
from .observation import Observation
from .skeleton import JOINT_INDEX, JOINT_PAIRS, ROOT_JOINT, build_connections, estimate_area


def assemble_pose(observation: Observation, min_confidence: float = 0.0) -> Pose | None:
    """由单个观测构建 Pose。

    参数:
        observation: 单人姿态观测。
        min_confidence: 关键点最低置信度，范围 [0.0, 1.0]；0 表示保留全部已识别点。

    返回:
        Pose | None: 至少有一个关键点时返回 Pose，否则返回 None。
    """
    landmarks: list[Landmark] = []
    seen: set[str] = set()
    for name in observation.available_joint_names:
        if name == ROOT_JOINT or name not in JOINT_INDEX or name in seen:
            continue
        try:
            x, y, conf = observation.recognized_point(name)
        except (LookupError, ValueError):
            continue
        if conf < min_confidence:
            continue
        seen.add(name)
        landmarks.append(Landmark(name=name, location=(float(x), float(y)), confidence=float(conf)))

    if not landmarks:
        return None

    return Pose(
        landmarks=tuple(landmarks),
        connections=build_connections(landmarks, JOINT_PAIRS),
        area=estimate_area(landmarks),
        keypoints=_capture_keypoints(observation),
    )


def assemble_poses(
    observations: Iterable[Observation] | None,
    min_confidence: float = 0.0,
) -> list[Pose]:
    """批量组装，过滤掉无法构建的观测，保持输入顺序。"""
    if not observations:
        return []
    poses: list[Pose] = []
    for observation in observations:
        pose = assemble_pose(observation, min_confidence=min_confidence)
        if pose is not None:
            poses.append(pose)
    return poses


def dominant_pose(poses: Sequence[Pose]) -> Pose | None:
    """返回面积最大的 Pose（单人动作识别使用），空列表返回 None。"""
    if not poses:
        return None
    return max(poses, key=lambda pose: pose.area)


def _capture_keypoints(observation: Observation) -> np.ndarray | None:
    """尝试获取原始关键点数组；任何失败都只导致该字段为空。"""
    try:
        return observation.keypoints_array()
    except Exception:
        return None
