from __future__ import annotations

"""人体骨架拓扑、连线构建与面积估计。"""

from typing import Iterable, Sequence

from ..types import Connection, JointPair, Landmark


# 关节名称表（与上游人体姿态观测的关节集合一致）
JOINT_NAMES = (
    "nose",
    "left_eye",
    "right_eye",
    "left_ear",
    "right_ear",
    "neck",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "root",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
)
JOINT_INDEX = {name: idx for idx, name in enumerate(JOINT_NAMES)}

# 合成的根关节（髋部中心），从不生成关键点
ROOT_JOINT = "root"

# 关节连线表；顺序即连线输出顺序
JOINT_PAIRS: tuple[JointPair, ...] = (
    # 左臂
    ("left_shoulder", "left_elbow"),
    ("left_elbow", "left_wrist"),
    # 左腿
    ("left_hip", "left_knee"),
    ("left_knee", "left_ankle"),
    # 右臂
    ("right_shoulder", "right_elbow"),
    ("right_elbow", "right_wrist"),
    # 右腿
    ("right_hip", "right_knee"),
    ("right_knee", "right_ankle"),
    # 躯干
    ("left_shoulder", "neck"),
    ("right_shoulder", "neck"),
    ("left_shoulder", "left_hip"),
    ("right_shoulder", "right_hip"),
    ("left_hip", "right_hip"),
)


def build_connections(
    landmarks: Iterable[Landmark],
    joint_pairs: Sequence[JointPair] = JOINT_PAIRS,
) -> tuple[Connection, ...]:
    """根据已检测的关键点构建有效连线。

    仅当连线两端的关节都存在时才输出；缺失任一端点的连线直接跳过。

    参数:
        landmarks: 关键点序列（关节名唯一）。
        joint_pairs: 关节连线表，默认 JOINT_PAIRS。

    返回:
        tuple[Connection, ...]: 按连线表顺序排列的连线。
    """
    lookup = {landmark.name: landmark for landmark in landmarks}

    connections: list[Connection] = []
    for joint_a, joint_b in joint_pairs:
        one = lookup.get(joint_a)
        two = lookup.get(joint_b)
        if one is None or two is None:
            continue
        connections.append(
            Connection(
                joints=(joint_a, joint_b),
                start=one.location,
                end=two.location,
                confidence=min(one.confidence, two.confidence),
            )
        )
    return tuple(connections)


def estimate_area(landmarks: Sequence[Landmark]) -> float:
    """粗略估计关键点集合的包围盒面积。

    参数:
        landmarks: 关键点序列。

    返回:
        float: (maxX - minX) * (maxY - minY)，空输入返回 0.0。
    """
    if not landmarks:
        return 0.0

    xs = [landmark.location[0] for landmark in landmarks]
    ys = [landmark.location[1] for landmark in landmarks]
    return float((max(xs) - min(xs)) * (max(ys) - min(ys)))


def body_part(pair: JointPair) -> str:
    """判断连线所属的身体部位（"left" / "right" / "center"）。"""
    sides = {_side(name) for name in pair}
    if sides == {"left"}:
        return "left"
    if sides == {"right"}:
        return "right"
    return "center"


def _side(name: str) -> str:
    if name.startswith("left_"):
        return "left"
    if name.startswith("right_"):
        return "right"
    return "center"


def torso_center(
    points: dict[str, tuple[float, float, float]],
    min_conf: float,
) -> tuple[float, float] | None:
    """计算躯干中心点（用于归一化）。

    优先使用肩部/髋部关键点；若不可用，退化为颈部或鼻子。

    参数:
        points: 关节名 -> (x, y, conf)。
        min_conf: 置信度阈值，范围 [0.0, 1.0]。
    """
    valid = [
        points[name]
        for name in ("left_shoulder", "right_shoulder", "left_hip", "right_hip")
        if name in points and points[name][2] >= min_conf
    ]
    if valid:
        xs = [p[0] for p in valid]
        ys = [p[1] for p in valid]
        return (sum(xs) / len(xs), sum(ys) / len(ys))

    for name in ("neck", "nose"):
        point = points.get(name)
        if point and point[2] >= min_conf:
            return point[0], point[1]

    return None


def torso_scale(points: dict[str, tuple[float, float, float]], min_conf: float) -> float:
    """计算归一化尺度（肩宽、髋宽或躯干高度中的最大值）。

    返回:
        float: 归一化尺度（>0），若不可用则返回 1.0。
    """
    distances: list[float] = []
    for a, b, axis in (
        ("left_shoulder", "right_shoulder", 0),
        ("left_hip", "right_hip", 0),
        ("left_shoulder", "left_hip", 1),
        ("right_shoulder", "right_hip", 1),
    ):
        pa = points.get(a)
        pb = points.get(b)
        if pa and pb and pa[2] >= min_conf and pb[2] >= min_conf:
            distances.append(abs(pa[axis] - pb[axis]))

    scale = max(distances) if distances else 0.0
    return scale if scale > 1e-6 else 1.0


def normalize_landmarks(
    landmarks: Iterable[Landmark],
    min_conf: float,
) -> dict[str, tuple[float, float, float]]:
    """对关键点做中心化与尺度归一化。

    参数:
        landmarks: 关键点序列。
        min_conf: 置信度阈值，范围 [0.0, 1.0]。

    返回:
        dict[str, tuple[float, float, float]]: 关节名 -> (x_norm, y_norm, conf)；
        无法确定躯干中心时返回空字典。
    """
    points = {
        landmark.name: (landmark.location[0], landmark.location[1], landmark.confidence)
        for landmark in landmarks
    }
    center = torso_center(points, min_conf)
    if center is None:
        return {}
    scale = torso_scale(points, min_conf)

    return {
        name: ((x - center[0]) / scale, (y - center[1]) / scale, conf)
        for name, (x, y, conf) in points.items()
    }
