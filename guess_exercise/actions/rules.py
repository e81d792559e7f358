from __future__ import annotations

"""基于规则的健身动作识别（深蹲/开合跳/高抬腿）。"""

from collections import deque

from ..features.skeleton import normalize_landmarks
from ..types import ActionPrediction, Pose


# 关键点历史：(timestamp, 关节名 -> (x_norm, y_norm, conf))
History = deque[tuple[float, dict[str, tuple[float, float, float]]]]

SQUAT = "squat"
JUMPING_JACK = "jumping_jack"
HIGH_KNEES = "high_knees"


class ActionRuleEngine:
    def __init__(
        self,
        max_seconds: float = 2.0,
        min_frames: int = 6,
        keypoint_conf: float = 0.3,
        min_confidence: float = 0.5,
    ) -> None:
        """初始化动作规则引擎。

        参数:
            max_seconds: 滑动窗口最大时长（秒），>0。
            min_frames: 最小帧数要求（整数，>=1）。
            keypoint_conf: 关键点置信度阈值，范围 [0.0, 1.0]。
            min_confidence: 输出动作标签的最低评分，低于该值输出 "Low Confidence"。
        """
        self._history: History = deque()
        self._max_seconds = max_seconds
        self._min_frames = min_frames
        self._keypoint_conf = keypoint_conf
        self._min_confidence = min_confidence

    def update(self, pose: Pose | None, timestamp: float) -> None:
        """追加一帧姿态并淘汰过期历史。

        参数:
            pose: 当前帧的主体姿态；None 表示本帧无人，仅推进时间窗口。
            timestamp: 当前时间戳（秒）。
        """
        if pose is not None:
            normalized = normalize_landmarks(pose.landmarks, self._keypoint_conf)
            if normalized:
                self._history.append((timestamp, normalized))
        while self._history and timestamp - self._history[0][0] > self._max_seconds:
            self._history.popleft()

    def classify(self) -> ActionPrediction:
        """基于历史关键点判断动作类别。

        返回:
            ActionPrediction: 动作标签或状态标签。
        """
        if not self._history:
            return ActionPrediction.no_person()
        if len(self._history) < self._min_frames:
            return ActionPrediction.starting()

        scores = {
            SQUAT: _squat_score(self._history, self._min_frames, self._keypoint_conf),
            JUMPING_JACK: _jumping_jack_score(self._history, self._min_frames, self._keypoint_conf),
            HIGH_KNEES: _high_knees_score(self._history, self._min_frames, self._keypoint_conf),
        }
        best_action = max(scores, key=scores.get)
        best_score = scores[best_action]
        if best_score < self._min_confidence:
            return ActionPrediction.low_confidence()
        return ActionPrediction(label=best_action, confidence=best_score)


def _sign_changes(values: list[float], min_delta: float) -> int:
    """统计数值序列的方向变化次数（忽略微小变化）。"""
    signs: list[int] = []
    for idx in range(1, len(values)):
        delta = values[idx] - values[idx - 1]
        if abs(delta) < min_delta:
            continue
        signs.append(1 if delta > 0 else -1)
    return sum(1 for idx in range(1, len(signs)) if signs[idx] != signs[idx - 1])


def _squat_score(history: History, min_frames: int, min_conf: float) -> float:
    """深蹲评分：髋部到踝部的竖直距离反复压缩与伸展。"""
    values = _pair_series(history, "hip", "ankle", axis=1, min_conf=min_conf)
    if len(values) < min_frames:
        return 0.0
    amplitude = max(values) - min(values)
    changes = _sign_changes(values, min_delta=0.05)
    if amplitude < 0.4 or changes < 2:
        return 0.0
    return float(min(1.0, amplitude / 0.8) * min(1.0, changes / 3.0))


def _jumping_jack_score(history: History, min_frames: int, min_conf: float) -> float:
    """开合跳评分：手腕越过肩部的上下摆动，同时双脚间距开合。"""
    arms = _pair_series(history, "shoulder", "wrist", axis=1, min_conf=min_conf)
    feet = _spread_series(history, "ankle", min_conf=min_conf)
    if len(arms) < min_frames or len(feet) < min_frames:
        return 0.0

    arm_amplitude = max(arms) - min(arms)
    feet_amplitude = max(feet) - min(feet)
    arm_changes = _sign_changes(arms, min_delta=0.05)
    above_ratio = sum(1 for v in arms if v < 0) / len(arms)
    if arm_amplitude < 0.8 or feet_amplitude < 0.3 or arm_changes < 2 or above_ratio < 0.2:
        return 0.0
    score = (
        min(1.0, arm_amplitude / 1.5)
        * min(1.0, feet_amplitude / 0.6)
        * min(1.0, arm_changes / 3.0)
    )
    return float(score)


def _high_knees_score(history: History, min_frames: int, min_conf: float) -> float:
    """高抬腿评分：左右膝盖交替抬起（与深蹲的双膝同步下降区分）。"""
    values = _side_difference_series(history, "hip", "knee", axis=1, min_conf=min_conf)
    if len(values) < min_frames:
        return 0.0
    amplitude = max(values) - min(values)
    changes = _sign_changes(values, min_delta=0.05)
    if amplitude < 0.6 or changes < 2:
        return 0.0
    return float(min(1.0, amplitude / 1.0) * min(1.0, changes / 3.0))


def _side_difference_series(
    history: History,
    origin: str,
    target: str,
    axis: int,
    min_conf: float,
) -> list[float]:
    """左侧偏移减右侧偏移的序列，两侧同时可用时才采样。"""
    values: list[float] = []
    for _, kps in history:
        offsets = {}
        for side in ("left", "right"):
            a = kps.get(f"{side}_{origin}")
            b = kps.get(f"{side}_{target}")
            if a and b and a[2] >= min_conf and b[2] >= min_conf:
                offsets[side] = b[axis] - a[axis]
        if len(offsets) == 2:
            values.append(offsets["left"] - offsets["right"])
    return values


def _pair_series(history: History, origin: str, target: str, axis: int, min_conf: float) -> list[float]:
    """左右两侧偏移的平均序列；某一侧缺失时使用另一侧。"""
    values: list[float] = []
    for _, kps in history:
        offsets = []
        for side in ("left", "right"):
            a = kps.get(f"{side}_{origin}")
            b = kps.get(f"{side}_{target}")
            if a and b and a[2] >= min_conf and b[2] >= min_conf:
                offsets.append(b[axis] - a[axis])
        if offsets:
            values.append(sum(offsets) / len(offsets))
    return values


def _spread_series(history: History, joint: str, min_conf: float) -> list[float]:
    """左右关节的水平间距序列。"""
    values: list[float] = []
    for _, kps in history:
        left = kps.get(f"left_{joint}")
        right = kps.get(f"right_{joint}")
        if left and right and left[2] >= min_conf and right[2] >= min_conf:
            values.append(abs(left[0] - right[0]))
    return values
