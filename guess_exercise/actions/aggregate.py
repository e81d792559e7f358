from __future__ import annotations

"""动作预测的累计帧数统计。"""

import numbers
import threading

from ..types import ActionPrediction


class PredictionAggregator:
    """按动作标签累计帧数（会话级状态）。

    计数只增不减；需要清零时创建新的实例。
    记录与快照都在锁内完成，可同时被多个生产者线程写入。
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._lock = threading.Lock()

    def record_event(self, label: str, frame_count: int) -> int:
        """累加某个动作的帧数。

        参数:
            label: 动作标签。
            frame_count: 本次预测覆盖的帧数（>=0）。

        返回:
            int: 该标签累加后的总帧数。

        异常:
            TypeError: frame_count 不是整数。
            ValueError: frame_count 为负数。
        """
        if isinstance(frame_count, bool) or not isinstance(frame_count, numbers.Integral):
            raise TypeError(f"frame_count must be an integer, got {frame_count!r}")
        if frame_count < 0:
            raise ValueError(f"frame_count must be >= 0, got {frame_count}")
        with self._lock:
            total = self._counts.get(label, 0) + int(frame_count)
            self._counts[label] = total
        return total

    def record_prediction(self, prediction: ActionPrediction, frame_count: int) -> int | None:
        """仅记录模型输出的标签；状态标签直接忽略并返回 None。"""
        if not prediction.is_model_label:
            return None
        return self.record_event(prediction.label, frame_count)

    def snapshot(self) -> dict[str, int]:
        """返回当前计数的拷贝，之后的更新不会影响该拷贝。"""
        with self._lock:
            return dict(self._counts)

    def total_frames(self) -> int:
        with self._lock:
            return sum(self._counts.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)

    def __contains__(self, label: object) -> bool:
        with self._lock:
            return label in self._counts
