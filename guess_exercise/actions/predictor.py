from __future__ import annotations

"""按固定步长产生预测事件 (ActionPrediction, frame_count)。"""

from ..types import ActionPrediction, Pose
from .rules import ActionRuleEngine


class ActionPredictor:
    def __init__(self, engine: ActionRuleEngine | None = None, stride: int = 15) -> None:
        """初始化预测器。

        参数:
            engine: 动作规则引擎，None 时使用默认参数创建。
            stride: 每隔多少帧输出一次预测（>=1），同时也是该预测代表的帧数。
        """
        if stride < 1:
            raise ValueError(f"stride must be >= 1, got {stride}")
        self._engine = engine or ActionRuleEngine()
        self._stride = stride
        self._frames = 0

    @property
    def stride(self) -> int:
        return self._stride

    def push(self, pose: Pose | None, timestamp: float) -> tuple[ActionPrediction, int] | None:
        """送入一帧；每满 stride 帧返回一次 (预测, 帧数)，否则返回 None。"""
        self._engine.update(pose, timestamp)
        self._frames += 1
        if self._frames < self._stride:
            return None
        self._frames = 0
        return self._engine.classify(), self._stride
