from __future__ import annotations

"""动作汇总：将累计帧数转换为时长并格式化输出。"""

from dataclasses import dataclass
from typing import Mapping, Sequence


@dataclass(frozen=True)
class SummaryRow:
    """单个动作的汇总结果。"""
    label: str
    frames: int
    seconds: float


def summarize(counts: Mapping[str, int], fps: float) -> list[SummaryRow]:
    """将 label -> 帧数 映射转换为按帧数降序排列的汇总行。

    参数:
        counts: 累计帧数快照。
        fps: 帧率（>0），用于换算秒数。

    返回:
        list[SummaryRow]: 帧数相同时按标签字母序排列。

    异常:
        ValueError: fps 不为正数。
    """
    if fps <= 0:
        raise ValueError(f"fps must be > 0, got {fps}")
    rows = [
        SummaryRow(label=label, frames=int(frames), seconds=frames / fps)
        for label, frames in counts.items()
    ]
    rows.sort(key=lambda row: (-row.frames, row.label))
    return rows


def format_summary(rows: Sequence[SummaryRow]) -> str:
    """格式化为多行文本，每行一个动作。"""
    if not rows:
        return "No actions recorded."
    width = max(len(row.label) for row in rows)
    return "\n".join(
        f"{row.label:<{width}}  {row.seconds:.1f}s ({row.frames} frames)" for row in rows
    )
