from __future__ import annotations

"""摄像头输入封装。"""

from typing import Iterator

import cv2
import numpy as np

from ..config import is_windows


def backend_candidates() -> list[tuple[str, int]]:
    """获取当前平台推荐的视频后端列表（按优先级排序）。"""
    names = ("DSHOW", "MSMF") if is_windows() else ("V4L2",)
    candidates = [
        (name, getattr(cv2, f"CAP_{name}")) for name in names if hasattr(cv2, f"CAP_{name}")
    ]
    candidates.append(("ANY", cv2.CAP_ANY))
    return candidates


def open_capture(source: int | str) -> tuple[cv2.VideoCapture | None, str]:
    """依次尝试各后端打开摄像头或视频流。

    返回:
        tuple[cv2.VideoCapture | None, str]: (cap, backend_name)，全部失败时 cap 为 None。
    """
    last_backend = "ANY"
    for name, backend in backend_candidates():
        cap = cv2.VideoCapture(source, backend)
        if cap.isOpened():
            return cap, name
        cap.release()
        last_backend = name
    return None, last_backend


def capture_fps(cap: cv2.VideoCapture, fallback: float = 30.0) -> float:
    """读取采集帧率；设备未报告或报告异常值时返回 fallback。"""
    fps = cap.get(cv2.CAP_PROP_FPS)
    if not fps or fps != fps or fps < 1:
        return fallback
    return float(fps)


def iter_frames(cap: cv2.VideoCapture) -> Iterator[np.ndarray]:
    """逐帧读取，读取失败（设备断开或视频结束）时停止。"""
    while True:
        ok, frame = cap.read()
        if not ok or frame is None:
            return
        yield frame
