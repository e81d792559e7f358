from __future__ import annotations

"""应用级配置与路径/模型处理工具。

包含：
- 项目路径与输出路径管理
- 默认摄像头来源设置
- YAML 默认配置文件加载
- 模型参数解析（路径或模型名）与权重下载
"""

import platform
import time
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml
from ultralytics.utils.downloads import attempt_download_asset


@dataclass(frozen=True)
class AppConfig:
    """应用配置结构体（由 CLI 参数与可选 YAML 文件合并而来）。

    字段说明：
        pose_model: 姿态模型路径或模型名，例如 "models/yolo26n-pose.pt"。
        source: 摄像头来源（字符串形式），如 "0" 或 "/dev/video0"。
        conf: 人体检测置信度阈值，范围 [0.0, 1.0]。
        imgsz: 推理输入尺寸（正整数，如 640）。
        device: 推理设备，如 "cpu"、"0"；None 表示由库自动选择。
        keypoint_conf: 关键点置信度阈值，范围 [0.0, 1.0]。
        stride: 每次动作预测覆盖的帧数（>=1）。
        fps: 采集帧率目标，同时用于汇总时长换算（>=1）。
        interval: JSONL 输出节流间隔（秒），0 表示每帧输出。
        relay_url: 关键点转发接口 URL，None 表示不转发。
        relay_timeout: 转发请求超时（秒）。
        flip_y: 关键点坐标原点在左下角时设为 True。
        no_preview: 是否禁用可视化窗口。
        log_path: JSONL 日志路径，None 使用默认路径。
        no_log: 是否禁用日志文件输出。
    """
    pose_model: str = "models/yolo26n-pose.pt"
    source: str | None = None
    conf: float = 0.25
    imgsz: int = 640
    device: str | None = None
    keypoint_conf: float = 0.2
    stride: int = 15
    fps: float = 30.0
    interval: float = 0.5
    relay_url: str | None = None
    relay_timeout: float = 2.0
    flip_y: bool = False
    no_preview: bool = False
    log_path: str | None = None
    no_log: bool = False


def config_keys() -> tuple[str, ...]:
    """返回 AppConfig 的全部字段名。"""
    return tuple(f.name for f in fields(AppConfig))


def load_config_file(path: Path) -> dict[str, Any]:
    """读取 YAML 默认配置文件。

    文件内容为平铺的键值对，键名与 AppConfig 字段一致（也接受连字符写法，
    如 relay-url）。

    参数:
        path: 配置文件路径。

    返回:
        dict[str, Any]: 规范化后的配置字典。

    异常:
        FileNotFoundError: 文件不存在。
        ValueError: 根节点不是映射，或包含未知字段。
    """
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        root = yaml.safe_load(f) or {}
    if not isinstance(root, dict):
        raise ValueError(f"Config root must be a mapping: {path}")

    known = set(config_keys())
    values: dict[str, Any] = {}
    for key, value in root.items():
        name = str(key).strip().replace("-", "_")
        if name not in known:
            raise ValueError(f"Unknown config key {key!r} in {path}")
        values[name] = value
    return values


def project_root() -> Path:
    """返回项目根目录路径（包目录的上一级）。"""
    return Path(__file__).resolve().parents[1]


def output_dir() -> Path:
    """返回输出目录（output/），如不存在会自动创建。"""
    out = project_root() / "output"
    out.mkdir(parents=True, exist_ok=True)
    return out


def log_dir() -> Path:
    """返回日志目录（output/logs/），如不存在会自动创建。"""
    logs = output_dir() / "logs"
    logs.mkdir(parents=True, exist_ok=True)
    return logs


def is_windows() -> bool:
    return platform.system().lower() == "windows"


def default_source() -> str:
    """返回默认摄像头来源：Windows 为 "0"，其他系统为 "/dev/video0"。"""
    return "0" if is_windows() else "/dev/video0"


def coerce_source(value: str) -> int | str:
    """纯数字字符串转为 int（摄像头索引），否则保持原样（设备路径/URL）。"""
    value = value.strip()
    return int(value) if value.isdigit() else value


def resolve_model_arg(model_arg: str) -> Path | str:
    """解析模型参数，支持路径或模型名。

    规则：
        - 绝对路径：直接返回 Path
        - 相对路径且文件存在：返回解析后的 Path
        - 含路径分隔符但文件不存在：按项目根目录拼接后返回 Path
        - 纯模型名：返回原字符串（交由 Ultralytics 自动解析/下载）
    """
    model_arg = model_arg.strip()
    model_path = Path(model_arg).expanduser()

    if model_path.is_absolute():
        return model_path

    if model_path.exists():
        return model_path.resolve()

    if any(sep in model_arg for sep in ("/", "\\")):
        return (project_root() / model_path).resolve()

    return model_arg


def prepare_model_arg(model_arg: str) -> Path | str:
    """准备模型参数，路径不存在时尝试从官方 release 下载。

    异常:
        FileNotFoundError: 下载失败或目标文件不存在。
    """
    resolved = resolve_model_arg(model_arg)
    if isinstance(resolved, str) or resolved.exists():
        return resolved

    resolved.parent.mkdir(parents=True, exist_ok=True)
    downloaded = Path(attempt_download_asset(resolved, release="latest"))
    if not downloaded.exists():
        raise FileNotFoundError(
            "Pose model not found after download attempt. "
            "Place weights under models/ or pass --pose-model."
        )
    return downloaded


def timestamp() -> str:
    """生成当前时间戳（YYYYmmdd_HHMMSS）。"""
    return time.strftime("%Y%m%d_%H%M%S")
